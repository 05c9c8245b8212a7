"""GitHub client wrapper using the PyGithub library."""

import logging
import re
import threading
from typing import Dict, List, Optional

from github import Auth, Github
from github.Repository import Repository


SEPARATOR = '-' * 80

# Any hash-number reference in a PR body counts as a linked issue
LINKED_ISSUE_RE = re.compile(r'#(\d+)')


def extract_linked_issues(body: Optional[str]) -> List[int]:
    """Extract issue numbers referenced in a pull request body.

    Every ``#N`` reference is collected, not only closing keywords like
    "fixes #N". Duplicates are dropped, first occurrence wins.

    Args:
        body: Pull request body

    Returns:
        Issue numbers in order of first appearance
    """
    if not body:
        return []

    issues = []
    for match in LINKED_ISSUE_RE.finditer(body):
        number = int(match.group(1))
        if number not in issues:
            issues.append(number)
    return issues


class GitHubClient:
    """Wrapper for the GitHub REST API using PyGithub."""

    def __init__(self, token: str, timeout: float = 60.0, logger: Optional[logging.Logger] = None):
        """Initialize GitHub client.

        Args:
            token: Personal access token
            timeout: Per-request timeout in seconds
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.gh = Github(auth=Auth.Token(token), timeout=timeout)

        # Cache for repository instances, shared by worker threads
        self._repo_cache: Dict[str, Repository] = {}
        self._repo_lock = threading.Lock()

    def _get_repo(self, owner: str, repo: str) -> Repository:
        """Get repository instance with caching."""
        full_name = f"{owner}/{repo}"
        with self._repo_lock:
            if full_name not in self._repo_cache:
                self._repo_cache[full_name] = self.gh.get_repo(full_name)
            return self._repo_cache[full_name]

    def get_pull_request_context(self, owner: str, repo: str, number: int) -> str:
        """Assemble the text context describing one pull request.

        The blob holds the title and body, commit messages, changed files,
        comments and every linked issue with its comments, followed by a
        separator line.

        Args:
            owner: Repository owner
            repo: Repository name
            number: Pull request number

        Returns:
            Context text for summarization

        Raises:
            github.GithubException: any API failure
        """
        proj = self._get_repo(owner, repo)
        pr = proj.get_pull(number)

        lines = [f"PR #{number}: {pr.title}", pr.body or '', '']

        lines.append("Commits:")
        for commit in pr.get_commits():
            lines.append(f"- {commit.commit.message}")
        lines.append('')

        lines.append("Files Changed:")
        for changed in pr.get_files():
            lines.append(f"- {changed.filename}: {changed.status}")
        lines.append('')

        lines.append("Comments:")
        for comment in pr.get_issue_comments():
            lines.append(f"- {comment.user.login}: {comment.body}")
        lines.append('')

        lines.append("Linked Issues:")
        for issue_number in extract_linked_issues(pr.body):
            self.logger.debug(f"PR #{number} references issue #{issue_number}")
            issue = proj.get_issue(issue_number)
            lines.append(f"Issue #{issue_number}: {issue.title}")
            lines.append(issue.body or '')
            lines.append('')

            lines.append("Issue Comments:")
            for issue_comment in issue.get_comments():
                lines.append(f"- {issue_comment.user.login}: {issue_comment.body}")
            lines.append('')

        lines.append(SEPARATOR)
        return '\n'.join(lines) + '\n'
