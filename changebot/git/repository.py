"""Local git repository queries using the GitPython library."""

import logging
import re
from typing import List, Optional, Tuple

import git
from git.exc import GitCommandError


# Supports HTTPS, scp-style SSH and ssh:// GitHub remotes
REMOTE_URL_PATTERNS = [
    re.compile(r'^https://(?:[^@/]+@)?github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$'),
    re.compile(r'^git@github\.com:([^/]+)/([^/]+?)(?:\.git)?/?$'),
    re.compile(r'^ssh://git@github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$'),
]


def parse_remote_url(remote_url: str) -> Tuple[Optional[str], Optional[str]]:
    """Extract owner and repository name from a GitHub remote URL.

    Args:
        remote_url: Remote URL as reported by ``git remote get-url``

    Returns:
        Tuple of (owner, repo), or (None, None) when the URL is not a GitHub remote
    """
    remote_url = (remote_url or '').strip()
    for pattern in REMOTE_URL_PATTERNS:
        match = pattern.match(remote_url)
        if match:
            return match.group(1), match.group(2)
    return None, None


class GitRepository:
    """Wrapper for tag and commit queries on a local clone."""

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """Open the repository at path.

        Args:
            path: Path inside the working tree
            logger: Logger instance

        Raises:
            git.InvalidGitRepositoryError: path is not inside a git repository
            git.NoSuchPathError: path does not exist
        """
        self.logger = logger or logging.getLogger(__name__)
        self.repo = git.Repo(path, search_parent_directories=True)
        self.git = self.repo.git

    def latest_tag(self) -> Optional[str]:
        """Most recent tag reachable from HEAD, or None if there are no tags."""
        try:
            tag = self.git.describe('--tags', '--abbrev=0').strip()
        except GitCommandError as e:
            self.logger.debug(f"git describe failed: {e}")
            return None
        return tag or None

    def list_tags(self) -> List[str]:
        """List tags ordered by creation date, oldest first."""
        try:
            output = self.git.tag('--sort=creatordate')
        except GitCommandError as e:
            self.logger.error(f"Error listing tags: {e}")
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    def previous_tag(self, tag_name: str) -> Optional[str]:
        """Get the tag created just before tag_name.

        Returns:
            Previous tag name, or None when tag_name is the first tag or unknown
        """
        tags = self.list_tags()
        if tag_name not in tags:
            return None
        index = tags.index(tag_name)
        return tags[index - 1] if index > 0 else None

    def commit_subjects(self, start: str, end: str) -> List[str]:
        """Subject lines of the commits in start..end, newest first."""
        try:
            output = self.git.log(f"{start}..{end}", '--pretty=format:%s')
        except GitCommandError as e:
            self.logger.error(f"Error listing commits between {start} and {end}: {e}")
            return []
        return [line for line in output.splitlines() if line.strip()]

    def remote_url(self, remote: str = 'origin') -> Optional[str]:
        try:
            return self.git.remote('get-url', remote).strip()
        except GitCommandError as e:
            self.logger.warning(f"Error retrieving remote URL for {remote}: {e}")
            return None

    def repository_info(self) -> Tuple[Optional[str], Optional[str]]:
        """Resolve GitHub owner and repository name from the origin remote."""
        remote_url = self.remote_url()
        if not remote_url:
            return None, None

        owner, repo = parse_remote_url(remote_url)
        if not owner:
            self.logger.warning(f"Remote URL does not match expected GitHub formats: {remote_url}")
        return owner, repo
