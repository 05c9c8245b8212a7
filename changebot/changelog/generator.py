"""Changelog generation pipeline."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from github import GithubException

from .formatter import format_markdown
from .gate import ConsistencyError, is_consistent
from .models import SummaryBatch, SummaryRecord
from .reconciler import EmojiReconciler
from .retry import Attempt, FatalAttemptError, RetriesExhaustedError, run_with_retries
from .summarizer import PullRequestSummarizer, SummarizationError


DEFAULT_WORKER_COUNT = 8

# GitHub statuses that are reported once and never retried
FATAL_GITHUB_STATUSES = (401, 404)

# GitHub merge commits start with "Merge pull request #N from owner/branch"
MERGE_PR_RE = re.compile(r'Merge pull request #(\d+)')


class Stage(str, Enum):
    COLLECTING_CONTEXT = "collecting_context"
    SUMMARIZING = "summarizing"
    RECONCILING = "reconciling"
    GATING = "gating"
    FORMATTING = "formatting"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class ChangelogResult:
    """Outcome of a changelog run.

    ``message`` carries the informational text of an aborted run; ``error``
    is set only when the run failed. ``history`` lists the stages entered,
    ending with ``stage``.
    """

    stage: Stage
    markdown: str = ""
    message: str = ""
    error: Optional[Exception] = None
    history: List[Stage] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def aborted(cls, message: str, error: Optional[Exception] = None,
                history: Optional[List[Stage]] = None) -> "ChangelogResult":
        return cls(Stage.ABORTED, message=message, error=error,
                   history=list(history or []) + [Stage.ABORTED])


def pr_num_for_commit_from_subject(subject: str) -> int:
    """Extract pull request number from a merge commit subject.

    Args:
        subject: Commit subject line

    Returns:
        PR number or 0 if not found
    """
    match = MERGE_PR_RE.search(subject)
    if not match:
        return 0
    return int(match.group(1))


def extract_pull_request_numbers(subjects: List[str]) -> List[int]:
    """Collect the distinct pull request numbers referenced by merge commits.

    Args:
        subjects: Commit subject lines

    Returns:
        PR numbers in order of first appearance
    """
    numbers = []
    for subject in subjects:
        number = pr_num_for_commit_from_subject(subject)
        if number > 0 and number not in numbers:
            numbers.append(number)
    return numbers


class ChangelogGenerator:
    """Drives context collection, summarization, reconciliation and formatting."""

    def __init__(self, github,
                 summarizer: PullRequestSummarizer,
                 reconciler: EmojiReconciler,
                 workers: int = DEFAULT_WORKER_COUNT,
                 max_attempts: int = 3,
                 retry_delay: float = 0.0,
                 logger: Optional[logging.Logger] = None):
        """Initialize generator.

        Args:
            github: Client exposing ``get_pull_request_context(owner, repo, number)``
            summarizer: Per pull request summarizer
            reconciler: Emoji uniqueness reconciler
            workers: Maximum concurrent pull request units
            max_attempts: Attempts per context fetch
            retry_delay: Seconds between context fetch attempts
            logger: Logger instance
        """
        self.github = github
        self.summarizer = summarizer
        self.reconciler = reconciler
        self.workers = workers
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, owner: str, repo: str, pr_numbers: List[int]) -> ChangelogResult:
        """Build the changelog for a set of pull requests.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_numbers: Pull requests to include

        Returns:
            ChangelogResult in stage DONE, or ABORTED when reconciliation
            changed the set of pull requests
        """
        history: List[Stage] = []

        def enter(stage: Stage):
            history.append(stage)
            self.logger.debug(f"Entering stage {stage.value}")

        enter(Stage.COLLECTING_CONTEXT)
        enter(Stage.SUMMARIZING)
        self.logger.info(f"Summarizing {len(pr_numbers)} pull requests")
        batch = self.summarize_all(owner, repo, pr_numbers)

        final = batch
        if not batch:
            self.logger.info("No pull requests could be summarized")
        else:
            enter(Stage.RECONCILING)
            self.logger.info(f"Reconciling emoji across {len(batch)} entries")
            reconciled = self.reconciler.reconcile(batch)
            if reconciled is None:
                self.logger.warning("Falling back to summaries without emoji reconciliation")

            enter(Stage.GATING)
            if not is_consistent(batch, reconciled):
                error = ConsistencyError(
                    "Emoji reconciliation changed the set of pull requests; refusing to emit a changelog"
                )
                self.logger.error(str(error))
                return ChangelogResult.aborted("The responses are not consistent. Please try again.",
                                               error, history)

            if reconciled is not None:
                final = reconciled

        enter(Stage.FORMATTING)
        markdown = format_markdown(final)
        enter(Stage.DONE)
        return ChangelogResult(Stage.DONE, markdown=markdown, history=history)

    def summarize_all(self, owner: str, repo: str, pr_numbers: List[int]) -> SummaryBatch:
        """Fetch and summarize every pull request concurrently.

        Each unit writes only its own slot; failed units leave it empty.
        """
        if not pr_numbers:
            return []

        slots: List[Optional[SummaryRecord]] = [None] * len(pr_numbers)
        max_workers = min(self.workers, len(pr_numbers))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {
                executor.submit(self.process_pull_request, owner, repo, pr_number): index
                for index, pr_number in enumerate(pr_numbers)
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    slots[index] = future.result()
                except Exception as e:
                    self.logger.warning(f"Dropping PR #{pr_numbers[index]}: {e}")

        return [record for record in slots if record is not None]

    def process_pull_request(self, owner: str, repo: str, pr_number: int) -> Optional[SummaryRecord]:
        """Collect context for one pull request and summarize it.

        Returns:
            SummaryRecord, or None when the pull request is dropped
        """
        try:
            context = run_with_retries(
                lambda: self._fetch_attempt(owner, repo, pr_number),
                max_attempts=self.max_attempts,
                delay=self.retry_delay,
                label=f"Fetching PR #{pr_number}",
                logger=self.logger,
            )
        except RetriesExhaustedError as e:
            self.logger.warning(f"Failed to fetch details for PR #{pr_number}: {e.reason}")
            return None
        except FatalAttemptError as e:
            self.logger.error(str(e))
            return None

        try:
            return self.summarizer.summarize(pr_number, context)
        except SummarizationError as e:
            self.logger.warning(str(e))
            return None

    def _fetch_attempt(self, owner: str, repo: str, pr_number: int) -> Attempt:
        try:
            return Attempt.ok(self.github.get_pull_request_context(owner, repo, pr_number))
        except GithubException as e:
            reason = f"GitHub API error {e.status}: {e.data}"
            if e.status in FATAL_GITHUB_STATUSES:
                return Attempt.fatal(reason)
            return Attempt.retryable(reason)
        except OSError as e:
            return Attempt.retryable(str(e))


def get_changelog_by_tag(repository, generator: ChangelogGenerator, tag_name: str) -> ChangelogResult:
    """Generate the changelog for the range between the previous tag and tag_name.

    Args:
        repository: GitRepository for the local clone
        generator: ChangelogGenerator wired to GitHub and the chat endpoint
        tag_name: Target tag

    Returns:
        ChangelogResult; structural problems yield an ABORTED result with a message
    """
    logger = logging.getLogger(__name__)

    previous_tag = repository.previous_tag(tag_name)
    if previous_tag is None:
        return ChangelogResult.aborted(f"No previous tag found before {tag_name}.")

    logger.info(f"Generating changelog for {previous_tag}..{tag_name}")
    subjects = repository.commit_subjects(previous_tag, tag_name)
    if not subjects:
        return ChangelogResult.aborted("No commit messages found between the specified tags.")

    pr_numbers = extract_pull_request_numbers(subjects)
    if not pr_numbers:
        return ChangelogResult.aborted("No merged pull requests found between the specified tags.")

    owner, repo = repository.repository_info()
    if not owner or not repo:
        return ChangelogResult.aborted("Failed to determine repository owner and name from the remote URL.")

    return generator.generate(owner, repo, pr_numbers)
