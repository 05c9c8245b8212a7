"""Per pull request summarization with a language model."""

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from ..llm import LLMError
from .models import SummaryRecord
from .retry import Attempt, RetriesExhaustedError, run_with_retries


SUMMARY_INSTRUCTION = (
    "You are a helpful assistant summarizing pull request details into a changelog for business use. "
    "Please provide the output as a plain JSON object without any additional text, formatting, or explanation. "
    "The JSON should have two properties: 'sentence' and 'emoji'. "
    "The 'sentence' property should contain a one-sentence summary, limited to 80 characters, "
    "of the pull request and its associated issues, that is focused on the business value, "
    "without including issue or PR numbers. "
    "The 'emoji' property should contain a single relevant unicode emoji that represents the changelog entry sentence."
)

CODE_FENCE_RE = re.compile(r'^```[A-Za-z]*\s*\n(.*)\n\s*```$', re.DOTALL)


class SummarizationError(RuntimeError):
    """Raised when a pull request could not be summarized."""

    def __init__(self, pr_number: int, reason: str):
        super().__init__(f"Could not summarize PR #{pr_number}: {reason}")
        self.pr_number = pr_number


def load_json_reply(text: str) -> Any:
    """Parse a model reply as JSON, unwrapping a surrounding code fence.

    Raises:
        ValueError: reply is not text or not valid JSON
    """
    if not isinstance(text, str):
        raise ValueError(f"reply is not text: {type(text).__name__}")
    text = text.strip()
    match = CODE_FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()
    return json.loads(text)


class PullRequestSummarizer:
    """Turns one pull request's context into a SummaryRecord."""

    def __init__(self, llm, max_attempts: int = 3, retry_delay: float = 0.0,
                 logger: Optional[logging.Logger] = None):
        """Initialize summarizer.

        Args:
            llm: Chat client exposing ``complete(system, user) -> str``
            max_attempts: Attempts per pull request
            retry_delay: Seconds between attempts
            logger: Logger instance
        """
        self.llm = llm
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.logger = logger or logging.getLogger(__name__)

    def summarize(self, pr_number: int, context: str) -> SummaryRecord:
        """Summarize a pull request into a sentence and emoji.

        Args:
            pr_number: Pull request number
            context: Context text assembled for the pull request

        Returns:
            Validated SummaryRecord for pr_number

        Raises:
            SummarizationError: every attempt failed
        """
        try:
            return run_with_retries(
                lambda: self._attempt(pr_number, context),
                max_attempts=self.max_attempts,
                delay=self.retry_delay,
                label=f"Summarizing PR #{pr_number}",
                logger=self.logger,
            )
        except RetriesExhaustedError as e:
            raise SummarizationError(pr_number, e.reason) from e

    def _attempt(self, pr_number: int, context: str) -> Attempt:
        try:
            reply = self.llm.complete(SUMMARY_INSTRUCTION, context)
        except LLMError as e:
            return Attempt.retryable(str(e))

        try:
            data = load_json_reply(reply)
        except ValueError as e:
            return Attempt.retryable(f"reply is not valid JSON: {e}")

        if not isinstance(data, dict):
            return Attempt.retryable("reply is not a JSON object")

        try:
            record = SummaryRecord(
                pull_request=pr_number,
                sentence=data.get('sentence'),
                emoji=data.get('emoji'),
            )
        except ValidationError as e:
            return Attempt.retryable(f"invalid summary: {e.errors()[0]['msg']}")

        return Attempt.ok(record)
