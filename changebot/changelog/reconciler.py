"""Second pass that makes emoji unique across a whole changelog."""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from ..llm import LLMError
from .models import SummaryBatch, SummaryRecord
from .retry import Attempt, RetriesExhaustedError, run_with_retries
from .summarizer import load_json_reply


UNIQUE_EMOJI_INSTRUCTION = (
    "You are a helpful assistant summarizing pull request details into a changelog for business use. "
    "Provided is a JSON array with each entry in the changelog. "
    "Your job is to ensure that all emojis are unique in the JSON array. "
    "If there is a problem with an emoji, please provide a new one and update the entry; "
    "entries without a problem may be returned unchanged. "
    "Please provide the output as a plain JSON array without any additional text, formatting, or explanation. "
    "The 'emoji' property should contain a single relevant unicode emoji that represents the changelog entry sentence. "
    "Do not modify the 'sentence' or 'pullRequest' properties."
)


def serialize_batch(batch: SummaryBatch) -> str:
    """Render a batch as an indented JSON array, keeping non-ASCII text as is."""
    return json.dumps(
        [record.model_dump(by_alias=True) for record in batch],
        ensure_ascii=False,
        indent=2,
    )


class EmojiReconciler:
    """Asks the model to reassign duplicate emoji across a batch."""

    def __init__(self, llm, max_attempts: int = 3, retry_delay: float = 0.0,
                 logger: Optional[logging.Logger] = None):
        self.llm = llm
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.logger = logger or logging.getLogger(__name__)

    def reconcile(self, batch: SummaryBatch) -> Optional[SummaryBatch]:
        """Return a copy of batch whose emoji are unique.

        Sentences of pull requests present in batch are kept from batch
        even if the model rewrote them. Pull request membership is not
        checked here; see ``gate.is_consistent``.

        Args:
            batch: Summaries produced by the summarizer

        Returns:
            Reconciled batch, or None when every attempt failed
        """
        if not batch:
            return []

        payload = serialize_batch(batch)
        sentences = {record.pull_request: record.sentence for record in batch}

        try:
            return run_with_retries(
                lambda: self._attempt(payload, sentences),
                max_attempts=self.max_attempts,
                delay=self.retry_delay,
                label="Reconciling emoji",
                logger=self.logger,
            )
        except RetriesExhaustedError as e:
            self.logger.warning(f"Emoji reconciliation gave up: {e.reason}")
            return None

    def _attempt(self, payload: str, sentences: dict) -> Attempt:
        try:
            reply = self.llm.complete(UNIQUE_EMOJI_INSTRUCTION, payload)
        except LLMError as e:
            return Attempt.retryable(str(e))

        try:
            data = load_json_reply(reply)
        except ValueError as e:
            return Attempt.retryable(f"reply is not valid JSON: {e}")

        if not isinstance(data, list):
            return Attempt.retryable("reply is not a JSON array")

        records: List[SummaryRecord] = []
        for item in data:
            if not isinstance(item, dict):
                return Attempt.retryable("reply entry is not a JSON object")
            try:
                record = SummaryRecord.model_validate(item)
            except ValidationError as e:
                return Attempt.retryable(f"invalid entry: {e.errors()[0]['msg']}")

            original = sentences.get(record.pull_request)
            if original is not None and original != record.sentence:
                self.logger.debug(f"Model rewrote sentence of PR #{record.pull_request}; keeping original")
                record = record.model_copy(update={'sentence': original})
            records.append(record)

        return Attempt.ok(records)
