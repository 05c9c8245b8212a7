"""
Tests for the SummaryRecord model.
"""

import json

import pytest
from pydantic import ValidationError

from changebot.changelog import SummaryRecord
from changebot.changelog.reconciler import serialize_batch


def test_record_accepts_json_names() -> None:
    """
    Model output using pullRequest parses into pull_request.
    """
    record = SummaryRecord.model_validate({"pullRequest": 12, "sentence": "Improves startup time", "emoji": "🚀"})
    assert record.pull_request == 12
    assert record.sentence == "Improves startup time"
    assert record.emoji == "🚀"


def test_record_rejects_invalid_emoji() -> None:
    """
    An emoji field holding text fails validation.
    """
    with pytest.raises(ValidationError):
        SummaryRecord(pull_request=1, sentence="Adds export", emoji="rocket")


def test_record_rejects_non_positive_pull_request() -> None:
    with pytest.raises(ValidationError):
        SummaryRecord(pull_request=0, sentence="Adds export", emoji="📤")


def test_record_is_immutable(record) -> None:
    """
    Records cannot be changed after creation.
    """
    entry = record(3)
    with pytest.raises(ValidationError):
        entry.emoji = "✨"


def test_serialize_batch_keeps_unicode(record) -> None:
    """
    Serialized batches use JSON names and raw emoji, not escapes.
    """
    payload = serialize_batch([record(7, "Café menus load faster", "☕")])
    assert "☕" in payload
    assert "Café" in payload
    assert "\\u" not in payload
    assert json.loads(payload) == [{"pullRequest": 7, "sentence": "Café menus load faster", "emoji": "☕"}]


@pytest.mark.parametrize("value", [True, "12", 12.0])
def test_record_rejects_non_integer_pull_request(value) -> None:
    """
    A model echoing a bool or string PR number does not coerce to a PR.
    """
    with pytest.raises(ValidationError):
        SummaryRecord.model_validate({"pullRequest": value, "sentence": "Adds export", "emoji": "🚀"})
