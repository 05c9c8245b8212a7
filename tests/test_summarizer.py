"""
Tests for per pull request summarization.
"""

import pytest

from changebot.changelog import PullRequestSummarizer, SummarizationError
from changebot.changelog.summarizer import SUMMARY_INSTRUCTION, load_json_reply
from changebot.llm import LLMError


def test_summary_from_valid_reply(chat) -> None:
    """
    A well-formed reply becomes a record for the requested pull request.
    """
    llm = chat(['{"sentence":"Improves startup time","emoji":"🚀"}'])
    record = PullRequestSummarizer(llm).summarize(12, "PR #12: Lazy load plugins")

    assert record.pull_request == 12
    assert record.sentence == "Improves startup time"
    assert record.emoji == "🚀"
    assert llm.calls == [(SUMMARY_INSTRUCTION, "PR #12: Lazy load plugins")]


def test_pull_request_number_is_not_taken_from_reply(chat) -> None:
    """
    A pullRequest value echoed by the model is ignored.
    """
    llm = chat(['{"pullRequest": 999, "sentence":"Adds CSV export","emoji":"📤"}'])
    record = PullRequestSummarizer(llm).summarize(4, "context")
    assert record.pull_request == 4


def test_three_invalid_replies_exhaust_retries(chat) -> None:
    """
    Three unparseable replies end in SummarizationError after three calls.
    """
    llm = chat(["Sure! Here is your summary.", "{not json", "still not json"])
    summarizer = PullRequestSummarizer(llm, max_attempts=3)

    with pytest.raises(SummarizationError) as excinfo:
        summarizer.summarize(8, "context")

    assert excinfo.value.pr_number == 8
    assert len(llm.calls) == 3


def test_invalid_emoji_is_retried(chat) -> None:
    """
    A reply with a non-emoji is rejected and the next reply is used.
    """
    llm = chat([
        '{"sentence":"Fixes checkout errors","emoji":"bug"}',
        '{"sentence":"Fixes checkout errors","emoji":"🐛🐛"}',
        '{"sentence":"Fixes checkout errors","emoji":"🐛"}',
    ])
    record = PullRequestSummarizer(llm).summarize(3, "context")
    assert record.emoji == "🐛"
    assert len(llm.calls) == 3


def test_chat_failure_is_retried(chat) -> None:
    llm = chat([LLMError("Status Code: 503"), '{"sentence":"Adds SSO login","emoji":"🔐"}'])
    record = PullRequestSummarizer(llm).summarize(21, "context")
    assert record.sentence == "Adds SSO login"


def test_missing_field_is_retried(chat) -> None:
    llm = chat(['{"sentence":"Adds SSO login"}', '["🔐"]', '{"sentence":"Adds SSO login","emoji":"🔐"}'])
    record = PullRequestSummarizer(llm).summarize(21, "context")
    assert record.emoji == "🔐"
    assert len(llm.calls) == 3


def test_code_fenced_reply_is_unwrapped() -> None:
    """
    A JSON reply wrapped in a Markdown code fence still parses.
    """
    reply = '```json\n{"sentence": "Adds reports", "emoji": "📊"}\n```'
    assert load_json_reply(reply) == {"sentence": "Adds reports", "emoji": "📊"}


def test_prose_reply_does_not_parse() -> None:
    with pytest.raises(ValueError):
        load_json_reply('Here you go: {"sentence": "x", "emoji": "📊"}')
