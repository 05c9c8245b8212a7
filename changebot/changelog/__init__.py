"""Changelog generation module."""

from .emoji import is_valid_emoji
from .formatter import format_markdown
from .gate import ConsistencyError, is_consistent
from .generator import (
    ChangelogGenerator,
    ChangelogResult,
    Stage,
    extract_pull_request_numbers,
    get_changelog_by_tag,
    pr_num_for_commit_from_subject,
)
from .models import SummaryBatch, SummaryRecord
from .reconciler import EmojiReconciler
from .summarizer import PullRequestSummarizer, SummarizationError

__all__ = [
    "is_valid_emoji",
    "format_markdown",
    "ConsistencyError",
    "is_consistent",
    "ChangelogGenerator",
    "ChangelogResult",
    "Stage",
    "extract_pull_request_numbers",
    "get_changelog_by_tag",
    "pr_num_for_commit_from_subject",
    "SummaryBatch",
    "SummaryRecord",
    "EmojiReconciler",
    "PullRequestSummarizer",
    "SummarizationError",
]
