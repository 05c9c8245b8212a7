"""Changelog entry model."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .emoji import is_valid_emoji


class SummaryRecord(BaseModel):
    """One changelog line: a pull request, its summary sentence and emoji.

    Serialized with the JSON names ``pullRequest``, ``sentence`` and ``emoji``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    pull_request: int = Field(alias="pullRequest", gt=0, strict=True)
    sentence: str
    emoji: str

    @field_validator('emoji')
    @classmethod
    def check_emoji(cls, v):
        if not is_valid_emoji(v):
            raise ValueError(f"not a single valid unicode emoji: {v!r}")
        return v


SummaryBatch = List[SummaryRecord]
