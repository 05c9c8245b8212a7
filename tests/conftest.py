"""
Shared fixtures for changebot tests.
"""

import threading

import pytest

from changebot.changelog import SummaryRecord


class FakeChat:
    """Chat client stand-in.

    Replies come from a list consumed in order, or from a callable taking
    (system, user). Exception instances are raised instead of returned.
    """

    def __init__(self, replies):
        self._replies = replies if callable(replies) else list(replies)
        self._lock = threading.Lock()
        self.calls = []

    def complete(self, system, user):
        with self._lock:
            self.calls.append((system, user))
            scripted = not callable(self._replies)
            if scripted:
                reply = self._replies.pop(0)
        if not scripted:
            reply = self._replies(system, user)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def chat():
    """Build a FakeChat from a reply list or callable."""
    return FakeChat


@pytest.fixture
def record():
    """Build a SummaryRecord with short keyword arguments."""
    def make(pr, sentence="Improves things", emoji="🎉"):
        return SummaryRecord(pull_request=pr, sentence=sentence, emoji=emoji)
    return make
