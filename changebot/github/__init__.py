"""GitHub API access."""

from .client import GitHubClient, extract_linked_issues

__all__ = ["GitHubClient", "extract_linked_issues"]
