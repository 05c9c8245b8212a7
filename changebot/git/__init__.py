"""Local git repository access."""

from .repository import GitRepository, parse_remote_url

__all__ = ["GitRepository", "parse_remote_url"]
