"""Markdown rendering of a changelog batch."""

from .models import SummaryBatch


def format_markdown(batch: SummaryBatch) -> str:
    """Render one line per pull request, ordered by pull request number."""
    lines = []
    for record in sorted(batch, key=lambda r: r.pull_request):
        lines.append(f"- {record.emoji}  [{record.sentence}](#{record.pull_request})\n")
    return ''.join(lines)
