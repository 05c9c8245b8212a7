"""Pull request membership check between the original and reconciled batches."""

from typing import Optional

from .models import SummaryBatch


class ConsistencyError(RuntimeError):
    """Reconciliation added or dropped pull requests."""


def is_consistent(original: Optional[SummaryBatch], reconciled: Optional[SummaryBatch]) -> bool:
    """Check that both batches cover the same pull requests.

    A missing batch on either side counts as consistent; the caller uses
    whichever batch exists.
    """
    if original is None or reconciled is None:
        return True

    original_prs = {record.pull_request for record in original}
    reconciled_prs = {record.pull_request for record in reconciled}
    return original_prs == reconciled_prs
