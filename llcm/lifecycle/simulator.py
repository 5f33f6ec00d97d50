"""
Retention simulator.

Estimates what applying a desired state would remove from a log group. The
estimate assumes a constant ingestion rate over the retained window and
never projects data older than the group itself.
"""

from llcm.errors import BadArgumentError
from llcm.lifecycle.models import INFINITE_RETENTION, DesiredState, LogGroupEntry, PreviewEntry


def bytes_per_day(stored_bytes: int, retention_days: int, elapsed_days: int) -> int:
    if stored_bytes <= 0:
        return 0
    if elapsed_days <= 0:
        return stored_bytes
    effective = min(retention_days, elapsed_days)
    if effective <= 0:
        return stored_bytes
    return max(1, stored_bytes // effective)


def reduction_in_days(
    stored_bytes: int,
    rate: int,
    retention_days: int,
    elapsed_days: int,
    desired: DesiredState,
) -> int:
    if stored_bytes <= 0 or rate <= 0 or desired is DesiredState.INFINITE:
        return 0
    if desired is DesiredState.DELETE:
        if 0 < retention_days < INFINITE_RETENTION:
            return retention_days
        return elapsed_days if elapsed_days > 0 else 1
    effective = min(retention_days, elapsed_days)
    if effective > desired:
        return effective - int(desired)
    return 0


def reducible_bytes(stored_bytes: int, rate: int, reduction: int, desired: DesiredState) -> int:
    if stored_bytes <= 0 or rate <= 0 or reduction <= 0 or desired is DesiredState.INFINITE:
        return 0
    if desired is DesiredState.DELETE:
        return stored_bytes
    return rate * reduction


def simulate(entry: LogGroupEntry, desired: DesiredState) -> PreviewEntry:
    """
    Compute the preview of one log group under a desired state.

    Args:
        entry: Log group to simulate
        desired: Target state, anything but NONE

    Returns:
        PreviewEntry with rate, reduction and byte estimates

    Raises:
        BadArgumentError: If desired is NONE
    """
    if desired is DesiredState.NONE:
        raise BadArgumentError("desired state is not set")

    stored = entry.stored_bytes
    retention = entry.retention_in_days
    # Clock skew can put creation in the future
    elapsed = max(0, entry.elapsed_days)

    rate = bytes_per_day(stored, retention, elapsed)
    reduction = reduction_in_days(stored, rate, retention, elapsed, desired)
    reducible = reducible_bytes(stored, rate, reduction, desired)

    return PreviewEntry(
        entry=entry,
        desired_state=desired,
        bytes_per_day=rate,
        reduction_in_days=reduction,
        reducible_bytes=reducible,
        remaining_bytes=max(0, stored - reducible),
    )
