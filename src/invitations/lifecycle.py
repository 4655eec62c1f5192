"""Pure lifecycle rules: status, maybe-decay and verdict.

Nothing here touches the store. Every caller passes the instant it considers
"now" so that the same inputs always produce the same answer.
"""

from datetime import datetime

from src.invitations.dtos import (
    ClosureCause,
    InvitationState,
    ResponseCounts,
    Verdict,
)

DEFAULT_CAPACITY_MIN = 2


def resolve_status(
    confirm_by: datetime | None,
    capacity_max: int | None,
    yes_count: int,
    now: datetime,
) -> InvitationState:
    """Classify an invitation as OPEN or CLOSED.

    The deadline is inclusive: a response arriving exactly at ``confirm_by`` is
    already too late, which lets an "immediate" deadline (equal to the event
    time) close at the event itself.
    """
    if confirm_by is None:
        return InvitationState.open()
    if now >= confirm_by:
        return InvitationState.closed(ClosureCause.EXPIRED)
    if capacity_max is not None and yes_count >= capacity_max:
        return InvitationState.closed(ClosureCause.FULL)
    return InvitationState.open()


def decay_maybes(
    confirm_by: datetime | None,
    now: datetime,
    counts: ResponseCounts,
) -> ResponseCounts:
    """Report expired MAYBE answers as NO. Stored responses are left untouched."""
    if confirm_by is None or now < confirm_by:
        return counts
    return ResponseCounts(yes=counts.yes, no=counts.no + counts.maybe, maybe=0)


def clamp_capacity_min(capacity_min: int | None) -> int:
    if not isinstance(capacity_min, int) or isinstance(capacity_min, bool):
        return DEFAULT_CAPACITY_MIN
    return max(DEFAULT_CAPACITY_MIN, capacity_min)


def compute_verdict(capacity_min: int | None, yes_count: int) -> Verdict:
    if yes_count >= clamp_capacity_min(capacity_min):
        return Verdict.SUCCESS
    return Verdict.FAILURE
