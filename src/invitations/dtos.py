from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum


class Choice(str, Enum):
    YES = "YES"
    NO = "NO"
    MAYBE = "MAYBE"


class InvitationStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ClosureCause(str, Enum):
    EXPIRED = "EXPIRED"
    FULL = "FULL"


class Verdict(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class LogType(str, Enum):
    INVITATION_CREATED = "invitation_created"
    FIRST_VIEW = "first_view"
    RESPONSE_CREATED = "response_created"
    RESPONSE_MODIFIED = "response_modified"
    INVITATION_CLOSED = "invitation_closed"


class ConfirmOffset(str, Enum):
    """How long before the event responses stop being accepted."""

    IMMEDIATE = "immediate"
    MINUTES_30 = "30m"
    HOUR_1 = "1h"
    HOURS_3 = "3h"
    HOURS_8 = "8h"
    EVE = "eve"

    @property
    def delta(self) -> timedelta:
        return {
            ConfirmOffset.IMMEDIATE: timedelta(0),
            ConfirmOffset.MINUTES_30: timedelta(minutes=30),
            ConfirmOffset.HOUR_1: timedelta(hours=1),
            ConfirmOffset.HOURS_3: timedelta(hours=3),
            ConfirmOffset.HOURS_8: timedelta(hours=8),
            ConfirmOffset.EVE: timedelta(hours=24),
        }[self]


# =============================================================================
# Errors
# =============================================================================


class InvitationError(Exception):
    """Base class for every rejection the invitation engine can produce."""

    code = "INVITATION_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidInputError(InvitationError):
    """Raised for malformed names, choices, ids or dates, before any store access."""

    code = "VALIDATION"


class InvitationNotFoundError(InvitationError):
    code = "NOT_FOUND"

    def __init__(self, invitation_id: str) -> None:
        self.invitation_id = invitation_id
        super().__init__(f"Invitation '{invitation_id}' not found")


class InvitationClosedError(InvitationError):
    code = "CLOSED"

    def __init__(self, invitation_id: str, cause: ClosureCause) -> None:
        self.invitation_id = invitation_id
        self.cause = cause
        super().__init__(f"Invitation '{invitation_id}' is closed ({cause.value})")


class AlreadyRespondedError(InvitationError):
    code = "ALREADY_RESPONDED"

    def __init__(self, invitation_id: str, device_id: str) -> None:
        self.invitation_id = invitation_id
        self.device_id = device_id
        super().__init__(f"Device '{device_id}' already responded to invitation '{invitation_id}'")


class StoreUnavailableError(InvitationError):
    """The tabular backend failed. Transient, safe to retry."""

    code = "STORE_UNAVAILABLE"


# =============================================================================
# DTOs
# =============================================================================


@dataclass(frozen=True)
class InvitationState:
    """OPEN, or CLOSED with the cause that closed it."""

    status: InvitationStatus
    closure_cause: ClosureCause | None = None

    @classmethod
    def open(cls) -> "InvitationState":
        return cls(status=InvitationStatus.OPEN)

    @classmethod
    def closed(cls, cause: ClosureCause) -> "InvitationState":
        return cls(status=InvitationStatus.CLOSED, closure_cause=cause)

    @property
    def is_closed(self) -> bool:
        return self.status == InvitationStatus.CLOSED


@dataclass(frozen=True)
class ResponseCounts:
    yes: int = 0
    no: int = 0
    maybe: int = 0


@dataclass(frozen=True)
class InvitationDTO:
    """Public facts about an invitation."""

    id: str
    title: str
    event_at: datetime
    event_has_time: bool
    confirm_by: datetime | None
    capacity_min: int
    capacity_max: int | None
    created_at: datetime


@dataclass(frozen=True)
class CreatedInvitationDTO:
    invitation: InvitationDTO
    state: InvitationState
    share_link: str
    organizer_device_id: str
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SubmittedResponseDTO:
    invitation_id: str
    choice: Choice
    modified: bool
    state: InvitationState


@dataclass(frozen=True)
class RecordedViewDTO:
    recorded: bool


@dataclass(frozen=True)
class MyResponseDTO:
    choice: Choice
    name: str


@dataclass(frozen=True)
class OrganizerCountsDTO:
    yes: int
    no: int
    maybe: int
    views: int


@dataclass(frozen=True)
class SnapshotDTO:
    """What a given viewer is allowed to see of an invitation right now.

    Fields a viewer may not see are left as None.
    """

    invitation: InvitationDTO
    state: InvitationState
    verdict: Verdict | None = None
    total_positions: int | None = None
    participants: list[str] | None = None
    my_response: MyResponseDTO | None = None
    counts: OrganizerCountsDTO | None = None
    no_names: list[str] | None = None
    maybe_names: list[str] | None = None


def organizer_device_id(invitation_id: str) -> str:
    """Well-known device id of the organizer's automatic YES response."""
    return f"organizer_{invitation_id}"
