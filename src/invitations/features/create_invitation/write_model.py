"""Write model for creating invitations.

Creates the invitation row, then the organizer's automatic YES response, then
seeds the cached counters. Returns DTOs, never rows.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

from src.config.settings import Settings, settings
from src.config.table_names import TableNames
from src.invitations.audit import append_log
from src.invitations.dtos import (
    Choice,
    ConfirmOffset,
    CreatedInvitationDTO,
    InvalidInputError,
    LogType,
    organizer_device_id,
)
from src.invitations.finalizer import ClosureFinalizer
from src.invitations.lifecycle import DEFAULT_CAPACITY_MIN
from src.invitations.repository.aggregates import AggregateProjector
from src.invitations.repository.rows import InvitationRow, ResponseRow
from src.invitations.repository.store import TableStore
from src.invitations.utils import (
    NAME_MAX_LENGTH,
    Clock,
    is_valid_invitation_id,
    new_id,
    normalize_name,
    utc_now,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 40
CAPACITY_SOFT_WARNING = "capacity_soft_warning"


def earliest_event_at(now: datetime, lead_minutes: int) -> datetime:
    """Next half hour strictly after ``now``'s minute, plus the lead time guests get to answer."""
    base = now.replace(second=0, microsecond=0)
    return base + timedelta(minutes=30 - base.minute % 30 + lead_minutes)


def deadline_from_offset(event_at: datetime, offset: ConfirmOffset) -> datetime:
    return event_at - offset.delta


def _clamp_capacity(value: int | None, lower: int, upper: int, field_name: str) -> int | None:
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInputError(f"Invalid {field_name}")
    return min(upper, max(lower, value))


def _as_utc(value: datetime, field_name: str) -> datetime:
    if value.tzinfo is None:
        raise InvalidInputError(f"{field_name} must carry a timezone")
    return value.astimezone(UTC)


class InvitationCreateWriteModel(ABC):
    """Abstract base class for invitation creation."""

    @abstractmethod
    async def create_invitation(
        self,
        title: str,
        event_at: datetime,
        organizer_name: str,
        event_has_time: bool = True,
        confirm_by: datetime | None = None,
        confirm_offset: ConfirmOffset | None = None,
        capacity_min: int | None = None,
        capacity_max: int | None = None,
        invitation_id: str | None = None,
    ) -> CreatedInvitationDTO:
        """Create an OPEN invitation and admit the organizer as YES.

        Args:
            title: What is proposed, at most 40 characters
            event_at: When the event happens (timezone-aware)
            organizer_name: Display name of the organizer's automatic YES
            event_has_time: False when only the date of the event is known
            confirm_by: Response deadline (timezone-aware)
            confirm_offset: Alternative to confirm_by, relative to event_at
            capacity_min: Quorum required for SUCCESS (default 2)
            capacity_max: Upper bound on YES responses, None for unbounded
            invitation_id: Optional client-generated id (32 hex characters)
        """
        raise NotImplementedError


class StoreInvitationCreateWriteModel(InvitationCreateWriteModel):
    """Table store implementation of invitation creation."""

    def __init__(
        self,
        store: TableStore,
        clock: Clock = utc_now,
        config: Settings = settings,
    ) -> None:
        self._store = store
        self._clock = clock
        self._config = config
        self._projector = AggregateProjector(store)
        self._finalizer = ClosureFinalizer(store, self._projector)

    def _validate_schedule(
        self,
        now: datetime,
        event_at: datetime,
        confirm_by: datetime | None,
        confirm_offset: ConfirmOffset | None,
    ) -> tuple[datetime, datetime]:
        event_at = _as_utc(event_at, "event_at")
        if event_at > now + timedelta(days=self._config.event_horizon_days):
            raise InvalidInputError("Event is too far in the future")
        if event_at < earliest_event_at(now, self._config.min_lead_minutes):
            raise InvalidInputError(
                f"Event must start at least {self._config.min_lead_minutes} minutes "
                "after the next half hour"
            )

        if confirm_by is not None:
            confirm_by = _as_utc(confirm_by, "confirm_by")
        elif confirm_offset is not None:
            confirm_by = deadline_from_offset(event_at, confirm_offset)
        else:
            raise InvalidInputError("Missing confirmation deadline")

        if confirm_by > event_at:
            raise InvalidInputError("Confirmation deadline is after the event")
        # An "immediate" deadline is the event time itself
        if confirm_by < now and confirm_by != event_at:
            raise InvalidInputError("Confirmation deadline has already passed")
        return event_at, confirm_by

    async def create_invitation(
        self,
        title: str,
        event_at: datetime,
        organizer_name: str,
        event_has_time: bool = True,
        confirm_by: datetime | None = None,
        confirm_offset: ConfirmOffset | None = None,
        capacity_min: int | None = None,
        capacity_max: int | None = None,
        invitation_id: str | None = None,
    ) -> CreatedInvitationDTO:
        now = self._clock()

        title = (title or "").strip()
        if not title:
            raise InvalidInputError("Missing title")
        if len(title) > TITLE_MAX_LENGTH:
            raise InvalidInputError(f"Title is longer than {TITLE_MAX_LENGTH} characters")

        organizer_name = normalize_name(organizer_name)
        if not organizer_name:
            raise InvalidInputError("Missing organizer name")
        if len(organizer_name) > NAME_MAX_LENGTH:
            raise InvalidInputError(f"Organizer name is longer than {NAME_MAX_LENGTH} characters")

        event_at, confirm_by = self._validate_schedule(now, event_at, confirm_by, confirm_offset)

        capacity_max = _clamp_capacity(
            capacity_max, DEFAULT_CAPACITY_MIN, self._config.capacity_max_limit, "capacity_max"
        )
        capacity_min = _clamp_capacity(
            capacity_min, DEFAULT_CAPACITY_MIN, self._config.capacity_min_limit, "capacity_min"
        )
        if capacity_min is None:
            capacity_min = DEFAULT_CAPACITY_MIN

        # Malformed client ids are replaced, as older clients send their own format
        if not is_valid_invitation_id(invitation_id):
            invitation_id = new_id()
        elif await self._projector.find_invitation(invitation_id) is not None:
            raise InvalidInputError(f"Invitation id '{invitation_id}' is already in use")

        invitation = InvitationRow(
            id=invitation_id,
            title=title,
            event_at=event_at,
            event_has_time=event_has_time,
            confirm_by=confirm_by,
            capacity_min=capacity_min,
            capacity_max=capacity_max,
            created_at=now,
        )
        await self._store.append_row(TableNames.INVITATIONS, invitation)
        await append_log(
            self._store,
            LogType.INVITATION_CREATED,
            created_at=now,
            invitation_id=invitation_id,
            payload={"event_at": event_at.isoformat(), "confirm_by": confirm_by.isoformat()},
        )

        organizer_device = organizer_device_id(invitation_id)
        await self._store.append_row(
            TableNames.RESPONSES,
            ResponseRow(
                id=new_id(),
                invitation_id=invitation_id,
                device_id=organizer_device,
                name=organizer_name,
                choice=Choice.YES,
                created_at=now,
            ),
        )

        result = await self._finalizer.sync(invitation, now)
        logger.info(f"Created invitation {invitation_id} ({result.state.status.value})")

        warnings = []
        if capacity_max is not None and capacity_max > self._config.capacity_soft_warning:
            warnings.append(CAPACITY_SOFT_WARNING)

        return CreatedInvitationDTO(
            invitation=invitation.to_dto(),
            state=result.state,
            share_link=f"{self._config.frontend_url}/invite/{invitation_id}",
            organizer_device_id=organizer_device,
            warnings=warnings,
        )
