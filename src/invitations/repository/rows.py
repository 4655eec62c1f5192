"""Row shapes of the four tables the engine reads and writes.

Rows are immutable: ``update_row_where`` mutators return a replacement built
with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.config.table_names import TableNames
from src.invitations.dtos import (
    Choice,
    ClosureCause,
    InvitationDTO,
    InvitationStatus,
    LogType,
    Verdict,
)


@dataclass(frozen=True)
class InvitationRow:
    id: str
    title: str
    event_at: datetime
    event_has_time: bool
    confirm_by: datetime | None
    capacity_min: int
    capacity_max: int | None
    created_at: datetime
    # Cached / derived state. Never a source of truth for decisions.
    status: InvitationStatus = InvitationStatus.OPEN
    closed_at: datetime | None = None
    closure_cause: ClosureCause | None = None
    verdict: Verdict | None = None
    view_count_unique: int = 0
    yes_count: int = 0
    no_count: int = 0
    maybe_count: int = 0
    first_view_at: datetime | None = None
    first_response_at: datetime | None = None
    response_time_delta_ms: int | None = None

    def to_dto(self) -> InvitationDTO:
        return InvitationDTO(
            id=self.id,
            title=self.title,
            event_at=self.event_at,
            event_has_time=self.event_has_time,
            confirm_by=self.confirm_by,
            capacity_min=self.capacity_min,
            capacity_max=self.capacity_max,
            created_at=self.created_at,
        )


@dataclass(frozen=True)
class ResponseRow:
    id: str
    invitation_id: str
    device_id: str
    name: str
    choice: Choice
    created_at: datetime


@dataclass(frozen=True)
class ViewRow:
    invitation_id: str
    device_id: str
    first_seen_at: datetime


@dataclass(frozen=True)
class LogRow:
    created_at: datetime
    type: LogType
    invitation_id: str = ""
    device_id: str = ""
    payload: dict = field(default_factory=dict)


Row = InvitationRow | ResponseRow | ViewRow | LogRow

ROW_TYPES: dict[TableNames, type] = {
    TableNames.INVITATIONS: InvitationRow,
    TableNames.RESPONSES: ResponseRow,
    TableNames.VIEWS: ViewRow,
    TableNames.LOGS: LogRow,
}
