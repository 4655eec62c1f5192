from datetime import datetime

from sqlalchemy import JSON, Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.config.table_names import TableNames
from src.invitations.dtos import Choice, ClosureCause, InvitationStatus, LogType, Verdict
from src.models.base import Base, UTCDateTime


def _enum_values(enum_class):
    return [e.value for e in enum_class]


class Invitation(Base):
    __tablename__ = TableNames.INVITATIONS.value

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    title: Mapped[str] = mapped_column(String(40), nullable=False)
    event_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    event_has_time: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    confirm_by: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    capacity_min: Mapped[int] = mapped_column(Integer, default=2, nullable=False)
    capacity_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    # Cached state, refreshed opportunistically
    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus, name="invitation_status_enum", values_callable=_enum_values),
        default=InvitationStatus.OPEN,
        nullable=False,
    )
    closed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    closure_cause: Mapped[ClosureCause | None] = mapped_column(
        Enum(ClosureCause, name="closure_cause_enum", values_callable=_enum_values),
        nullable=True,
    )
    verdict: Mapped[Verdict | None] = mapped_column(
        Enum(Verdict, name="verdict_enum", values_callable=_enum_values),
        nullable=True,
    )
    view_count_unique: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    yes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    no_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    maybe_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    first_view_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    first_response_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    response_time_delta_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Invitation {self.id} {self.status}>"


class Response(Base):
    __tablename__ = TableNames.RESPONSES.value

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # No foreign keys or unique constraints: the engine only relies on
    # append / read-all / update-where.
    invitation_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    choice: Mapped[Choice] = mapped_column(
        Enum(Choice, name="choice_enum", values_callable=_enum_values),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Response {self.device_id} {self.choice} on {self.invitation_id}>"


class View(Base):
    __tablename__ = TableNames.VIEWS.value

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invitation_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    device_id: Mapped[str] = mapped_column(String(128), nullable=False)
    first_seen_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<View {self.device_id} on {self.invitation_id}>"


class Log(Base):
    __tablename__ = TableNames.LOGS.value

    row_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    type: Mapped[LogType] = mapped_column(
        Enum(LogType, name="log_type_enum", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    invitation_id: Mapped[str] = mapped_column(String(32), default="", nullable=False)
    device_id: Mapped[str] = mapped_column(String(128), default="", nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    def __repr__(self) -> str:
        return f"<Log {self.type} {self.invitation_id}>"


ORM_MODELS: dict[TableNames, type[Base]] = {
    TableNames.INVITATIONS: Invitation,
    TableNames.RESPONSES: Response,
    TableNames.VIEWS: View,
    TableNames.LOGS: Log,
}
