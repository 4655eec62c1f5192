"""Aggregate projection: rebuild an invitation's picture from its response rows.

The counters cached on the invitation row are best-effort and may lag behind;
anything that needs current counts goes through here instead.
"""

from dataclasses import dataclass, field

from src.config.table_names import TableNames
from src.invitations.dtos import Choice, InvitationNotFoundError, ResponseCounts
from src.invitations.repository.rows import InvitationRow, ResponseRow, ViewRow
from src.invitations.repository.store import TableStore


@dataclass(frozen=True)
class InvitationAggregate:
    counts: ResponseCounts
    # Effective responses, ordered by creation time
    responses: list[ResponseRow] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)
    no_names: list[str] = field(default_factory=list)
    maybe_names: list[str] = field(default_factory=list)

    @property
    def total_positions(self) -> int:
        return len(self.responses)

    def response_for(self, device_id: str | None) -> ResponseRow | None:
        if not device_id:
            return None
        for response in self.responses:
            if response.device_id == device_id:
                return response
        return None


def _names(responses: list[ResponseRow], choice: Choice) -> list[str]:
    return [r.name.strip() for r in responses if r.choice == choice and r.name.strip()]


def project_responses(responses: list[ResponseRow]) -> InvitationAggregate:
    """Build counts and name lists from one invitation's response rows.

    When concurrent appends left more than one row for a device, the earliest
    one is the effective response.
    """
    ordered = sorted(responses, key=lambda r: r.created_at)
    effective: list[ResponseRow] = []
    seen_devices: set[str] = set()
    for response in ordered:
        if response.device_id in seen_devices:
            continue
        seen_devices.add(response.device_id)
        effective.append(response)

    counts = ResponseCounts(
        yes=sum(1 for r in effective if r.choice == Choice.YES),
        no=sum(1 for r in effective if r.choice == Choice.NO),
        maybe=sum(1 for r in effective if r.choice == Choice.MAYBE),
    )
    return InvitationAggregate(
        counts=counts,
        responses=effective,
        participants=_names(effective, Choice.YES),
        no_names=_names(effective, Choice.NO),
        maybe_names=_names(effective, Choice.MAYBE),
    )


def count_unique_views(views: list[ViewRow], invitation_id: str) -> int:
    return len({v.device_id for v in views if v.invitation_id == invitation_id})


class AggregateProjector:
    """Store-backed reads shared by every write and read model."""

    def __init__(self, store: TableStore) -> None:
        self._store = store

    async def find_invitation(self, invitation_id: str) -> InvitationRow | None:
        rows = await self._store.read_all_rows(TableNames.INVITATIONS)
        for row in rows:
            if row.id == invitation_id:
                return row
        return None

    async def load_invitation(self, invitation_id: str) -> InvitationRow:
        invitation = await self.find_invitation(invitation_id)
        if invitation is None:
            raise InvitationNotFoundError(invitation_id)
        return invitation

    async def load_responses(self, invitation_id: str) -> list[ResponseRow]:
        rows = await self._store.read_all_rows(TableNames.RESPONSES)
        return [r for r in rows if r.invitation_id == invitation_id]

    async def project(self, invitation_id: str) -> InvitationAggregate:
        return project_responses(await self.load_responses(invitation_id))

    async def unique_views(self, invitation_id: str) -> int:
        rows = await self._store.read_all_rows(TableNames.VIEWS)
        return count_unique_views(rows, invitation_id)
