from abc import ABC, abstractmethod

from src.invitations.dtos import (
    MyResponseDTO,
    OrganizerCountsDTO,
    SnapshotDTO,
    organizer_device_id,
)
from src.invitations.lifecycle import compute_verdict, decay_maybes, resolve_status
from src.invitations.repository.aggregates import AggregateProjector
from src.invitations.repository.store import TableStore
from src.invitations.utils import Clock, utc_now


class SnapshotReadModel(ABC):
    @abstractmethod
    async def get_snapshot(
        self,
        invitation_id: str,
        device_id: str | None = None,
        is_organizer: bool = False,
    ) -> SnapshotDTO:
        """
        Get the current picture of an invitation, filtered by what the viewer may see.
        """
        raise NotImplementedError


class StoreSnapshotReadModel(SnapshotReadModel):
    """Derives the snapshot from response rows, never from cached counters."""

    def __init__(self, store: TableStore, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._projector = AggregateProjector(store)

    async def get_snapshot(
        self,
        invitation_id: str,
        device_id: str | None = None,
        is_organizer: bool = False,
    ) -> SnapshotDTO:
        """
        Visibility rules:
        - OPEN, viewer has not answered and is not the organizer: position count only.
        - OPEN, viewer has answered or is the organizer: YES list and own answer.
        - CLOSED: verdict and YES list for everyone.
        - Organizer only: counts including unique views, NO and MAYBE lists.
        """
        invitation = await self._projector.load_invitation(invitation_id)
        aggregate = await self._projector.project(invitation_id)
        now = self._clock()

        state = resolve_status(
            invitation.confirm_by, invitation.capacity_max, aggregate.counts.yes, now
        )
        counts = decay_maybes(invitation.confirm_by, now, aggregate.counts)

        mine = aggregate.response_for(device_id)
        is_responding = mine is not None
        if mine is None and is_organizer:
            mine = aggregate.response_for(organizer_device_id(invitation_id))
        my_response = MyResponseDTO(choice=mine.choice, name=mine.name) if mine else None

        sees_participants = is_responding or is_organizer

        if not state.is_closed and not sees_participants:
            return SnapshotDTO(
                invitation=invitation.to_dto(),
                state=state,
                total_positions=aggregate.total_positions,
            )

        snapshot = {
            "invitation": invitation.to_dto(),
            "state": state,
            "participants": aggregate.participants,
            "my_response": my_response if sees_participants else None,
        }
        if state.is_closed:
            # A missed finalization leaves no persisted verdict; compute it on read
            snapshot["verdict"] = invitation.verdict or compute_verdict(
                invitation.capacity_min, counts.yes
            )
        else:
            snapshot["total_positions"] = aggregate.total_positions

        if is_organizer:
            snapshot["counts"] = OrganizerCountsDTO(
                yes=counts.yes,
                no=counts.no,
                maybe=counts.maybe,
                views=await self._projector.unique_views(invitation_id),
            )
            snapshot["no_names"] = aggregate.no_names
            snapshot["maybe_names"] = aggregate.maybe_names

        return SnapshotDTO(**snapshot)
