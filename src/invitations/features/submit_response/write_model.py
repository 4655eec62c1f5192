"""Write model for submitting responses (the response register).

Admission rules, in order:
1. the invitation must be OPEN, judged from freshly read responses;
2. YES and NO are final; one MAYBE may become YES or NO, once, keeping its
   original creation time;
3. a YES is re-checked against ``capacity_max`` right before it is written.

Nothing is written when a submission is rejected.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import replace

from src.config.table_names import TableNames
from src.invitations.audit import append_log
from src.invitations.dtos import (
    AlreadyRespondedError,
    Choice,
    ClosureCause,
    InvalidInputError,
    InvitationClosedError,
    LogType,
    SubmittedResponseDTO,
)
from src.invitations.finalizer import ClosureFinalizer
from src.invitations.lifecycle import resolve_status
from src.invitations.locks import KeyedLock
from src.invitations.repository.aggregates import AggregateProjector
from src.invitations.repository.rows import ResponseRow
from src.invitations.repository.store import TableStore
from src.invitations.utils import NAME_MAX_LENGTH, Clock, new_id, normalize_name, utc_now

logger = logging.getLogger(__name__)


def parse_choice(choice: Choice | str | None) -> Choice:
    if isinstance(choice, Choice):
        return choice
    try:
        return Choice(str(choice or "").strip().upper())
    except ValueError:
        raise InvalidInputError(f"Invalid choice '{choice}'") from None


class SubmitResponseWriteModel(ABC):
    @abstractmethod
    async def submit_response(
        self,
        invitation_id: str,
        device_id: str,
        name: str,
        choice: Choice | str,
    ) -> SubmittedResponseDTO:
        """
        Record a participant's answer to an invitation.
        Raises InvitationClosedError, AlreadyRespondedError, InvitationNotFoundError
        or InvalidInputError without writing anything.
        """
        raise NotImplementedError


class StoreSubmitResponseWriteModel(SubmitResponseWriteModel):
    """Table store implementation of the response register."""

    def __init__(
        self,
        store: TableStore,
        clock: Clock = utc_now,
        locks: KeyedLock | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._locks = locks
        self._projector = AggregateProjector(store)
        self._finalizer = ClosureFinalizer(store, self._projector)

    async def submit_response(
        self,
        invitation_id: str,
        device_id: str,
        name: str,
        choice: Choice | str,
    ) -> SubmittedResponseDTO:
        device_id = (device_id or "").strip()
        if not device_id:
            raise InvalidInputError("Missing device id")
        name = normalize_name(name)
        if not name:
            raise InvalidInputError("Missing name")
        if len(name) > NAME_MAX_LENGTH:
            raise InvalidInputError(f"Name is longer than {NAME_MAX_LENGTH} characters")
        choice = parse_choice(choice)

        lock = self._locks.hold(invitation_id) if self._locks else nullcontext()
        async with lock:
            return await self._submit(invitation_id, device_id, name, choice)

    async def _submit(
        self,
        invitation_id: str,
        device_id: str,
        name: str,
        choice: Choice,
    ) -> SubmittedResponseDTO:
        invitation = await self._projector.load_invitation(invitation_id)
        aggregate = await self._projector.project(invitation_id)
        now = self._clock()

        state = resolve_status(
            invitation.confirm_by, invitation.capacity_max, aggregate.counts.yes, now
        )
        if state.is_closed:
            raise InvitationClosedError(invitation_id, state.closure_cause)

        existing = aggregate.response_for(device_id)
        if existing is not None:
            # Only an undecided MAYBE may still change, and only to a final answer
            if existing.choice != Choice.MAYBE or choice == Choice.MAYBE:
                raise AlreadyRespondedError(invitation_id, device_id)

        if choice == Choice.YES and invitation.capacity_max is not None:
            fresh = await self._projector.project(invitation_id)
            if fresh.counts.yes >= invitation.capacity_max:
                raise InvitationClosedError(invitation_id, ClosureCause.FULL)

        if existing is not None:
            await self._store.update_row_where(
                TableNames.RESPONSES,
                lambda row: row.id == existing.id,
                lambda row: replace(row, choice=choice, name=name),
            )
            created_at = existing.created_at
            await append_log(
                self._store,
                LogType.RESPONSE_MODIFIED,
                created_at=now,
                invitation_id=invitation_id,
                device_id=device_id,
                payload={"from": existing.choice.value, "to": choice.value},
            )
        else:
            created_at = now
            await self._store.append_row(
                TableNames.RESPONSES,
                ResponseRow(
                    id=new_id(),
                    invitation_id=invitation_id,
                    device_id=device_id,
                    name=name,
                    choice=choice,
                    created_at=created_at,
                ),
            )
            await append_log(
                self._store,
                LogType.RESPONSE_CREATED,
                created_at=now,
                invitation_id=invitation_id,
                device_id=device_id,
                payload={"choice": choice.value},
            )

        result = await self._finalizer.sync(invitation, now, response_created_at=created_at)
        logger.debug(
            f"Invitation {invitation_id}: {device_id} answered {choice.value}, "
            f"now {result.state.status.value}"
        )

        return SubmittedResponseDTO(
            invitation_id=invitation_id,
            choice=choice,
            modified=existing is not None,
            state=result.state,
        )
