"""FastAPI dependency providers shared by the invitation features.

Override them in tests through ``app.dependency_overrides``.
"""

from src.config.settings import settings
from src.invitations.locks import KeyedLock, invitation_locks
from src.invitations.repository.sql_store import SqlTableStore
from src.invitations.repository.store import TableStore
from src.invitations.utils import Clock, utc_now


def get_table_store() -> TableStore:
    return SqlTableStore()


def get_clock() -> Clock:
    return utc_now


def get_invitation_locks() -> KeyedLock | None:
    return invitation_locks if settings.serialize_mutations else None
