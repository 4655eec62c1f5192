import logging
from datetime import datetime

from src.config.table_names import TableNames
from src.invitations.dtos import LogType, StoreUnavailableError
from src.invitations.repository.rows import LogRow
from src.invitations.repository.store import TableStore

logger = logging.getLogger(__name__)


async def append_log(
    store: TableStore,
    log_type: LogType,
    created_at: datetime,
    invitation_id: str = "",
    device_id: str = "",
    payload: dict | None = None,
) -> None:
    """Append an audit row. A failure here never undoes the mutation it describes."""
    row = LogRow(
        created_at=created_at,
        type=log_type,
        invitation_id=invitation_id,
        device_id=device_id,
        payload=payload or {},
    )
    try:
        await store.append_row(TableNames.LOGS, row)
    except StoreUnavailableError as e:
        logger.warning(f"Could not record {log_type.value} for invitation {invitation_id}: {e}")
