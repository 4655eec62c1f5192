from abc import ABC, abstractmethod
from dataclasses import asdict
from enum import Enum

from src.config.table_names import TableNames
from src.invitations.repository.store import TableStore


class ExportKind(str, Enum):
    ALL = "all"
    INVITATIONS = "invitations"
    RESPONSES = "responses"
    VIEWS = "views"
    LOGS = "logs"

    @property
    def tables(self) -> list[TableNames]:
        if self == ExportKind.ALL:
            return list(TableNames)
        return [TableNames(self.value)]


class ExportReadModel(ABC):
    @abstractmethod
    async def export(self, kind: ExportKind) -> dict[str, list[dict]]:
        """Dump the raw rows of one table, or of every table, keyed by table name."""
        raise NotImplementedError


class StoreExportReadModel(ExportReadModel):
    def __init__(self, store: TableStore) -> None:
        self._store = store

    async def export(self, kind: ExportKind) -> dict[str, list[dict]]:
        exported = {}
        for table in kind.tables:
            rows = await self._store.read_all_rows(table)
            exported[table.value] = [asdict(row) for row in rows]
        return exported
