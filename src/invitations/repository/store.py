"""The three primitives the engine is allowed to use against its backend.

None of them is atomic with another: ``update_row_where`` performs its own
read before writing and may race with concurrent callers. Callers pre-check
duplicates before ``append_row``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from src.config.table_names import TableNames
from src.invitations.repository.rows import Row


class TableStore(ABC):
    @abstractmethod
    async def append_row(self, table: TableNames, row: Row) -> None:
        raise NotImplementedError

    @abstractmethod
    async def read_all_rows(self, table: TableNames) -> list[Row]:
        raise NotImplementedError

    @abstractmethod
    async def update_row_where(
        self,
        table: TableNames,
        predicate: Callable[[Row], bool],
        mutate: Callable[[Row], Row],
    ) -> bool:
        """Replace every row matching ``predicate`` with ``mutate(row)``.

        Returns False when nothing matched.
        """
        raise NotImplementedError
