"""SQL implementation of the table store.

Each primitive runs in its own session and commits on its own, so every
single operation is atomic while sequences of them are not.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict, fields

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config.database import async_session_maker
from src.config.table_names import TableNames
from src.invitations.dtos import StoreUnavailableError
from src.invitations.repository.orm_models import ORM_MODELS
from src.invitations.repository.rows import ROW_TYPES, Row
from src.invitations.repository.store import TableStore

logger = logging.getLogger(__name__)


class SqlTableStore(TableStore):
    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._session_maker = session_maker or async_session_maker

    @staticmethod
    def _to_row(table: TableNames, obj) -> Row:
        row_type = ROW_TYPES[table]
        return row_type(**{f.name: getattr(obj, f.name) for f in fields(row_type)})

    async def append_row(self, table: TableNames, row: Row) -> None:
        orm_model = ORM_MODELS[table]
        try:
            async with self._session_maker() as session:
                session.add(orm_model(**asdict(row)))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"append to {table.value} failed: {e}")
            raise StoreUnavailableError(f"Could not append to {table.value}") from e

    async def read_all_rows(self, table: TableNames) -> list[Row]:
        orm_model = ORM_MODELS[table]
        primary_key = orm_model.__mapper__.primary_key[0]
        try:
            async with self._session_maker() as session:
                result = await session.execute(select(orm_model).order_by(primary_key))
                return [self._to_row(table, obj) for obj in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"read of {table.value} failed: {e}")
            raise StoreUnavailableError(f"Could not read {table.value}") from e

    async def update_row_where(
        self,
        table: TableNames,
        predicate: Callable[[Row], bool],
        mutate: Callable[[Row], Row],
    ) -> bool:
        orm_model = ORM_MODELS[table]
        row_type = ROW_TYPES[table]
        try:
            async with self._session_maker() as session:
                result = await session.execute(select(orm_model))
                matched = False
                for obj in result.scalars().all():
                    current = self._to_row(table, obj)
                    if not predicate(current):
                        continue
                    matched = True
                    updated = mutate(current)
                    for f in fields(row_type):
                        setattr(obj, f.name, getattr(updated, f.name))
                await session.commit()
                return matched
        except SQLAlchemyError as e:
            logger.error(f"update of {table.value} failed: {e}")
            raise StoreUnavailableError(f"Could not update {table.value}") from e
