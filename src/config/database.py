import logging
import sys

from alembic import command, config
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.config.settings import settings

logger = logging.getLogger(__name__)


def create_engine(url: str) -> AsyncEngine:
    """Async engine for postgres (asyncpg) or, for local runs, sqlite (aiosqlite)."""
    url = str(url)
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"timeout": 15, "check_same_thread": False}
        if ":memory:" in url or url.rstrip("/").endswith(":"):
            # one shared connection, or every session sees its own empty database
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_async_engine(url, echo=settings.LOG_DB, **kwargs)


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.database_url)
if "pytest" in sys.modules:
    # never point a test run at the configured database
    engine = create_engine(generate_test_db_dsn(settings.database_url))

async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


def run_upgrade(connection, cfg):
    cfg.attributes["connection"] = connection
    command.upgrade(cfg, "head")


async def init_db():
    """Bring the schema to the latest migration over the application engine."""
    async with engine.begin() as conn:
        await conn.run_sync(run_upgrade, config.Config("alembic.ini"))
    logger.info("Database schema is up to date")


async def dispose_engine():
    await engine.dispose()
