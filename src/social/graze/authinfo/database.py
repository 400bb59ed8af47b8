"""Session provider for the auth info store.

``Database`` hands out SQLAlchemy async sessions in two flavours:

* ``session()`` for reads. No transaction is opened explicitly and nothing is committed.
* ``transaction()`` for writes. Everything done inside the block is committed when the
  block exits normally and rolled back when it exits with an exception, including
  ``asyncio.CancelledError``.

The session is closed on every exit path.
"""

import contextlib
import logging
from typing import AsyncIterator
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from social.graze.authinfo.config import Settings

logger = logging.getLogger(__name__)


class Database:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        engine: AsyncEngine | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.engine = engine

    @contextlib.asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as database_session:
            yield database_session

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        async with self.session_maker() as database_session:
            async with database_session.begin():
                yield database_session

    async def ping(self) -> None:
        async with self.session() as database_session:
            await database_session.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def create_database(settings: Settings) -> Database:
    engine = create_async_engine(settings.pg_dsn, echo=settings.debug)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    logger.info("Database engine created for %s", engine.url.render_as_string())
    return Database(session_maker, engine)
