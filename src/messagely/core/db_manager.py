from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from pathlib import Path
import logging

from messagely.config import Config
from .database import Base


class BaseDatabaseManager:
    def __init__(self, config: Config):
        self.config = config
        self.engine = None
        self.session_factory = None
        self._logger = logging.getLogger(__name__)

    async def initialize(self):
        raise NotImplementedError()

    def _make_session_factory(self):
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        if not self.engine:
            await self.initialize()

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self):
        if not self.engine:
            await self.initialize()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class PostgresDatabaseManager(BaseDatabaseManager):
    def get_url(self) -> str:
        db = self.config.db
        return f"postgresql+asyncpg://{db.user}:{db.password}@{db.host}:{db.port}/{db.name}"

    async def initialize(self):
        self.engine = create_async_engine(
            url=self.get_url(),
            pool_size=30,
            max_overflow=20,
            pool_pre_ping=True,
            pool_timeout=60,
            pool_recycle=-1,
            echo=self.config.db.echo,
        )
        self._make_session_factory()
        self._logger.info("PostgreSQL engine initialized for %s", self.config.db.host)


class SqliteDatabaseManager(BaseDatabaseManager):
    def get_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.config.db.path}"

    async def initialize(self):
        Path(self.config.db.path).parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_async_engine(
            url=self.get_url(),
            echo=self.config.db.echo,
        )

        # SQLite only checks foreign keys when asked to, per connection
        @event.listens_for(self.engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        self._make_session_factory()
        self._logger.info("SQLite engine initialized at %s", self.config.db.path)


def create_db_manager(config: Config) -> BaseDatabaseManager:
    if config.db.is_postgres:
        return PostgresDatabaseManager(config)
    return SqliteDatabaseManager(config)
