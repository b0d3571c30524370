import logging
from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

from attendance_monitor import config

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    def __init__(self):
        self.engine = None
        self.async_session = None
        self.is_connected = False

    async def connect(self, url: Optional[str] = None) -> bool:
        """Create the async engine and session factory"""
        database_url = url or config.get_database_url()
        try:
            if database_url.startswith("sqlite"):
                # A single shared connection keeps in-memory databases alive between sessions
                self.engine = create_async_engine(
                    database_url,
                    echo=config.SQL_ECHO,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False}
                )
            else:
                self.engine = create_async_engine(
                    database_url,
                    echo=config.SQL_ECHO,
                    pool_pre_ping=True,
                    pool_recycle=3600,
                    poolclass=NullPool
                )

            self.async_session = sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False
            )

            self.is_connected = True
            logger.info(f"Connected to database: {self.engine.url.render_as_string(hide_password=True)}")
            return True

        except Exception as e:
            logger.error(f"Error connecting to database: {e}", exc_info=True)
            self.is_connected = False
            return False

    async def disconnect(self):
        """Dispose of the engine"""
        if self.engine:
            await self.engine.dispose()
            self.is_connected = False
            logger.info("Database connection closed")

    def get_session(self) -> AsyncSession:
        """Get async database session"""
        if not self.is_connected:
            raise RuntimeError("Database is not connected. Call connect() first.")
        return self.async_session()

    async def create_tables(self):
        """Create all tables defined in Base metadata"""
        # Registers every model on Base.metadata
        from attendance_monitor.models import (  # noqa: F401
            attendance, department, faculty, student, subject, timetable
        )

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created successfully")
        except Exception as e:
            logger.error(f"Error creating tables: {e}")
            raise

    async def check_connection(self) -> bool:
        """Run a trivial query to confirm the database answers"""
        if not self.is_connected:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.exec_driver_sql("SELECT 1")
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False


# Create global database instance
database = Database()
