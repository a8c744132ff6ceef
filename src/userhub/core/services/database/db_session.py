"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, event, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from src.userhub.runtime.config.config_data import ConfigData
from src.userhub.runtime.context import get_config


def _unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(engine: Engine) -> None:
    """Replace SQLite's ASCII-only ``lower()`` with a Unicode-aware one.

    Applies to connections opened after the call, so register before the
    engine first connects.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.create_function(
            "lower", 1, _unicode_lower, deterministic=True
        )


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Args:
            engine: Pre-built engine (tests pass an in-memory SQLite engine).
                When omitted the engine is built from the current config.
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        db_config = main_config.database

        logger.info(
            "Configuring database engine for environment: {}",
            main_config.app.environment,
        )
        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "echo_pool": False,
            "pool_pre_ping": True,
            "connect_args": self._get_connect_args(main_config),
        }

        if db_config.url.startswith("sqlite") and ":memory:" in db_config.url:
            # A single shared connection keeps the in-memory database alive
            engine_kwargs["poolclass"] = StaticPool
        elif not db_config.is_sqlite:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        self._engine = create_engine(db_config.url, **engine_kwargs)
        if db_config.is_sqlite:
            register_sqlite_functions(self._engine)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
                pool_timeout=db_config.pool_timeout,
                pool_recycle=db_config.pool_recycle,
            )

    @property
    def engine(self) -> Engine:
        return self._engine

    def _get_connect_args(self, config: ConfigData) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if "postgresql" in config.database.url:
            connect_args.update(
                {
                    "application_name": f"userhub_{config.app.environment}",
                    "connect_timeout": 30,
                }
            )

        elif config.database.is_sqlite:
            connect_args.update(
                {
                    # Sessions are handed to FastAPI's worker threads
                    "check_same_thread": False,
                    "timeout": 20,
                }
            )

            if config.app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )

        return connect_args

    def create_all(self) -> None:
        """Create all database tables."""
        from src.userhub.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for repositories and scripts."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
