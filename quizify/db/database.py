from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
import os

from quizify.config.settings import settings


def create_db_engine(database_url: str = None, echo: bool = None) -> Engine:
    """
    Create a database engine

    Args:
        database_url: SQLAlchemy URL (defaults to settings.DATABASE_URL)
        echo: Log SQL statements (defaults to settings.DEBUG)

    Returns:
        Engine
    """
    database_url = database_url or settings.DATABASE_URL
    echo = settings.DEBUG if echo is None else echo

    if database_url.startswith("sqlite"):
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection so every session sees the same in-memory database
            db_engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=echo
            )
        else:
            db_path = database_url.split("///", 1)[-1]
            parent_dir = os.path.dirname(db_path)
            if parent_dir:
                os.makedirs(parent_dir, exist_ok=True)
            db_engine = create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                echo=echo
            )

        # SQLite only honours ON DELETE CASCADE with foreign keys switched on
        @event.listens_for(db_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return db_engine

    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=30,
        pool_pre_ping=True,
        echo=echo
    )


# Create database engine
engine = create_db_engine()

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create base class for models
Base = declarative_base()


def init_db(bind: Engine = None):
    """Initialize database (create tables)"""
    # Models must be imported so their tables are registered on Base.metadata
    from quizify.db import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
