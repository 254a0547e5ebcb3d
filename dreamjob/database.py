"""
Database schema and connection management.

Uses SQLAlchemy for the durable user store. The ``users.email`` unique
constraint is what rejects duplicate registrations.
"""

from pathlib import Path
from sqlalchemy import create_engine, Column, Integer, String, UniqueConstraint
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

EMAIL_CONSTRAINT = "uq_users_email"


class UserRecord(Base):
    """Registered user row."""

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("email", name=EMAIL_CONSTRAINT),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=False)
    password = Column(String, nullable=False)


def create_db_engine(url: str, timeout: float = 5.0) -> Engine:
    """
    Build a pooled engine for ``url``.

    Args:
        url: SQLAlchemy database URL
        timeout: Seconds a statement may wait on the database before failing

    Returns:
        SQLAlchemy engine
    """
    parsed = make_url(url)
    connect_args = {}
    if parsed.get_backend_name() == "sqlite":
        # Pooled connections move between request threads
        connect_args = {"check_same_thread": False, "timeout": timeout}
    elif parsed.get_backend_name() == "postgresql":
        connect_args = {"connect_timeout": int(timeout)}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def init_database(url: str, timeout: float = 5.0) -> Engine:
    """
    Initialize database and create tables.

    Args:
        url: SQLAlchemy database URL
        timeout: Seconds a statement may wait on the database before failing

    Returns:
        Engine bound to the initialized database
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(url, timeout=timeout)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """
    Get a session factory for the given engine.

    Sessions are meant to be short-lived: open one per repository call.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)
