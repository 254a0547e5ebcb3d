"""
Users Repository.

Responsibilities:
- CRUD operations for the users table.
- Duplicate-email rejection, decided by the database's unique constraint.

Non-Responsibilities:
- No password hashing.
- No retries; a failed statement is reported to the caller.

Invariant:
A duplicate email yields None. Any other storage failure raises StoreFault.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .database import EMAIL_CONSTRAINT, UserRecord
from .errors import StoreFault
from .logger import StructuredLogger, get_logger
from .models import User


SQLITE_DUPLICATE_EMAIL = "UNIQUE constraint failed: users.email"
PG_UNIQUE_VIOLATION = "23505"


def is_duplicate_email(exc: IntegrityError) -> bool:
    """
    Determine if an integrity error comes from the users.email unique constraint.

    PostgreSQL drivers expose the SQLSTATE and the violated constraint name;
    SQLite only has a message, whose first line names the table and column.
    Row data echoed after the first line never takes part in the decision.
    """
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate is not None:
        diag = getattr(orig, "diag", None)
        return sqlstate == PG_UNIQUE_VIOLATION and getattr(diag, "constraint_name", None) == EMAIL_CONSTRAINT
    lines = str(orig).splitlines()
    return bool(lines) and lines[0].strip() == SQLITE_DUPLICATE_EMAIL


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=record.email,
        name=record.name,
        password=record.password,
    )


class SqlUserRepository:
    """User store backed by a relational table."""

    def __init__(self, session_factory: sessionmaker, logger: Optional[StructuredLogger] = None):
        self._session_factory = session_factory
        self._logger = logger or get_logger()

    def save(self, user: User) -> Optional[User]:
        """
        Insert ``user`` under a database-issued id.

        Returns:
            The stored user, or None if the email is already registered

        Raises:
            StoreFault: If the database fails for any other reason
        """
        record = UserRecord(email=user.email, name=user.name, password=user.password)
        with self._session_factory() as session:
            try:
                session.add(record)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                if not is_duplicate_email(e):
                    raise self._fault("save", e) from e
                self._logger.record_duplicate()
                self._logger.warning(
                    "User not saved: email already registered",
                    email=user.email,
                    cause="duplicate_email",
                )
                return None
            except SQLAlchemyError as e:
                session.rollback()
                raise self._fault("save", e) from e
            saved = _to_user(record)
        self._logger.record_save()
        self._logger.debug("Saved user", id=saved.id, email=saved.email)
        return saved

    def find_by_email_and_password(self, email: str, password: str) -> Optional[User]:
        with self._session_factory() as session:
            try:
                record = (
                    session.query(UserRecord)
                    .filter_by(email=email, password=password)
                    .first()
                )
            except SQLAlchemyError as e:
                raise self._fault("find_by_email_and_password", e) from e
            return _to_user(record) if record is not None else None

    def find_all(self) -> List[User]:
        with self._session_factory() as session:
            try:
                records = session.query(UserRecord).order_by(UserRecord.id).all()
            except SQLAlchemyError as e:
                raise self._fault("find_all", e) from e
            return [_to_user(r) for r in records]

    def delete_by_email(self, email: str) -> bool:
        """Delete the user registered under ``email``; False if there is none."""
        with self._session_factory() as session:
            try:
                deleted = session.query(UserRecord).filter_by(email=email).delete()
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise self._fault("delete_by_email", e) from e
        if deleted:
            self._logger.record_delete()
            self._logger.debug("Deleted user", email=email)
        return deleted > 0

    def _fault(self, operation: str, exc: SQLAlchemyError) -> StoreFault:
        self._logger.record_store_fault(operation)
        self._logger.error(
            f"User store {operation} failed: {exc}",
            operation=operation,
            error_type=type(exc).__name__,
        )
        return StoreFault(operation, str(exc), cause=exc)
