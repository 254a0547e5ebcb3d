"""
Tests for user_repository.py - SQL-backed user store.
"""

import pytest
import threading
from types import SimpleNamespace
from concurrent.futures import ThreadPoolExecutor
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from dreamjob.database import EMAIL_CONSTRAINT
from dreamjob.errors import StoreFault
from dreamjob.models import User
from dreamjob.user_repository import is_duplicate_email


class TestSaveAndFind:
    """Test saving and looking up users."""

    def test_save_then_get_same(self, user_repo):
        user = user_repo.save(User(email="user1@mail.ru", name="user1", password="password1"))

        found = user_repo.find_by_email_and_password(user.email, user.password)
        assert found == user
        assert user.id > 0

    def test_save_several_then_get_all(self, user_repo):
        user1 = user_repo.save(User(email="user1@mail.ru", name="user1", password="password1"))
        user2 = user_repo.save(User(email="user2@mail.ru", name="user2", password="password2"))
        user3 = user_repo.save(User(email="user3@mail.ru", name="user3", password="password3"))

        assert user_repo.find_all() == [user1, user2, user3]

    def test_save_ignores_caller_id(self, user_repo):
        user = user_repo.save(User(id=77, email="user1@mail.ru", name="user1", password="p"))
        assert user.id != 77

    def test_nothing_saved_nothing_found(self, user_repo):
        assert user_repo.find_all() == []
        assert user_repo.find_by_email_and_password("user1@mail.ru", "user1") is None

    def test_wrong_password_not_found(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="password1"))
        assert user_repo.find_by_email_and_password("user1@mail.ru", "wrong") is None

    def test_wrong_email_not_found(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="password1"))
        assert user_repo.find_by_email_and_password("user2@mail.ru", "password1") is None


class TestDuplicateEmail:
    """Test the unique email constraint."""

    def test_second_user_with_same_email_is_rejected(self, user_repo, quiet_logger):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="password1"))

        assert user_repo.save(User(email="user1@mail.ru", name="user2", password="password2")) is None
        assert len(user_repo.find_all()) == 1
        assert quiet_logger.get_metrics()["duplicates"] == 1

    def test_email_is_case_sensitive(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="p"))
        other = user_repo.save(User(email="User1@mail.ru", name="user1", password="p"))

        assert other is not None
        assert len(user_repo.find_all()) == 2

    def test_store_usable_after_duplicate(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="p"))
        user_repo.save(User(email="user1@mail.ru", name="user1", password="p"))

        assert user_repo.save(User(email="user2@mail.ru", name="user2", password="p")) is not None

    def test_concurrent_registrations_same_email(self, user_repo):
        """Exactly one of two racing registrations should win."""
        barrier = threading.Barrier(2)

        def register(name):
            barrier.wait()
            return user_repo.save(User(email="race@mail.ru", name=name, password="p"))

        with ThreadPoolExecutor(max_workers=2) as pool:
            results = list(pool.map(register, ["first", "second"]))

        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        assert [u.email for u in user_repo.find_all()] == ["race@mail.ru"]


class TestDelete:
    """Test delete_by_email."""

    def test_delete_then_not_found(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="user1"))
        user_repo.save(User(email="user2@mail.ru", name="user2", password="user2"))

        assert user_repo.delete_by_email("user1@mail.ru") is True
        assert user_repo.find_by_email_and_password("user1@mail.ru", "user1") is None
        assert [u.email for u in user_repo.find_all()] == ["user2@mail.ru"]

    def test_delete_unknown_email(self, user_repo):
        assert user_repo.delete_by_email("user111@mail.ru") is False

    def test_email_free_again_after_delete(self, user_repo):
        user_repo.save(User(email="user1@mail.ru", name="user1", password="p"))
        user_repo.delete_by_email("user1@mail.ru")

        assert user_repo.save(User(email="user1@mail.ru", name="again", password="p")) is not None


class TestStoreFaults:
    """Failures other than duplicates must raise, not return None."""

    @pytest.fixture
    def broken_repo(self, user_repo, db_engine):
        with db_engine.begin() as conn:
            conn.execute(text("DROP TABLE users"))
        return user_repo

    def test_save_raises_on_missing_table(self, broken_repo, quiet_logger):
        with pytest.raises(StoreFault) as exc_info:
            broken_repo.save(User(email="user1@mail.ru", name="user1", password="p"))

        assert exc_info.value.operation == "save"
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert quiet_logger.get_metrics()["faults_by_operation"] == {"save": 1}

    def test_find_all_raises_on_missing_table(self, broken_repo):
        with pytest.raises(StoreFault):
            broken_repo.find_all()

    def test_find_by_email_and_password_raises(self, broken_repo):
        with pytest.raises(StoreFault):
            broken_repo.find_by_email_and_password("user1@mail.ru", "p")

    def test_delete_raises_on_missing_table(self, broken_repo):
        with pytest.raises(StoreFault):
            broken_repo.delete_by_email("user1@mail.ru")

    def test_missing_email_is_fault_not_duplicate(self, user_repo):
        """A NOT NULL violation is not a duplicate."""
        with pytest.raises(StoreFault) as exc_info:
            user_repo.save(User(email=None, name="user1", password="p"))

        assert isinstance(exc_info.value.__cause__, IntegrityError)


class TestIsDuplicateEmail:
    """Test constraint-violation classification."""

    @staticmethod
    def _integrity_error(message):
        return IntegrityError("INSERT INTO users", {}, Exception(message))

    def test_sqlite_unique_message(self):
        assert is_duplicate_email(self._integrity_error("UNIQUE constraint failed: users.email"))

    def test_not_null_message(self):
        assert not is_duplicate_email(self._integrity_error("NOT NULL constraint failed: users.email"))

    def test_other_column(self):
        assert not is_duplicate_email(self._integrity_error("UNIQUE constraint failed: users.name"))

    def test_row_data_ignored(self):
        """Words echoed from the failing row must not make a NOT NULL error a duplicate."""
        err = self._integrity_error(
            'null value in column "name" of relation "users" violates not-null constraint\n'
            "DETAIL:  Failing row contains (7, unique.duplicate@email.com, null, p)."
        )
        assert not is_duplicate_email(err)

    def test_postgres_email_constraint(self):
        orig = _PgError("23505", EMAIL_CONSTRAINT, 'duplicate key value violates unique constraint "uq_users_email"')
        assert is_duplicate_email(IntegrityError("INSERT INTO users", {}, orig))

    def test_postgres_other_constraint(self):
        orig = _PgError("23505", "users_pkey", 'duplicate key value violates unique constraint "users_pkey"')
        assert not is_duplicate_email(IntegrityError("INSERT INTO users", {}, orig))

    def test_postgres_not_null_on_email_row(self):
        orig = _PgError(
            "23502",
            None,
            'null value in column "name" of relation "users" violates not-null constraint\n'
            "DETAIL:  Failing row contains (7, unique.duplicate@email.com, null, p).",
        )
        assert not is_duplicate_email(IntegrityError("INSERT INTO users", {}, orig))


class _PgError(Exception):
    """Shape of a psycopg2 error: SQLSTATE in pgcode, details in diag."""

    def __init__(self, pgcode, constraint_name, message):
        super().__init__(message)
        self.pgcode = pgcode
        self.diag = SimpleNamespace(constraint_name=constraint_name)
