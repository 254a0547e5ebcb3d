"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime
from typing import Dict, Any

from dreamjob import logger as logger_module
from dreamjob.database import get_session_factory, init_database
from dreamjob.logger import StructuredLogger
from dreamjob.models import Candidate
from dreamjob.repository import MemoryCandidateRepository
from dreamjob.user_repository import SqlUserRepository


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no handlers attached to files or console."""
    return StructuredLogger(name="dreamjob-test", enable_file=False, enable_console=False)


@pytest.fixture(autouse=True)
def global_logger(monkeypatch, quiet_logger):
    """Keep get_logger() from writing log files during tests."""
    monkeypatch.setattr(logger_module, "_global_logger", quiet_logger)
    return quiet_logger


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'dreamjob.db'}"


@pytest.fixture
def db_engine(db_url):
    engine = init_database(db_url, timeout=5)
    yield engine
    engine.dispose()


@pytest.fixture
def user_repo(db_engine, quiet_logger) -> SqlUserRepository:
    return SqlUserRepository(get_session_factory(db_engine), quiet_logger)


@pytest.fixture
def empty_candidates(quiet_logger) -> MemoryCandidateRepository:
    return MemoryCandidateRepository(quiet_logger, seed=False)


@pytest.fixture
def ivan() -> Candidate:
    return Candidate(
        name="Ivan",
        description="Java developer",
        creation_date=datetime(2024, 1, 15, 10, 30),
        city_id=1,
    )


@pytest.fixture
def valid_user_data() -> Dict[str, Any]:
    return {
        "email": "user1@mail.ru",
        "name": "user1",
        "password": "password1",
    }
