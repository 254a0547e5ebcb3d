"""
Process-wide wiring of the stores.

``build_container`` is called once at process start; request handlers get
the resulting ``Container`` injected instead of reaching for globals.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .database import get_session_factory, init_database
from .errors import StoreFault
from .logger import StructuredLogger, get_logger
from .repository import (
    MemoryCandidateRepository,
    MemoryCityRepository,
    MemoryVacancyRepository,
)
from .user_repository import SqlUserRepository


@dataclass
class Container:
    candidates: MemoryCandidateRepository
    vacancies: MemoryVacancyRepository
    cities: MemoryCityRepository
    users: SqlUserRepository
    engine: Engine
    logger: StructuredLogger

    def close(self) -> None:
        """Release pooled database connections."""
        self.engine.dispose()


def build_container(settings: Settings, logger: Optional[StructuredLogger] = None) -> Container:
    """
    Create one instance of every store.

    Args:
        settings: Runtime settings
        logger: Logger to share between stores (default: global logger)

    Returns:
        Container holding the shared stores

    Raises:
        StoreFault: If the user database cannot be opened or initialized
    """
    logger = logger or get_logger(level=settings.log_level, log_dir=settings.log_dir)
    try:
        engine = init_database(settings.database_url, timeout=settings.db_timeout)
    except (SQLAlchemyError, OSError) as e:
        logger.record_store_fault("init_database")
        logger.error(f"User store init_database failed: {e}", error_type=type(e).__name__)
        raise StoreFault("init_database", str(e), cause=e) from e
    container = Container(
        candidates=MemoryCandidateRepository(logger),
        vacancies=MemoryVacancyRepository(logger),
        cities=MemoryCityRepository(logger),
        users=SqlUserRepository(get_session_factory(engine), logger),
        engine=engine,
        logger=logger,
    )
    logger.info("Stores ready", database_url=engine.url.render_as_string(hide_password=True))
    return container
