"""
Entity repositories.

Responsibilities:
- Uniform contract for entity stores (save/update/delete/find).
- Thread-safe in-memory stores for candidates, vacancies and cities.

Non-Responsibilities:
- No validation of field contents.
- No translation of absence into user-facing errors.

Invariant:
Ids are issued by the store only, are positive, increase per store and
are never reused. Stored values are replaced wholesale, never mutated.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Dict, Generic, List, Optional, TypeVar

from .logger import StructuredLogger, get_logger
from .models import Candidate, City, Vacancy, preserved_values

E = TypeVar("E")


class Repository(ABC, Generic[E]):
    """Contract every id-keyed entity store satisfies."""

    @abstractmethod
    def save(self, entity: E) -> E:
        """Assign a fresh id to ``entity``, store it and return the stored value."""

    @abstractmethod
    def delete_by_id(self, entity_id: int) -> bool:
        """Remove the entity; False if nothing was stored under ``entity_id``."""

    @abstractmethod
    def update(self, entity: E) -> bool:
        """Replace the entity stored under ``entity.id``; False if absent."""

    @abstractmethod
    def find_by_id(self, entity_id: int) -> Optional[E]:
        pass

    @abstractmethod
    def find_all(self) -> List[E]:
        pass


class AtomicCounter:
    """Monotonic id source; ``next()`` reads and advances in one step."""

    def __init__(self, start: int = 1):
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def value(self) -> int:
        """Id the next call to ``next()`` will return."""
        with self._lock:
            return self._value


class MemoryRepository(Repository[E]):
    """
    Dict-backed store safe for concurrent request threads.

    Writers and readers share one lock, so ``save``, ``update`` and
    ``delete_by_id`` each apply as a single step and readers never see a
    half-applied write.
    """

    entity_name = "entity"

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self._entities: Dict[int, E] = {}
        self._lock = threading.Lock()
        self._next_id = AtomicCounter(1)
        self._logger = logger or get_logger()

    def save(self, entity: E) -> E:
        with self._lock:
            # Id order matches insertion order
            stored = replace(entity, id=self._next_id.next())
            self._entities[stored.id] = stored
        self._logger.record_save()
        self._logger.debug(f"Saved {self.entity_name}", id=stored.id)
        return stored

    def delete_by_id(self, entity_id: int) -> bool:
        with self._lock:
            removed = self._entities.pop(entity_id, None)
        if removed is None:
            return False
        self._logger.record_delete()
        self._logger.debug(f"Deleted {self.entity_name}", id=entity_id)
        return True

    def update(self, entity: E) -> bool:
        with self._lock:
            current = self._entities.get(entity.id)
            if current is None:
                return False
            self._entities[entity.id] = replace(entity, **preserved_values(current))
        self._logger.record_update()
        self._logger.debug(f"Updated {self.entity_name}", id=entity.id)
        return True

    def find_by_id(self, entity_id: int) -> Optional[E]:
        with self._lock:
            return self._entities.get(entity_id)

    def find_all(self) -> List[E]:
        with self._lock:
            return list(self._entities.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)


class MemoryCandidateRepository(MemoryRepository[Candidate]):
    entity_name = "candidate"

    def __init__(self, logger: Optional[StructuredLogger] = None, seed: bool = True):
        super().__init__(logger)
        if seed:
            for name, description, city_id in CANDIDATE_FIXTURES:
                self.save(Candidate(
                    name=name,
                    description=description,
                    creation_date=datetime.now(),
                    city_id=city_id,
                ))


class MemoryVacancyRepository(MemoryRepository[Vacancy]):
    entity_name = "vacancy"

    def __init__(self, logger: Optional[StructuredLogger] = None, seed: bool = True):
        super().__init__(logger)
        if seed:
            for title, description, visible, city_id in VACANCY_FIXTURES:
                self.save(Vacancy(
                    title=title,
                    description=description,
                    creation_date=datetime.now(),
                    visible=visible,
                    city_id=city_id,
                ))


class MemoryCityRepository(MemoryRepository[City]):
    entity_name = "city"

    def __init__(self, logger: Optional[StructuredLogger] = None, seed: bool = True):
        super().__init__(logger)
        if seed:
            for name in CITY_FIXTURES:
                self.save(City(name=name))


# Demo data loaded into fresh stores (name, description, city_id)
CANDIDATE_FIXTURES = [
    ("Ivan Ivanov", "description of Ivan Ivanov", 1),
    ("Dmitriy Alexeev", "description of Dmitriy Alexeev", 2),
    ("Elena Petrova", "description of Elena Petrova", 3),
    ("Andrey Andreev", "description of Andrey Andreev", 1),
    ("John Johnson", "description of John", 2),
    ("James Smith", "description of James", 3),
]

# (title, description, visible, city_id)
VACANCY_FIXTURES = [
    ("Intern Java Developer", "Internship for students", True, 1),
    ("Junior Java Developer", "Up to one year of commercial experience", True, 2),
    ("Junior+ Java Developer", "One to two years of commercial experience", True, 3),
    ("Middle Java Developer", "Two to three years of commercial experience", True, 1),
    ("Middle+ Java Developer", "Three to five years of commercial experience", False, 2),
    ("Senior Java Developer", "Five or more years of commercial experience", True, 3),
]

CITY_FIXTURES = ["Moscow", "Saint Petersburg", "Ekaterinburg"]
