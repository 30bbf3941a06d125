"""In-memory store of validated Person, Event and Source records."""

from collections.abc import Iterable, Mapping
import logging
from types import MappingProxyType
from typing import Any

import networkx as nx

from kintime.errors import CyclicParentage, DuplicateId, KintimeError, LoadError, NotFound
from kintime.graph import build_parentage_graph
from kintime.models import ENTITY_TYPES, EVENT, KINDS, PERSON, SOURCE, Event, Person, Source
from kintime.schemas import validate_record
from kintime.validation import find_parentage_cycle

logger = logging.getLogger(__name__)


class EntityStore:
    """
    Validated entities keyed by id, one namespace per entity kind.

    Every record passes through schema validation on the way in. Entities are frozen
    once stored; cross-entity references are only checked by `check_integrity`, so
    records may be loaded in any order.
    """

    def __init__(self):
        self._entities: dict[str, dict[str, Any]] = {kind: {} for kind in KINDS}
        self._graph: nx.DiGraph | None = None

    def __len__(self) -> int:
        return sum(len(entities) for entities in self._entities.values())

    def __contains__(self, key: tuple[str, str]) -> bool:
        kind, record_id = key
        return record_id in self._entities.get(kind, {})

    def _namespace(self, kind: str) -> dict[str, Any]:
        try:
            return self._entities[kind]
        except KeyError:
            raise ValueError(f"Unknown entity kind: {kind!r}") from None

    def _build(self, kind: str, record: Mapping[str, Any]) -> Any:
        validate_record(kind, record)
        return ENTITY_TYPES[kind].from_record(record)

    def insert(self, kind: str, record: Mapping[str, Any]) -> Any:
        """Validate a record and add it, returning the stored entity."""
        namespace = self._namespace(kind)
        entity = self._build(kind, record)
        if entity.id in namespace:
            raise DuplicateId(kind, entity.id)
        namespace[entity.id] = entity
        self._graph = None
        logger.debug("Inserted %s %r", kind, entity.id)
        return entity

    def load(self, kind: str, records: Iterable[Mapping[str, Any]]) -> list[Any]:
        """
        Validate and add a batch of records of one kind, all or nothing.

        If any record fails, nothing from the batch is stored and LoadError is raised
        with the index of the first failing record and the underlying error.
        """
        namespace = self._namespace(kind)
        staged: dict[str, Any] = {}
        for index, record in enumerate(records):
            try:
                entity = self._build(kind, record)
                if entity.id in namespace or entity.id in staged:
                    raise DuplicateId(kind, entity.id)
            except KintimeError as e:
                raise LoadError(kind, index, e) from e
            staged[entity.id] = entity

        namespace.update(staged)
        self._graph = None
        logger.info("Loaded %d %s record(s)", len(staged), kind)
        return list(staged.values())

    def get(self, kind: str, record_id: str) -> Any:
        try:
            return self._namespace(kind)[record_id]
        except KeyError:
            raise NotFound(kind, record_id) from None

    def person(self, person_id: str) -> Person:
        return self.get(PERSON, person_id)

    def event(self, event_id: str) -> Event:
        return self.get(EVENT, event_id)

    def source(self, source_id: str) -> Source:
        return self.get(SOURCE, source_id)

    @property
    def persons(self) -> Mapping[str, Person]:
        return MappingProxyType(self._entities[PERSON])

    @property
    def events(self) -> Mapping[str, Event]:
        return MappingProxyType(self._entities[EVENT])

    @property
    def sources(self) -> Mapping[str, Source]:
        return MappingProxyType(self._entities[SOURCE])

    @property
    def parentage_graph(self) -> nx.DiGraph:
        """The parent -> child graph of the stored persons, rebuilt after changes."""
        if self._graph is None:
            self._graph = build_parentage_graph(self._entities[PERSON].values())
        return self._graph

    def dangling_references(self) -> list[NotFound]:
        """Every reference to an id that is not stored, in store order."""
        persons = self._entities[PERSON]
        sources = self._entities[SOURCE]
        problems: list[NotFound] = []

        for person in persons.values():
            for field in ("father_id", "mother_id"):
                parent_id = getattr(person, field)
                if parent_id is not None and parent_id not in persons:
                    problems.append(NotFound(PERSON, parent_id, (PERSON, person.id, field)))
            for source_id in sorted(person.source_ids):
                if source_id not in sources:
                    problems.append(NotFound(SOURCE, source_id, (PERSON, person.id, "source_ids")))

        for event in self._entities[EVENT].values():
            for person_id in event.who:
                if person_id not in persons:
                    problems.append(NotFound(PERSON, person_id, (EVENT, event.id, "who")))
            for source_id in sorted(event.source_ids):
                if source_id not in sources:
                    problems.append(NotFound(SOURCE, source_id, (EVENT, event.id, "source_ids")))

        return problems

    def check_integrity(self) -> None:
        """
        Check cross-entity references once every kind has been loaded.

        Raises NotFound for the first dangling reference, then CyclicParentage if a
        person is their own ancestor.
        """
        problems = self.dangling_references()
        if problems:
            logger.info("Integrity check found %d dangling reference(s)", len(problems))
            raise problems[0]

        cycle = find_parentage_cycle(self.parentage_graph)
        if cycle is not None:
            raise CyclicParentage(cycle)

        logger.info(
            "Integrity check passed: %d person(s), %d event(s), %d source(s)",
            len(self._entities[PERSON]),
            len(self._entities[EVENT]),
            len(self._entities[SOURCE]),
        )
