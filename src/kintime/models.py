"""Data classes for genealogical entities and the tables derived from them."""

from collections.abc import Mapping
from dataclasses import dataclass, field
import hashlib
from typing import Any

from kintime.dates import resolve_year

PERSON = "person"
EVENT = "event"
SOURCE = "source"
KINDS = (PERSON, EVENT, SOURCE)

SEXES = ("female", "male", "unknown")

# Fixed-length digests available on every platform; shake_* need an explicit length
FINGERPRINT_ALGORITHMS = tuple(
    sorted(name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_"))
)

UNARY_EVENT_TYPES = ("birth", "death", "baptism", "burial")
BINARY_EVENT_TYPES = ("marriage", "divorce")
EVENT_TYPES = UNARY_EVENT_TYPES + BINARY_EVENT_TYPES + ("custom",)


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    sex: str  # female, male, unknown
    born: str | None = None  # partial date: YYYY, YYYY-MM or YYYY-MM-DD
    born_place: str | None = None
    died: str | None = None
    died_place: str | None = None
    father_id: str | None = None
    mother_id: str | None = None
    notes: str | None = None
    source_ids: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Person":
        return cls(
            id=record["id"],
            name=record["name"],
            sex=record["sex"],
            born=record.get("born"),
            born_place=record.get("born_place"),
            died=record.get("died"),
            died_place=record.get("died_place"),
            father_id=record.get("father_id"),
            mother_id=record.get("mother_id"),
            notes=record.get("notes"),
            source_ids=frozenset(record.get("source_ids") or ()),
        )

    @property
    def birth_year(self) -> int | None:
        return resolve_year(self.born)

    @property
    def death_year(self) -> int | None:
        return resolve_year(self.died)

    @property
    def parent_ids(self) -> list[tuple[str, str]]:
        """Known parents as (role, person id), father first."""
        parents = []
        if self.father_id is not None:
            parents.append(("father", self.father_id))
        if self.mother_id is not None:
            parents.append(("mother", self.mother_id))
        return parents


@dataclass(frozen=True)
class Event:
    id: str
    type: str
    t: str | None  # partial date, None when unknown
    who: tuple[str, ...]  # one person, or two for marriage/divorce
    place: str | None = None
    certainty: float = 1.0
    source_ids: frozenset[str] = field(default_factory=frozenset)
    payload: Any = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Event":
        certainty = record.get("certainty")
        return cls(
            id=record["id"],
            type=record["type"],
            t=record.get("t"),
            who=tuple(record["who"]),
            place=record.get("place"),
            certainty=1.0 if certainty is None else float(certainty),
            source_ids=frozenset(record.get("source_ids") or ()),
            payload=record.get("payload"),
        )

    @property
    def year(self) -> int | None:
        return resolve_year(self.t)


@dataclass(frozen=True)
class Source:
    id: str
    title: str
    citation: str | None = None
    url: str | None = None
    date_accessed: str | None = None
    hash: str | None = None  # "<hexdigest>" or "<algorithm>:<hexdigest>"

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Source":
        return cls(
            id=record["id"],
            title=record["title"],
            citation=record.get("citation"),
            url=record.get("url"),
            date_accessed=record.get("date_accessed"),
            hash=record.get("hash"),
        )

    @staticmethod
    def _digest(algorithm: str, content: bytes) -> str:
        if algorithm not in FINGERPRINT_ALGORITHMS:
            raise ValueError(f"Unsupported fingerprint algorithm: {algorithm!r}")
        return hashlib.new(algorithm, content).hexdigest()

    @staticmethod
    def fingerprint(content: bytes, algorithm: str = "sha256") -> str:
        """Fingerprint content in the "<algorithm>:<hexdigest>" form stored in `hash`."""
        return f"{algorithm}:{Source._digest(algorithm, content)}"

    def verify(self, content: bytes) -> bool:
        """
        Check content against the recorded fingerprint.

        A bare hex digest is assumed to be SHA-256. Raises ValueError if the source
        has no fingerprint or names an algorithm outside FINGERPRINT_ALGORITHMS.
        """
        if self.hash is None:
            raise ValueError(f"Source {self.id!r} has no content fingerprint")
        algorithm, _, digest = self.hash.rpartition(":")
        return self._digest(algorithm or "sha256", content) == digest.lower()


ENTITY_TYPES = {PERSON: Person, EVENT: Event, SOURCE: Source}


@dataclass(frozen=True)
class EventAge:
    event_id: str
    type: str
    person_id: str
    year: int
    age: int


@dataclass(frozen=True)
class GenerationGap:
    parent_id: str
    child_id: str
    gap: int


@dataclass(frozen=True)
class Forecast:
    p05: float
    p50: float
    p95: float
