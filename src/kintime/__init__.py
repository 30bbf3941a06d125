"""Validated genealogical record store and timeline analytics."""

from kintime.errors import (
    CyclicParentage,
    DuplicateId,
    InvalidParameter,
    KintimeError,
    LoadError,
    NotFound,
    SchemaViolation,
    UnknownFounder,
)
from kintime.forecast import forecast_descendants
from kintime.graph import build_parentage_graph, generation_index
from kintime.models import Event, EventAge, Forecast, GenerationGap, Person, Source
from kintime.schemas import validate_record
from kintime.store import EntityStore
from kintime.timeline import compute_ages, intergen_gap

__version__ = "0.1.0"

__all__ = [
    "CyclicParentage",
    "DuplicateId",
    "EntityStore",
    "Event",
    "EventAge",
    "Forecast",
    "GenerationGap",
    "InvalidParameter",
    "KintimeError",
    "LoadError",
    "NotFound",
    "Person",
    "SchemaViolation",
    "Source",
    "UnknownFounder",
    "build_parentage_graph",
    "compute_ages",
    "forecast_descendants",
    "generation_index",
    "intergen_gap",
    "validate_record",
]
