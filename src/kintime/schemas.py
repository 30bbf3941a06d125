"""JSON Schemas for entity records and record validation."""

from collections.abc import Iterator, Mapping
import logging
import math
from typing import Any

from jsonschema import ValidationError
from jsonschema.validators import Draft202012Validator, extend

from kintime.dates import PARTIAL_DATE_PATTERN
from kintime.errors import SchemaViolation, Violation
from kintime.models import (
    BINARY_EVENT_TYPES,
    EVENT,
    EVENT_TYPES,
    FINGERPRINT_ALGORITHMS,
    PERSON,
    SEXES,
    SOURCE,
    UNARY_EVENT_TYPES,
)

logger = logging.getLogger(__name__)

ID_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.:-]*(?!\n)$"
HASH_PATTERN = rf"^(({'|'.join(FINGERPRINT_ALGORITHMS)}):)?[0-9a-fA-F]{{8,}}(?!\n)$"

_ID = {"type": "string", "pattern": ID_PATTERN}
_OPTIONAL_ID = {"type": ["string", "null"], "pattern": ID_PATTERN}
_OPTIONAL_DATE = {"type": ["string", "null"], "pattern": PARTIAL_DATE_PATTERN}
_OPTIONAL_TEXT = {"type": ["string", "null"]}
_NAME = {"type": "string", "minLength": 1}
_SOURCE_IDS = {"type": "array", "items": _ID, "uniqueItems": True}


def _closed(properties: dict[str, Any], required: list[str], **extra: Any) -> dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
        **extra,
    }


PERSON_SCHEMA = _closed(
    {
        "id": _ID,
        "name": _NAME,
        "sex": {"enum": list(SEXES)},
        "born": _OPTIONAL_DATE,
        "born_place": _OPTIONAL_TEXT,
        "died": _OPTIONAL_DATE,
        "died_place": _OPTIONAL_TEXT,
        "father_id": _OPTIONAL_ID,
        "mother_id": _OPTIONAL_ID,
        "notes": _OPTIONAL_TEXT,
        "source_ids": _SOURCE_IDS,
    },
    ["id", "name", "sex"],
    title="Person",
)

EVENT_SCHEMA = _closed(
    {
        "id": _ID,
        "type": {"enum": list(EVENT_TYPES)},
        "t": _OPTIONAL_DATE,
        "who": {
            "type": "array",
            "items": _ID,
            "minItems": 1,
            "maxItems": 2,
            "uniqueItems": True,
        },
        "place": _OPTIONAL_TEXT,
        "certainty": {"type": "number", "minimum": 0, "maximum": 1, "finite": True},
        "source_ids": _SOURCE_IDS,
        "payload": {},
    },
    ["id", "type", "t", "who"],
    title="Event",
    allOf=[
        {
            "if": {
                "properties": {"type": {"enum": list(UNARY_EVENT_TYPES)}},
                "required": ["type"],
            },
            "then": {"properties": {"who": {"maxItems": 1}}},
        },
        {
            "if": {
                "properties": {"type": {"enum": list(BINARY_EVENT_TYPES)}},
                "required": ["type"],
            },
            "then": {"properties": {"who": {"minItems": 2}}},
        },
    ],
)

SOURCE_SCHEMA = _closed(
    {
        "id": _ID,
        "title": _NAME,
        "citation": _OPTIONAL_TEXT,
        "url": _OPTIONAL_TEXT,
        "date_accessed": _OPTIONAL_DATE,
        "hash": {"type": ["string", "null"], "pattern": HASH_PATTERN},
    },
    ["id", "title"],
    title="Source",
)

SCHEMAS = {PERSON: PERSON_SCHEMA, EVENT: EVENT_SCHEMA, SOURCE: SOURCE_SCHEMA}


def _finite(
    validator: Any, finite: bool, instance: Any, schema: dict[str, Any]
) -> Iterator[ValidationError]:
    # minimum/maximum comparisons are always false for NaN
    if finite and validator.is_type(instance, "number") and not math.isfinite(instance):
        yield ValidationError(f"{instance!r} is not a finite number")


RecordValidator = extend(Draft202012Validator, {"finite": _finite})

_VALIDATORS = {kind: RecordValidator(schema) for kind, schema in SCHEMAS.items()}


# jsonschema keyword -> rule reported in a Violation
RULES = {
    "required": "required",
    "type": "type",
    "pattern": "pattern",
    "enum": "enum",
    "const": "enum",
    "minimum": "range",
    "maximum": "range",
    "exclusiveMinimum": "range",
    "exclusiveMaximum": "range",
    "finite": "range",
    "minLength": "length",
    "maxLength": "length",
    "minItems": "length",
    "maxItems": "length",
    "uniqueItems": "unique",
    "additionalProperties": "additional",
}


def schema_for(kind: str) -> dict[str, Any]:
    """Return the JSON Schema for an entity kind."""
    try:
        return SCHEMAS[kind]
    except KeyError:
        raise ValueError(f"Unknown entity kind: {kind!r}") from None


def _violations(error: ValidationError) -> list[Violation]:
    rule = RULES.get(error.validator, error.validator)
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in error.instance]
        return [Violation(name, rule, f"{name!r} is a required property") for name in missing]
    if error.validator == "additionalProperties":
        declared = error.schema.get("properties", {})
        extras = sorted(name for name in error.instance if name not in declared)
        return [Violation(name, rule, f"{name!r} is not a declared field") for name in extras]
    field = str(error.absolute_path[0]) if error.absolute_path else "$"
    return [Violation(field, rule, error.message)]


def validate_record(kind: str, record: Any) -> Any:
    """
    Validate a candidate record against the schema of its entity kind.

    Returns the record unchanged, or raises SchemaViolation listing every offending
    field together with the rule it breaks.
    """
    validator = _VALIDATORS.get(kind)
    if validator is None:
        raise ValueError(f"Unknown entity kind: {kind!r}")

    violations: list[Violation] = []
    errors = sorted(validator.iter_errors(record), key=lambda e: [str(p) for p in e.absolute_path])
    for error in errors:
        for violation in _violations(error):
            if violation not in violations:
                violations.append(violation)

    if violations:
        record_id = record.get("id") if isinstance(record, Mapping) else None
        if not isinstance(record_id, str):
            record_id = None
        logger.debug("Rejected %s record %r: %d violation(s)", kind, record_id, len(violations))
        raise SchemaViolation(kind, record_id, violations)

    return record
