"""Exception types raised by the record store and analytics."""

from dataclasses import dataclass


class KintimeError(Exception):
    """Base class for every error raised by kintime."""


@dataclass(frozen=True)
class Violation:
    field: str
    rule: str  # required, type, pattern, enum, range, length, unique, additional
    message: str


class SchemaViolation(KintimeError):
    """A candidate record does not match the schema for its entity kind."""

    def __init__(self, kind: str, record_id: str | None, violations: list[Violation]):
        self.kind = kind
        self.record_id = record_id
        self.violations = violations
        details = "; ".join(f"{v.field}: {v.rule} ({v.message})" for v in violations)
        label = f"{kind} {record_id!r}" if record_id is not None else f"{kind} record"
        super().__init__(f"Invalid {label}: {details}")

    @property
    def fields(self) -> list[str]:
        return [v.field for v in self.violations]


class DuplicateId(KintimeError):
    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"Duplicate {kind} id {record_id!r}")


class NotFound(KintimeError):
    """
    A lookup or reference names an id that is not in the store.

    When raised by the integrity pass, `referrer` holds (kind, id, field) of the record
    holding the dangling reference.
    """

    def __init__(
        self,
        kind: str,
        record_id: str,
        referrer: tuple[str, str, str] | None = None,
        message: str | None = None,
    ):
        self.kind = kind
        self.record_id = record_id
        self.referrer = referrer
        if message is None:
            message = f"No {kind} with id {record_id!r}"
        if referrer is not None:
            ref_kind, ref_id, ref_field = referrer
            message += f" (referenced by {ref_kind} {ref_id!r} field {ref_field!r})"
        super().__init__(message)


class UnknownFounder(NotFound):
    def __init__(self, founder_id: str):
        self.founder_id = founder_id
        super().__init__("person", founder_id, message=f"Unknown founder {founder_id!r}")


class InvalidParameter(KintimeError, ValueError):
    def __init__(self, name: str, value: object, rule: str):
        self.name = name
        self.value = value
        self.rule = rule
        super().__init__(f"Invalid {name}={value!r}: {rule}")


class LoadError(KintimeError):
    """A bulk load was aborted; nothing from the batch was committed."""

    def __init__(self, kind: str, index: int, reason: KintimeError):
        self.kind = kind
        self.index = index
        self.reason = reason
        super().__init__(f"Loading {kind} records failed at index {index}: {reason}")


class CyclicParentage(KintimeError):
    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        path = " -> ".join(cycle + cycle[:1])
        super().__init__(f"Cycle detected in parent-child relationships: {path}")
