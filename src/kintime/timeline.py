"""Ages at events and birth-year gaps between generations."""

import logging

from kintime.errors import InvalidParameter
from kintime.models import EventAge, GenerationGap
from kintime.store import EntityStore

logger = logging.getLogger(__name__)


def compute_ages(store: EntityStore, min_certainty: float = 0.0) -> list[EventAge]:
    """
    Compute each participant's age at each event, in years.

    One row is produced per (event, person) pair where both the event year and the
    person's birth year resolve. Pairs missing either year are left out, as are
    events whose certainty is below `min_certainty`.
    """
    if not 0.0 <= min_certainty <= 1.0:
        raise InvalidParameter("min_certainty", min_certainty, "must be within [0, 1]")

    persons = store.persons
    rows: list[EventAge] = []
    for event in store.events.values():
        if event.certainty < min_certainty:
            continue
        year = event.year
        if year is None:
            continue
        for person_id in event.who:
            person = persons.get(person_id)
            if person is None or person.birth_year is None:
                continue
            rows.append(
                EventAge(
                    event_id=event.id,
                    type=event.type,
                    person_id=person_id,
                    year=year,
                    age=year - person.birth_year,
                )
            )

    logger.debug("Computed %d event age(s) from %d event(s)", len(rows), len(store.events))
    return rows


def intergen_gap(store: EntityStore) -> list[GenerationGap]:
    """
    Compute the birth-year gap between every child and each of their known parents.

    Gaps are returned as-is, including zero or negative values; see
    `kintime.validation.plausibility_warnings` for flagging suspect data.
    """
    persons = store.persons
    rows: list[GenerationGap] = []
    for child in persons.values():
        child_birth = child.birth_year
        if child_birth is None:
            continue
        for _, parent_id in child.parent_ids:
            parent = persons.get(parent_id)
            if parent is None or parent.birth_year is None:
                continue
            rows.append(
                GenerationGap(
                    parent_id=parent_id,
                    child_id=child.id,
                    gap=child_birth - parent.birth_year,
                )
            )

    logger.debug("Computed %d generation gap(s)", len(rows))
    return rows
