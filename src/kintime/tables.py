"""Conversion of raw record-table rows into candidate records."""

import csv
from collections.abc import Iterable, Mapping
import logging
from pathlib import Path
from typing import Any

from kintime.config import get_settings
from kintime.dates import is_partial_date, normalize_date_string
from kintime.models import EVENT, PERSON, SOURCE
from kintime.store import EntityStore

logger = logging.getLogger(__name__)

COLUMNS = {
    PERSON: (
        "id",
        "name",
        "sex",
        "born",
        "born_place",
        "died",
        "died_place",
        "father_id",
        "mother_id",
        "notes",
        "source_ids",
    ),
    EVENT: ("id", "type", "t", "who", "place", "certainty", "source_ids", "payload"),
    SOURCE: ("id", "title", "citation", "url", "date_accessed", "hash"),
}

LIST_COLUMNS = {"who", "source_ids"}
DATE_COLUMNS = {"born", "died", "t", "date_accessed"}


def record_from_row(
    kind: str,
    row: Mapping[str, str | None],
    delimiter: str | None = None,
    normalize_dates: bool = False,
) -> dict[str, Any]:
    """
    Turn a row of strings into a candidate record for `kind`.

    Empty cells become None, list cells are split on `delimiter` and certainty is read
    as a number. Values that cannot be converted are passed through unchanged so that
    schema validation reports them. With `normalize_dates`, free-form dates such as
    "25 NOV 1954" are rewritten as partial dates.
    """
    if kind not in COLUMNS:
        raise ValueError(f"Unknown entity kind: {kind!r}")
    if delimiter is None:
        delimiter = get_settings().list_delimiter

    record: dict[str, Any] = {}
    for column, raw in row.items():
        value = raw.strip() if isinstance(raw, str) else raw

        if column in LIST_COLUMNS:
            items = value.split(delimiter) if value else []
            record[column] = [item.strip() for item in items if item.strip()]
            continue

        if value == "" or value is None:
            record[column] = None
            continue

        if column == "certainty":
            try:
                value = float(value)
            except ValueError:
                pass
        elif column in DATE_COLUMNS and normalize_dates and not is_partial_date(value):
            value = normalize_date_string(value) or value

        record[column] = value

    if kind == EVENT and record.get("certainty", 0) is None:
        # An empty certainty cell means the default
        del record["certainty"]

    return record


def read_table(
    path: Path, kind: str, delimiter: str | None = None, normalize_dates: bool = False
) -> list[dict[str, Any]]:
    """Read a CSV record table with a header row into candidate records."""
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        records = [record_from_row(kind, row, delimiter, normalize_dates) for row in reader]
    logger.debug("Read %d %s row(s) from %s", len(records), kind, path)
    return records


def load_tables(
    store: EntityStore,
    tables: Iterable[tuple[str, Path]],
    delimiter: str | None = None,
    normalize_dates: bool = False,
) -> EntityStore:
    """
    Load (kind, path) tables into a store, then run the integrity check.

    Each table is loaded all or nothing; integrity is only checked once every table is
    in, so tables may reference each other in any order.
    """
    for kind, path in tables:
        store.load(kind, read_table(path, kind, delimiter, normalize_dates))
    store.check_integrity()
    return store
