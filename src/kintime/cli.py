"""
Command line interface: load record tables and print derived tables.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
import logging
from pathlib import Path
from typing import Any

import click

from kintime.config import get_settings
from kintime.errors import KintimeError
from kintime.forecast import forecast_descendants
from kintime.graph import generation_index
from kintime.models import EVENT, PERSON, SOURCE
from kintime.store import EntityStore
from kintime.tables import load_tables
from kintime.timeline import compute_ages, intergen_gap
from kintime.validation import plausibility_warnings

logger = logging.getLogger(__name__)

TABLE_PATH = click.Path(exists=True, dir_okay=False, path_type=Path)


@contextmanager
def catch_exceptions() -> Iterator[None]:
    """Report kintime errors as command failures instead of tracebacks."""
    try:
        yield
    except KintimeError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(str(e)) from e


def pass_store(f: Callable[..., Any]) -> Callable[..., Any]:
    """Decorate a command to receive an entity store loaded from the table options."""

    @click.option(
        "--people",
        "people_path",
        type=TABLE_PATH,
        required=True,
        help="Person table (CSV).",
    )
    @click.option(
        "--events",
        "events_path",
        type=TABLE_PATH,
        help="Event table (CSV).",
    )
    @click.option(
        "--sources",
        "sources_path",
        type=TABLE_PATH,
        help="Source table (CSV).",
    )
    @click.option(
        "--normalize-dates",
        is_flag=True,
        default=False,
        help="Rewrite free-form dates such as '25 NOV 1954' as partial dates.",
    )
    @wraps(f)
    def _command(
        people_path: Path,
        events_path: Path | None,
        sources_path: Path | None,
        normalize_dates: bool,
        **kwargs: Any,
    ) -> Any:
        tables = [(SOURCE, sources_path), (PERSON, people_path), (EVENT, events_path)]
        with catch_exceptions():
            store = load_tables(
                EntityStore(),
                [(kind, path) for kind, path in tables if path is not None],
                normalize_dates=normalize_dates,
            )
            return f(store, **kwargs)

    return _command


def _init_verbosity(ctx: click.Context, _: click.Parameter, verbosity: int) -> None:
    level = {0: get_settings().log_level, 1: logging.INFO}.get(verbosity, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    expose_value=False,
    is_eager=True,
    callback=_init_verbosity,
    help="Show informative log messages; repeat (-vv) for debug messages.",
)
def main() -> None:
    """Validate genealogical records and analyze their timelines."""


@main.command(help="Load the tables, check references and report suspect timelines.")
@pass_store
def validate(store: EntityStore) -> None:
    click.echo(
        f"Loaded {len(store.persons)} persons, {len(store.events)} events "
        f"and {len(store.sources)} sources"
    )
    warnings = plausibility_warnings(store)
    if warnings:
        click.echo(f"Found {len(warnings)} validation warnings:")
        for w in warnings:
            click.echo(f"  - {w}")
    else:
        click.echo("No validation issues found")


@main.command(help="Print the generation of every descendant of FOUNDER.")
@click.argument("founder")
@pass_store
def generations(store: EntityStore, founder: str) -> None:
    for person_id, generation in generation_index(store, founder).items():
        click.echo(f"{person_id}\t{generation}")


@main.command(help="Print each participant's age at each dated event.")
@click.option(
    "--min-certainty",
    type=float,
    default=0.0,
    show_default=True,
    help="Skip less certain events.",
)
@pass_store
def ages(store: EntityStore, min_certainty: float) -> None:
    click.echo("event_id\ttype\tperson_id\tyear\tage")
    for row in compute_ages(store, min_certainty):
        click.echo(f"{row.event_id}\t{row.type}\t{row.person_id}\t{row.year}\t{row.age}")


@main.command(help="Print the birth-year gap between children and their parents.")
@pass_store
def gaps(store: EntityStore) -> None:
    click.echo("parent_id\tchild_id\tgap")
    for row in intergen_gap(store):
        click.echo(f"{row.parent_id}\t{row.child_id}\t{row.gap}")


@main.command(help="Forecast total descendants with a Monte Carlo branching process.")
@click.option(
    "--mu",
    type=click.FloatRange(min=0),
    required=True,
    help="Mean offspring per individual.",
)
@click.option(
    "--generations",
    "generation_count",
    type=click.IntRange(min=1),
    required=True,
    help="Generations to simulate.",
)
@click.option(
    "--simulations",
    type=click.IntRange(min=1),
    default=None,
    help="Number of trials.",
)
@click.option(
    "--start",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Starting population.",
)
@click.option(
    "--seed",
    type=click.IntRange(min=0),
    default=None,
    help="Random seed.",
)
def forecast(
    mu: float,
    generation_count: int,
    simulations: int | None,
    start: int,
    seed: int | None,
) -> None:
    settings = get_settings()
    if simulations is None:
        simulations = settings.default_simulations
    if seed is None:
        seed = settings.default_seed
    if simulations > settings.max_simulations:
        raise click.BadParameter(
            f"at most {settings.max_simulations} simulations are allowed",
            param_hint="--simulations",
        )
    if generation_count > settings.max_generations:
        raise click.BadParameter(
            f"at most {settings.max_generations} generations are allowed",
            param_hint="--generations",
        )

    with catch_exceptions():
        result = forecast_descendants(
            mu,
            generation_count,
            simulations,
            start=start,
            seed=seed,
        )
    click.echo(f"p05\t{result.p05:g}")
    click.echo(f"p50\t{result.p50:g}")
    click.echo(f"p95\t{result.p95:g}")
