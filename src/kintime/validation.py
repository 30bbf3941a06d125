"""Data-quality checks over the parentage graph."""

import logging
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from kintime.store import EntityStore

logger = logging.getLogger(__name__)

# Youngest plausible age of a parent at a child's birth
MIN_PARENT_AGE = 12


def find_parentage_cycle(G: nx.DiGraph) -> list[str] | None:
    """Return the people on a parent-child cycle, or None if the graph is acyclic."""
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"
    ]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
    except nx.NetworkXNoCycle:
        return None
    return [edge[0] for edge in cycle]


def plausibility_warnings(store: "EntityStore") -> list[str]:
    """
    Report suspect timelines without changing or filtering any data:
    - Children born before a parent
    - Parents younger than MIN_PARENT_AGE at a child's birth
    - Deaths before births

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    G = store.parentage_graph

    for parent, child in G.edges():
        parent_data = G.nodes[parent]
        child_data = G.nodes[child]

        parent_birth = parent_data.get("birth_year")
        child_birth = child_data.get("birth_year")
        if parent_birth is None or child_birth is None:
            continue

        if child_birth < parent_birth:
            warnings.append(
                f"Impossible: {child_data['person_name']} ({child}) born before parent "
                f"{parent_data['person_name']} ({parent})"
            )
        elif child_birth - parent_birth < MIN_PARENT_AGE:
            warnings.append(
                f"Suspicious: {parent_data['person_name']} ({parent}) was less than "
                f"{MIN_PARENT_AGE} years old when {child_data['person_name']} ({child}) was born"
            )

    for person_id, data in G.nodes(data=True):
        birth = data.get("birth_year")
        death = data.get("death_year")
        if birth is not None and death is not None and death < birth:
            warnings.append(
                f"Impossible: {data['person_name']} ({person_id}) died before being born"
            )

    for warning in warnings:
        logger.debug(warning)
    logger.info("Plausibility check found %d warning(s)", len(warnings))
    return warnings
