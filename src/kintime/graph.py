"""NetworkX parentage graph building and generation indexing."""

from collections import deque
from collections.abc import Iterable
import logging
from typing import TYPE_CHECKING

import networkx as nx

from kintime.errors import UnknownFounder
from kintime.models import Person

if TYPE_CHECKING:
    from kintime.store import EntityStore

logger = logging.getLogger(__name__)


def build_parentage_graph(persons: Iterable[Person]) -> nx.DiGraph:
    """
    Build a directed graph with one node per person and a PARENT_OF edge from each
    known parent to the child.

    Edges are added in the order persons are given, father before mother, so that
    successor order (and therefore traversal order) is deterministic. References to
    people that are not among `persons` are left out; the store's integrity pass
    reports them.
    """
    persons = list(persons)
    G = nx.DiGraph()

    # Add nodes (persons)
    # Note: use 'person_name' instead of 'name', matching the node attributes used elsewhere
    for person in persons:
        G.add_node(
            person.id,
            person_name=person.name,
            sex=person.sex,
            birth_year=person.birth_year,
            death_year=person.death_year,
        )

    # Add edges (parent -> child)
    for person in persons:
        for role, parent_id in person.parent_ids:
            if parent_id in G:
                G.add_edge(parent_id, person.id, relationship_type="PARENT_OF", role=role)

    return G


def generation_index(source: "nx.DiGraph | EntityStore", founder_id: str) -> dict[str, int]:
    """
    Number every descendant of a founder by their distance in parent -> child edges.

    Args:
        source: A parentage graph, or an entity store whose parentage graph is used
        founder_id: The person ID to number as generation 0

    Returns:
        A mapping of person ID to generation. People that are not descendants of the
        founder are absent.

    The traversal is breadth-first. A person is numbered by whichever parent reaches
    them first and is never revisited, so cycles cannot cause non-termination.
    """
    G = source if isinstance(source, nx.DiGraph) else source.parentage_graph
    if founder_id not in G:
        raise UnknownFounder(founder_id)

    generations: dict[str, int] = {founder_id: 0}
    frontier: deque[str] = deque([founder_id])
    while frontier:
        parent = frontier.popleft()
        for child in G.successors(parent):
            if child in generations:
                continue
            generations[child] = generations[parent] + 1
            frontier.append(child)

    logger.debug(
        "Indexed %d descendant(s) of %r across %d generation(s)",
        len(generations) - 1,
        founder_id,
        max(generations.values()) + 1,
    )
    return generations


def get_descendant_subgraph(source: "nx.DiGraph | EntityStore", founder_id: str) -> nx.DiGraph:
    """
    Extract the subgraph of a founder and everyone descending from them.

    Node attributes are copied and every node gains a `generation` attribute.
    """
    G = source if isinstance(source, nx.DiGraph) else source.parentage_graph
    generations = generation_index(G, founder_id)
    H = G.subgraph(generations).copy()
    nx.set_node_attributes(H, generations, "generation")
    return H
