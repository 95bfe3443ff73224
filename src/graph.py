"""Relation graph building, component partitioning and root selection."""

from dataclasses import dataclass, field
from typing import Iterable

import networkx as nx

from models import Relation, RelationType


@dataclass
class RelationGraph:
    """Adjacency maps for one layout pass. Every list is in person insertion order."""

    person_ids: list[str]
    parent_of: dict[str, list[str]] = field(default_factory=dict)  # parent -> children
    child_of: dict[str, list[str]] = field(default_factory=dict)  # child -> parents
    spouse_of: dict[str, list[str]] = field(default_factory=dict)  # symmetric

    def __post_init__(self):
        self.order = {pid: i for i, pid in enumerate(self.person_ids)}

    def children(self, person_id: str) -> list[str]:
        return self.parent_of.get(person_id, [])

    def parents(self, person_id: str) -> list[str]:
        return self.child_of.get(person_id, [])

    def spouses(self, person_id: str) -> list[str]:
        return self.spouse_of.get(person_id, [])

    def neighbors(self, person_id: str) -> list[str]:
        return self.parents(person_id) + self.children(person_id) + self.spouses(person_id)

    def is_isolated(self, person_id: str) -> bool:
        return not self.neighbors(person_id)

    def to_networkx(self) -> nx.DiGraph:
        """
        Build a NetworkX directed graph view of the relations.

        PARENT_CHILD edges point from parent to child; SPOUSE edges are stored in
        both directions. Each edge carries a `relationship_type` attribute.
        """
        G = nx.DiGraph()
        G.add_nodes_from(self.person_ids)
        for parent, children in self.parent_of.items():
            for child in children:
                G.add_edge(parent, child, relationship_type=RelationType.PARENT_CHILD.value)
        for person, spouses in self.spouse_of.items():
            for spouse in spouses:
                G.add_edge(person, spouse, relationship_type=RelationType.SPOUSE.value)
        return G


def build_relation_graph(person_ids: Iterable[str], relations: Iterable[Relation]) -> RelationGraph:
    """
    Turn flat person/relation lists into adjacency maps.

    Relations pointing at unknown persons, or at the same person twice, are
    dropped without error. Repeated edges are collapsed.
    """
    graph = RelationGraph(person_ids=list(dict.fromkeys(person_ids)))
    known = graph.order

    for rel in relations:
        a, b = rel.a_id, rel.b_id
        if a not in known or b not in known or a == b:
            continue
        if rel.type == RelationType.PARENT_CHILD:
            graph.parent_of.setdefault(a, []).append(b)
            graph.child_of.setdefault(b, []).append(a)
        elif rel.type == RelationType.SPOUSE:
            graph.spouse_of.setdefault(a, []).append(b)
            graph.spouse_of.setdefault(b, []).append(a)

    # Discovery order follows person insertion order, not relation order
    for adjacency in (graph.parent_of, graph.child_of, graph.spouse_of):
        for pid, ids in adjacency.items():
            adjacency[pid] = sorted(dict.fromkeys(ids), key=known.__getitem__)

    return graph


def find_components(graph: RelationGraph) -> list[list[str]]:
    """
    Split the persons into connected family forests.

    Parent, child and spouse edges are treated as one undirected graph. Members
    of each component are listed in person insertion order; components are
    sorted by descending size, ties kept in order of their first member.
    """
    undirected = graph.to_networkx().to_undirected()
    order = graph.order

    components = [
        sorted(members, key=order.__getitem__) for members in nx.connected_components(undirected)
    ]
    components.sort(key=lambda members: (-len(members), order[members[0]]))
    return components


def find_true_roots(graph: RelationGraph, component: list[str]) -> list[str]:
    """
    Find the couple-aware roots of one component.

    A person is a true root when they have no parent and none of their spouses
    has a parent either; a spouse who married into a family with known ancestors
    is drawn beside their partner rather than above. Picking a root marks its
    spouses as visited so that a couple yields a single root.

    Returns:
        Root ids in person order. Empty only when the parent edges contain a cycle.
    """
    members = set(component)
    visited: set[str] = set()
    roots: list[str] = []

    for pid in component:
        if pid in visited:
            continue
        if any(p in members for p in graph.parents(pid)):
            continue

        spouses = [s for s in graph.spouses(pid) if s in members]
        spouse_has_parents = any(
            p in members for spouse in spouses for p in graph.parents(spouse)
        )
        if spouse_has_parents:
            continue

        roots.append(pid)
        visited.add(pid)
        visited.update(spouses)

    return roots
