"""Relation guards and integrity checks for family tree data."""

import uuid
from collections import Counter
from typing import Iterable

import networkx as nx

from models import Relation, RelationType

MAX_PARENTS = 2


class RelationCycleError(ValueError):
    """Adding the relation would make a person their own ancestor."""


class ParentLimitError(ValueError):
    """A person would end up with more than MAX_PARENTS recorded parents."""


def new_relation_id() -> str:
    return f"r_{uuid.uuid4().hex[:12]}"


def parent_graph(relations: Iterable[Relation]) -> nx.DiGraph:
    """Directed graph of PARENT_CHILD edges only (parent -> child)."""
    return nx.DiGraph(
        (r.a_id, r.b_id) for r in relations if r.type == RelationType.PARENT_CHILD
    )


def find_duplicate(
    relations: Iterable[Relation], rel_type: RelationType, a_id: str, b_id: str
) -> Relation | None:
    """Return the stored relation equal to the given one, if any."""
    candidate = Relation(id="", type=RelationType(rel_type), a_id=a_id, b_id=b_id)
    key = candidate.endpoints()
    for rel in relations:
        if rel.type == candidate.type and rel.endpoints() == key:
            return rel
    return None


def would_create_cycle(relations: Iterable[Relation], parent_id: str, child_id: str) -> bool:
    """
    Check whether PARENT_CHILD(parent_id, child_id) would close a loop.

    True when the child is the parent itself or already one of the parent's
    ancestors (reachable by walking child -> parent links up from `parent_id`).
    """
    if parent_id == child_id:
        return True
    G = parent_graph(relations)
    if child_id not in G or parent_id not in G:
        return False
    return nx.has_path(G, child_id, parent_id)


def add_relation(
    relations: list[Relation],
    rel_type: RelationType,
    a_id: str,
    b_id: str,
    relation_id: str | None = None,
) -> Relation:
    """
    Append a relation unless it is a duplicate or would create a cycle.

    Args:
        relations: The relation list to extend in place
        rel_type: PARENT_CHILD (a_id is the parent) or SPOUSE
        a_id: First person id
        b_id: Second person id
        relation_id: Id for the new record (generated if omitted)

    Returns:
        The new relation, or the already stored one for a duplicate.

    Raises:
        RelationCycleError: PARENT_CHILD whose child is an ancestor of the parent.
            Nothing is recorded.
    """
    rel_type = RelationType(rel_type)

    existing = find_duplicate(relations, rel_type, a_id, b_id)
    if existing is not None:
        return existing

    if rel_type == RelationType.PARENT_CHILD and would_create_cycle(relations, a_id, b_id):
        raise RelationCycleError(f"{b_id} is an ancestor of {a_id}; cannot make them their child")

    relation = Relation(id=relation_id or new_relation_id(), type=rel_type, a_id=a_id, b_id=b_id)
    relations.append(relation)
    return relation


def link_parents(relations: list[Relation], child_id: str, parent_ids: list[str]) -> list[Relation]:
    """
    Record several parents of one child at once, capped at MAX_PARENTS.

    Every edge is checked before any is added, so a rejected batch leaves
    `relations` unchanged. Parents already recorded are not counted twice.

    Returns:
        The relation records for each requested parent (existing or new).

    Raises:
        ParentLimitError: The child would have more than MAX_PARENTS parents.
        RelationCycleError: One of the links would create a cycle.
    """
    requested = list(dict.fromkeys(parent_ids))
    current = {
        r.a_id for r in relations if r.type == RelationType.PARENT_CHILD and r.b_id == child_id
    }
    if len(current | set(requested)) > MAX_PARENTS:
        raise ParentLimitError(
            f"{child_id} would have {len(current | set(requested))} parents "
            f"(at most {MAX_PARENTS} allowed)"
        )

    for parent_id in requested:
        if parent_id not in current and would_create_cycle(relations, parent_id, child_id):
            raise RelationCycleError(
                f"{child_id} is an ancestor of {parent_id}; cannot make them their child"
            )

    return [add_relation(relations, RelationType.PARENT_CHILD, p, child_id) for p in requested]


def validate_graph(person_ids: Iterable[str], relations: list[Relation]) -> list[str]:
    """
    Validate stored family tree data for:
    - Cycles in parent-child relationships
    - Persons with more than two recorded parents
    - Relations pointing at unknown persons

    Returns a list of warning messages.
    """
    warnings: list[str] = []
    known = set(person_ids)

    dangling = [r for r in relations if r.a_id not in known or r.b_id not in known]
    if dangling:
        warnings.append(
            f"{len(dangling)} relation(s) reference unknown persons and will be ignored: "
            f"{[r.id for r in dangling]}"
        )

    # Check for cycles
    try:
        cycle = nx.find_cycle(parent_graph(relations), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass  # No cycle found, which is good

    parent_edges = {(r.a_id, r.b_id) for r in relations if r.type == RelationType.PARENT_CHILD}
    parent_counts = Counter(child_id for _, child_id in parent_edges)
    for child_id, count in sorted(parent_counts.items()):
        if count > MAX_PARENTS:
            warnings.append(f"{child_id} has {count} recorded parents; the first claim decides placement")

    return warnings
