"""Family units: a person plus their unclaimed spouses, laid out as one block."""

from dataclasses import dataclass, field

from config import LayoutConfig
from graph import RelationGraph


@dataclass(eq=False)
class FamilyUnit:
    members: list[str]
    width: float
    children: list["FamilyUnit"] = field(default_factory=list)

    @property
    def root_id(self) -> str:
        return self.members[0]

    def walk(self):
        """Yield this unit and all descendant units, depth first."""
        stack = [self]
        while stack:
            unit = stack.pop()
            yield unit
            stack.extend(reversed(unit.children))


def _make_unit(
    person_id: str, graph: RelationGraph, claimed: set[str], config: LayoutConfig
) -> tuple[FamilyUnit, list[str]]:
    """Group `person_id` with their unclaimed spouses and claim the unit's children."""
    members = [person_id]
    for spouse in graph.spouses(person_id):
        if spouse not in claimed and spouse not in members:
            members.append(spouse)
    claimed.update(members)

    child_ids: list[str] = []
    for member in members:
        for child in graph.children(member):
            if child not in claimed and child not in child_ids:
                child_ids.append(child)

    # Children are claimed up front so they stay one generation below this
    # unit even if an elder sibling's subtree reaches them as a spouse.
    claimed.update(child_ids)
    return FamilyUnit(members=members, width=config.unit_width(len(members))), child_ids


def build_unit_tree(
    root_id: str, graph: RelationGraph, claimed: set[str], config: LayoutConfig
) -> FamilyUnit:
    """
    Build the unit tree hanging from `root_id`.

    Units are built depth first, in the order a recursive descent would visit
    them, but with an explicit stack so long ancestor lines do not hit the
    interpreter's recursion limit.

    Args:
        root_id: Person heading the unit
        graph: Relation graph of the current pass
        claimed: Persons already placed in a unit; updated in place
        config: Layout geometry (for unit widths)

    Returns:
        The unit of `root_id` with its descendants. Each child appears once even
        when listed under several members (e.g. both parents).
    """
    root, child_ids = _make_unit(root_id, graph, claimed, config)
    stack = [(child, root) for child in reversed(child_ids)]
    while stack:
        person_id, parent = stack.pop()
        unit, child_ids = _make_unit(person_id, graph, claimed, config)
        parent.children.append(unit)
        stack.extend((child, unit) for child in reversed(child_ids))
    return root


def build_forest(
    roots: list[str], graph: RelationGraph, claimed: set[str], config: LayoutConfig
) -> list[FamilyUnit]:
    """Build the unit trees of one component, skipping roots another tree already holds."""
    forest = []
    for root_id in roots:
        if root_id in claimed:
            continue
        forest.append(build_unit_tree(root_id, graph, claimed, config))
    return forest
