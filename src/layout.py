"""Automatic arrangement of a whole family tree: components, fallback strip, normalization."""

from dataclasses import dataclass, field

from config import LayoutConfig
from graph import RelationGraph, build_relation_graph, find_components, find_true_roots
from models import Person, Relation
from tidy import position_forest
from units import build_forest


@dataclass
class LayoutResult:
    positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    components: list[list[str]] = field(default_factory=list)
    isolated: list[str] = field(default_factory=list)  # persons placed in the fallback strip
    warnings: list[str] = field(default_factory=list)

    @property
    def families(self) -> list[list[str]]:
        """Components laid out as trees, i.e. not placed wholly in the fallback strip."""
        strip = set(self.isolated)
        return [c for c in self.components if not strip.issuperset(c)]


@dataclass
class _Cursor:
    """Running placement position of the compositor (box edges, not centres)."""

    x: float = 0.0
    row_top: float = 0.0
    row_bottom: float = 0.0
    row_used: bool = False

    def place(
        self, width: float, height: float, config: LayoutConfig, gap: float | None = None
    ) -> tuple[float, float]:
        """Reserve a width x height block followed by `gap`; return its top-left corner."""
        if gap is None:
            gap = config.family_gap
        if (
            config.row_width is not None
            and self.row_used
            and self.x + width > config.row_width
        ):
            self.x = 0.0
            self.row_top = self.row_bottom + config.family_gap
            self.row_used = False

        left, top = self.x, self.row_top
        self.x = left + width + gap
        self.row_bottom = max(self.row_bottom, top + height)
        self.row_used = True
        return left, top


def layout_component(
    graph: RelationGraph, component: list[str], claimed: set[str], config: LayoutConfig
) -> dict[str, tuple[float, float]]:
    """Position one connected component in local coordinates."""
    roots = find_true_roots(graph, component)
    forest = build_forest(roots, graph, claimed, config)
    return position_forest(forest, config)


def _bounds(positions: dict[str, tuple[float, float]], config: LayoutConfig):
    xs = [x for x, _ in positions.values()]
    ys = [y for _, y in positions.values()]
    left = min(xs) - config.node_width / 2
    right = max(xs) + config.node_width / 2
    top = min(ys) - config.node_height / 2
    bottom = max(ys) + config.node_height / 2
    return left, top, right, bottom


def compute_layout(
    persons: list[Person], relations: list[Relation], config: LayoutConfig
) -> LayoutResult:
    """
    Compute positions for every person without touching the Person objects.

    Components are laid out independently, then placed left to right with
    `family_gap` between them (wrapping into rows when `config.row_width` is
    set). Persons outside any tree follow in a strip. Finally everything is
    shifted so the leftmost box edge sits at `padding` and the topmost box
    centre at `padding`.
    """
    result = LayoutResult()
    if not persons:
        return result

    graph = build_relation_graph([p.id for p in persons], relations)
    components = find_components(graph)
    result.components = components

    claimed: set[str] = set()
    cursor = _Cursor()
    placed: dict[str, tuple[float, float]] = {}
    leftovers: list[str] = []

    for component in components:
        if len(component) == 1 and graph.is_isolated(component[0]):
            leftovers.append(component[0])
            continue

        local = layout_component(graph, component, claimed, config)
        if not local:
            result.warnings.append(
                f"No root found for family of {len(component)} persons "
                f"(starting with {component[0]}); parent-child links may contain a cycle"
            )
        else:
            left, top, right, bottom = _bounds(local, config)
            dest_left, dest_top = cursor.place(right - left, bottom - top, config)
            dx, dy = dest_left - left, dest_top - top
            for pid, (x, y) in local.items():
                placed[pid] = (x + dx, y + dy)

        missing = [pid for pid in component if pid not in local]
        if local and missing:
            result.warnings.append(
                f"{len(missing)} persons of the family starting with {component[0]} "
                f"could not be attached to a tree: {missing}"
            )
        leftovers.extend(missing)

    # Fallback strip, in person order
    order = graph.order
    leftovers.sort(key=order.__getitem__)
    for pid in leftovers:
        left, top = cursor.place(config.node_width, config.node_height, config, gap=config.h_gap)
        placed[pid] = (left + config.node_width / 2, top + config.node_height / 2)
    result.isolated = leftovers

    result.positions = normalize_positions(placed, config)
    return result


def normalize_positions(
    positions: dict[str, tuple[float, float]], config: LayoutConfig
) -> dict[str, tuple[float, float]]:
    """Shift all positions so min(x) - node_width/2 == padding and min(y) == padding."""
    if not positions:
        return {}
    min_x = min(x for x, _ in positions.values()) - config.node_width / 2
    # The y floor is the box centre, not its top edge: the top row sits at y == padding
    min_y = min(y for _, y in positions.values())
    dx = config.padding - min_x
    dy = config.padding - min_y
    return {pid: (x + dx, y + dy) for pid, (x, y) in positions.items()}


def auto_arrange(
    persons: list[Person],
    relations: list[Relation],
    config: LayoutConfig,
    lock_manual_positions: bool = False,
) -> LayoutResult:
    """
    Lay out the family tree and write the result into the Person objects.

    Args:
        persons: All persons of the session, in insertion order
        relations: PARENT_CHILD and SPOUSE relations (never modified)
        config: Layout geometry; pass a different preset to re-layout at another scale
        lock_manual_positions: Keep manually dragged persons where they are

    Returns:
        LayoutResult with the written positions and any data-integrity warnings.
        Persons kept in place by the lock are left out of `positions`.
    """
    result = compute_layout(persons, relations, config)

    for person in persons:
        if lock_manual_positions and person.has_manual_pos:
            result.positions.pop(person.id, None)
            continue
        x, y = result.positions[person.id]
        person.x = x
        person.y = y
        person.has_manual_pos = False

    return result
