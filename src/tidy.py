"""
Tidy tree positioning for family units.

Reingold-Tilford/Walker contour algorithm in Buchheim's linear-time form, with
nodes of varying width: two neighbours at the same depth are kept
`left.width / 2 + h_gap + right.width / 2` apart (centre to centre).

The first walk computes preliminary x values bottom-up, pushing subtrees apart
along their contours; the second walk accumulates modifiers top-down into final
coordinates.
"""

from dataclasses import dataclass, field

from config import LayoutConfig
from units import FamilyUnit


@dataclass(eq=False)
class TreeNode:
    unit: FamilyUnit | None  # None for the virtual root of a forest
    width: float
    children: list["TreeNode"] = field(default_factory=list)
    parent: "TreeNode | None" = None
    number: int = 1  # 1-based index among siblings

    prelim: float = 0.0
    mod: float = 0.0
    change: float = 0.0
    shift: float = 0.0
    thread: "TreeNode | None" = None
    ancestor: "TreeNode | None" = None

    x: float = 0.0
    y: float = 0.0
    depth: int = 0

    def __post_init__(self):
        self.ancestor = self
        self.adopt(self.children)

    def adopt(self, children: list["TreeNode"]):
        self.children = children
        for i, child in enumerate(children, start=1):
            child.parent = self
            child.number = i

    def left_brother(self) -> "TreeNode | None":
        if self.parent is None or self.number == 1:
            return None
        return self.parent.children[self.number - 2]

    def leftmost_sibling(self) -> "TreeNode | None":
        if self.parent is None or self.number == 1:
            return None
        return self.parent.children[0]

    # Next node on the left/right contour: first/last child, else the thread.
    def next_left(self) -> "TreeNode | None":
        return self.children[0] if self.children else self.thread

    def next_right(self) -> "TreeNode | None":
        return self.children[-1] if self.children else self.thread


def build_tree(unit: FamilyUnit) -> TreeNode:
    root = TreeNode(unit=unit, width=unit.width)
    stack = [root]
    while stack:
        node = stack.pop()
        node.adopt([TreeNode(unit=c, width=c.width) for c in node.unit.children])
        stack.extend(node.children)
    return root


def build_forest_tree(forest: list[FamilyUnit]) -> TreeNode:
    """Hang all unit trees of a component under one zero-width virtual root."""
    return TreeNode(unit=None, width=0.0, children=[build_tree(u) for u in forest])


def _separation(left: TreeNode, right: TreeNode, config: LayoutConfig) -> float:
    return left.width / 2 + config.h_gap + right.width / 2


def _place(v: TreeNode, config: LayoutConfig):
    """Set the preliminary x of `v` once all its children are placed and apportioned."""
    if not v.children:
        w = v.left_brother()
        v.prelim = w.prelim + _separation(w, v, config) if w else 0.0
        return

    execute_shifts(v)
    midpoint = (v.children[0].prelim + v.children[-1].prelim) / 2
    w = v.left_brother()
    if w:
        v.prelim = w.prelim + _separation(w, v, config)
        v.mod = v.prelim - midpoint
    else:
        v.prelim = midpoint


def first_walk(root: TreeNode, config: LayoutConfig):
    """
    Post-order pass computing preliminary x values.

    Each child is apportioned against its left siblings right after its own
    subtree is placed and before the next sibling is visited.
    """
    # Frames are [node, index of next child, default ancestor]
    stack = [[root, 0, root.children[0] if root.children else None]]
    while stack:
        frame = stack[-1]
        v, i = frame[0], frame[1]
        if i < len(v.children):
            frame[1] += 1
            w = v.children[i]
            stack.append([w, 0, w.children[0] if w.children else None])
            continue

        stack.pop()
        _place(v, config)
        if stack:
            parent_frame = stack[-1]
            parent_frame[2] = apportion(v, parent_frame[2], config)


def apportion(v: TreeNode, default_ancestor: TreeNode, config: LayoutConfig) -> TreeNode:
    """
    Push the subtree of `v` clear of the subtrees of its left siblings.

    Walks the right contour of the left siblings (vil) against the left contour
    of `v` (vir), plus the outer contours (vol, vor) so threads can be set when
    one side runs out of depth.

    Returns:
        The default ancestor to use for the next sibling.
    """
    w = v.left_brother()
    if w is None:
        return default_ancestor

    vir = vor = v
    vil = w
    vol = v.leftmost_sibling()
    sir = sor = v.mod
    sil = vil.mod
    sol = vol.mod

    while vil.next_right() is not None and vir.next_left() is not None:
        vil = vil.next_right()
        vir = vir.next_left()
        vol = vol.next_left()
        vor = vor.next_right()
        vor.ancestor = v
        shift = (vil.prelim + sil) + _separation(vil, vir, config) - (vir.prelim + sir)
        if shift > 0:
            move_subtree(_ancestor(vil, v, default_ancestor), v, shift)
            sir += shift
            sor += shift
        sil += vil.mod
        sir += vir.mod
        sol += vol.mod
        sor += vor.mod

    if vil.next_right() is not None and vor.next_right() is None:
        vor.thread = vil.next_right()
        vor.mod += sil - sor
    else:
        if vir.next_left() is not None and vol.next_left() is None:
            vol.thread = vir.next_left()
            vol.mod += sir - sol
        default_ancestor = v

    return default_ancestor


def _ancestor(vil: TreeNode, v: TreeNode, default_ancestor: TreeNode) -> TreeNode:
    if vil.ancestor.parent is v.parent:
        return vil.ancestor
    return default_ancestor


def move_subtree(wl: TreeNode, wr: TreeNode, shift: float):
    """Shift `wr` right and record the change so the siblings between move proportionally."""
    subtrees = wr.number - wl.number
    wr.change -= shift / subtrees
    wr.shift += shift
    wl.change += shift / subtrees
    wr.prelim += shift
    wr.mod += shift


def execute_shifts(v: TreeNode):
    shift = change = 0.0
    for w in reversed(v.children):
        w.prelim += shift
        w.mod += shift
        change += w.change
        shift += w.shift + change


def second_walk(root: TreeNode, m: float, depth: int, config: LayoutConfig):
    """Pre-order pass summing modifiers into final x and setting y from depth."""
    stack = [(root, m, depth)]
    while stack:
        v, m, depth = stack.pop()
        v.x = v.prelim + m
        v.depth = depth
        v.y = config.padding + depth * config.v_gap
        stack.extend((w, m + v.mod, depth + 1) for w in v.children)


def position_forest(forest: list[FamilyUnit], config: LayoutConfig) -> dict[str, tuple[float, float]]:
    """
    Position the unit trees of one component in a local coordinate space.

    Root units sit at depth 0 (y = padding). x values are relative and may be
    negative; the compositor shifts them afterwards.

    Returns:
        Mapping of person id to box centre (x, y).
    """
    if not forest:
        return {}

    root = build_forest_tree(forest)
    first_walk(root, config)
    # The virtual root sits one level above the real roots
    second_walk(root, -root.prelim, -1, config)

    positions: dict[str, tuple[float, float]] = {}
    stack = list(root.children)
    while stack:
        node = stack.pop()
        positions.update(member_positions(node, config))
        stack.extend(node.children)
    return positions


def member_positions(node: TreeNode, config: LayoutConfig) -> dict[str, tuple[float, float]]:
    """Spread the members of a unit node across its block, left to right."""
    left = node.x - node.width / 2
    return {
        pid: (left + i * config.member_pitch + config.node_width / 2, node.y)
        for i, pid in enumerate(node.unit.members)
    }
