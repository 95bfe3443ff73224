"""Static rendering of an arranged family tree."""

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.patches import FancyBboxPatch
import pydot

from config import LayoutConfig
from models import Person, Relation, RelationType

# Tolerance for "directly below" when routing a lone child
_EPS = 1e-6


def _fill_color(person: Person) -> str:
    gender = str(person.attributes.get("gender") or person.attributes.get("sex") or "").upper()
    if gender in ("M", "MALE"):
        return "lightblue"
    if gender in ("F", "FEMALE"):
        return "lightpink"
    return "lightgray"


def family_connectors(
    persons: list[Person], relations: list[Relation], config: LayoutConfig
) -> list[list[tuple[float, float]]]:
    """
    Compute the connector polylines between boxes.

    - Spouses: a horizontal segment between facing box edges.
    - Children are grouped by their set of parents and hang from the midpoint
      of those parents. A lone child straight below that point gets a vertical
      drop; any other group is routed orthogonally through a horizontal bus
      halfway between the generations.

    Returns:
        A list of polylines, each a list of (x, y) points.
    """
    by_id = {p.id: p for p in persons}
    half_w = config.node_width / 2
    half_h = config.node_height / 2
    lines: list[list[tuple[float, float]]] = []

    parents_of: dict[str, list[str]] = {}
    for rel in relations:
        a, b = by_id.get(rel.a_id), by_id.get(rel.b_id)
        if a is None or b is None or a is b:
            continue
        if rel.type == RelationType.SPOUSE:
            left, right = sorted((a, b), key=lambda p: p.x)
            lines.append([(left.x + half_w, left.y), (right.x - half_w, right.y)])
        elif rel.type == RelationType.PARENT_CHILD:
            parents_of.setdefault(b.id, [])
            if a.id not in parents_of[b.id]:
                parents_of[b.id].append(a.id)

    groups: dict[tuple[str, ...], list[Person]] = {}
    for child_id, parent_ids in parents_of.items():
        groups.setdefault(tuple(sorted(parent_ids)), []).append(by_id[child_id])

    for parent_ids, children in groups.items():
        parents = [by_id[pid] for pid in parent_ids]
        origin_x = sum(p.x for p in parents) / len(parents)
        origin_y = max(p.y for p in parents) + half_h
        children.sort(key=lambda c: c.x)

        if len(children) == 1 and abs(children[0].x - origin_x) < _EPS:
            child = children[0]
            lines.append([(origin_x, origin_y), (child.x, child.y - half_h)])
            continue

        bus_y = (origin_y + min(c.y for c in children) - half_h) / 2
        xs = [origin_x] + [c.x for c in children]
        lines.append([(origin_x, origin_y), (origin_x, bus_y)])
        lines.append([(min(xs), bus_y), (max(xs), bus_y)])
        for child in children:
            lines.append([(child.x, bus_y), (child.x, child.y - half_h)])

    return lines


def plot_layout(
    persons: list[Person],
    relations: list[Relation],
    config: LayoutConfig,
    output_path: Path | None = None,
):
    """
    Draw the arranged tree with matplotlib.

    Boxes are coloured by gender and labelled with the person's name; the y axis
    points down as on a canvas.

    Args:
        persons: Persons with x/y already set (box centres)
        relations: Relations to draw connectors for
        config: Geometry used for the arrangement
        output_path: Path to save the output image (PNG/SVG/PDF). If None, displays interactively.
    """
    fig, ax = plt.subplots(figsize=(20, 16))

    for line in family_connectors(persons, relations, config):
        xs, ys = zip(*line)
        ax.plot(xs, ys, color="darkgray", linewidth=1.2, zorder=1)

    for person in persons:
        ax.add_patch(
            FancyBboxPatch(
                (person.x - config.node_width / 2, person.y - config.node_height / 2),
                config.node_width,
                config.node_height,
                boxstyle="round,pad=0,rounding_size=8",
                facecolor=_fill_color(person),
                edgecolor="dimgray",
                zorder=2,
            )
        )
        ax.text(person.x, person.y, person.name, ha="center", va="center", fontsize=8, zorder=3)

    if persons:
        ax.set_xlim(
            min(p.x for p in persons) - config.node_width,
            max(p.x for p in persons) + config.node_width,
        )
        ax.set_ylim(
            max(p.y for p in persons) + config.node_height,
            min(p.y for p in persons) - config.node_height,
        )
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"Family Tree ({len(persons)} people, {len(relations)} relationships)")
    fig.tight_layout()

    if output_path:
        output_path = Path(output_path)
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        fig.savefig(output_path, format=ext, dpi=150, bbox_inches="tight")
        plt.close(fig)
        print(f"Graph saved to {output_path}")
    else:
        plt.show()


def build_dot(persons: list[Person], relations: list[Relation]) -> pydot.Dot:
    """
    Build a Graphviz graph with every node pinned to its arranged position.

    Positions are given in points with the y axis flipped, so the file renders
    unchanged with `neato -n`.
    """
    P = pydot.Dot(graph_type="digraph")
    P.set("splines", "ortho")

    known = set()
    for person in persons:
        known.add(person.id)
        P.add_node(
            pydot.Node(
                person.id,
                label=person.name,
                shape="box",
                style="rounded,filled",
                fillcolor=_fill_color(person),
                fontsize="10",
                pos=f"{person.x:.2f},{-person.y:.2f}!",
            )
        )

    for rel in relations:
        if rel.a_id not in known or rel.b_id not in known:
            continue
        if rel.type == RelationType.SPOUSE:
            # Spouse link: no arrow
            P.add_edge(pydot.Edge(rel.a_id, rel.b_id, dir="none", color="darkgray"))
        else:
            P.add_edge(pydot.Edge(rel.a_id, rel.b_id, color="darkgray"))

    return P


def write_dot(persons: list[Person], relations: list[Relation], output_path: Path) -> Path:
    """Write the pinned DOT source to a file (no Graphviz installation needed)."""
    output_path = Path(output_path)
    output_path.write_text(build_dot(persons, relations).to_string(), encoding="utf-8")
    print(f"DOT file saved to {output_path}")
    return output_path
