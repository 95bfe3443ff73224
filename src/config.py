"""Layout configuration presets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutConfig:
    """
    Geometry used by one layout pass.

    All distances are in canvas units. Coordinates produced by the engine are
    box centres, so `padding` should be at least `node_height / 2` to keep boxes
    inside the canvas.

    Attributes:
        node_width: Width of one person box
        node_height: Height of one person box
        h_gap: Horizontal gap between neighbouring family units
        v_gap: Vertical distance between generations (centre to centre)
        spouse_gap: Gap between the boxes of one family unit
        padding: Distance kept from the canvas origin
        family_gap: Gap between disconnected families
        row_width: If set, families wrap into a new row past this width
    """

    name: str = "custom"
    node_width: float = 140.0
    node_height: float = 70.0
    h_gap: float = 50.0
    v_gap: float = 120.0
    spouse_gap: float = 20.0
    padding: float = 100.0
    family_gap: float = 100.0
    row_width: float | None = None

    def unit_width(self, member_count: int) -> float:
        """Width of a block holding `member_count` boxes side by side."""
        if member_count <= 0:
            return 0.0
        return member_count * self.node_width + (member_count - 1) * self.spouse_gap

    @property
    def member_pitch(self) -> float:
        """Centre-to-centre distance between members of one unit."""
        return self.node_width + self.spouse_gap


PRESETS: dict[str, LayoutConfig] = {
    "compact": LayoutConfig(
        name="compact",
        node_width=120.0,
        node_height=60.0,
        h_gap=30.0,
        v_gap=100.0,
        spouse_gap=12.0,
        padding=60.0,
        family_gap=60.0,
    ),
    "comfortable": LayoutConfig(
        name="comfortable",
        node_width=140.0,
        node_height=70.0,
        h_gap=50.0,
        v_gap=120.0,
        spouse_gap=20.0,
        padding=100.0,
        family_gap=100.0,
    ),
}

DEFAULT_PRESET = "comfortable"


def get_preset(name: str = DEFAULT_PRESET) -> LayoutConfig:
    """Look up a named preset."""
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown layout preset {name!r} (expected one of: {', '.join(sorted(PRESETS))})"
        ) from None
