"""Data classes for family tree entities."""

from dataclasses import dataclass, field
from enum import Enum


class RelationType(str, Enum):
    """Kinds of recorded relations."""

    PARENT_CHILD = "PARENT_CHILD"  # a_id is the parent, b_id the child
    SPOUSE = "SPOUSE"


@dataclass
class Person:
    id: str
    x: float = 0.0
    y: float = 0.0
    has_manual_pos: bool = False
    attributes: dict = field(default_factory=dict)  # name, gender, ... (never read by layout)

    @property
    def name(self) -> str:
        return self.attributes.get("name") or self.id


@dataclass
class Relation:
    id: str
    type: RelationType
    a_id: str
    b_id: str

    def endpoints(self) -> tuple[str, str]:
        """Endpoints in a form comparable across records of the same type."""
        if self.type == RelationType.SPOUSE:
            return tuple(sorted((self.a_id, self.b_id)))
        return (self.a_id, self.b_id)
