"""Editing session holding the persons and relations of one family tree."""

import uuid

from config import LayoutConfig, get_preset
from layout import LayoutResult, auto_arrange
from models import Person, Relation, RelationType
from validation import add_relation, link_parents


class FamilyTree:
    """
    Main interface for editing a family tree.

    Owns the ordered persons and relations; all structural edits go through the
    relation guards, and `arrange` recomputes the layout from scratch.

    Usage:
        tree = FamilyTree()
        tree.add_person("p1", name="Ahmed")
        tree.add_person("p2", name="Fatima")
        tree.add_spouse("p1", "p2")
        tree.arrange("compact")
    """

    def __init__(
        self,
        persons: list[Person] | None = None,
        relations: list[Relation] | None = None,
        lock_manual_positions: bool = False,
    ):
        self.persons: list[Person] = list(persons or [])
        self.relations: list[Relation] = list(relations or [])
        self.lock_manual_positions = lock_manual_positions
        self._by_id = {p.id: p for p in self.persons}
        self._drag: tuple[str, float, float] | None = None  # (person id, start x, start y)

    # ─────────────────────────────────────────
    # Persons
    # ─────────────────────────────────────────

    def add_person(self, person_id: str | None = None, **attributes) -> Person:
        person_id = person_id or f"p_{uuid.uuid4().hex[:12]}"
        if person_id in self._by_id:
            raise ValueError(f"Person ID {person_id} already exists")
        person = Person(id=person_id, attributes=attributes)
        self.persons.append(person)
        self._by_id[person_id] = person
        return person

    def get_person(self, person_id: str) -> Person:
        try:
            return self._by_id[person_id]
        except KeyError:
            raise KeyError(f"Person ID {person_id} not found in tree") from None

    def remove_person(self, person_id: str):
        """Delete a person together with all their relations. A drag of that person is cancelled."""
        person = self.get_person(person_id)
        if self._drag is not None and self._drag[0] == person_id:
            self._drag = None
        self.persons.remove(person)
        del self._by_id[person_id]
        self.relations[:] = [
            r for r in self.relations if r.a_id != person_id and r.b_id != person_id
        ]

    # ─────────────────────────────────────────
    # Relations
    # ─────────────────────────────────────────

    def add_relation(self, rel_type: RelationType, a_id: str, b_id: str) -> Relation:
        self.get_person(a_id)
        self.get_person(b_id)
        if a_id == b_id:
            raise ValueError("Cannot link a person to themselves")
        return add_relation(self.relations, rel_type, a_id, b_id)

    def add_child(self, parent_id: str, child_id: str) -> Relation:
        return self.add_relation(RelationType.PARENT_CHILD, parent_id, child_id)

    def add_parent(self, child_id: str, parent_id: str) -> Relation:
        return self.add_relation(RelationType.PARENT_CHILD, parent_id, child_id)

    def add_spouse(self, person1_id: str, person2_id: str) -> Relation:
        return self.add_relation(RelationType.SPOUSE, person1_id, person2_id)

    def link_parents(self, child_id: str, parent_ids: list[str]) -> list[Relation]:
        """Record up to two parents of a child in one step."""
        for pid in [child_id, *parent_ids]:
            self.get_person(pid)
        return link_parents(self.relations, child_id, parent_ids)

    def remove_relation(self, relation_id: str) -> bool:
        before = len(self.relations)
        self.relations[:] = [r for r in self.relations if r.id != relation_id]
        return len(self.relations) < before

    def parents(self, person_id: str) -> list[str]:
        return [
            r.a_id
            for r in self.relations
            if r.type == RelationType.PARENT_CHILD and r.b_id == person_id
        ]

    # ─────────────────────────────────────────
    # Manual positioning
    # ─────────────────────────────────────────

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def begin_drag(self, person_id: str):
        person = self.get_person(person_id)
        self._drag = (person_id, person.x, person.y)

    def drag_to(self, x: float, y: float):
        if self._drag is None:
            raise RuntimeError("No drag in progress")
        person = self._by_id[self._drag[0]]
        person.x = x
        person.y = y

    def end_drag(self) -> bool:
        """Finish a drag. The person is marked as manually placed only if it moved."""
        if self._drag is None:
            return False
        person_id, start_x, start_y = self._drag
        self._drag = None
        person = self._by_id[person_id]
        moved = (person.x, person.y) != (start_x, start_y)
        if moved:
            person.has_manual_pos = True
        return moved

    def move_person(self, person_id: str, x: float, y: float):
        self.begin_drag(person_id)
        self.drag_to(x, y)
        self.end_drag()

    # ─────────────────────────────────────────
    # Layout
    # ─────────────────────────────────────────

    def arrange(self, config: LayoutConfig | str = "comfortable") -> LayoutResult:
        """Recompute every position with the given preset or configuration."""
        if self.dragging:
            raise RuntimeError("Cannot arrange while a drag is in progress")
        if isinstance(config, str):
            config = get_preset(config)
        return auto_arrange(
            self.persons,
            self.relations,
            config,
            lock_manual_positions=self.lock_manual_positions,
        )
