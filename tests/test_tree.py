"""Tests for the FamilyTree editing session."""

import pytest

from config import get_preset
from models import RelationType
from tree import FamilyTree
from validation import ParentLimitError, RelationCycleError


@pytest.fixture
def tree():
    """Couple A + B with child C."""
    family = FamilyTree()
    for pid in ("A", "B", "C"):
        family.add_person(pid, name=f"Person {pid}")
    family.add_spouse("A", "B")
    family.add_child("A", "C")
    family.add_parent("C", "B")
    return family


class TestPersons:
    """Tests for person bookkeeping."""

    def test_add_person_keeps_attributes(self, tree):
        person = tree.get_person("A")
        assert person.name == "Person A"
        assert person.attributes == {"name": "Person A"}

    def test_generated_id(self):
        family = FamilyTree()
        person = family.add_person(name="Anon")
        assert person.id.startswith("p_")
        assert family.get_person(person.id) is person

    def test_duplicate_id_rejected(self, tree):
        with pytest.raises(ValueError, match="already exists"):
            tree.add_person("A")

    def test_unknown_person(self, tree):
        with pytest.raises(KeyError, match="not found"):
            tree.get_person("nobody")

    def test_remove_person_drops_relations(self, tree):
        tree.remove_person("A")

        assert [p.id for p in tree.persons] == ["B", "C"]
        assert all("A" not in (r.a_id, r.b_id) for r in tree.relations)
        assert tree.parents("C") == ["B"]


class TestRelations:
    """Tests for relation edits through the session."""

    def test_parents(self, tree):
        assert tree.parents("C") == ["A", "B"]

    def test_self_link_rejected(self, tree):
        with pytest.raises(ValueError, match="themselves"):
            tree.add_spouse("A", "A")

    def test_unknown_endpoint_rejected(self, tree):
        with pytest.raises(KeyError):
            tree.add_child("A", "ghost")
        assert len(tree.relations) == 3

    def test_cycle_rejected(self, tree):
        with pytest.raises(RelationCycleError):
            tree.add_child("C", "A")
        assert len(tree.relations) == 3

    def test_duplicate_returns_existing(self, tree):
        existing = tree.relations[0]
        assert tree.add_spouse("B", "A") is existing
        assert len(tree.relations) == 3

    def test_link_parents_cap(self, tree):
        tree.add_person("D")
        with pytest.raises(ParentLimitError):
            tree.link_parents("C", ["D"])
        assert tree.parents("C") == ["A", "B"]

    def test_remove_relation(self, tree):
        rel = tree.add_relation(RelationType.PARENT_CHILD, "B", "C")
        assert tree.remove_relation(rel.id) is True
        assert tree.remove_relation(rel.id) is False
        assert tree.parents("C") == ["A"]


class TestDragging:
    """Tests for manual positioning."""

    def test_drag_marks_manual(self, tree):
        tree.arrange()
        tree.begin_drag("C")
        assert tree.dragging
        tree.drag_to(10.0, 20.0)
        assert tree.end_drag() is True

        person = tree.get_person("C")
        assert (person.x, person.y) == (10.0, 20.0)
        assert person.has_manual_pos is True
        assert not tree.dragging

    def test_drag_without_movement(self, tree):
        tree.arrange()
        tree.begin_drag("C")
        assert tree.end_drag() is False
        assert tree.get_person("C").has_manual_pos is False

    def test_drag_to_without_drag(self, tree):
        with pytest.raises(RuntimeError):
            tree.drag_to(1.0, 1.0)

    def test_arrange_blocked_during_drag(self, tree):
        tree.begin_drag("A")
        with pytest.raises(RuntimeError):
            tree.arrange()

    def test_arrange_resets_manual_position(self, tree):
        tree.move_person("C", 5.0, 5.0)
        tree.arrange()

        person = tree.get_person("C")
        assert person.has_manual_pos is False
        assert (person.x, person.y) == pytest.approx((250, 220))

    def test_lock_keeps_manual_position(self):
        family = FamilyTree(lock_manual_positions=True)
        family.add_person("A")
        family.add_person("B")
        family.add_spouse("A", "B")
        family.move_person("A", 5.0, 5.0)
        family.arrange()

        assert (family.get_person("A").x, family.get_person("A").y) == (5.0, 5.0)

    def test_removing_dragged_person_cancels_drag(self, tree):
        tree.begin_drag("C")
        tree.remove_person("C")

        assert not tree.dragging
        assert tree.end_drag() is False
        with pytest.raises(RuntimeError):
            tree.drag_to(1.0, 1.0)

    def test_removing_other_person_keeps_drag(self, tree):
        tree.begin_drag("C")
        tree.remove_person("A")
        assert tree.dragging


class TestArrange:
    """Tests for preset selection."""

    def test_preset_by_name(self, tree):
        tree.arrange("compact")
        compact = get_preset("compact")
        a, b = tree.get_person("A"), tree.get_person("B")
        assert b.x - a.x == pytest.approx(compact.member_pitch)
        assert a.y == compact.padding

    def test_unknown_preset(self, tree):
        with pytest.raises(ValueError, match="Unknown layout preset"):
            tree.arrange("huge")
