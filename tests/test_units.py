"""Tests for family unit tree construction."""

from graph import build_relation_graph
from units import build_forest, build_unit_tree


def _graph(persons, relations):
    return build_relation_graph([p.id for p in persons], relations)


class TestBuildUnitTree:
    """Tests for unit grouping and child claiming."""

    def test_couple_with_shared_child(self, make_family, config):
        """A child listed under both parents should be added once."""
        persons, relations = make_family(
            ["A", "B", "C"], parent_child=[("A", "C"), ("B", "C")], spouses=[("A", "B")]
        )
        claimed: set[str] = set()
        unit = build_unit_tree("A", _graph(persons, relations), claimed, config)

        assert unit.members == ["A", "B"]
        assert unit.width == 2 * 140 + 20
        assert [c.members for c in unit.children] == [["C"]]
        assert claimed == {"A", "B", "C"}

    def test_children_of_every_member(self, make_family, config):
        """Children from a second marriage hang from the same unit, in discovery order."""
        persons, relations = make_family(
            ["A", "W1", "W2", "K1", "K2", "K3"],
            parent_child=[("W2", "K3"), ("A", "K1"), ("W1", "K1"), ("W1", "K2")],
            spouses=[("A", "W1"), ("A", "W2")],
        )
        unit = build_unit_tree("A", _graph(persons, relations), set(), config)

        assert unit.members == ["A", "W1", "W2"]
        assert unit.width == 3 * 140 + 2 * 20
        assert [c.root_id for c in unit.children] == ["K1", "K2", "K3"]

    def test_claimed_spouse_is_not_taken_twice(self, make_family, config):
        """A spouse already placed elsewhere should not join a second unit."""
        persons, relations = make_family(["A", "B"], spouses=[("A", "B")])
        unit = build_unit_tree("A", _graph(persons, relations), {"B"}, config)
        assert unit.members == ["A"]
        assert unit.width == 140

    def test_unmarried_parents_claim_child_once(self, make_family, config):
        """The first parent's subtree claims a shared child; the second gets nothing."""
        persons, relations = make_family(["A", "D", "C"], parent_child=[("A", "C"), ("D", "C")])
        forest = build_forest(["A", "D"], _graph(persons, relations), set(), config)

        assert [u.members for u in forest] == [["A"], ["D"]]
        assert [c.root_id for c in forest[0].children] == ["C"]
        assert forest[1].children == []

        everyone = [pid for root in forest for unit in root.walk() for pid in unit.members]
        assert sorted(everyone) == ["A", "C", "D"]

    def test_siblings_stay_in_their_generation(self, make_family, config):
        """A child married to a later sibling keeps that sibling as its own unit."""
        persons, relations = make_family(
            ["P", "S1", "S2"], parent_child=[("P", "S1"), ("P", "S2")], spouses=[("S1", "S2")]
        )
        unit = build_unit_tree("P", _graph(persons, relations), set(), config)
        assert [c.members for c in unit.children] == [["S1"], ["S2"]]

    def test_cycle_terminates(self, make_family, config):
        """Claiming stops recursion even on cyclic data."""
        persons, relations = make_family(["X", "Y"], parent_child=[("X", "Y"), ("Y", "X")])
        unit = build_unit_tree("X", _graph(persons, relations), set(), config)
        assert [u.members for u in unit.walk()] == [["X"], ["Y"]]

    def test_long_line_builds_iteratively(self, make_family, config):
        """Thousands of generations build without hitting the recursion limit."""
        ids = [f"p{i}" for i in range(3000)]
        persons, relations = make_family(ids, parent_child=list(zip(ids, ids[1:])))
        unit = build_unit_tree("p0", _graph(persons, relations), set(), config)

        assert [u.root_id for u in unit.walk()] == ids

    def test_walk_is_depth_first(self, make_family, config):
        """A whole branch is visited before the next sibling."""
        persons, relations = make_family(
            ["R", "A", "B", "A1"], parent_child=[("R", "A"), ("R", "B"), ("A", "A1")]
        )
        unit = build_unit_tree("R", _graph(persons, relations), set(), config)
        assert [u.root_id for u in unit.walk()] == ["R", "A", "A1", "B"]
