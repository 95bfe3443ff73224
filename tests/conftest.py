"""Pytest fixtures for layout tests."""

import matplotlib

matplotlib.use("Agg")

import pytest

from config import get_preset
from models import Person, Relation, RelationType


@pytest.fixture
def config():
    """Comfortable preset: node 140x70, h_gap 50, v_gap 120, spouse_gap 20, padding 100."""
    return get_preset("comfortable")


@pytest.fixture
def make_family():
    """Factory building persons and relations from plain id tuples."""

    def _make(person_ids, parent_child=(), spouses=()):
        persons = [Person(id=pid, attributes={"name": pid}) for pid in person_ids]
        relations = [
            Relation(id=f"s{i}", type=RelationType.SPOUSE, a_id=a, b_id=b)
            for i, (a, b) in enumerate(spouses)
        ]
        relations += [
            Relation(id=f"c{i}", type=RelationType.PARENT_CHILD, a_id=a, b_id=b)
            for i, (a, b) in enumerate(parent_child)
        ]
        return persons, relations

    return _make


def assert_no_overlap(positions: dict, config):
    """Boxes on the same row must not touch."""
    rows: dict[float, list[float]] = {}
    for x, y in positions.values():
        rows.setdefault(round(y, 6), []).append(x)
    min_pitch = config.node_width + min(config.spouse_gap, config.h_gap)
    for xs in rows.values():
        xs.sort()
        for left, right in zip(xs, xs[1:]):
            assert right - left >= min_pitch - 1e-6
