"""Tests for GEDCOM import."""

import pytest

from models import RelationType
from parsing import extract_person_id, normalize_data, parse_gedcom

GEDCOM = """\
0 HEAD
1 SOUR TEST
1 GEDC
2 VERS 5.5.1
2 FORM LINEAGE-LINKED
1 CHAR UTF-8
0 @I1@ INDI
1 NAME John /Smith/
1 SEX M
1 BIRT
2 DATE 1 JAN 1900
1 FAMS @F1@
0 @I2@ INDI
1 NAME Mary /Jones/
1 SEX F
1 FAMS @F1@
0 @I3@ INDI
1 NAME Paul /Smith/
1 SEX M
1 FAMC @F1@
0 @F1@ FAM
1 HUSB @I1@
1 WIFE @I2@
1 CHIL @I3@
0 TRLR
"""


@pytest.fixture
def gedcom_file(tmp_path):
    path = tmp_path / "family.ged"
    path.write_text(GEDCOM, encoding="utf-8")
    return path


def test_extract_person_id():
    assert extract_person_id("@I_347421849@") == "I_347421849"
    with pytest.raises(ValueError):
        extract_person_id("@@")


def test_normalize_data(gedcom_file):
    persons, relations = normalize_data(parse_gedcom(gedcom_file))

    assert [p.id for p in persons] == ["I1", "I2", "I3"]
    john = persons[0]
    assert john.name == "John Smith"
    assert john.attributes["givenName"] == "John"
    assert john.attributes["surname"] == "Smith"
    assert john.attributes["gender"] == "M"
    assert "1900" in john.attributes["birthDate"]
    assert "deathDate" not in john.attributes

    assert [(r.id, r.type, r.a_id, r.b_id) for r in relations] == [
        ("F1_S", RelationType.SPOUSE, "I1", "I2"),
        ("F1_I1_I3", RelationType.PARENT_CHILD, "I1", "I3"),
        ("F1_I2_I3", RelationType.PARENT_CHILD, "I2", "I3"),
    ]


def test_imported_family_lays_out(gedcom_file, config):
    """A parsed GEDCOM goes straight into the layout engine."""
    from layout import auto_arrange

    persons, relations = normalize_data(parse_gedcom(gedcom_file))
    auto_arrange(persons, relations, config)

    john, mary, paul = persons
    assert john.y == mary.y == config.padding
    assert paul.x == pytest.approx((john.x + mary.x) / 2)
