"""GEDCOM and JSON project import."""

import json
from pathlib import Path

from ged4py import GedcomReader

from database import DATA_VERSION
from models import Person, Relation, RelationType

# Keys of a JSON person record that are not payload
_POSITION_KEYS = {"id", "x", "y", "hasManualPos"}


def extract_person_id(xref_id: str) -> str:
    """Turn a GEDCOM xref like '@I_347421849@' into a person id ('I_347421849')."""
    person_id = xref_id.strip().strip("@")
    if not person_id:
        raise ValueError(f"Empty GEDCOM xref: {xref_id!r}")
    return person_id


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_name_parts(indi) -> tuple[str, str | None, str | None]:
    """Extract full name, given name, and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None:
        return ("Unknown", None, None)

    name_value = name_rec.value
    if name_value is None:
        return ("Unknown", None, None)

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        given, surname, suffix = name_value
        parts = [p for p in [given, surname, suffix] if p]
        full_name = " ".join(parts) if parts else "Unknown"
        return (full_name, given or None, surname or None)

    # Fallback: string format "Given /Surname/"
    full_name = str(name_value).replace("/", "").strip() or "Unknown"

    givn = name_rec.sub_tag("GIVN")
    surn = name_rec.sub_tag("SURN")

    given_name = givn.value if givn else None
    surname = surn.value if surn else None

    return (full_name, given_name, surname)


def extract_event_date(indi, tag: str) -> str | None:
    """Extract the date of an event tag (BIRT, DEAT) as written in the file."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    # ged4py may return DateValue objects
    if date_rec and date_rec.value:
        return str(date_rec.value)
    return None


def extract_sex(indi) -> str | None:
    """Extract sex from an individual record."""
    sex_rec = indi.sub_tag("SEX")
    return sex_rec.value if sex_rec else None


def normalize_data(reader: GedcomReader) -> tuple[list[Person], list[Relation]]:
    """
    Extract persons and relations from parsed GEDCOM data.

    Each FAM record yields a SPOUSE relation between husband and wife and a
    PARENT_CHILD relation from every parent to every child. Non-standard
    Ancestry-specific tags (starting with _) are ignored.
    """
    persons: list[Person] = []
    relations: list[Relation] = []

    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue

        full_name, given_name, surname = extract_name_parts(rec)
        attributes = {
            "name": full_name,
            "givenName": given_name,
            "surname": surname,
            "gender": extract_sex(rec),
            "birthDate": extract_event_date(rec, "BIRT"),
            "deathDate": extract_event_date(rec, "DEAT"),
        }
        persons.append(
            Person(
                id=extract_person_id(rec.xref_id),
                attributes={k: v for k, v in attributes.items() if v is not None},
            )
        )

    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue
        fam_id = extract_person_id(rec.xref_id)

        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        husb_id = extract_person_id(husb.xref_id) if husb and husb.xref_id else None
        wife_id = extract_person_id(wife.xref_id) if wife and wife.xref_id else None
        parents = [pid for pid in (husb_id, wife_id) if pid]

        # Spouse relationship
        if husb_id and wife_id:
            relations.append(
                Relation(id=f"{fam_id}_S", type=RelationType.SPOUSE, a_id=husb_id, b_id=wife_id)
            )

        # Parent-child relationships
        for child in rec.sub_tags("CHIL"):
            if not child.xref_id:
                continue
            child_id = extract_person_id(child.xref_id)
            for parent_id in parents:
                relations.append(
                    Relation(
                        id=f"{fam_id}_{parent_id}_{child_id}",
                        type=RelationType.PARENT_CHILD,
                        a_id=parent_id,
                        b_id=child_id,
                    )
                )

    return persons, relations


def migrate_data(data: dict):
    """Bring project data written by older versions up to DATA_VERSION in place."""
    if data.get("dataVersion", 1) >= DATA_VERSION:
        return
    data["dataVersion"] = DATA_VERSION
    for p in data["people"]:
        for key in ("originCountry", "originCity", "originArea", "originFamilyBranch", "originNotes"):
            p.setdefault(key, "")


def validate_project_data(data) -> list[str]:
    """
    Clean up a decoded project file in place.

    - Persons without an id get a generated one; duplicate ids are skipped
    - Persons without a usable name are called "Unknown"
    - Relations with missing or unknown endpoints, or an unknown type, are removed

    Returns a list of warning messages.

    Raises:
        ValueError: The data is not a JSON object.
    """
    if not isinstance(data, dict):
        raise ValueError("Invalid project file: expected a JSON object")

    warnings: list[str] = []
    if not isinstance(data.get("people"), list):
        data["people"] = []
        warnings.append("No people found, starting empty")
    if not isinstance(data.get("relations"), list):
        data["relations"] = []

    seen: set[str] = set()
    people = []
    for idx, p in enumerate(data["people"]):
        if not isinstance(p, dict):
            warnings.append(f"Person at index {idx} is not an object, skipping")
            continue
        if not p.get("id"):
            p["id"] = f"p_import_{idx}"
            warnings.append(f"Person at index {idx} had no ID, generated one")
        if p["id"] in seen:
            warnings.append(f"Duplicate ID {p['id']} found, skipping")
            continue
        seen.add(p["id"])
        name = p.get("name")
        if not isinstance(name, str) or not name.strip():
            warnings.append(f"Person {p['id']} has invalid name, using \"Unknown\"")
            p["name"] = "Unknown"
        people.append(p)
    data["people"] = people

    valid_types = {t.value for t in RelationType}
    relations = [
        r
        for r in data["relations"]
        if isinstance(r, dict)
        and r.get("aId") in seen
        and r.get("bId") in seen
        and r.get("type") in valid_types
    ]
    removed = len(data["relations"]) - len(relations)
    if removed > 0:
        warnings.append(f"Removed {removed} invalid relationship(s)")
    data["relations"] = relations

    return warnings


def load_project(filepath: Path) -> tuple[list[Person], list[Relation], list[str]]:
    """Load a `.familytree.json` project (or a plain exported JSON file)."""
    data = json.loads(Path(filepath).read_text(encoding="utf-8"))
    warnings = validate_project_data(data)
    migrate_data(data)

    persons = [
        Person(
            id=str(p["id"]),
            x=float(p.get("x") or 0.0),
            y=float(p.get("y") or 0.0),
            has_manual_pos=bool(p.get("hasManualPos", False)),
            attributes={k: v for k, v in p.items() if k not in _POSITION_KEYS},
        )
        for p in data["people"]
    ]
    relations = [
        Relation(
            id=str(r.get("id") or f"r_import_{i}"),
            type=RelationType(r["type"]),
            a_id=str(r["aId"]),
            b_id=str(r["bId"]),
        )
        for i, r in enumerate(data["relations"])
    ]
    return persons, relations, warnings
