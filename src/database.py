"""SQLite and JSON project storage for family trees."""

from datetime import datetime, timezone
import json
from pathlib import Path
import sqlite3

from models import Person, Relation, RelationType

DATA_VERSION = 2


def create_database(db_path: Path) -> sqlite3.Connection:
    """Create SQLite database with person and relation tables."""
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            id TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            x REAL NOT NULL DEFAULT 0,
            y REAL NOT NULL DEFAULT 0,
            has_manual_pos INTEGER NOT NULL DEFAULT 0,
            attributes TEXT NOT NULL DEFAULT '{}'
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS relation (
            id TEXT PRIMARY KEY,
            position INTEGER NOT NULL,
            type TEXT NOT NULL,
            a_id TEXT NOT NULL,
            b_id TEXT NOT NULL,
            FOREIGN KEY (a_id) REFERENCES person(id),
            FOREIGN KEY (b_id) REFERENCES person(id)
        )
    """)

    conn.commit()
    return conn


def store_data(conn: sqlite3.Connection, persons: list[Person], relations: list[Relation]):
    """Replace the stored tree with the given persons and relations."""
    cursor = conn.cursor()
    cursor.execute("DELETE FROM relation")
    cursor.execute("DELETE FROM person")

    # Insert persons
    cursor.executemany(
        """
        INSERT INTO person (id, position, x, y, has_manual_pos, attributes)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        [
            (p.id, i, p.x, p.y, int(p.has_manual_pos), json.dumps(p.attributes, ensure_ascii=False))
            for i, p in enumerate(persons)
        ],
    )

    # Insert relations
    cursor.executemany(
        """
        INSERT INTO relation (id, position, type, a_id, b_id)
        VALUES (?, ?, ?, ?, ?)
        """,
        [(r.id, i, RelationType(r.type).value, r.a_id, r.b_id) for i, r in enumerate(relations)],
    )

    conn.commit()


def load_data(conn: sqlite3.Connection) -> tuple[list[Person], list[Relation]]:
    """Read persons and relations back in their original order."""
    cursor = conn.cursor()

    cursor.execute("SELECT id, x, y, has_manual_pos, attributes FROM person ORDER BY position")
    persons = [
        Person(id=row[0], x=row[1], y=row[2], has_manual_pos=bool(row[3]), attributes=json.loads(row[4]))
        for row in cursor.fetchall()
    ]

    cursor.execute("SELECT id, type, a_id, b_id FROM relation ORDER BY position")
    relations = [
        Relation(id=row[0], type=RelationType(row[1]), a_id=row[2], b_id=row[3])
        for row in cursor.fetchall()
    ]

    return persons, relations


def project_dict(persons: list[Person], relations: list[Relation], project_name: str = "Untitled") -> dict:
    """Serialize a tree into the `.familytree.json` project layout."""
    now = datetime.now(timezone.utc).isoformat()
    return {
        "dataVersion": DATA_VERSION,
        "people": [
            {**p.attributes, "id": p.id, "x": p.x, "y": p.y, "hasManualPos": p.has_manual_pos}
            for p in persons
        ],
        "relations": [
            {"id": r.id, "type": RelationType(r.type).value, "aId": r.a_id, "bId": r.b_id}
            for r in relations
        ],
        "meta": {"projectName": project_name, "updatedAt": now},
    }


def export_project(
    path: Path, persons: list[Person], relations: list[Relation], project_name: str | None = None
) -> Path:
    """Write a JSON project file; the project name defaults to the file stem."""
    path = Path(path)
    if project_name is None:
        project_name = path.name.removesuffix(".json").removesuffix(".familytree")
    data = project_dict(persons, relations, project_name)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
