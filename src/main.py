"""
1) Load a family tree from a GEDCOM file or a `.familytree.json` project.
2) Validate the relations (cycles, parent counts, dangling references).
3) Auto-arrange every person with the chosen layout preset.
4) Optionally store the arranged tree with SQLite.
5) Optionally plot it, export pinned DOT source, or write a JSON project.
"""

import argparse
from pathlib import Path

from config import PRESETS, DEFAULT_PRESET, get_preset
from database import create_database, export_project, store_data
from layout import auto_arrange
from parsing import load_project, normalize_data, parse_gedcom
from plotting import plot_layout, write_dot
from validation import validate_graph

MAX_SHOWN_WARNINGS = 10


def _print_warnings(warnings: list[str], indent: str = "  "):
    print(f"{indent}Found {len(warnings)} warnings:")
    for w in warnings[:MAX_SHOWN_WARNINGS]:
        print(f"{indent}  - {w}")
    if len(warnings) > MAX_SHOWN_WARNINGS:
        print(f"{indent}  ... and {len(warnings) - MAX_SHOWN_WARNINGS} more")


def load_input(input_path: Path):
    """Read persons and relations from a GEDCOM (.ged) or JSON project file."""
    if input_path.suffix.lower() == ".ged":
        print(f"Parsing GEDCOM file: {input_path}")
        persons, relations = normalize_data(parse_gedcom(input_path))
        return persons, relations, []

    print(f"Loading project file: {input_path}")
    return load_project(input_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="famtree-layout", description="Automatic layout for family trees"
    )
    parser.add_argument("input", type=Path, help="GEDCOM (.ged) or JSON project file")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        default=DEFAULT_PRESET,
        help=f"layout preset (default: {DEFAULT_PRESET})",
    )
    parser.add_argument("--db", type=Path, help="store the arranged tree in this SQLite file")
    parser.add_argument("--plot", type=Path, help="render the tree to an image (png, svg, pdf)")
    parser.add_argument("--dot", type=Path, help="write Graphviz source with pinned positions")
    parser.add_argument("--export", type=Path, help="write a .familytree.json project")
    parser.add_argument(
        "--lock-manual",
        action="store_true",
        help="keep manually positioned persons where they are",
    )
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    config = get_preset(args.preset)

    persons, relations, load_warnings = load_input(args.input)
    print(f"  Found {len(persons)} persons and {len(relations)} relations")
    if load_warnings:
        _print_warnings(load_warnings)

    print("Validating relations...")
    warnings = validate_graph([p.id for p in persons], relations)
    if warnings:
        _print_warnings(warnings)
    else:
        print("  No validation issues found")

    print(f"Arranging tree ({config.name} preset)...")
    result = auto_arrange(persons, relations, config, lock_manual_positions=args.lock_manual)
    print(
        f"  Placed {len(result.positions)} persons in {len(result.families)} families "
        f"({len(result.isolated)} in the unconnected strip)"
    )
    if result.warnings:
        _print_warnings(result.warnings)

    if args.db:
        # Delete existing database to ensure fresh start
        if args.db.exists():
            args.db.unlink()
            print(f"Deleted existing database: {args.db}")
        print(f"Storing data in SQLite: {args.db}")
        conn = create_database(args.db)
        store_data(conn, persons, relations)
        conn.close()

    if args.plot:
        print(f"Plotting tree to: {args.plot}")
        plot_layout(persons, relations, config, args.plot)

    if args.dot:
        write_dot(persons, relations, args.dot)

    if args.export:
        export_project(args.export, persons, relations)
        print(f"Project saved to {args.export}")

    print("Done!")


if __name__ == "__main__":
    main()
