#!/usr/bin/env python3
"""
World file validation script.

Usage:
    python scripts/validate_world.py worlds/cave.json     # Check a world file
    python scripts/validate_world.py --demo               # Check the bundled demo
    python scripts/validate_world.py --export demo.json   # Write the demo as JSON
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def check_world(path: str | None) -> bool:
    """Load a world and report its issues."""
    from delve.content import WorldValidationError, create_demo_world, load_world, validate_world

    label = path or "bundled demo world"
    print(f"Checking {label}...")

    try:
        if path is None:
            world = create_demo_world()
            issues = validate_world(world)
        else:
            world = load_world(path)
            issues = []
    except WorldValidationError as e:
        for issue in e.issues:
            print(f"  - {issue}")
        print(f"  {len(e.issues)} issue(s) found")
        return False
    except OSError as e:
        print(f"  Error - {e}")
        return False

    if issues:
        for issue in issues:
            print(f"  - {issue}")
        print(f"  {len(issues)} issue(s) found")
        return False

    print(f"  {world.title} (id {world.id}, v{world.version})")
    print(
        f"  {len(world.locations)} locations, "
        f"{len(world.unique_items)} unique items, "
        f"{len(world.generic_items)} generic items, "
        f"{len(world.quests)} quests"
    )
    print("  OK")
    return True


def export_demo(destination: str) -> None:
    """Write the bundled demo world as a JSON world file."""
    from delve.content import create_demo_world

    world = create_demo_world()
    Path(destination).write_text(
        world.model_dump_json(indent=2, exclude_none=True),
        encoding="utf-8",
    )
    print(f"Demo world written to {destination}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Validate Delve world files")
    parser.add_argument("paths", nargs="*", help="World JSON files to check")
    parser.add_argument("--demo", action="store_true", help="Check the bundled demo world")
    parser.add_argument("--export", metavar="PATH", help="Write the demo world to PATH as JSON")
    args = parser.parse_args()

    if args.export:
        export_demo(args.export)
        return 0

    print("Delve World Check")
    print("=" * 40)

    targets: list[str | None] = list(args.paths)
    if args.demo or not targets:
        targets.insert(0, None)

    results = [check_world(target) for target in targets]

    print()
    print("Summary")
    print("=" * 40)
    print(f"  {sum(results)}/{len(results)} world(s) OK")

    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
