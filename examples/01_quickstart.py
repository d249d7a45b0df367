#!/usr/bin/env python3
"""Example: Quickstart - accesstree

Minimal working example: register players, grant access on a path,
and check what each player can do.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install accesstree
"""
from __future__ import annotations

import accesstree as at


def main() -> None:
    print(f"accesstree version: {at.__version__}")

    # Step 1: A governor over a seeded in-memory database
    governor = at.AccessGovernor(players={"aedil": 45, "frogo": 1})
    print(f"Governor ready: {governor!r}")

    # Step 2: An archwizard hands out write access to a domain
    result = governor.grant("aedil", "frogo", "/d/Elandar", "write")
    print(f"\nGrant: {result.outcome.value if result else result.message}")

    # Step 3: Check a few paths
    checks = [
        ("/d/Elandar/castle.c", "write"),
        ("/d/Other/castle.c", "read"),
        ("/players/frogo/workroom.c", "write"),
        ("/data/secret", "read"),
        ("/tmp/scratch", "write"),
    ]
    print("\nAccess checks for frogo:")
    for path, level in checks:
        icon = "ALLOW" if governor.check(path, "frogo", level) else "DENY"
        effective = governor.level_of(path, "frogo").display_name
        print(f"  [{icon}] {level:<6} {path}  (effective: {effective})")


if __name__ == "__main__":
    main()
