#!/usr/bin/env python3
"""Example: Authorization service - accesstree

Wires AuthorizationService to a YAML store and a JSONL audit log, then
walks through groups, priority between trees, removal and listing.

Usage:
    python examples/02_authorization_service.py

Requirements:
    pip install accesstree
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import accesstree as at
from accesstree.display.renderer import TreeRenderer


def main() -> None:
    workdir = Path(tempfile.mkdtemp(prefix="accesstree-"))

    directory = at.StaticDirectory()
    directory.add_player("aedil", level=45, affiliations=["docs"])
    directory.add_player("frogo", level=1)

    service = at.AuthorizationService(
        store=at.YamlFileStore(workdir / "access_db.yaml"),
        identity=directory,
        affiliations=directory,
        audit=at.AccessAuditLog(workdir / "access_audit.jsonl"),
    )
    print(f"Database seeded at {workdir / 'access_db.yaml'}")
    print(f"aedil belongs to: {service.groups_of('aedil')}")

    # A new group, created by granting to it
    created = service.grant("aedil", "Coders", "/src", at.AccessLevel.WRITE)
    print(f"\nGrant to Coders: {created.outcome.value}")
    service.set_group_membership("aedil", "frogo", "Coders")
    print(f"frogo belongs to: {service.groups_of('frogo')}")

    # The player's own tree outranks its groups
    service.grant("aedil", "frogo", "/src/secret", at.AccessLevel.REVOKED)
    for path in ("/src/main.c", "/src/secret/key.c"):
        result = service.effective_level(path, "frogo")
        print(f"  {path}: {result.level.display_name} (from {result.source})")

    # Refusals are typed results, not exceptions
    refused = service.grant("frogo", "frogo", "/data", at.AccessLevel.READ)
    print(f"\nfrogo granting itself /data: {refused.error.value}: {refused.message}")

    # Listing
    listing = service.list_effective_tree("frogo")
    print()
    print(TreeRenderer().render_plain(listing))

    denied = service.check("/data/secret", "frogo", at.AccessLevel.READ)
    print(f"\nCheck /data/secret: allowed={denied.allowed}")
    print(f"Audit records: {at.AuditLogger(workdir / 'access_audit.jsonl').count()}")


if __name__ == "__main__":
    main()
