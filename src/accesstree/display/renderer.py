"""Rendering of access-tree listings.

TreeRenderer turns a :class:`~accesstree.engine.results.TreeListing` into:

- Rich-formatted tables (for the CLI),
- plain text (for logs and redirection),
- JSON (for programmatic consumption).

Trees are shown as one row per explicit entry.  A branch's ``*`` is shown
on the directory path with a trailing slash (``/players/``), its ``.`` on
the directory path followed by ``.`` (``/players/.``).

Example
-------
>>> renderer = TreeRenderer()
>>> listing = service.list_effective_tree("frogo")
>>> print(renderer.render_plain(listing))
"""
from __future__ import annotations

import io
import json

import yaml
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from accesstree.engine.results import ListingMode, ListingSection, TreeListing
from accesstree.principals.classification import DEFAULT_PRINCIPAL, is_group_name
from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import Branch, Leaf

_LEVEL_STYLES: dict[AccessLevel, str] = {
    AccessLevel.REVOKED: "red",
    AccessLevel.READ: "green",
    AccessLevel.GRANT_READ: "green",
    AccessLevel.WRITE: "yellow",
    AccessLevel.GRANT_WRITE: "yellow",
    AccessLevel.GRANT_GRANT: "bold magenta",
}


def tree_rows(node: Branch, base: str = "/") -> list[tuple[str, AccessLevel]]:
    """Flatten *node* into ``(path, level)`` rows, defaults first."""
    rows: list[tuple[str, AccessLevel]] = []
    if node.default_level is not None:
        rows.append((base, node.default_level))
    if node.self_level is not None:
        rows.append((base + ".", node.self_level))
    for name in sorted(node.children):
        child = node.children[name]
        match child:
            case Leaf(level=level):
                rows.append((base + name, level))
            case Branch():
                rows.extend(tree_rows(child, f"{base}{name}/"))
    return rows


def section_title(section: ListingSection) -> str:
    owner = section.owner
    if owner == DEFAULT_PRINCIPAL:
        return "'*' (default privileges)"
    if is_group_name(owner):
        return f"group '{owner}'"
    return f"user '{owner}'"


class TreeRenderer:
    """Renders tree listings in rich, plain, or JSON form."""

    # ------------------------------------------------------------------
    # Rich rendering
    # ------------------------------------------------------------------

    def render_rich(self, listing: TreeListing) -> str:
        """Return the listing as a string of Rich-rendered tables."""
        output_buffer = io.StringIO()
        console = Console(file=output_buffer, highlight=False, width=100)

        console.print(Panel(self._heading(listing), border_style="cyan"))
        for number, section in enumerate(listing.sections, start=1):
            title = section_title(section)
            if listing.mode is ListingMode.RAW:
                console.print(f"[bold]#{number} {title}[/bold]")
                console.print(_raw_yaml(section), markup=False)
                continue

            table = Table(
                title=f"#{number} {title}" if listing.mode is ListingMode.DETAILED else None,
                box=box.SIMPLE,
                show_header=True,
                header_style="bold cyan",
            )
            table.add_column("Path", style="white")
            table.add_column("Access")
            for path, level in tree_rows(section.tree.root):
                style = _LEVEL_STYLES.get(level, "white")
                table.add_row(path, f"[{style}]{level.display_name}[/{style}]")
            console.print(table)

        if listing.mode is not ListingMode.EFFECTIVE:
            console.print("[dim]Listed in order of priority (earlier overrules later).[/dim]")
        return output_buffer.getvalue()

    # ------------------------------------------------------------------
    # Plain rendering
    # ------------------------------------------------------------------

    def render_plain(self, listing: TreeListing) -> str:
        """Return the listing as plain multi-line text."""
        sep = "-" * 60
        lines: list[str] = [sep, f" {self._heading(listing)}", sep]
        for number, section in enumerate(listing.sections, start=1):
            if listing.mode is not ListingMode.EFFECTIVE:
                lines.append(f"  #{number} {section_title(section)}:")
            if listing.mode is ListingMode.RAW:
                lines.extend(f"    {line}" for line in _raw_yaml(section).splitlines())
            else:
                for path, level in tree_rows(section.tree.root):
                    lines.append(f"    {path:<40} {level.display_name}")
        lines.append(sep)
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # JSON rendering
    # ------------------------------------------------------------------

    def render_json(self, listing: TreeListing) -> str:
        """Return the listing as a JSON document."""
        payload: dict[str, object] = {
            "principal": listing.principal,
            "listed_as": listing.listed_as,
            "mode": listing.mode.value,
            "fallback_to_default": listing.fallback_to_default,
            "sections": [
                {
                    "owner": section.owner,
                    "tree": section.tree.to_raw(),
                    "entries": [
                        {"path": path, "level": level.display_name}
                        for path, level in tree_rows(section.tree.root)
                    ],
                }
                for section in listing.sections
            ],
        }
        return json.dumps(payload, indent=2)

    def _heading(self, listing: TreeListing) -> str:
        kind = "group" if is_group_name(listing.listed_as) else "user"
        heading = f"Access privileges ({listing.mode.value}) for {kind}: {listing.listed_as}"
        if listing.fallback_to_default:
            heading += f" (no entry for {listing.principal!r}; default privileges apply)"
        return heading


def _raw_yaml(section: ListingSection) -> str:
    return yaml.safe_dump(section.tree.to_raw(), sort_keys=False, default_flow_style=False)


__all__ = [
    "TreeRenderer",
    "section_title",
    "tree_rows",
]
