"""Access levels stored in access trees.

Levels form a totally ordered signed scale::

    REVOKED (-1) < READ (1) < GRANT_READ (2) < WRITE (3) < GRANT_WRITE (4) < GRANT_GRANT (5)

``NO_ACCESS`` (0) is never stored in a tree.  The evaluator uses it as the
"no decision yet" sentinel, and the grant API uses it as the verb meaning
"remove the explicit entry and fall back to whatever is inherited".  It is
distinct from ``REVOKED``, which is an explicit denial.

Example
-------
>>> AccessLevel.parse("grant-write")
<AccessLevel.GRANT_WRITE: 4>
>>> AccessLevel.WRITE.can_read
True
>>> AccessLevel.REVOKED.display_name
'revoked'
"""
from __future__ import annotations

from enum import IntEnum


class AccessLevel(IntEnum):
    """Signed, totally ordered access scale."""

    REVOKED = -1
    NO_ACCESS = 0
    READ = 1
    GRANT_READ = 2
    WRITE = 3
    GRANT_WRITE = 4
    GRANT_GRANT = 5

    @property
    def display_name(self) -> str:
        """Human-readable name used in audit records and listings."""
        return _DISPLAY_NAMES[self]

    @property
    def is_storable(self) -> bool:
        """``True`` for every level that may appear inside a tree."""
        return self is not AccessLevel.NO_ACCESS

    @property
    def can_read(self) -> bool:
        return self >= AccessLevel.READ

    @property
    def can_write(self) -> bool:
        return self >= AccessLevel.WRITE

    @property
    def can_grant(self) -> bool:
        return self in (AccessLevel.GRANT_READ, AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT)

    @classmethod
    def parse(cls, value: str | int | AccessLevel) -> AccessLevel:
        """Convert a name, enum name or integer into an AccessLevel.

        Parameters
        ----------
        value:
            One of the display names (``"grant-read"``), an enum member
            name (``"GRANT_READ"``), ``"none"`` for NO_ACCESS, or an int.

        Raises
        ------
        ValueError
            If *value* does not name a known level.
        """
        if isinstance(value, AccessLevel):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid access level: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid access level: {value!r}") from None

        text = str(value).strip()
        lowered = text.lower()
        if lowered in _NAME_LOOKUP:
            return _NAME_LOOKUP[lowered]
        try:
            return cls[text.upper().replace("-", "_")]
        except KeyError:
            pass
        try:
            return cls(int(text))
        except ValueError:
            raise ValueError(
                f"Invalid access level: {value!r}. "
                f"Valid: {sorted(_NAME_LOOKUP)}"
            ) from None


_DISPLAY_NAMES: dict[AccessLevel, str] = {
    AccessLevel.NO_ACCESS: "no-access",
    AccessLevel.REVOKED: "revoked",
    AccessLevel.READ: "read",
    AccessLevel.GRANT_READ: "grant-read",
    AccessLevel.WRITE: "write",
    AccessLevel.GRANT_WRITE: "grant-write",
    AccessLevel.GRANT_GRANT: "grant",
}

_NAME_LOOKUP: dict[str, AccessLevel] = {
    **{name: level for level, name in _DISPLAY_NAMES.items()},
    "none": AccessLevel.NO_ACCESS,
    "grant-grant": AccessLevel.GRANT_GRANT,
}

# Levels an actor must itself hold (exactly one of) on a path before it may
# hand out the keyed level there.
REQUIRED_GRANTER_LEVELS: dict[AccessLevel, frozenset[AccessLevel]] = {
    AccessLevel.NO_ACCESS: frozenset(
        [AccessLevel.GRANT_READ, AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT]
    ),
    AccessLevel.REVOKED: frozenset(
        [AccessLevel.GRANT_READ, AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT]
    ),
    AccessLevel.READ: frozenset(
        [AccessLevel.GRANT_READ, AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT]
    ),
    AccessLevel.GRANT_READ: frozenset([AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT]),
    AccessLevel.WRITE: frozenset([AccessLevel.GRANT_WRITE, AccessLevel.GRANT_GRANT]),
    AccessLevel.GRANT_WRITE: frozenset([AccessLevel.GRANT_GRANT]),
    AccessLevel.GRANT_GRANT: frozenset([AccessLevel.GRANT_GRANT]),
}


def may_grant(actor_level: AccessLevel, requested: AccessLevel) -> bool:
    """Return True if an actor holding *actor_level* may grant *requested*."""
    return actor_level in REQUIRED_GRANTER_LEVELS[requested]


__all__ = [
    "AccessLevel",
    "REQUIRED_GRANTER_LEVELS",
    "may_grant",
]
