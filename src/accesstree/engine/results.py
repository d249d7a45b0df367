"""Typed outcomes of the authorization API.

Mutations never raise for ordinary failures.  Each returns a frozen result
carrying either an outcome or an error code plus a readable message, and
the result is truthy on success::

    result = service.grant("aedil", "frogo", "/players/frogo/open", AccessLevel.READ)
    if not result:
        print(result.error, result.message)

Only persistence failure raises (:class:`~accesstree.storage.store.PersistenceError`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import AccessTree

# ---------------------------------------------------------------------------
# Check
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CheckResult:
    """Allow / deny decision for one path.

    Attributes
    ----------
    allowed:
        Whether *level* satisfies *required*.
    path:
        The canonical resolved path, or ``None`` if the path was invalid.
    level:
        Effective level of the principal at *path*.
    required:
        The level that was asked for.
    source:
        Principal whose tree decided, ``"!"`` for a ruled override, or
        ``None`` when nothing decided.
    """

    allowed: bool
    path: str | None
    level: AccessLevel
    required: AccessLevel
    source: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


# ---------------------------------------------------------------------------
# Grant
# ---------------------------------------------------------------------------


class GrantOutcome(str, Enum):
    GRANTED = "granted"
    GROUP_CREATED = "group_created"
    REMOVED = "removed"
    PRINCIPAL_REMOVED = "principal_removed"


class GrantError(str, Enum):
    INVALID_PATH = "invalid_path"
    UNKNOWN_PRINCIPAL = "unknown_principal"
    NOT_AUTHORIZED = "not_authorized"
    NOT_FOUND = "not_found"
    ALREADY_AT_LEVEL = "already_at_level"
    UNKNOWN_GROUP = "unknown_group"


@dataclass(frozen=True)
class GrantResult:
    """Result of :meth:`AuthorizationService.grant`."""

    target: str
    path: str | None
    level: AccessLevel
    outcome: GrantOutcome | None = None
    error: GrantError | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Group membership
# ---------------------------------------------------------------------------


class MembershipOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


class MembershipError(str, Enum):
    INVALID_MEMBER = "invalid_member"
    ALREADY_A_MEMBER = "already_a_member"
    NOT_A_MEMBER = "not_a_member"
    DERIVED_MEMBERSHIP = "derived_membership"
    UNKNOWN_GROUP = "unknown_group"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"


@dataclass(frozen=True)
class MembershipResult:
    """Result of :meth:`AuthorizationService.set_group_membership`."""

    target: str
    group: str
    outcome: MembershipOutcome | None = None
    error: MembershipError | None = None
    message: str = ""
    groups: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


class ResetOutcome(str, Enum):
    RESET = "reset"
    DEFAULT_RESTORED = "default_restored"


class ResetError(str, Enum):
    NOT_FOUND = "not_found"
    NOT_AUTHORIZED = "not_authorized"


@dataclass(frozen=True)
class ResetResult:
    """Result of :meth:`AuthorizationService.reset_principal`."""

    target: str
    outcome: ResetOutcome | None = None
    error: ResetError | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class ListingMode(str, Enum):
    DETAILED = "detailed"
    EFFECTIVE = "effective"
    RAW = "raw"


@dataclass(frozen=True)
class ListingSection:
    """One tree in a listing, labelled with its owner."""

    owner: str
    tree: AccessTree


@dataclass(frozen=True)
class TreeListing:
    """Inspection view returned by :meth:`AuthorizationService.list_effective_tree`.

    Attributes
    ----------
    principal:
        The name that was asked for.
    listed_as:
        The name whose trees are shown (``"*"`` on fallback).
    mode:
        How the sections were produced.
    sections:
        Trees in priority order.  EFFECTIVE mode has exactly one section.
    fallback_to_default:
        True when *principal* has no entry and the default tree is shown.
    """

    principal: str
    listed_as: str
    mode: ListingMode
    sections: list[ListingSection] = field(default_factory=list)
    fallback_to_default: bool = False


__all__ = [
    "CheckResult",
    "GrantError",
    "GrantOutcome",
    "GrantResult",
    "ListingMode",
    "ListingSection",
    "MembershipError",
    "MembershipOutcome",
    "MembershipResult",
    "ResetError",
    "ResetOutcome",
    "ResetResult",
    "TreeListing",
]
