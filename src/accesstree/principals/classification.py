"""Principal naming rules.

Every principal owns at most one tree, keyed by name.  Three kinds share
that namespace:

- groups have a name containing an upper-case letter (``Arch_docs``,
  ``Elandar``);
- fake users are a fixed set of system names (``*`` for the global
  default tree, ``backbone``, ``root``) that never take part in groups;
- every other name is a player.

Static groups are the built-in groups whose membership changes are gated
by privilege tier.  Admins bypass the granter check.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_PRINCIPAL = "*"

DEFAULT_FAKE_USERS: tuple[str, ...] = (DEFAULT_PRINCIPAL, "backbone", "root")

DEFAULT_STATIC_GROUPS: tuple[str, ...] = (
    "Arch_full",
    "Arch_docs",
    "Arch_qc",
    "Arch_junior",
    "Arch_law",
    "Arch_web",
)

DEFAULT_ADMINS: tuple[str, ...] = ("moreldir", "kralk", "cryzeck")

DEFAULT_AFFILIATION_PREFIX = "Arch_"


class PrincipalKind(str, Enum):
    """What sort of principal a name refers to."""

    PLAYER = "player"
    GROUP = "group"
    FAKE = "fake"


def is_group_name(name: str) -> bool:
    """Return True if *name* is group-shaped (contains an upper-case letter)."""
    return name != name.lower()


@dataclass(frozen=True)
class PrincipalRules:
    """Classifies principal names.

    Attributes
    ----------
    fake_users:
        System names that own trees but are never players or group members.
    static_groups:
        Built-in groups, listed first by :meth:`AuthorizationDatabase.all_groups`.
    admins:
        Hard-coded admins that may grant regardless of their own level.
    affiliation_prefix:
        Prefix turning an external affiliation name into a group name.
    """

    fake_users: tuple[str, ...] = DEFAULT_FAKE_USERS
    static_groups: tuple[str, ...] = DEFAULT_STATIC_GROUPS
    admins: tuple[str, ...] = DEFAULT_ADMINS
    affiliation_prefix: str = DEFAULT_AFFILIATION_PREFIX
    _fake: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_fake", frozenset(self.fake_users))

    def kind_of(self, name: str) -> PrincipalKind:
        if name in self._fake:
            return PrincipalKind.FAKE
        if is_group_name(name):
            return PrincipalKind.GROUP
        return PrincipalKind.PLAYER

    def is_fake(self, name: str) -> bool:
        return name in self._fake

    def is_group(self, name: str) -> bool:
        return self.kind_of(name) is PrincipalKind.GROUP

    def is_player(self, name: str) -> bool:
        return self.kind_of(name) is PrincipalKind.PLAYER

    def is_static_group(self, name: str) -> bool:
        return name in self.static_groups

    def is_admin(self, name: str | None) -> bool:
        return name is not None and name in self.admins

    def group_for_affiliation(self, affiliation: str) -> str:
        """Map an external affiliation name onto its group name."""
        return f"{self.affiliation_prefix}{affiliation}"


__all__ = [
    "DEFAULT_ADMINS",
    "DEFAULT_AFFILIATION_PREFIX",
    "DEFAULT_FAKE_USERS",
    "DEFAULT_PRINCIPAL",
    "DEFAULT_STATIC_GROUPS",
    "PrincipalKind",
    "PrincipalRules",
    "is_group_name",
]
