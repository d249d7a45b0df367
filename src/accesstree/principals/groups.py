"""Group membership resolution.

GroupResolver computes the ordered groups a player belongs to.  The order
is the evaluation priority of the group trees, so it matters:

1. explicit memberships, in stored order;
2. the tier group earned by privilege level, if that group exists;
3. groups mapped from external affiliations, if they exist.

Explicit memberships naming a group that no longer has a tree are pruned
from the stored list.  The resolver writes the pruned list back into the
database and reports it; persisting the change is the caller's job.

Example
-------
>>> db = AuthorizationDatabase.seeded()
>>> directory = StaticDirectory()
>>> directory.add_player("aedil", level=45, affiliations=["docs"])
>>> resolver = GroupResolver(db, identity=directory, affiliations=directory)
>>> resolver.resolve("aedil").groups
['Arch_full', 'Arch_docs']
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from accesstree.principals.classification import PrincipalKind
from accesstree.principals.database import AuthorizationDatabase
from accesstree.principals.sources import GroupAffiliationSource, IdentityProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierPolicy:
    """Privilege thresholds that grant automatic group membership.

    Attributes
    ----------
    archwizard_level:
        At or above this level a player joins :attr:`full_group`.
    junior_arch_level:
        At or above this level (and below archwizard) a player joins
        :attr:`junior_group`.
    elder_level:
        Elders are excluded from the junior tier.
    """

    archwizard_level: int = 45
    junior_arch_level: int = 40
    elder_level: int = 42
    full_group: str = "Arch_full"
    junior_group: str = "Arch_junior"

    def tier_group(self, level: int) -> str | None:
        """Return the tier group earned at *level*, or ``None``."""
        if level >= self.archwizard_level:
            return self.full_group
        if level >= self.junior_arch_level and level != self.elder_level:
            return self.junior_group
        return None

    def is_archwizard(self, level: int) -> bool:
        return level >= self.archwizard_level


@dataclass(frozen=True)
class GroupResolution:
    """Outcome of :meth:`GroupResolver.resolve`.

    Attributes
    ----------
    groups:
        Ordered groups, highest priority first.
    explicit:
        The stored memberships that survived pruning.
    pruned:
        Stored memberships removed because their group no longer exists.
    """

    groups: list[str] = field(default_factory=list)
    explicit: list[str] = field(default_factory=list)
    pruned: list[str] = field(default_factory=list)

    @property
    def derived(self) -> list[str]:
        """Groups that come only from tier or affiliation."""
        return [g for g in self.groups if g not in self.explicit]

    @property
    def changed(self) -> bool:
        return bool(self.pruned)


class GroupResolver:
    """Resolves the ordered group list of a principal.

    Parameters
    ----------
    database:
        The access database to read (and prune) memberships in.
    identity:
        Source of privilege levels.  Without one, nobody earns a tier group.
    affiliations:
        Source of external affiliations.  Optional.
    tiers:
        Tier thresholds.
    """

    def __init__(
        self,
        database: AuthorizationDatabase,
        identity: IdentityProvider | None = None,
        affiliations: GroupAffiliationSource | None = None,
        tiers: TierPolicy | None = None,
    ) -> None:
        self._db = database
        self._identity = identity
        self._affiliations = affiliations
        self._tiers = tiers or TierPolicy()

    @property
    def database(self) -> AuthorizationDatabase:
        return self._db

    @database.setter
    def database(self, database: AuthorizationDatabase) -> None:
        self._db = database

    @property
    def tiers(self) -> TierPolicy:
        return self._tiers

    def resolve(self, name: str) -> GroupResolution:
        """Compute the groups of *name*, pruning stale memberships.

        Only players have groups; groups and fake users resolve to an
        empty result.
        """
        rules = self._db.rules
        if not name or rules.kind_of(name) is not PrincipalKind.PLAYER:
            return GroupResolution()

        stored = self._db.memberships(name)
        explicit = [g for g in stored if g in self._db]
        pruned = [g for g in stored if g not in self._db]
        groups = list(explicit)

        if self._identity is not None:
            tier_group = self._tiers.tier_group(self._identity.privilege_level(name))
            if tier_group is not None and tier_group in self._db and tier_group not in groups:
                groups.append(tier_group)

        if self._affiliations is not None:
            for affiliation in self._affiliations.affiliations_of(name):
                group = rules.group_for_affiliation(affiliation)
                if group in self._db and group not in groups:
                    groups.append(group)

        if pruned:
            logger.warning(
                "Pruning stale group memberships of %s: %s", name, ", ".join(pruned)
            )
            self._db.set_memberships(name, explicit)

        return GroupResolution(groups=groups, explicit=explicit, pruned=pruned)

    def groups_of(self, name: str) -> list[str]:
        """Shortcut for ``resolve(name).groups``."""
        return self.resolve(name).groups


__all__ = [
    "GroupResolution",
    "GroupResolver",
    "TierPolicy",
]
