"""The authorization API.

AuthorizationService ties the tree algorithms to the principal model and
the collaborators (store, identity, affiliations, audit).  It owns the
shared :class:`AuthorizationDatabase` and serializes every entry point
behind one re-entrant lock.  Reads are serialized too, because resolving
a player's groups may prune stale memberships and persist the result.

Mutations follow "read tree, mutate, persist" inside the lock.  If the
store fails, the in-memory database keeps the mutation and
:class:`~accesstree.storage.store.PersistenceError` propagates to the
caller.

Example
-------
>>> directory = StaticDirectory()
>>> directory.add_player("aedil", level=45)
>>> directory.add_player("frogo", level=1)
>>> service = AuthorizationService(identity=directory, affiliations=directory)
>>> service.grant("aedil", "frogo", "/d/Elandar", AccessLevel.WRITE).outcome
<GrantOutcome.GRANTED: 'granted'>
>>> service.check("/d/Elandar/castle.c", "frogo", AccessLevel.WRITE).allowed
True
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from accesstree.audit.access_log import NullAuditLog
from accesstree.engine.results import (
    CheckResult,
    GrantError,
    GrantOutcome,
    GrantResult,
    ListingMode,
    ListingSection,
    MembershipError,
    MembershipOutcome,
    MembershipResult,
    ResetError,
    ResetOutcome,
    ResetResult,
    TreeListing,
)
from accesstree.principals.classification import DEFAULT_PRINCIPAL, PrincipalKind, PrincipalRules
from accesstree.principals.database import AuthorizationDatabase
from accesstree.principals.groups import GroupResolution, GroupResolver, TierPolicy
from accesstree.principals.sources import AuditLog, GroupAffiliationSource, IdentityProvider
from accesstree.storage.store import Store
from accesstree.tree.evaluator import RULED_SOURCE, EvaluationResult, TreeEvaluator
from accesstree.tree.levels import AccessLevel, may_grant
from accesstree.tree.merger import TreeMerger
from accesstree.tree.mutator import RevokeOutcome, TreeMutator
from accesstree.tree.nodes import GROUPS_KEY, RESERVED_KEYS, SELF_KEY, AccessTree, Branch, Leaf
from accesstree.tree.resolver import InvalidPathError, PathResolver

logger = logging.getLogger(__name__)


class UnknownPrincipalError(LookupError):
    """Raised when inspecting a name that has no entry and no fallback."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"No such principal {name!r}: {reason}")


@dataclass(frozen=True)
class PathLayout:
    """Well-known directories of the virtual filesystem.

    Attributes
    ----------
    domain_root:
        Parent of group homes (``/d/<Group>``).
    player_root:
        Parent of player homes (``/players/<name>``).
    character_root:
        Parent of character records, writable by their owner's session.
    open_dir:
        Home subdirectory readable by everyone.
    """

    domain_root: str = "d"
    player_root: str = "players"
    character_root: str = "characters"
    open_dir: str = "open"


class AuthorizationService:
    """Thread-safe authorization API over one access database.

    Parameters
    ----------
    database:
        The database to serve.  When omitted it is loaded from *store*,
        or seeded (and saved) if the store is empty or absent.
    store:
        Where mutations are persisted.  Without one nothing is persisted.
    identity:
        Players, privilege levels and working directories.
    affiliations:
        External affiliations mapped onto groups.
    audit:
        Receives denials, grant changes and resets.
    rules:
        Principal naming rules.
    tiers:
        Privilege thresholds.
    layout:
        Well-known directories.
    """

    def __init__(
        self,
        database: AuthorizationDatabase | None = None,
        store: Store | None = None,
        identity: IdentityProvider | None = None,
        affiliations: GroupAffiliationSource | None = None,
        audit: AuditLog | None = None,
        rules: PrincipalRules | None = None,
        tiers: TierPolicy | None = None,
        layout: PathLayout | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._store = store
        self._identity = identity
        self._audit: AuditLog = audit if audit is not None else NullAuditLog()
        self._rules = rules or (database.rules if database is not None else PrincipalRules())
        self._tiers = tiers or TierPolicy()
        self._layout = layout or PathLayout()

        self._resolver = PathResolver(
            identity, self._layout.domain_root, self._layout.player_root
        )
        self._evaluator = TreeEvaluator(
            (self._layout.domain_root, self._layout.player_root), self._layout.open_dir
        )
        self._mutator = TreeMutator()
        self._merger = TreeMerger()

        if database is None:
            database = self._load_or_seed()
        self._db = database
        self._groups = GroupResolver(database, identity, affiliations, self._tiers)

    # ------------------------------------------------------------------
    # Database lifecycle
    # ------------------------------------------------------------------

    @property
    def database(self) -> AuthorizationDatabase:
        """The live database.  Mutate it only through this service."""
        return self._db

    @property
    def rules(self) -> PrincipalRules:
        return self._rules

    @property
    def tiers(self) -> TierPolicy:
        return self._tiers

    @property
    def layout(self) -> PathLayout:
        return self._layout

    def reload(self) -> bool:
        """Replace the database with the stored one.  False if none is stored."""
        with self._lock:
            if self._store is None:
                return False
            database = self._store.load()
            if database is None:
                return False
            self._db = database
            self._groups.database = database
            return True

    def _load_or_seed(self) -> AuthorizationDatabase:
        if self._store is not None:
            database = self._store.load()
            if database is not None:
                return database
        database = AuthorizationDatabase.seeded(self._rules)
        if self._store is not None:
            self._store.save(database)
        return database

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._db)

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    def resolve_path(self, path: str, acting: str | None = None, cwd: str | None = None) -> str:
        """Return the canonical absolute form of *path*.

        Raises
        ------
        InvalidPathError
            If *path* is empty.
        """
        with self._lock:
            return self._resolver.resolve_str(path, acting=acting, cwd=cwd)

    def groups_of(self, name: str) -> list[str]:
        """Return the ordered groups of *name*, pruning stale memberships."""
        with self._lock:
            return list(self._resolve_groups(name).groups)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def effective_level(
        self, path: str, principal: str, cwd: str | None = None
    ) -> EvaluationResult:
        """Return the effective level of *principal* at *path* and its source.

        Raises
        ------
        InvalidPathError
            If *path* is empty.
        """
        with self._lock:
            segments = self._resolver.resolve(path, acting=principal, cwd=cwd)
            return self._evaluate(segments, principal)

    def check(
        self,
        path: str,
        principal: str,
        required: AccessLevel,
        cwd: str | None = None,
        own_session: bool = False,
    ) -> CheckResult:
        """Decide whether *principal* holds at least *required* at *path*.

        Denials are not errors: they come back as a falsy result and are
        reported to the audit log.

        Parameters
        ----------
        own_session:
            True when the request comes from *principal*'s own session.
            Such a session may always write its own character record.
        """
        required = AccessLevel(required)
        with self._lock:
            try:
                segments = self._resolver.resolve(path, acting=principal, cwd=cwd)
            except InvalidPathError:
                logger.debug("Denied %s on invalid path %r", principal, path)
                self._audit.record_denial(principal, str(path), required, AccessLevel.NO_ACCESS)
                return CheckResult(False, None, AccessLevel.NO_ACCESS, required)

            resolved = "/" + "/".join(segments)
            if own_session and self._is_own_character_record(segments, principal, required):
                return CheckResult(True, resolved, AccessLevel.WRITE, required, RULED_SOURCE)

            result = self._evaluate(segments, principal)
            allowed = result.level >= required
            if not allowed:
                self._audit.record_denial(principal, resolved, required, result.level)
            return CheckResult(allowed, resolved, result.level, required, result.source)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def grant(
        self,
        acting: str,
        target: str,
        path: str,
        level: AccessLevel,
        cwd: str | None = None,
    ) -> GrantResult:
        """Grant *target* *level* at *path* on behalf of *acting*.

        ``AccessLevel.NO_ACCESS`` removes the explicit entry instead.

        Raises
        ------
        PersistenceError
            If the store failed to save; the mutation stays applied.
        """
        level = AccessLevel(level)
        removal = level == AccessLevel.NO_ACCESS
        with self._lock:
            try:
                segments = self._resolver.resolve(path, acting=acting, cwd=cwd, allow_dots=removal)
            except InvalidPathError as exc:
                return self._refuse_grant(target, None, level, GrantError.INVALID_PATH, str(exc))
            resolved = "/" + "/".join(segments)
            problem = self._invalid_grant_segments(segments)
            if problem:
                return self._refuse_grant(target, resolved, level, GrantError.INVALID_PATH, problem)

            kind = self._rules.kind_of(target)
            if kind is not PrincipalKind.GROUP and not self._player_exists(target):
                if not (self._rules.is_admin(acting) and kind is PrincipalKind.FAKE):
                    return self._refuse_grant(
                        target, resolved, level, GrantError.UNKNOWN_PRINCIPAL,
                        f"There is no such player: {target!r}",
                    )

            lookup = [s for s in segments if s != SELF_KEY]
            actor_level = self._evaluate(lookup, acting).level
            if not may_grant(actor_level, level) and not self._rules.is_admin(acting):
                return self._refuse_grant(
                    target, resolved, level, GrantError.NOT_AUTHORIZED,
                    f"{acting!r} holds {actor_level.display_name} at {resolved} "
                    f"and may not grant {level.display_name}",
                )

            if removal:
                return self._remove_entry(acting, target, segments, resolved)

            if self._already_at_level(target, kind, segments, level):
                return self._refuse_grant(
                    target, resolved, level, GrantError.ALREADY_AT_LEVEL,
                    f"{target!r} already has {level.display_name} at {resolved}",
                )

            created = kind is PrincipalKind.GROUP and target not in self._db
            if created and not (
                self._tiers.is_archwizard(self._privilege_level(acting))
                or self._rules.is_admin(acting)
            ):
                return self._refuse_grant(
                    target, resolved, level, GrantError.UNKNOWN_GROUP,
                    f"No such group {target!r}; only archwizards can create groups",
                )

            self._mutator.grant(self._db.ensure(target), segments, level)
            self._audit.record_grant_change(acting, target, resolved, level)
            logger.info(
                "%s granted %s %s at %s%s",
                acting, target, level.display_name, resolved,
                " (new group)" if created else "",
            )
            self._persist()
            outcome = GrantOutcome.GROUP_CREATED if created else GrantOutcome.GRANTED
            return GrantResult(target, resolved, level, outcome=outcome)

    def set_group_membership(
        self, acting: str, target: str, group: str, add: bool = True
    ) -> MembershipResult:
        """Add *target* to, or remove it from, the explicit members of *group*.

        Raises
        ------
        PersistenceError
            If the store failed to save; the change stays applied.
        """
        with self._lock:
            if self._rules.kind_of(target) is not PrincipalKind.PLAYER:
                return self._refuse_membership(
                    target, group, MembershipError.INVALID_MEMBER,
                    f"{target!r} cannot be a group member",
                )

            resolution = self._resolve_groups(target)
            member = group in resolution.groups
            if add and member:
                return self._refuse_membership(
                    target, group, MembershipError.ALREADY_A_MEMBER,
                    f"{target!r} is already a member of {group!r}",
                )

            if not add and member:
                if (
                    self._rules.is_static_group(group)
                    and self._privilege_level(target) >= self._tiers.junior_arch_level
                ):
                    return self._refuse_membership(
                        target, group, MembershipError.INSUFFICIENT_PRIVILEGE,
                        f"{target!r} cannot be removed from static group {group!r}",
                    )
                if group not in resolution.explicit:
                    return self._refuse_membership(
                        target, group, MembershipError.DERIVED_MEMBERSHIP,
                        f"{target!r} is a member of {group!r} by tier or affiliation",
                    )
                remaining = [g for g in resolution.explicit if g != group]
                self._db.set_memberships(target, remaining)
                logger.info("%s removed %s from group %s", acting, target, group)
                self._persist()
                return MembershipResult(
                    target, group, outcome=MembershipOutcome.REMOVED,
                    groups=self._groups.groups_of(target),
                )

            if not add:
                return self._refuse_membership(
                    target, group, MembershipError.NOT_A_MEMBER,
                    f"{target!r} is not a member of {group!r}",
                )
            if not self._rules.is_group(group) or group not in self._db:
                return self._refuse_membership(
                    target, group, MembershipError.UNKNOWN_GROUP, f"No such group {group!r}"
                )
            if (
                self._rules.is_static_group(group)
                and not self._tiers.is_archwizard(self._privilege_level(acting))
            ):
                return self._refuse_membership(
                    target, group, MembershipError.INSUFFICIENT_PRIVILEGE,
                    f"Only archwizards can add members to static group {group!r}",
                )

            self._db.set_memberships(target, resolution.explicit + [group])
            logger.info("%s added %s to group %s", acting, target, group)
            self._persist()
            return MembershipResult(
                target, group, outcome=MembershipOutcome.ADDED,
                groups=self._groups.groups_of(target),
            )

    def reset_principal(self, acting: str, target: str) -> ResetResult:
        """Reset *target* to default access.

        The ``*`` tree is restored to the seed schema; any other entry is
        deleted so the principal falls back to its groups and the default.

        Raises
        ------
        PersistenceError
            If the store failed to save; the reset stays applied.
        """
        with self._lock:
            tree = self._db.get(target)
            if tree is None:
                return self._refuse_reset(
                    target, ResetError.NOT_FOUND, f"{target!r} has no access entry"
                )

            actor_level = self._privilege_level(acting)
            archwizard = self._tiers.is_archwizard(actor_level)
            kind = self._rules.kind_of(target)

            if target == DEFAULT_PRINCIPAL:
                if not (archwizard or self._rules.is_admin(acting)):
                    return self._refuse_reset(
                        target, ResetError.NOT_AUTHORIZED,
                        "Only archwizards can restore the default tree",
                    )
            elif kind is PrincipalKind.FAKE:
                return self._refuse_reset(
                    target, ResetError.NOT_AUTHORIZED, f"{target!r} cannot be reset"
                )
            elif kind is PrincipalKind.PLAYER:
                if not archwizard or not (
                    actor_level > self._privilege_level(target) or acting == target
                ):
                    return self._refuse_reset(
                        target, ResetError.NOT_AUTHORIZED,
                        f"{acting!r} may not reset {target!r}",
                    )
            elif not archwizard:
                return self._refuse_reset(
                    target, ResetError.NOT_AUTHORIZED,
                    "Only archwizards can reset groups",
                )

            previous = tree.to_raw()
            if target == DEFAULT_PRINCIPAL:
                self._db.reset_default_tree()
                outcome = ResetOutcome.DEFAULT_RESTORED
            else:
                self._db.remove(target)
                outcome = ResetOutcome.RESET
            self._audit.record_reset(acting, target, previous)
            logger.info("%s reset the access of %s to default", acting, target)
            self._persist()
            return ResetResult(target, outcome=outcome)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_effective_tree(self, name: str, mode: ListingMode | None = None) -> TreeListing:
        """Return the trees that apply to *name* for inspection.

        Raises
        ------
        UnknownPrincipalError
            If *name* has no entry and is neither a known player nor a fake user.
        """
        with self._lock:
            listed_as = name
            fallback = False
            if (
                not self._rules.is_fake(name)
                and name not in self._db
                and len(self._resolve_groups(name).groups) <= 1
            ):
                if self._rules.is_group(name):
                    raise UnknownPrincipalError(name, "no such group in the database")
                if not self._player_exists(name):
                    raise UnknownPrincipalError(name, "no such player")
                listed_as = DEFAULT_PRINCIPAL
                fallback = True

            if mode is None:
                mode = ListingMode.EFFECTIVE if listed_as == DEFAULT_PRINCIPAL else ListingMode.DETAILED
            trees, _ = self._trees_for(listed_as)

            if mode is ListingMode.EFFECTIVE:
                merged = self._merger.flatten([tree for _, tree in trees])
                sections = [ListingSection(listed_as, merged)]
            elif mode is ListingMode.DETAILED:
                sections = [
                    ListingSection(owner, tree.clone())
                    for owner, tree in trees
                    if not tree.root.is_empty
                ]
            else:
                sections = [ListingSection(owner, tree.clone()) for owner, tree in trees]

            return TreeListing(name, listed_as, mode, sections, fallback)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_groups(self, name: str) -> GroupResolution:
        resolution = self._groups.resolve(name)
        if resolution.changed:
            self._persist()
        return resolution

    def _trees_for(self, name: str) -> tuple[list[tuple[str, AccessTree]], bool]:
        """Return ``(principal, tree)`` pairs for *name*, highest priority first."""
        own = self._db.get(name)
        if name == DEFAULT_PRINCIPAL:
            return [(DEFAULT_PRINCIPAL, self._db.default_tree)], own is not None

        trees: list[tuple[str, AccessTree]] = []
        if own is not None:
            trees.append((name, own))
        for group in self._resolve_groups(name).groups:
            tree = self._db.get(group)
            if tree is not None:
                trees.append((group, tree))
        trees.append((DEFAULT_PRINCIPAL, self._db.default_tree))
        return trees, own is not None

    def _evaluate(self, segments: list[str], name: str) -> EvaluationResult:
        trees, has_own = self._trees_for(name)
        return self._evaluator.evaluate(segments, trees, requester=name, has_own_tree=has_own)

    def _is_own_character_record(
        self, segments: list[str], principal: str, required: AccessLevel
    ) -> bool:
        return (
            required <= AccessLevel.WRITE
            and len(segments) >= 3
            and segments[0] == self._layout.character_root
            and segments[-1].split(".", 1)[0] == principal
        )

    def _invalid_grant_segments(self, segments: list[str]) -> str | None:
        if not segments:
            return "the root itself cannot be granted"
        if any(s in RESERVED_KEYS for s in segments[:-1]):
            return "'.', '*' and '?' may only appear as the final segment"
        if segments[-1] == GROUPS_KEY:
            return "'?' is reserved for group memberships"
        return None

    def _already_at_level(
        self, target: str, kind: PrincipalKind, segments: list[str], level: AccessLevel
    ) -> bool:
        if self._evaluate(segments, target).level != level:
            return False
        if kind is not PrincipalKind.GROUP:
            return True
        tree = self._db.get(target)
        if tree is None:
            return False
        node: Branch = tree.root
        for segment in segments[:-1]:
            child = node.children.get(segment)
            if not isinstance(child, Branch):
                return False
            node = child
        return node.get_entry(segments[-1]) == Leaf(level)

    def _remove_entry(
        self, acting: str, target: str, segments: list[str], resolved: str
    ) -> GrantResult:
        level = AccessLevel.NO_ACCESS
        tree = self._db.get(target)
        outcome = (
            self._mutator.revoke(tree, segments) if tree is not None else RevokeOutcome.NOT_FOUND
        )
        if outcome is RevokeOutcome.NOT_FOUND:
            return self._refuse_grant(
                target, resolved, level, GrantError.NOT_FOUND,
                f"{target!r} has no explicit access at {resolved}",
            )
        if outcome is RevokeOutcome.PRINCIPAL_REMOVED:
            self._db.remove(target)
        self._audit.record_grant_change(acting, target, resolved, None)
        logger.info("%s removed the access of %s at %s", acting, target, resolved)
        self._persist()
        if outcome is RevokeOutcome.PRINCIPAL_REMOVED:
            return GrantResult(target, resolved, level, outcome=GrantOutcome.PRINCIPAL_REMOVED)
        return GrantResult(target, resolved, level, outcome=GrantOutcome.REMOVED)

    def _player_exists(self, name: str) -> bool:
        return self._identity is not None and self._identity.player_exists(name)

    def _privilege_level(self, name: str) -> int:
        return self._identity.privilege_level(name) if self._identity is not None else 0

    def _refuse_grant(
        self,
        target: str,
        path: str | None,
        level: AccessLevel,
        error: GrantError,
        message: str,
    ) -> GrantResult:
        logger.warning("Grant to %s at %s refused (%s): %s", target, path, error.value, message)
        return GrantResult(target, path, level, error=error, message=message)

    def _refuse_membership(
        self, target: str, group: str, error: MembershipError, message: str
    ) -> MembershipResult:
        logger.warning("Membership change of %s in %s refused (%s)", target, group, error.value)
        return MembershipResult(target, group, error=error, message=message)

    def _refuse_reset(self, target: str, error: ResetError, message: str) -> ResetResult:
        logger.warning("Reset of %s refused (%s)", target, error.value)
        return ResetResult(target, error=error, message=message)


__all__ = [
    "AuthorizationService",
    "PathLayout",
    "UnknownPrincipalError",
]
