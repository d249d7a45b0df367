"""accesstree: hierarchical, path-based authorization engine.

Every principal (a player, a group, or the global default ``*``) owns a
sparse access tree.  The effective level at a path is resolved from the
principal's own tree, its groups' trees, and the default tree, in that
priority order.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import accesstree
>>> accesstree.__version__
'0.1.0'
>>> governor = accesstree.AccessGovernor(players={"frogo": 1})
>>> governor.level_of("/players/frogo", "frogo")
<AccessLevel.GRANT_GRANT: 5>
"""
from __future__ import annotations

__version__: str = "0.1.0"

from accesstree.convenience import AccessGovernor

# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------
from accesstree.tree.levels import AccessLevel
from accesstree.tree.nodes import AccessTree, Branch, Leaf
from accesstree.tree.resolver import InvalidPathError, PathResolver
from accesstree.tree.evaluator import EvaluationResult, TreeEvaluator
from accesstree.tree.mutator import RevokeOutcome, TreeMutator
from accesstree.tree.merger import TreeMerger

# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------
from accesstree.principals.classification import PrincipalKind, PrincipalRules
from accesstree.principals.database import AuthorizationDatabase
from accesstree.principals.groups import GroupResolver, TierPolicy
from accesstree.principals.sources import StaticDirectory

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
from accesstree.engine.results import (
    CheckResult,
    GrantError,
    GrantOutcome,
    GrantResult,
    ListingMode,
    MembershipError,
    MembershipOutcome,
    MembershipResult,
    ResetError,
    ResetOutcome,
    ResetResult,
    TreeListing,
)
from accesstree.engine.service import AuthorizationService, PathLayout, UnknownPrincipalError

# ---------------------------------------------------------------------------
# Storage and audit
# ---------------------------------------------------------------------------
from accesstree.storage.store import InMemoryStore, PersistenceError, StoreFormatError, YamlFileStore
from accesstree.audit.access_log import AccessAuditLog, NullAuditLog
from accesstree.audit.logger import AuditLogger
from accesstree.audit.search import AuditSearch

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from accesstree.config.config_loader import AccessConfig, ConfigError, ConfigLoader

__all__ = [
    "__version__",
    "AccessGovernor",
    # Trees
    "AccessLevel",
    "AccessTree",
    "Branch",
    "EvaluationResult",
    "InvalidPathError",
    "Leaf",
    "PathResolver",
    "RevokeOutcome",
    "TreeEvaluator",
    "TreeMerger",
    "TreeMutator",
    # Principals
    "AuthorizationDatabase",
    "GroupResolver",
    "PrincipalKind",
    "PrincipalRules",
    "StaticDirectory",
    "TierPolicy",
    # Engine
    "AuthorizationService",
    "CheckResult",
    "GrantError",
    "GrantOutcome",
    "GrantResult",
    "ListingMode",
    "MembershipError",
    "MembershipOutcome",
    "MembershipResult",
    "PathLayout",
    "ResetError",
    "ResetOutcome",
    "ResetResult",
    "TreeListing",
    "UnknownPrincipalError",
    # Storage and audit
    "AccessAuditLog",
    "AuditLogger",
    "AuditSearch",
    "InMemoryStore",
    "NullAuditLog",
    "PersistenceError",
    "StoreFormatError",
    "YamlFileStore",
    # Configuration
    "AccessConfig",
    "ConfigError",
    "ConfigLoader",
]
