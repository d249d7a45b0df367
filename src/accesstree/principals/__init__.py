"""Principal package for accesstree.

Provides principal classification, the access database and its seed
content, group membership resolution, and the collaborator interfaces
the engine consumes.
"""
from __future__ import annotations

from accesstree.principals.classification import (
    DEFAULT_PRINCIPAL,
    PrincipalKind,
    PrincipalRules,
    is_group_name,
)
from accesstree.principals.database import AuthorizationDatabase
from accesstree.principals.defaults import BOOTSTRAP_MAP, DEFAULT_SCHEMA, SEED_MAP
from accesstree.principals.groups import GroupResolution, GroupResolver, TierPolicy
from accesstree.principals.sources import (
    AuditLog,
    GroupAffiliationSource,
    IdentityProvider,
    PlayerRecord,
    StaticDirectory,
)

__all__ = [
    "AuditLog",
    "AuthorizationDatabase",
    "BOOTSTRAP_MAP",
    "DEFAULT_PRINCIPAL",
    "DEFAULT_SCHEMA",
    "GroupAffiliationSource",
    "GroupResolution",
    "GroupResolver",
    "IdentityProvider",
    "PlayerRecord",
    "PrincipalKind",
    "PrincipalRules",
    "SEED_MAP",
    "StaticDirectory",
    "TierPolicy",
    "is_group_name",
]
