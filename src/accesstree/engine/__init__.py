"""Engine package for accesstree.

Provides the AuthorizationService API surface and its typed results.
"""
from __future__ import annotations

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
from accesstree.engine.service import AuthorizationService, PathLayout, UnknownPrincipalError

__all__ = [
    "AuthorizationService",
    "CheckResult",
    "GrantError",
    "GrantOutcome",
    "GrantResult",
    "ListingMode",
    "ListingSection",
    "MembershipError",
    "MembershipOutcome",
    "MembershipResult",
    "PathLayout",
    "ResetError",
    "ResetOutcome",
    "ResetResult",
    "TreeListing",
    "UnknownPrincipalError",
]
