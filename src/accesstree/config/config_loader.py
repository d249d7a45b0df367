"""Access configuration loader with Pydantic v2 validation.

Loads and validates an ``access.yaml`` file into a typed
:class:`AccessConfig`.  Unknown keys are allowed so newer files still load
with older releases.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load_string("store:\\n  path: /srv/access_db.yaml\\n")
>>> config.store.path
PosixPath('/srv/access_db.yaml')
>>> config.tiers.archwizard_level
45
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from accesstree.engine.service import PathLayout
from accesstree.principals.classification import (
    DEFAULT_ADMINS,
    DEFAULT_AFFILIATION_PREFIX,
    DEFAULT_FAKE_USERS,
    DEFAULT_PRINCIPAL,
    DEFAULT_STATIC_GROUPS,
    PrincipalRules,
    is_group_name,
)
from accesstree.principals.groups import TierPolicy
from accesstree.principals.sources import PlayerRecord, StaticDirectory


class ConfigError(ValueError):
    """Raised when a configuration file fails to parse or validate."""


class StoreConfig(BaseModel):
    """Where the access database is persisted."""

    model_config = {"extra": "allow"}

    path: Path = Field(default=Path("./access_db.yaml"))


class AuditConfig(BaseModel):
    """Configuration for the audit trail."""

    model_config = {"extra": "allow"}

    enabled: bool = Field(default=True)
    log_path: Path = Field(default=Path("./access_audit.jsonl"))
    session_id: str | None = Field(default=None)


class LayoutConfig(BaseModel):
    """Well-known directories of the virtual filesystem."""

    model_config = {"extra": "allow"}

    domain_root: str = Field(default="d", min_length=1)
    player_root: str = Field(default="players", min_length=1)
    character_root: str = Field(default="characters", min_length=1)
    open_dir: str = Field(default="open", min_length=1)

    def to_layout(self) -> PathLayout:
        return PathLayout(
            domain_root=self.domain_root,
            player_root=self.player_root,
            character_root=self.character_root,
            open_dir=self.open_dir,
        )


class PrincipalsConfig(BaseModel):
    """Principal naming rules."""

    model_config = {"extra": "allow"}

    fake_users: list[str] = Field(default_factory=lambda: list(DEFAULT_FAKE_USERS))
    static_groups: list[str] = Field(default_factory=lambda: list(DEFAULT_STATIC_GROUPS))
    admins: list[str] = Field(default_factory=lambda: list(DEFAULT_ADMINS))
    affiliation_prefix: str = Field(default=DEFAULT_AFFILIATION_PREFIX)

    @field_validator("fake_users")
    @classmethod
    def validate_fake_users(cls, values: list[str]) -> list[str]:
        if DEFAULT_PRINCIPAL not in values:
            raise ValueError(f"fake_users must include the default principal {DEFAULT_PRINCIPAL!r}")
        return values

    @field_validator("static_groups")
    @classmethod
    def validate_static_groups(cls, values: list[str]) -> list[str]:
        for v in values:
            if not is_group_name(v):
                raise ValueError(f"Static group '{v}' must contain an upper-case letter")
        return values

    def to_rules(self) -> PrincipalRules:
        return PrincipalRules(
            fake_users=tuple(self.fake_users),
            static_groups=tuple(self.static_groups),
            admins=tuple(self.admins),
            affiliation_prefix=self.affiliation_prefix,
        )


class TiersConfig(BaseModel):
    """Privilege thresholds for automatic tier groups."""

    model_config = {"extra": "allow"}

    archwizard_level: int = Field(default=45, ge=0)
    junior_arch_level: int = Field(default=40, ge=0)
    elder_level: int = Field(default=42, ge=0)
    full_group: str = Field(default="Arch_full")
    junior_group: str = Field(default="Arch_junior")

    @model_validator(mode="after")
    def validate_order(self) -> TiersConfig:
        if self.junior_arch_level > self.archwizard_level:
            raise ValueError("junior_arch_level must not exceed archwizard_level")
        return self

    def to_policy(self) -> TierPolicy:
        return TierPolicy(
            archwizard_level=self.archwizard_level,
            junior_arch_level=self.junior_arch_level,
            elder_level=self.elder_level,
            full_group=self.full_group,
            junior_group=self.junior_group,
        )


class PlayerConfig(BaseModel):
    """One player of the static identity roster."""

    model_config = {"extra": "allow"}

    level: int = Field(default=0, ge=0)
    affiliations: list[str] = Field(default_factory=list)
    cwd: str | None = Field(default=None)


class IdentityConfig(BaseModel):
    """Static roster used when no external identity source is wired in."""

    model_config = {"extra": "allow"}

    players: dict[str, PlayerConfig] = Field(default_factory=dict)

    def to_directory(self, current: str | None = None) -> StaticDirectory:
        return StaticDirectory(
            {
                name: PlayerRecord(level=p.level, affiliations=list(p.affiliations), cwd=p.cwd)
                for name, p in self.players.items()
            },
            current=current,
        )


class AccessConfig(BaseModel):
    """Top-level access configuration schema.

    Loaded from ``access.yaml``.  Every section is optional.
    """

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    store: StoreConfig = Field(default_factory=StoreConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    principals: PrincipalsConfig = Field(default_factory=PrincipalsConfig)
    tiers: TiersConfig = Field(default_factory=TiersConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)


class ConfigLoader:
    """Loads and validates access YAML configuration.

    Example
    -------
    >>> config = ConfigLoader().load(Path("access.yaml"))
    """

    def load(self, config_path: Path) -> AccessConfig:
        """Load and validate an ``access.yaml`` file.

        Raises
        ------
        FileNotFoundError
            When the file does not exist.
        ConfigError
            When the YAML is malformed or fails validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Access config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            text = fh.read()
        return self._parse(text, str(config_path))

    def load_string(self, yaml_content: str) -> AccessConfig:
        """Load and validate a YAML string directly."""
        return self._parse(yaml_content, "<string>")

    def defaults(self) -> AccessConfig:
        """Return a configuration with every default applied."""
        return AccessConfig()

    def _parse(self, text: str, source: str) -> AccessConfig:
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{source}: invalid YAML: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"{source}: expected a mapping at top level")
        try:
            return AccessConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(f"{source}: {exc}") from exc


__all__ = [
    "AccessConfig",
    "AuditConfig",
    "ConfigError",
    "ConfigLoader",
    "IdentityConfig",
    "LayoutConfig",
    "PlayerConfig",
    "PrincipalsConfig",
    "StoreConfig",
    "TiersConfig",
]
