"""Tests for ConfigLoader and the AccessConfig models."""
from __future__ import annotations

from pathlib import Path

import pytest

from accesstree.config.config_loader import AccessConfig, ConfigError, ConfigLoader

_FULL_CONFIG = """\
version: "1"
store:
  path: /srv/mud/access_db.yaml
audit:
  enabled: false
  log_path: /srv/mud/audit.jsonl
  session_id: driver-1
layout:
  domain_root: domains
  player_root: home
principals:
  admins: [kralk]
  static_groups: [Arch_full, Arch_docs]
tiers:
  archwizard_level: 50
  junior_arch_level: 30
identity:
  players:
    aedil:
      level: 50
      affiliations: [docs]
      cwd: /home/aedil
    frogo: {}
"""


@pytest.fixture()
def loader() -> ConfigLoader:
    return ConfigLoader()


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoad:
    def test_defaults(self, loader: ConfigLoader) -> None:
        config = loader.defaults()
        assert isinstance(config, AccessConfig)
        assert config.store.path == Path("./access_db.yaml")
        assert config.audit.enabled is True
        assert config.layout.domain_root == "d"
        assert config.tiers.archwizard_level == 45
        assert "*" in config.principals.fake_users

    def test_empty_string_gives_defaults(self, loader: ConfigLoader) -> None:
        assert loader.load_string("") == loader.defaults()

    def test_full_config(self, loader: ConfigLoader) -> None:
        config = loader.load_string(_FULL_CONFIG)
        assert config.store.path == Path("/srv/mud/access_db.yaml")
        assert config.audit.enabled is False
        assert config.audit.session_id == "driver-1"
        assert config.layout.player_root == "home"
        assert config.layout.open_dir == "open"
        assert config.principals.admins == ["kralk"]
        assert config.identity.players["aedil"].affiliations == ["docs"]
        assert config.identity.players["frogo"].level == 0

    def test_load_from_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "access.yaml"
        path.write_text(_FULL_CONFIG, encoding="utf-8")
        assert loader.load(path).tiers.archwizard_level == 50

    def test_missing_file(self, loader: ConfigLoader, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "absent.yaml")

    def test_unknown_keys_are_allowed(self, loader: ConfigLoader) -> None:
        config = loader.load_string("future_section: {x: 1}\nstore:\n  backend: yaml\n")
        assert config.store.path == Path("./access_db.yaml")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_invalid_yaml(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError, match="invalid YAML"):
            loader.load_string("store: [unclosed\n")

    def test_top_level_must_be_mapping(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            loader.load_string("- a\n- b\n")

    def test_tier_order_is_enforced(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError, match="junior_arch_level"):
            loader.load_string("tiers:\n  archwizard_level: 40\n  junior_arch_level: 45\n")

    def test_static_groups_must_be_group_shaped(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError, match="upper-case"):
            loader.load_string("principals:\n  static_groups: [arch_full]\n")

    def test_fake_users_must_include_default(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError):
            loader.load_string("principals:\n  fake_users: [root]\n")

    def test_negative_player_level(self, loader: ConfigLoader) -> None:
        with pytest.raises(ConfigError):
            loader.load_string("identity:\n  players:\n    frogo: {level: -1}\n")

    def test_error_names_the_source(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "access.yaml"
        path.write_text("tiers:\n  archwizard_level: -5\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="access.yaml"):
            loader.load(path)


# ---------------------------------------------------------------------------
# Conversion into runtime objects
# ---------------------------------------------------------------------------


class TestConversion:
    def test_to_rules(self, loader: ConfigLoader) -> None:
        rules = loader.load_string(_FULL_CONFIG).principals.to_rules()
        assert rules.is_admin("kralk")
        assert rules.static_groups == ("Arch_full", "Arch_docs")
        assert rules.is_fake("backbone")

    def test_to_policy(self, loader: ConfigLoader) -> None:
        policy = loader.load_string(_FULL_CONFIG).tiers.to_policy()
        assert policy.tier_group(50) == "Arch_full"
        assert policy.tier_group(35) == "Arch_junior"

    def test_to_layout(self, loader: ConfigLoader) -> None:
        layout = loader.load_string(_FULL_CONFIG).layout.to_layout()
        assert layout.domain_root == "domains"
        assert layout.character_root == "characters"

    def test_to_directory(self, loader: ConfigLoader) -> None:
        directory = loader.load_string(_FULL_CONFIG).identity.to_directory(current="aedil")
        assert directory.current_principal() == "aedil"
        assert directory.privilege_level("aedil") == 50
        assert directory.working_directory("aedil") == "/home/aedil"
        assert directory.player_exists("frogo")
        assert not directory.player_exists("dios")
