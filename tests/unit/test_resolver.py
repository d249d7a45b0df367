"""Tests for PathResolver and segment collapsing."""
from __future__ import annotations

import pytest

from accesstree.principals.sources import StaticDirectory
from accesstree.tree.resolver import InvalidPathError, PathResolver, collapse_segments


@pytest.fixture()
def resolver() -> PathResolver:
    return PathResolver()


@pytest.fixture()
def directory() -> StaticDirectory:
    directory = StaticDirectory(current="frogo")
    directory.add_player("frogo", level=1, cwd="/players/frogo/src")
    return directory


# ---------------------------------------------------------------------------
# Absolute paths
# ---------------------------------------------------------------------------


class TestAbsolutePaths:
    def test_root_resolves_to_no_segments(self, resolver: PathResolver) -> None:
        assert resolver.resolve("/") == []
        assert resolver.resolve("///") == []

    def test_redundant_slashes_are_collapsed(self, resolver: PathResolver) -> None:
        assert resolver.resolve("//players//aedil/") == ["players", "aedil"]

    def test_dot_dot_skips_the_segment_to_its_left(self, resolver: PathResolver) -> None:
        assert resolver.resolve("/players/frogo/../aedil//com") == ["players", "aedil", "com"]
        assert resolver.resolve("/a/b/../../c") == ["c"]

    def test_dot_dot_above_root_is_discarded(self, resolver: PathResolver) -> None:
        assert resolver.resolve("/../../data") == ["data"]

    def test_single_dots_are_dropped_by_default(self, resolver: PathResolver) -> None:
        assert resolver.resolve("/players/./frogo/.") == ["players", "frogo"]

    def test_allow_dots_keeps_single_dots(self, resolver: PathResolver) -> None:
        assert resolver.resolve("/players/.", allow_dots=True) == ["players", "."]


# ---------------------------------------------------------------------------
# Home expansion
# ---------------------------------------------------------------------------


class TestHomeExpansion:
    def test_tilde_name_is_a_player_home(self, resolver: PathResolver) -> None:
        assert resolver.resolve("~aedil") == ["players", "aedil"]

    def test_tilde_capitalised_name_is_a_group_home(self, resolver: PathResolver) -> None:
        assert resolver.resolve("~Elandar") == ["d", "Elandar"]

    def test_bare_tilde_is_the_acting_home(self, resolver: PathResolver) -> None:
        assert resolver.resolve("~", acting="frogo") == ["players", "frogo"]
        assert resolver.resolve("~/workroom.c", acting="frogo") == ["players", "frogo", "workroom.c"]

    def test_system_principals_have_no_home(self, resolver: PathResolver) -> None:
        assert resolver.resolve("~", acting="root") == []
        assert resolver.resolve("~/data", acting="backbone") == ["data"]

    def test_anonymous_home(self, resolver: PathResolver) -> None:
        assert resolver.resolve("~") == ["players", "nobody"]

    def test_custom_roots(self) -> None:
        resolver = PathResolver(domain_root="domains", player_root="home")
        assert resolver.resolve("~Elandar") == ["domains", "Elandar"]
        assert resolver.resolve("~", acting="frogo") == ["home", "frogo"]
        assert resolver.home_of("frogo") == "/home/frogo"
        assert resolver.home_of("Elandar") == "/domains/Elandar"


# ---------------------------------------------------------------------------
# Relative paths
# ---------------------------------------------------------------------------


class TestRelativePaths:
    def test_explicit_cwd(self, resolver: PathResolver) -> None:
        assert resolver.resolve("castle.c", cwd="/d/Elandar") == ["d", "Elandar", "castle.c"]
        assert resolver.resolve("../x", cwd="/d/Elandar") == ["d", "x"]

    def test_root_cwd(self, resolver: PathResolver) -> None:
        assert resolver.resolve("tmp", cwd="/") == ["tmp"]

    def test_cwd_from_identity(self, directory: StaticDirectory) -> None:
        resolver = PathResolver(directory)
        assert resolver.resolve("main.c") == ["players", "frogo", "src", "main.c"]
        assert resolver.resolve("main.c", acting="frogo") == ["players", "frogo", "src", "main.c"]

    def test_no_cwd_means_root(self, resolver: PathResolver) -> None:
        assert resolver.resolve("data/x") == ["data", "x"]

    def test_resolve_str(self, resolver: PathResolver) -> None:
        assert resolver.resolve_str("/a//b/../c") == "/a/c"
        assert resolver.resolve_str("/") == "/"


# ---------------------------------------------------------------------------
# Errors and helpers
# ---------------------------------------------------------------------------


class TestInvalidPaths:
    @pytest.mark.parametrize("path", ["", None, 42])
    def test_invalid_input_raises(self, resolver: PathResolver, path: object) -> None:
        with pytest.raises(InvalidPathError) as exc_info:
            resolver.resolve(path)  # type: ignore[arg-type]
        assert exc_info.value.path == path

    def test_invalid_path_error_is_a_value_error(self) -> None:
        assert issubclass(InvalidPathError, ValueError)


class TestCollapseSegments:
    def test_collapse(self) -> None:
        assert collapse_segments(["", "a", "", "b", "..", "c"]) == ["a", "c"]

    def test_consecutive_dot_dots(self) -> None:
        assert collapse_segments(["a", "b", "c", "..", ".."]) == ["a"]
