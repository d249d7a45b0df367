"""Path resolution into canonical segments.

PathResolver turns a textual path into the ordered list of segments the
evaluator and mutator walk.  Three forms are accepted:

- ``~`` forms expand to a home directory.  ``~Name`` (upper-case) is a
  group's domain home ``/d/Name``, ``~name`` is a player home
  ``/players/name``, and a bare ``~`` is the acting principal's own home.
  The two system principals (``root`` and ``backbone``) have no home, so
  for them ``~`` reduces to the path root.
- Absolute paths are used as-is, with redundant leading slashes collapsed.
- Anything else is joined to the working directory.

Segments are then collapsed in a single right-to-left pass.  Empty segments
are dropped, and each ``..`` skips the nearest retained segment to its left.
``.`` is dropped too, unless *allow_dots* is set.  That mode exists only so
the mutator can address a branch's own ``.`` modifier.

Example
-------
>>> resolver = PathResolver()
>>> resolver.resolve("/players/frogo/../aedil//com")
['players', 'aedil', 'com']
>>> resolver.resolve("~", acting="frogo")
['players', 'frogo']
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from accesstree.principals.sources import IdentityProvider

_ANONYMOUS = "nobody"
_HOMELESS: frozenset[str] = frozenset(["root", "backbone"])


class InvalidPathError(ValueError):
    """Raised when a path cannot be resolved (empty or malformed input)."""

    def __init__(self, path: object, reason: str = "path must be a non-empty string") -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class PathResolver:
    """Normalises textual paths into canonical segment lists.

    Parameters
    ----------
    identity:
        Optional IdentityProvider consulted for the acting principal and
        its working directory when the caller does not pass them.
    domain_root:
        First segment of group homes (default ``"d"``).
    player_root:
        First segment of player homes (default ``"players"``).
    """

    def __init__(
        self,
        identity: IdentityProvider | None = None,
        domain_root: str = "d",
        player_root: str = "players",
    ) -> None:
        self._identity = identity
        self._domain_root = domain_root
        self._player_root = player_root

    def resolve(
        self,
        path: str,
        acting: str | None = None,
        cwd: str | None = None,
        allow_dots: bool = False,
    ) -> list[str]:
        """Resolve *path* into its canonical segments.

        Parameters
        ----------
        path:
            The path to resolve.
        acting:
            Principal the path is resolved for (home expansion and default
            working directory).  Falls back to the IdentityProvider's
            current principal, then to ``"nobody"``.
        cwd:
            Working directory for relative paths.  Falls back to the
            acting principal's current directory.
        allow_dots:
            Keep ``.`` segments instead of dropping them.

        Returns
        -------
        list[str]
            Segments in order; ``[]`` for the root.

        Raises
        ------
        InvalidPathError
            If *path* is empty or not a string.
        """
        if not isinstance(path, str) or not path:
            raise InvalidPathError(path)

        has_acting = acting is not None
        if not has_acting and self._identity is not None:
            acting = self._identity.current_principal()
            has_acting = acting is not None
        acting = acting or _ANONYMOUS

        joined = self._join(path, acting, cwd, has_acting)
        return collapse_segments(joined.split("/"), allow_dots=allow_dots)

    def resolve_str(
        self,
        path: str,
        acting: str | None = None,
        cwd: str | None = None,
    ) -> str:
        """Resolve *path* and return it as an absolute ``/``-joined string."""
        return "/" + "/".join(self.resolve(path, acting=acting, cwd=cwd))

    def home_of(self, principal: str) -> str:
        """Return the home directory of *principal* as an absolute path."""
        if principal[:1].isupper():
            return f"/{self._domain_root}/{principal}"
        return f"/{self._player_root}/{principal}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _join(self, path: str, acting: str, cwd: str | None, has_acting: bool) -> str:
        first = path[0]
        if first == "~":
            if len(path) > 1 and path[1] != "/":
                name = path[1:]
                if "A" <= name[0] <= "Z":
                    return f"/{self._domain_root}/{name}"
                return f"/{self._player_root}/{name}"
            if acting not in _HOMELESS:
                return f"/{self._player_root}/{acting}{path[1:]}"
            return path[2:]
        if first == "/":
            return "/" + path.lstrip("/")

        if cwd == "/":
            return "/" + path
        if cwd is None:
            cwd = ""
            if self._identity is not None and has_acting:
                cwd = self._identity.working_directory(acting) or ""
        return f"{cwd}/{path}"


def collapse_segments(parts: list[str], allow_dots: bool = False) -> list[str]:
    """Collapse raw ``/``-split parts into canonical segments.

    Works right to left so that a ``..`` skips the nearest retained segment
    on its left.  ``..`` segments with nothing left to skip are discarded.
    """
    kept: list[str] = []
    skip = 0
    for part in reversed(parts):
        if part == "":
            continue
        if part == "..":
            skip += 1
            continue
        if part == "." and not allow_dots:
            continue
        if skip:
            skip -= 1
            continue
        kept.append(part)
    kept.reverse()
    return kept


__all__ = [
    "InvalidPathError",
    "PathResolver",
    "collapse_segments",
]
