"""Persistence of the access database.

A store loads and saves a whole :class:`AuthorizationDatabase`.  The
persisted document is a YAML mapping::

    version: "1"
    access_map:
      "*": {"*": 1, data: -1, players: {".": 1, "*": -1}}
      aedil: {d: {Elandar: 5}, "?": [Arch_docs]}

Saving must either succeed or raise :class:`PersistenceError`; a silent
failure would let the in-memory and durable state drift apart.

Example
-------
>>> store = YamlFileStore(Path("access_db.yaml"))
>>> db = store.load() or AuthorizationDatabase.seeded()
>>> store.save(db)
"""
from __future__ import annotations

import copy
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

import yaml

from accesstree.principals.classification import PrincipalRules
from accesstree.principals.database import AuthorizationDatabase

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1"


class PersistenceError(RuntimeError):
    """Raised when the access database could not be saved."""


class StoreFormatError(ValueError):
    """Raised when a persisted document cannot be turned into trees."""


class Store(Protocol):
    def load(self) -> AuthorizationDatabase | None: ...

    def save(self, database: AuthorizationDatabase) -> None: ...


# ---------------------------------------------------------------------------
# Document helpers
# ---------------------------------------------------------------------------


def database_to_document(database: AuthorizationDatabase) -> dict[str, object]:
    return {"version": DOCUMENT_VERSION, "access_map": database.snapshot()}


def database_from_document(
    document: object,
    rules: PrincipalRules | None = None,
    source: str = "<document>",
) -> AuthorizationDatabase:
    """Parse a persisted document.

    Raises
    ------
    StoreFormatError
        If the document is not a mapping with a valid ``access_map``.
    """
    if not isinstance(document, dict):
        raise StoreFormatError(f"{source}: expected a mapping at top level")
    version = str(document.get("version", DOCUMENT_VERSION))
    if version != DOCUMENT_VERSION:
        raise StoreFormatError(f"{source}: unsupported document version {version!r}")
    access_map = document.get("access_map") or {}
    try:
        return AuthorizationDatabase.from_raw(access_map, rules)
    except ValueError as exc:
        raise StoreFormatError(f"{source}: {exc}") from exc


# ---------------------------------------------------------------------------
# YamlFileStore
# ---------------------------------------------------------------------------


class YamlFileStore:
    """Stores the database as one YAML file.

    Saves go to a temporary file in the same directory which then
    atomically replaces the target.

    Parameters
    ----------
    path:
        Location of the YAML document.
    rules:
        Principal rules attached to loaded databases.
    """

    def __init__(self, path: Path | str, rules: PrincipalRules | None = None) -> None:
        self._path = Path(path)
        self._rules = rules

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AuthorizationDatabase | None:
        """Load the database, or return ``None`` if the file does not exist.

        Raises
        ------
        StoreFormatError
            If the file is not valid YAML or not a valid document.
        """
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                document = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise StoreFormatError(f"{self._path}: invalid YAML: {exc}") from exc
        database = database_from_document(document or {}, self._rules, str(self._path))
        logger.info("Loaded access database from %s (%d principals)", self._path, len(database))
        return database

    def save(self, database: AuthorizationDatabase) -> None:
        """Write the database to disk.

        Raises
        ------
        PersistenceError
            If the document could not be written.
        """
        document = database_to_document(database)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump(document, fh, sort_keys=False, allow_unicode=True)
            os.replace(tmp_name, self._path)
            tmp_name = None
        except (OSError, yaml.YAMLError) as exc:
            logger.critical("Failed to save the access database to %s: %s", self._path, exc)
            raise PersistenceError(f"Failed to save the access database to {self._path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.debug("Saved access database to %s", self._path)


# ---------------------------------------------------------------------------
# InMemoryStore
# ---------------------------------------------------------------------------


class InMemoryStore:
    """Keeps the last saved document in memory.

    Parameters
    ----------
    document:
        Initial persisted document, if any.
    fail_saves:
        When True every :meth:`save` raises :class:`PersistenceError`.
    """

    def __init__(
        self,
        document: dict[str, object] | None = None,
        fail_saves: bool = False,
        rules: PrincipalRules | None = None,
    ) -> None:
        self._document = copy.deepcopy(document) if document is not None else None
        self.fail_saves = fail_saves
        self.save_count = 0
        self._rules = rules

    @property
    def document(self) -> dict[str, object] | None:
        return copy.deepcopy(self._document)

    def load(self) -> AuthorizationDatabase | None:
        if self._document is None:
            return None
        return database_from_document(copy.deepcopy(self._document), self._rules, "<memory>")

    def save(self, database: AuthorizationDatabase) -> None:
        if self.fail_saves:
            logger.critical("Failed to save the access database: in-memory store is failing saves")
            raise PersistenceError("Failed to save the access database: store is failing saves")
        self._document = database_to_document(database)
        self.save_count += 1


__all__ = [
    "DOCUMENT_VERSION",
    "InMemoryStore",
    "PersistenceError",
    "Store",
    "StoreFormatError",
    "YamlFileStore",
    "database_from_document",
    "database_to_document",
]
