"""Symbol index: fully-qualified type name -> declared kind, built before extraction."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from layerlint.source.php_parser import ParsedFile

logger = logging.getLogger(__name__)


class SymbolKind(enum.Enum):
    """Kind of a declared type."""

    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


@dataclass(frozen=True)
class DuplicateSymbol:
    """Same fully-qualified name declared twice with different kinds."""

    name: str
    kept: SymbolKind
    ignored: SymbolKind
    origin: str | None = None  # where the ignored declaration came from

    @property
    def message(self) -> str:
        where = f" in {self.origin}" if self.origin else ""
        return (
            f"Symbol '{self.name}' declared as {self.ignored.value}{where} "
            f"but already indexed as {self.kept.value}; keeping {self.kept.value}"
        )


def _strip(name: str) -> str:
    return name.strip().lstrip("\\")


class SymbolIndex:
    """Mapping from every declared type name to its kind.

    Lookups are case-insensitive, as PHP type names are, and return the
    name as first declared.  The first declaration of a name wins;
    conflicting redeclarations are recorded in :attr:`conflicts` and never
    abort indexing.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, SymbolKind]] = {}
        self.conflicts: list[DuplicateSymbol] = []

    def add(self, name: str, kind: SymbolKind, *, origin: str | None = None) -> None:
        name = _strip(name)
        existing = self._entries.get(name.lower())
        if existing is None:
            self._entries[name.lower()] = (name, kind)
            return
        canonical, kept = existing
        if kept is kind:
            return
        conflict = DuplicateSymbol(name=canonical, kept=kept, ignored=kind, origin=origin)
        self.conflicts.append(conflict)
        logger.warning(conflict.message)

    def resolve(self, name: str) -> tuple[str, SymbolKind] | None:
        """Return ``(canonical_name, kind)`` or ``None`` when *name* is not declared."""
        return self._entries.get(_strip(name).lower())

    def lookup(self, name: str) -> SymbolKind | None:
        entry = self.resolve(name)
        return entry[1] if entry is not None else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.resolve(name) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (canonical for canonical, _kind in self._entries.values())


def build_symbol_index(files: Iterable[ParsedFile]) -> SymbolIndex:
    """Index every type declaration across *files*."""
    index = SymbolIndex()
    for parsed in files:
        for decl in parsed.declarations:
            index.add(decl.name, decl.kind, origin=f"{parsed.file_path}:{decl.line_number}")
    logger.debug("Indexed %d symbols (%d conflicts)", len(index), len(index.conflicts))
    return index
