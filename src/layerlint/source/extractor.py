"""Reference extractor: turn a namespace-resolved event stream into symbol references.

The stream is produced by a parser that has already resolved imported and
relative names.  Every :class:`NameReference` must therefore carry a
fully-qualified name; the extractor never resolves names itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from layerlint.source.php_parser import ParsedFile
    from layerlint.source.symbol_index import SymbolIndex, SymbolKind

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised on a malformed event stream (e.g. exiting a scope never entered)."""


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnterScope:
    """Entering a namespace or type declaration named *name* (fully qualified)."""

    name: str


@dataclass(frozen=True)
class ExitScope:
    """Leaving the innermost scope."""


@dataclass(frozen=True)
class NameReference:
    """A fully-qualified name used in a type-reference position."""

    name: str
    line_number: int | None = None


Event = EnterScope | ExitScope | NameReference


@dataclass(frozen=True)
class SymbolReference:
    """One occurrence of a reference to a declared class, interface, or trait."""

    name: str  # fully-qualified referenced name
    kind: SymbolKind
    namespace: str  # fully-qualified context the reference occurred in
    file_path: str | None = None
    line_number: int | None = None


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


class ReferenceExtractor:
    """Track the active scope and emit references found in the symbol index."""

    def __init__(self, index: SymbolIndex) -> None:
        self._index = index

    def extract(
        self, events: Iterable[Event], *, file_path: str | None = None
    ) -> list[SymbolReference]:
        scopes: list[str] = []
        references: list[SymbolReference] = []

        for event in events:
            if isinstance(event, EnterScope):
                scopes.append(event.name.strip("\\"))
            elif isinstance(event, ExitScope):
                if not scopes:
                    msg = f"{file_path or '<events>'}: scope exit without matching enter"
                    raise ExtractionError(msg)
                scopes.pop()
            else:
                entry = self._index.resolve(event.name)
                if entry is None:
                    # functions, constants, external or undeclared types
                    continue
                name, kind = entry
                references.append(
                    SymbolReference(
                        name=name,
                        kind=kind,
                        namespace=scopes[-1] if scopes else "",
                        file_path=file_path,
                        line_number=event.line_number,
                    )
                )

        return references


def extract_references(files: Iterable[ParsedFile], index: SymbolIndex) -> list[SymbolReference]:
    """Extract references from every parsed file against a complete *index*."""
    extractor = ReferenceExtractor(index)
    references: list[SymbolReference] = []
    for parsed in files:
        found = extractor.extract(parsed.events, file_path=parsed.file_path)
        logger.debug("%s: %d references", parsed.file_path, len(found))
        references.extend(found)
    return references
