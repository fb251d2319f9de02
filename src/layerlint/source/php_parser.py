"""PHP parsing via tree-sitter: type declarations and a name-resolved reference stream.

This module is the parsing collaborator for the extractor.  It performs the
name-resolution pass (namespaces, ``use`` imports, relative names) so that
every emitted :class:`~layerlint.source.extractor.NameReference` is fully
qualified.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser

from layerlint.source.extractor import EnterScope, Event, ExitScope, NameReference
from layerlint.source.symbol_index import SymbolKind

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node as TSNode

logger = logging.getLogger(__name__)


class ParserUnavailableError(RuntimeError):
    """Raised when the tree-sitter PHP grammar is not installed."""


# Declaration node type -> symbol kind.  Enums behave as classes at runtime.
_DECLARATION_KINDS: dict[str, SymbolKind] = {
    "class_declaration": SymbolKind.CLASS,
    "enum_declaration": SymbolKind.CLASS,
    "interface_declaration": SymbolKind.INTERFACE,
    "trait_declaration": SymbolKind.TRAIT,
}

_NAME_TYPES = frozenset({"name", "qualified_name", "relative_name"})

# Parents in which a name always denotes a type.
_TYPE_POSITION_PARENTS = frozenset(
    {
        "base_clause",  # extends
        "class_interface_clause",  # implements
        "object_creation_expression",  # new X
        "named_type",  # parameter / return / property types
        "type_list",  # catch (A | B $e)
        "use_declaration",  # trait use inside a class body
        "attribute",  # #[X]
    }
)

# Parents whose first named child is the class being accessed (X::...).
_SCOPE_PARENTS = frozenset(
    {
        "scoped_call_expression",
        "scoped_property_access_expression",
        "class_constant_access_expression",
    }
)

_RESERVED_TYPE_NAMES = frozenset(
    {
        "self",
        "static",
        "parent",
        "array",
        "callable",
        "iterable",
        "bool",
        "float",
        "int",
        "string",
        "void",
        "mixed",
        "never",
        "null",
        "false",
        "true",
        "object",
    }
)

_USE_ITEM_RE = re.compile(r"^\\?([\w\\]+?)(?:\s+as\s+(\w+))?$", re.IGNORECASE)
_USE_KIND_RE = re.compile(r"^(function|const)\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Declaration:
    """A declared class, interface, or trait."""

    name: str  # fully qualified, no leading separator
    kind: SymbolKind
    line_number: int


@dataclass
class ParsedFile:
    """Parse result for one source file."""

    file_path: str
    declarations: list[Declaration] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    has_errors: bool = False


# ---------------------------------------------------------------------------
# Grammar loading (lazy, cached)
# ---------------------------------------------------------------------------

_LANG_CACHE: dict[str, Language | None] = {}


def get_php_language() -> Language | None:
    """Return the PHP grammar, or ``None`` if ``tree-sitter-php`` is not installed."""
    if "php" in _LANG_CACHE:
        return _LANG_CACHE["php"]

    try:
        import tree_sitter_php as tsphp
    except ImportError:
        _LANG_CACHE["php"] = None
        return None

    language = Language(tsphp.language_php())
    _LANG_CACHE["php"] = language
    return language


def clear_cache() -> None:
    """Clear the grammar cache (useful for testing)."""
    _LANG_CACHE.clear()


# ---------------------------------------------------------------------------
# Name resolution helpers
# ---------------------------------------------------------------------------


def _text(node: TSNode) -> str:
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def _join(namespace: str, name: str) -> str:
    return f"{namespace}\\{name}" if namespace else name


def _same_node(a: TSNode, b: TSNode) -> bool:
    return (a.start_byte, a.end_byte, a.type) == (b.start_byte, b.end_byte, b.type)


def parse_use_declaration(text: str) -> dict[str, str]:
    """Parse the text of a ``use`` statement into ``{alias_lower: fully_qualified}``.

    Handles aliases and group uses.  ``use function`` and ``use const``
    imports are ignored, as are malformed items.

    >>> parse_use_declaration("use App\\\\{Foo, Bar as Baz};")
    {'foo': 'App\\\\Foo', 'baz': 'App\\\\Bar'}
    """
    body = text.strip()
    if body[:3].lower() == "use":
        body = body[3:]
    body = body.strip().rstrip(";").strip()
    if _USE_KIND_RE.match(body):
        return {}

    prefix = ""
    if "{" in body:
        head, _, rest = body.partition("{")
        prefix = head.strip().strip("\\")
        body = rest.rsplit("}", 1)[0]

    imports: dict[str, str] = {}
    for raw_item in body.split(","):
        item = raw_item.strip()
        if not item or _USE_KIND_RE.match(item):
            continue
        match = _USE_ITEM_RE.match(item)
        if match is None:
            continue
        name = match.group(1).strip("\\")
        full = _join(prefix, name) if prefix else name
        alias = match.group(2) or full.rsplit("\\", 1)[-1]
        imports[alias.lower()] = full
    return imports


def resolve_name(name: str, namespace: str, imports: dict[str, str]) -> str:
    """Resolve a class name as written in *namespace* with the given *imports*."""
    name = name.strip()
    if name.startswith("\\"):
        return name[1:]
    if name.lower().startswith("namespace\\"):
        return _join(namespace, name[len("namespace\\") :])

    first, sep, rest = name.partition("\\")
    imported = imports.get(first.lower())
    if imported is not None:
        return f"{imported}{sep}{rest}" if sep else imported
    return _join(namespace, name)


def _is_type_reference(node: TSNode) -> bool:
    """Return True if the name *node* sits in a position that refers to a type."""
    parent = node.parent
    if parent is None:
        return False
    if parent.type in _TYPE_POSITION_PARENTS:
        return True
    if parent.type in _SCOPE_PARENTS:
        named = parent.named_children
        return bool(named) and _same_node(named[0], node)
    if parent.type == "binary_expression":
        operator = parent.child_by_field_name("operator")
        right = parent.child_by_field_name("right")
        return (
            operator is not None
            and _text(operator).lower() == "instanceof"
            and right is not None
            and _same_node(right, node)
        )
    return False


# ---------------------------------------------------------------------------
# Tree walker
# ---------------------------------------------------------------------------

_EXIT = object()


class _Walker:
    """Collect declarations and the scope/reference event stream of one file."""

    def __init__(self, parsed: ParsedFile) -> None:
        self.parsed = parsed
        self.namespace = ""
        self.imports: dict[str, str] = {}

    def run(self, root: TSNode) -> None:
        open_statement_namespace = False
        for child in root.children:
            if child.type != "namespace_definition":
                self.walk(child)
                continue

            name_node = child.child_by_field_name("name")
            body = child.child_by_field_name("body")
            if open_statement_namespace:
                self.parsed.events.append(ExitScope())
                open_statement_namespace = False

            self.namespace = _text(name_node).strip("\\") if name_node is not None else ""
            self.imports = {}
            self.parsed.events.append(EnterScope(self.namespace))
            if body is None:
                # `namespace X;` applies to everything up to the next namespace
                open_statement_namespace = True
                continue
            self.walk(body)
            self.parsed.events.append(ExitScope())
            self.namespace = ""
            self.imports = {}

        if open_statement_namespace:
            self.parsed.events.append(ExitScope())

    def walk(self, node: TSNode) -> None:
        stack: list[object] = [node]
        while stack:
            item = stack.pop()
            if item is _EXIT:
                self.parsed.events.append(ExitScope())
                continue
            current: TSNode = item  # type: ignore[assignment]

            if current.type == "namespace_use_declaration":
                self.imports.update(parse_use_declaration(_text(current)))
                continue

            if current.type in _NAME_TYPES:
                self._visit_name(current)
                continue

            kind = _DECLARATION_KINDS.get(current.type)
            if kind is not None:
                name_node = current.child_by_field_name("name")
                if name_node is not None:
                    full_name = _join(self.namespace, _text(name_node))
                    self.parsed.declarations.append(
                        Declaration(
                            name=full_name,
                            kind=kind,
                            line_number=current.start_point.row + 1,
                        )
                    )
                    self.parsed.events.append(EnterScope(full_name))
                    stack.append(_EXIT)

            stack.extend(reversed(current.children))

    def _visit_name(self, node: TSNode) -> None:
        text = _text(node)
        if not text or text.lower() in _RESERVED_TYPE_NAMES:
            return
        if not _is_type_reference(node):
            return
        self.parsed.events.append(
            NameReference(
                name=resolve_name(text, self.namespace, self.imports),
                line_number=node.start_point.row + 1,
            )
        )


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def parse_php(source: str | bytes, file_path: str = "<string>") -> ParsedFile:
    """Parse PHP *source* into declarations and a fully-qualified event stream.

    Raises :class:`ParserUnavailableError` when the grammar is not installed.
    Syntax errors do not abort parsing; tree-sitter recovers and
    :attr:`ParsedFile.has_errors` is set.
    """
    language = get_php_language()
    if language is None:
        msg = "tree-sitter-php is not installed; run `pip install tree-sitter-php`"
        raise ParserUnavailableError(msg)

    content = source.encode("utf-8") if isinstance(source, str) else source
    parser = Parser(language)
    tree = parser.parse(content)

    parsed = ParsedFile(file_path=file_path, has_errors=tree.root_node.has_error)
    if parsed.has_errors:
        logger.debug("%s: syntax errors, continuing with recovered tree", file_path)
    _Walker(parsed).run(tree.root_node)
    return parsed


def parse_php_file(path: Path) -> ParsedFile:
    """Read and parse a PHP file; undecodable bytes are replaced."""
    content = path.read_bytes().decode("utf-8", errors="replace")
    return parse_php(content, file_path=str(path))
