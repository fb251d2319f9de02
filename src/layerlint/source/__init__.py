"""Source domain: PHP parsing, file discovery, symbol index, reference extraction."""

from layerlint.source.extractor import (
    EnterScope,
    ExitScope,
    ExtractionError,
    NameReference,
    ReferenceExtractor,
    SymbolReference,
    extract_references,
)
from layerlint.source.php_parser import (
    Declaration,
    ParsedFile,
    ParserUnavailableError,
    parse_php,
    parse_php_file,
)
from layerlint.source.scanner import iter_php_files
from layerlint.source.symbol_index import (
    DuplicateSymbol,
    SymbolIndex,
    SymbolKind,
    build_symbol_index,
)

__all__ = [
    "Declaration",
    "DuplicateSymbol",
    "EnterScope",
    "ExitScope",
    "ExtractionError",
    "NameReference",
    "ParsedFile",
    "ParserUnavailableError",
    "ReferenceExtractor",
    "SymbolIndex",
    "SymbolKind",
    "SymbolReference",
    "build_symbol_index",
    "extract_references",
    "iter_php_files",
    "parse_php",
    "parse_php_file",
]
