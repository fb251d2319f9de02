"""Tests for layerlint.source.extractor — scope tracking and reference emission."""

from __future__ import annotations

import pytest

from layerlint.source.extractor import (
    EnterScope,
    ExitScope,
    ExtractionError,
    NameReference,
    ReferenceExtractor,
    extract_references,
)
from layerlint.source.php_parser import ParsedFile
from layerlint.source.symbol_index import SymbolIndex, SymbolKind


@pytest.fixture()
def index() -> SymbolIndex:
    idx = SymbolIndex()
    idx.add("App\\IO\\Writer", SymbolKind.CLASS)
    idx.add("App\\IO\\WriterInterface", SymbolKind.INTERFACE)
    idx.add("App\\Shared\\Loggable", SymbolKind.TRAIT)
    return idx


class TestReferenceExtractor:
    def test_emits_indexed_names_with_kind(self, index: SymbolIndex) -> None:
        events = [
            EnterScope("App\\Logic"),
            NameReference("App\\IO\\Writer", 4),
            NameReference("App\\IO\\WriterInterface", 5),
            NameReference("App\\Shared\\Loggable", 6),
            ExitScope(),
        ]
        refs = ReferenceExtractor(index).extract(events, file_path="a.php")
        assert [(r.name, r.kind) for r in refs] == [
            ("App\\IO\\Writer", SymbolKind.CLASS),
            ("App\\IO\\WriterInterface", SymbolKind.INTERFACE),
            ("App\\Shared\\Loggable", SymbolKind.TRAIT),
        ]
        assert all(r.namespace == "App\\Logic" for r in refs)
        assert refs[0].file_path == "a.php"
        assert refs[0].line_number == 4

    def test_unknown_names_dropped(self, index: SymbolIndex) -> None:
        events = [
            EnterScope("App\\Logic"),
            NameReference("App\\IO\\helper"),
            NameReference("Vendor\\Client"),
            ExitScope(),
        ]
        assert ReferenceExtractor(index).extract(events) == []

    def test_innermost_scope_is_context(self, index: SymbolIndex) -> None:
        events = [
            EnterScope("App\\Logic"),
            NameReference("App\\IO\\Writer", 1),
            EnterScope("App\\Logic\\Service"),
            NameReference("App\\IO\\Writer", 2),
            ExitScope(),
            NameReference("App\\IO\\Writer", 3),
            ExitScope(),
            NameReference("App\\IO\\Writer", 4),
        ]
        refs = ReferenceExtractor(index).extract(events)
        assert [r.namespace for r in refs] == [
            "App\\Logic",
            "App\\Logic\\Service",
            "App\\Logic",
            "",
        ]

    def test_leading_separator_stripped(self, index: SymbolIndex) -> None:
        refs = ReferenceExtractor(index).extract(
            [EnterScope("\\App\\Logic"), NameReference("\\App\\IO\\Writer")]
        )
        assert refs[0].name == "App\\IO\\Writer"
        assert refs[0].namespace == "App\\Logic"

    def test_canonical_case_used(self, index: SymbolIndex) -> None:
        refs = ReferenceExtractor(index).extract([NameReference("app\\io\\writer")])
        assert refs[0].name == "App\\IO\\Writer"

    def test_unbalanced_exit_raises(self, index: SymbolIndex) -> None:
        with pytest.raises(ExtractionError, match="x.php"):
            ReferenceExtractor(index).extract([ExitScope()], file_path="x.php")


class TestExtractReferences:
    def test_flattens_files(self, index: SymbolIndex) -> None:
        files = [
            ParsedFile(
                file_path="a.php",
                events=[EnterScope("App\\Logic"), NameReference("App\\IO\\Writer"), ExitScope()],
            ),
            ParsedFile(
                file_path="b.php",
                events=[EnterScope("App\\Http"), NameReference("App\\IO\\Writer"), ExitScope()],
            ),
        ]
        refs = extract_references(files, index)
        assert [(r.file_path, r.namespace) for r in refs] == [
            ("a.php", "App\\Logic"),
            ("b.php", "App\\Http"),
        ]
