"""Tests for layerlint.source.symbol_index — declared type table."""

from __future__ import annotations

import logging

import pytest

from layerlint.source.php_parser import Declaration, ParsedFile
from layerlint.source.symbol_index import SymbolIndex, SymbolKind, build_symbol_index


class TestSymbolIndex:
    def test_lookup_declared(self) -> None:
        index = SymbolIndex()
        index.add("App\\IO\\Writer", SymbolKind.CLASS)
        assert index.lookup("App\\IO\\Writer") is SymbolKind.CLASS
        assert "App\\IO\\Writer" in index

    def test_lookup_missing(self) -> None:
        index = SymbolIndex()
        assert index.lookup("App\\IO\\helper") is None
        assert "App\\IO\\helper" not in index

    def test_leading_separator_ignored(self) -> None:
        index = SymbolIndex()
        index.add("\\App\\IO\\Writer", SymbolKind.CLASS)
        assert index.lookup("App\\IO\\Writer") is SymbolKind.CLASS
        assert index.lookup("\\App\\IO\\Writer") is SymbolKind.CLASS

    def test_case_insensitive_with_canonical_name(self) -> None:
        index = SymbolIndex()
        index.add("App\\IO\\Writer", SymbolKind.CLASS)
        assert index.resolve("app\\io\\WRITER") == ("App\\IO\\Writer", SymbolKind.CLASS)

    def test_first_kind_wins_and_conflict_recorded(self, caplog: pytest.LogCaptureFixture) -> None:
        index = SymbolIndex()
        index.add("App\\Foo", SymbolKind.INTERFACE)
        with caplog.at_level(logging.WARNING, logger="layerlint.source.symbol_index"):
            index.add("App\\Foo", SymbolKind.CLASS, origin="src/Foo.php:4")
        assert index.lookup("App\\Foo") is SymbolKind.INTERFACE
        assert len(index.conflicts) == 1
        conflict = index.conflicts[0]
        assert conflict.kept is SymbolKind.INTERFACE
        assert conflict.ignored is SymbolKind.CLASS
        assert "src/Foo.php:4" in conflict.message
        assert "App\\Foo" in caplog.text

    def test_same_kind_redeclaration_is_silent(self) -> None:
        index = SymbolIndex()
        index.add("App\\Foo", SymbolKind.CLASS)
        index.add("App\\Foo", SymbolKind.CLASS)
        assert index.conflicts == []
        assert len(index) == 1

    def test_iterates_canonical_names(self) -> None:
        index = SymbolIndex()
        index.add("App\\A", SymbolKind.CLASS)
        index.add("App\\B", SymbolKind.TRAIT)
        assert sorted(index) == ["App\\A", "App\\B"]


class TestBuildSymbolIndex:
    def test_builds_from_declarations(self) -> None:
        files = [
            ParsedFile(
                file_path="a.php",
                declarations=[
                    Declaration("App\\A", SymbolKind.CLASS, 3),
                    Declaration("App\\AInterface", SymbolKind.INTERFACE, 10),
                ],
            ),
            ParsedFile(
                file_path="b.php",
                declarations=[Declaration("App\\A", SymbolKind.TRAIT, 5)],
            ),
        ]
        index = build_symbol_index(files)
        assert len(index) == 2
        assert index.lookup("App\\AInterface") is SymbolKind.INTERFACE
        assert index.lookup("App\\A") is SymbolKind.CLASS
        assert index.conflicts[0].origin == "b.php:5"
