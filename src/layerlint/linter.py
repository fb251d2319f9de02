"""Linter orchestrator: load the architecture, index and extract sources, evaluate, format."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import yaml

from layerlint.architecture.component import ArchitectureError
from layerlint.architecture.config import load_architecture
from layerlint.source.extractor import ExtractionError, extract_references
from layerlint.source.php_parser import ParserUnavailableError, parse_php_file
from layerlint.source.scanner import iter_php_files
from layerlint.source.symbol_index import build_symbol_index

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from layerlint.architecture.rule_engine import Violation
    from layerlint.source.php_parser import ParsedFile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LintError(Exception):
    """Raised when lint encounters a configuration error."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class LintResult:
    """Result of a lint run."""

    violations: list[Violation] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    rules_evaluated: int = 0
    files_scanned: int = 0
    symbols_indexed: int = 0
    references_found: int = 0
    elapsed_ms: float = 0.0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _parse_all(files: Sequence[Path]) -> list[ParsedFile]:
    parsed_files: list[ParsedFile] = []
    for path in files:
        try:
            parsed_files.append(parse_php_file(path))
        except OSError as exc:
            logger.warning("Cannot read file %s: %s", path, exc)
            continue
        logger.debug("Parsed %s", path)
    return parsed_files


def lint(config_path: Path, *, paths: Sequence[Path] | None = None) -> LintResult:
    """Run the lint process: load config, index, extract, evaluate.

    Parameters
    ----------
    config_path:
        Path to the ``layerlint.yml`` architecture definition.
    paths:
        Optional source paths overriding the ``paths`` from the config file.

    Returns
    -------
    LintResult
        Summary with violations, warnings, counts, and timing.

    Raises
    ------
    LintError
        When the configuration is missing or invalid, or the PHP grammar is
        not installed.
    """
    start = time.monotonic()

    if not config_path.is_file():
        msg = f"Configuration file not found: {config_path}"
        raise LintError(msg)

    try:
        config = load_architecture(config_path)
    except (ValueError, ArchitectureError, yaml.YAMLError) as exc:
        msg = f"Invalid architecture configuration: {exc}"
        raise LintError(msg) from exc

    scan_paths = list(paths) if paths else config.paths
    files = list(iter_php_files(scan_paths, exclude=config.exclude))
    logger.info("Scanning %d PHP files", len(files))

    try:
        parsed_files = _parse_all(files)
    except ParserUnavailableError as exc:
        raise LintError(str(exc)) from exc

    # The index must cover every file before any reference is extracted.
    index = build_symbol_index(parsed_files)
    try:
        references = extract_references(parsed_files, index)
    except ExtractionError as exc:
        msg = f"Malformed source structure: {exc}"
        raise LintError(msg) from exc

    evaluation = config.architecture.evaluate(references, index=index)
    elapsed = (time.monotonic() - start) * 1000

    return LintResult(
        violations=evaluation.violations,
        warnings=evaluation.warnings,
        rules_evaluated=len(config.architecture.rules),
        files_scanned=len(parsed_files),
        symbols_indexed=len(index),
        references_found=len(references),
        elapsed_ms=elapsed,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _location(v: Violation) -> str | None:
    if v.reference.file_path is None:
        return None
    loc = v.reference.file_path
    if v.reference.line_number is not None:
        loc += f":{v.reference.line_number}"
    return loc


def format_rich(result: LintResult) -> str:
    """Format a LintResult as human-readable text.

    Example output with violations::

        Rules: 2 loaded
        Files: 25 scanned, 140 symbols indexed, 312 references

        x Logic -> IO (forbid)
          Logic must not depend on IO
          src/Logic/Foo.php:12 -> 'App\\Logic\\Foo' (Logic) references class ...

        1 violations found (2 rules evaluated, 0.3s)
    """
    lines: list[str] = []

    lines.append(f"Rules: {result.rules_evaluated} loaded")
    lines.append(
        f"Files: {result.files_scanned} scanned, {result.symbols_indexed} symbols indexed, "
        f"{result.references_found} references"
    )
    lines.append("")

    for warning in result.warnings:
        lines.append(f"⚠ {warning}")
    if result.warnings:
        lines.append("")

    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"

    if result.violations:
        for v in result.violations:
            lines.append(f"✗ {v.source_name} → {v.target_name} ({v.rule_type})")
            lines.append(f"  {v.rule.description}")
            loc = _location(v)
            if loc is not None:
                lines.append(f"  {loc} → {v.message}")
            else:
                lines.append(f"  {v.message}")
            lines.append("")

        count = len(result.violations)
        lines.append(
            f"{count} violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )
    else:
        lines.append(
            f"✓ No violations found ({result.rules_evaluated} rules evaluated, {elapsed_str})"
        )

    return "\n".join(lines)


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON.

    Returns a JSON string with ``violations`` and ``warnings`` arrays and a
    ``summary`` object.
    """
    violations_list: list[dict[str, object]] = []
    for v in result.violations:
        violations_list.append(
            {
                "rule_type": v.rule_type,
                "rule": v.rule.description,
                "source": v.source_name,
                "target": v.target_name,
                "referenced_name": v.reference.name,
                "referenced_kind": v.reference.kind.value,
                "namespace": v.reference.namespace,
                "file_path": v.reference.file_path,
                "line_number": v.reference.line_number,
                "message": v.message,
            }
        )

    output: dict[str, object] = {
        "violations": violations_list,
        "warnings": list(result.warnings),
        "summary": {
            "rules_evaluated": result.rules_evaluated,
            "violations_count": len(result.violations),
            "files_scanned": result.files_scanned,
            "symbols_indexed": result.symbols_indexed,
            "references_found": result.references_found,
            "elapsed_ms": result.elapsed_ms,
        },
    }

    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """Format a LintResult as machine-readable one-line-per-violation output.

    Format: ``rule_type:source:target:file_path:line:referenced_name``

    Missing file paths and line numbers are empty strings.  Returns an empty
    string when there are no violations.
    """
    if not result.violations:
        return ""

    lines: list[str] = []
    for v in result.violations:
        file_path = v.reference.file_path or ""
        line_number = str(v.reference.line_number) if v.reference.line_number is not None else ""
        lines.append(
            f"{v.rule_type}:{v.source_name}:{v.target_name}:"
            f"{file_path}:{line_number}:{v.reference.name}"
        )

    return "\n".join(lines)
