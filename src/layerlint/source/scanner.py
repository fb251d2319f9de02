"""Source file discovery."""

from __future__ import annotations

import fnmatch
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from pathlib import Path

PHP_EXTENSIONS = frozenset({".php"})

# Directories never scanned.
_SKIP_DIRS = frozenset(
    {
        ".git",
        ".idea",
        "node_modules",
        "vendor",
        "var",
        "cache",
    }
)


def _excluded(path: Path, exclude: tuple[str, ...]) -> bool:
    """Return True if any path component or the posix path matches an exclude glob."""
    posix = path.as_posix()
    for pattern in exclude:
        if fnmatch.fnmatch(posix, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in path.parts):
            return True
    return False


def _walk(directory: Path, base: Path, exclude: tuple[str, ...]) -> Iterator[Path]:
    """Yield files under *directory*, never descending into skipped or excluded dirs."""
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            if entry.name in _SKIP_DIRS or _excluded(entry.relative_to(base), exclude):
                continue
            yield from _walk(entry, base, exclude)
        else:
            yield entry


def iter_php_files(paths: Iterable[Path], *, exclude: Iterable[str] = ()) -> Iterator[Path]:
    """Yield PHP files under *paths* in sorted order.

    Files passed explicitly are yielded as-is (when they have a PHP
    extension).  Directories are scanned recursively, skipping VCS,
    dependency, and cache directories as well as anything matching an
    *exclude* glob.  Each file is yielded once.
    """
    patterns = tuple(exclude)
    seen: set[Path] = set()

    for root in paths:
        if root.is_file():
            candidates: Iterable[Path] = [root]
        elif root.is_dir():
            candidates = _walk(root, root, patterns)
        else:
            continue

        for candidate in candidates:
            if candidate.suffix.lower() not in PHP_EXTENSIONS or not candidate.is_file():
                continue
            base = root if root.is_dir() else root.parent
            if _excluded(candidate.relative_to(base), patterns):
                continue
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            yield candidate
