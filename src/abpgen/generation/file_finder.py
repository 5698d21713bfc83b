"""Locate files below a solution directory with gitignore-style patterns.

Patterns are matched with :mod:`pathspec` using gitignore semantics, so the
values users pass to ``--exclude`` behave the way they do in a
``.gitignore`` file: ``*.Blazor`` prunes every directory of that name,
``**/test/**`` prunes every ``test`` sub-tree. Windows-style separators in
patterns are normalised to ``/``.

Build output and tool directories (``bin``, ``obj``, ``.git``,
``node_modules`` ...) are always pruned.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

import pathspec

from abpgen.exceptions import ProjectNotFoundError

ALWAYS_SKIP = frozenset({
    "bin",
    "obj",
    ".git",
    ".vs",
    ".idea",
    "node_modules",
    "__pycache__",
})


def _compile(patterns: Iterable[str]) -> Optional[pathspec.PathSpec]:
    lines = [p.replace("\\", "/") for p in patterns if p and p.strip()]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitignore", lines)


def find_files(
    root: str | Path,
    patterns: list[str],
    exclude_patterns: Optional[list[str]] = None,
) -> list[Path]:
    """Walk *root* and return every file matching *patterns*, sorted.

    Args:
        root: Directory to search.
        patterns: Gitignore-style include patterns (``["**/*.cs"]``).
        exclude_patterns: Gitignore-style patterns for files and directories
            to leave out. Matching directories are pruned without descending.

    Returns:
        Absolute paths of the matching files. Empty when *root* is not a
        directory.
    """
    base = Path(root)
    if not base.is_dir():
        return []

    include_spec = _compile(patterns)
    if include_spec is None:
        return []
    exclude_spec = _compile(exclude_patterns or [])

    matches: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(str(base)):
        rel_dir = os.path.relpath(dirpath, str(base))
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")

        dirnames[:] = sorted(
            d for d in dirnames
            if d not in ALWAYS_SKIP
            and not (exclude_spec and exclude_spec.match_file(
                (f"{rel_dir}/{d}" if rel_dir else d) + "/",
            ))
        )

        for fname in filenames:
            rel_path = f"{rel_dir}/{fname}" if rel_dir else fname
            if not include_spec.match_file(rel_path):
                continue
            if exclude_spec and exclude_spec.match_file(rel_path):
                continue
            matches.append((Path(dirpath) / fname).resolve())

    matches.sort()
    return matches


def find_file(
    root: str | Path,
    pattern: str,
    exclude_patterns: Optional[list[str]] = None,
) -> Path:
    """Return the first file below *root* matching *pattern*.

    When several files match, the shallowest one wins (then alphabetical
    order), so ``src/Books/Book.cs`` is preferred over a copy in a test
    project nested deeper.

    Raises:
        ProjectNotFoundError: If nothing matches.
    """
    matches = find_files(root, [pattern], exclude_patterns)
    if not matches:
        raise ProjectNotFoundError(f"Cannot find a file matching '{pattern}' under '{root}'")
    matches.sort(key=lambda p: (len(p.parts), str(p)))
    return matches[0]
