from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Tuple

"""
Path utilities used across the project.

Provides a component-wise '**' supporting glob matcher used by the file
locator and the root-relative folder computation used by the upload form.
"""


def split_posix(p: str) -> Tuple[str, ...]:
    """Split a POSIX path into non-empty segments."""
    s = (p or "").strip().replace("\\", "/").strip("/")
    if not s:
        return tuple()
    return tuple(seg for seg in s.split("/") if seg)


def glob_match(rel_path: str, pattern: str, *, case_sensitive: bool = True) -> bool:
    """Match a relative path against a glob pattern with '**' support."""
    parts = split_posix(rel_path)

    pat = (pattern or "").strip().replace("\\", "/").strip("/")
    if not pat:
        return False
    pats = split_posix(pat)

    if not case_sensitive:
        parts = tuple(p.lower() for p in parts)
        pats = tuple(p.lower() for p in pats)

    def rec(i: int, j: int) -> bool:
        if j == len(pats):
            return i == len(parts)

        token = pats[j]
        if token == "**":
            return rec(i, j + 1) or (i < len(parts) and rec(i + 1, j))

        return (
            i < len(parts)
            and fnmatch.fnmatchcase(parts[i], token)
            and rec(i + 1, j + 1)
        )

    return rec(0, 0)


def matches_any(rel_path: str, patterns: Tuple[str, ...]) -> bool:
    return any(glob_match(rel_path, p) for p in patterns)


def parent_folder(file_path: Path, root: Path) -> str:
    """Folder of `file_path` relative to `root`, joined with the OS separator.

    Returns '' when the file sits directly in `root`.
    """
    try:
        parts = file_path.relative_to(root).parts
    except ValueError:
        # Not under root; fall back to stripping the root prefix textually.
        parts = split_posix(str(file_path).replace(str(root), "", 1))

    if len(parts) < 2:
        return ""
    return os.sep.join(parts[:-1])
