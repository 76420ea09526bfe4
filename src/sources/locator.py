from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from core.errors import ValidationError
from core.models import DiscoveryResult, MatchedFile
from core.paths import glob_match, matches_any
from core.text import pluralize


"""Local filesystem locator for SAST result files.

Walks the search root, keeps files matching the inclusion pattern
(case-insensitive), drops excluded files and never descends into excluded
directories. Results are capped at `max_files`.
"""

logger = logging.getLogger(__name__)


class FileLocator:
    # Finds SARIF files under a root directory.

    def __init__(
        self,
        *,
        root: Path,
        pattern: str,
        max_files: int,
        log: Optional[logging.Logger] = None,
    ) -> None:
        # abspath, not resolve(): symlinked folders must stay under root for parent folder math.
        self._root = Path(os.path.abspath(root))
        self._pattern = pattern
        self._max_files = max(1, int(max_files))
        self._log = log or logger

    @property
    def root(self) -> Path:
        return self._root

    async def find_files(
        self,
        *,
        files_to_exclude: Sequence[str] = (),
        directories_to_exclude: Sequence[str] = (),
    ) -> DiscoveryResult:
        file_patterns = tuple(files_to_exclude)
        dir_patterns = tuple(directories_to_exclude)

        self._log.info("Searching for SAST files from %s...", self._root)

        # Offload blocking filesystem IO to a thread to keep async loop responsive
        matched = await asyncio.to_thread(self._walk, file_patterns, dir_patterns)

        self._log.info(
            "%s found matching pattern '%s'.",
            pluralize(len(matched), "file", "files"),
            self._pattern,
        )
        return self._cap(matched)

    def _walk(self, file_patterns: Tuple[str, ...], dir_patterns: Tuple[str, ...]) -> List[MatchedFile]:
        if not self._root.is_dir():
            raise ValidationError(f"Not a directory: {self._root}")

        found: List[Tuple[str, MatchedFile]] = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            current = Path(dirpath)
            rel_dir = current.relative_to(self._root).as_posix()
            if rel_dir == ".":
                rel_dir = ""

            # Prune in place so os.walk never enters excluded or hidden folders
            dirnames[:] = [
                d
                for d in dirnames
                if not d.startswith(".") and not matches_any(_join(rel_dir, d), dir_patterns)
            ]

            for name in filenames:
                if name.startswith("."):
                    continue
                rel_path = _join(rel_dir, name)
                if not glob_match(rel_path, self._pattern, case_sensitive=False):
                    continue
                if matches_any(rel_path, file_patterns):
                    self._log.debug("Excluding %s", rel_path)
                    continue
                found.append((rel_path, MatchedFile(name=name, path=current / name)))

        # Sorted so the cap always drops the same files
        found.sort(key=lambda item: item[0])
        return [f for _, f in found]

    def _cap(self, matched: List[MatchedFile]) -> DiscoveryResult:
        if len(matched) <= self._max_files:
            return DiscoveryResult(files=tuple(matched), truncated=False)

        kept = matched[: self._max_files]
        skipped = matched[self._max_files :]
        self._log.info(
            "The maximum number of SAST files per scan is %d. %s detected, and %s will not be uploaded.\n"
            "The following files will not be included in the scan:\n%s",
            self._max_files,
            pluralize(len(matched), "file was", "files were"),
            pluralize(len(skipped), "file", "files"),
            "\n".join(f'  "{f.name}": "{f.path}"' for f in skipped),
        )
        return DiscoveryResult(files=tuple(kept), truncated=True)


def _join(rel_dir: str, name: str) -> str:
    return f"{rel_dir}/{name}" if rel_dir else name
