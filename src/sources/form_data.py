"""Multipart form preparation for SAST result uploads.

Each matched file becomes one `file{n}` part paired with a `parentFolder{n}`
field holding its folder relative to the search root. The first pair is
unsuffixed; later pairs carry their zero-based index.

File handles are opened when the form is entered and closed when it exits,
so httpx can stream the contents without buffering them in memory.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Sequence, Tuple

from core.errors import FileReadError
from core.models import MatchedFile
from core.paths import parent_folder

FileField = Tuple[str, Tuple[str, BinaryIO, str]]

CONTENT_TYPE = "application/json"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadPart:
    file: MatchedFile
    parent_folder: str
    index: int

    @property
    def suffix(self) -> str:
        return str(self.index) if self.index > 0 else ""

    @property
    def file_field(self) -> str:
        return f"file{self.suffix}"

    @property
    def folder_field(self) -> str:
        return f"parentFolder{self.suffix}"


class UploadForm:
    """Scoped set of upload parts; use as a context manager."""

    def __init__(self, parts: Sequence[UploadPart]) -> None:
        self._parts = tuple(parts)
        self._stack: Optional[ExitStack] = None
        self._handles: List[BinaryIO] = []

    @property
    def parts(self) -> Tuple[UploadPart, ...]:
        return self._parts

    def __enter__(self) -> "UploadForm":
        stack = ExitStack()
        try:
            for part in self._parts:
                self._handles.append(stack.enter_context(_open(part.file)))
        except BaseException:
            stack.close()
            self._handles.clear()
            raise
        self._stack = stack
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._stack is not None:
            self._stack.close()
            self._stack = None
        self._handles.clear()

    def data(self) -> Dict[str, str]:
        return {part.folder_field: part.parent_folder for part in self._parts}

    def files(self) -> List[FileField]:
        if self._stack is None:
            raise RuntimeError("UploadForm must be entered before reading files")
        return [
            (part.file_field, (part.file.name, handle, CONTENT_TYPE))
            for part, handle in zip(self._parts, self._handles)
        ]


def prepare_upload(files: Sequence[MatchedFile], *, root: Path) -> UploadForm:
    parts = [
        UploadPart(file=f, parent_folder=parent_folder(f.path, root), index=i)
        for i, f in enumerate(files)
    ]
    for part in parts:
        logger.debug("Prepared %s (parent folder '%s')", part.file.path, part.parent_folder)
    return UploadForm(parts)


def _open(file: MatchedFile) -> BinaryIO:
    try:
        return open(file.path, "rb")
    except OSError as e:
        raise FileReadError(f"Unable to read {file.path}: {e}") from e
