"""File walker: enumerates project files and loads content where needed."""
from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from codeanalyzer.errors import AnalysisCancelledError

from .models import ProjectFile

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: list[str] = [".cs", ".razor", ".cshtml", ".json", ".config", ".xml"]

# Directories never descended into
DEFAULT_SKIP_DIRS: set[str] = {".git", ".vs", ".idea", "bin", "obj", "node_modules"}

# Files larger than this are classified by name only
MAX_CONTENT_BYTES = 100_000


class CancellationToken:
    """Lets a caller abort a long scan from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class ContentRead:
    """Result of trying to load one file's text."""
    content: str | None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.content is not None


def normalize_extensions(extensions: Iterable[str] | None) -> set[str]:
    """Lowercase and dot-prefix an extension allow-list."""
    if not extensions:
        extensions = DEFAULT_EXTENSIONS
    normalized: set[str] = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return normalized


def read_file_text(path: Path, max_bytes: int = MAX_CONTENT_BYTES) -> ContentRead:
    """Read a file as text, never raising.

    Oversized and unreadable files come back with ``content=None`` and a reason.
    Undecodable bytes are replaced rather than failing the read.
    """
    try:
        size = path.stat().st_size
        if max_bytes and size > max_bytes:
            return ContentRead(None, f"larger than {max_bytes} bytes")
        return ContentRead(path.read_text(encoding="utf-8", errors="replace"))
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return ContentRead(None, f"unreadable: {e}")


class FileWalker:
    """Walks a project tree in a deterministic (sorted) order."""

    def __init__(
        self,
        root: Path,
        extensions: Iterable[str] | None = None,
        skip_dirs: Iterable[str] | None = None,
        cancel: CancellationToken | None = None,
    ):
        self.root = root
        self.extensions = normalize_extensions(extensions)
        self.skip_dirs = set(DEFAULT_SKIP_DIRS if skip_dirs is None else skip_dirs)
        self.cancel = cancel

    def walk(self) -> Iterator[ProjectFile]:
        """Yield a ProjectFile for every allowed file under the root.

        Raises:
            FileNotFoundError: If the root directory does not exist.
            AnalysisCancelledError: If the cancellation token fires mid-walk.
        """
        if not self.root.is_dir():
            raise FileNotFoundError(f"Directory {self.root} does not exist")

        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.skip_dirs)
            for filename in sorted(filenames):
                if self.cancel is not None and self.cancel.cancelled:
                    raise AnalysisCancelledError(str(self.root))
                extension = os.path.splitext(filename)[1].lower()
                if extension not in self.extensions:
                    continue
                project_file = self._describe(Path(dirpath) / filename, extension)
                if project_file is not None:
                    yield project_file

    def _describe(self, path: Path, extension: str) -> ProjectFile | None:
        try:
            size = path.stat().st_size
        except OSError as e:
            # Deleted or became inaccessible between listing and stat
            logger.debug("Skipping %s: %s", path, e)
            return None
        relative = path.relative_to(self.root)
        directory = relative.parent.as_posix()
        return ProjectFile(
            path=relative.as_posix(),
            name=path.name,
            extension=extension,
            size=size,
            directory="" if directory == "." else directory,
        )
