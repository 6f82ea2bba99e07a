"""Discover and parse authored Markdown pages into :class:`Document` records.

The loader is the first build stage. It reads UTF-8 Markdown files below a
content root, splits and parses their YAML front-matter, scans the heading
outline, and resolves the last-updated timestamp. Nothing is written to disk.

Example
-------
>>> from pathlib import Path
>>> from sitepress.content import ContentSource
>>> source = ContentSource(Path("docs"))  # doctest: +SKIP
>>> [doc.relative_path for doc in source]  # doctest: +SKIP
['getting-started.md', 'index.md', 'introduction.md', 'overview.md']
"""

from __future__ import annotations

import collections.abc as cabc
import fnmatch
import subprocess
import typing as typ
from pathlib import Path

from sitepress._constants import CONTENT_SUFFIX
from sitepress.errors import ContentParseError

from .front_matter import parse_front_matter, split_front_matter
from .headings import nest_headings, scan_headings
from .models import Document

ErrorCallback = cabc.Callable[[ContentParseError], None]


def load_document(path: Path, root: Path, *, last_updated: bool = True) -> Document:
    """Parse a single content file into a :class:`Document`.

    Parameters
    ----------
    path : Path
        Content file to read.
    root : Path
        Content root; the document key is ``path`` relative to it.
    last_updated : bool, optional
        Resolve the last-updated timestamp when ``True`` (default).

    Returns
    -------
    Document
        Immutable record describing the page.

    Raises
    ------
    ContentParseError
        If the file is not valid UTF-8 or its front-matter is malformed.
    OSError
        If the file cannot be read.
    """
    relative_path = path.relative_to(root).as_posix()
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"content is not valid UTF-8: {exc}"
        raise ContentParseError(relative_path, msg) from exc

    source, body = split_front_matter(text, relative_path)
    front_matter = parse_front_matter(source, relative_path)
    headings = scan_headings(body)

    title = front_matter.get("title")
    if title is None:
        title = next((h.title for h in headings if h.level == 1), None)
    if title is None:
        title = path.stem.replace("-", " ").replace("_", " ").title()
    description = front_matter.get("description") or ""

    timestamp = None
    if last_updated and front_matter.get("lastUpdated") is not False:
        timestamp = _resolve_last_updated(path)

    return Document(
        relative_path=relative_path,
        title=str(title),
        description=str(description),
        headers=nest_headings(headings),
        last_updated=timestamp,
        front_matter=front_matter,
        front_matter_source=source,
        body=body,
        source_path=path.resolve(),
    )


def _resolve_last_updated(path: Path) -> int:
    """Return the last commit time of ``path`` in epoch ms, or its mtime."""
    try:
        result = subprocess.run(  # noqa: S603
            ["git", "log", "-1", "--format=%at", "--", path.name],  # noqa: S607
            cwd=path.parent,
            check=True,
            text=True,
            capture_output=True,
        )
    except (FileNotFoundError, subprocess.CalledProcessError):
        result = None
    if result is not None and result.stdout.strip().isdigit():
        return int(result.stdout.strip()) * 1000
    return int(path.stat().st_mtime * 1000)


class ContentSource:
    """Lazy, restartable sequence of documents found below a content root.

    Each iteration rescans the filesystem, so the same instance can be
    consumed more than once. Parse failures stop iteration unless an
    ``on_error`` callback is supplied, in which case the failure is handed to
    the callback and the offending file is skipped.
    """

    def __init__(
        self,
        root: Path,
        *,
        exclude: typ.Iterable[str] = (),
        public_dir: str = "public",
        last_updated: bool = True,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.root = root
        self.exclude = tuple(exclude)
        self.public_dir = public_dir
        self.last_updated = last_updated
        self.on_error = on_error

    def __iter__(self) -> cabc.Iterator[Document]:
        """Yield one :class:`Document` per discovered content file."""
        for path in self.discover():
            try:
                yield load_document(path, self.root, last_updated=self.last_updated)
            except ContentParseError as exc:
                if self.on_error is None:
                    raise
                self.on_error(exc)

    def discover(self) -> list[Path]:
        """Return the content files below the root in sorted path order."""
        found: list[Path] = []
        for path in sorted(self.root.rglob(f"*{CONTENT_SUFFIX}")):
            if not path.is_file():
                continue
            relative = path.relative_to(self.root)
            if self._is_ignored(relative):
                continue
            found.append(path)
        return found

    def _is_ignored(self, relative: Path) -> bool:
        parts = relative.parts
        if any(part.startswith(".") for part in parts[:-1]):
            return True
        if parts[0] in (self.public_dir, "node_modules"):
            return True
        posix = relative.as_posix()
        return any(fnmatch.fnmatch(posix, pattern) for pattern in self.exclude)


__all__ = ["ContentSource", "load_document"]
