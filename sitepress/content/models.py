"""Immutable records produced by the content loader."""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ

from sitepress._constants import CONTENT_SUFFIX

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True)
class Header:
    """A heading entry in a document's outline.

    Attributes
    ----------
    level : int
        Heading level (``2`` for ``##``).
    title : str
        Heading text with inline Markdown removed.
    slug : str
        Anchor identifier, unique within the document.
    link : str
        Fragment link to the heading (``#slug``).
    children : tuple[Header, ...]
        Deeper headings nested under this one.
    """

    level: int
    title: str
    slug: str
    link: str
    children: tuple[Header, ...] = ()

    def to_payload(self) -> dict[str, typ.Any]:
        """Return the JSON-ready representation used in page data."""
        return {
            "level": self.level,
            "title": self.title,
            "slug": self.slug,
            "link": self.link,
            "children": [child.to_payload() for child in self.children],
        }


@dc.dataclass(frozen=True, slots=True)
class Document:
    """One authored content unit parsed from the source tree.

    Attributes
    ----------
    relative_path : str
        POSIX path relative to the content root; unique across a build.
    title : str
        Front-matter title, first level-1 heading, or the title-cased stem.
    description : str
        Front-matter description; may be empty.
    headers : tuple[Header, ...]
        Nested outline of level-2 and level-3 headings.
    last_updated : int or None
        Last modification time in epoch milliseconds, when enabled.
    front_matter : Mapping
        Parsed front-matter (a ruamel.yaml round-trip mapping).
    front_matter_source : str or None
        Raw front-matter block as authored, without the ``---`` fences.
    body : str
        Markdown body following the front-matter block.
    source_path : Path
        Absolute path of the source file.
    """

    relative_path: str
    title: str
    description: str
    headers: tuple[Header, ...]
    last_updated: int | None
    front_matter: typ.Mapping[str, typ.Any]
    front_matter_source: str | None
    body: str
    source_path: Path

    @property
    def route(self) -> str:
        """Return the site route of the document without base or extension.

        >>> Document("guide/index.md", "", "", (), None, {}, None, "", None).route
        '/guide/'
        >>> Document("overview.md", "", "", (), None, {}, None, "", None).route
        '/overview'
        """
        stem = self.relative_path.removesuffix(CONTENT_SUFFIX)
        if posixpath.basename(stem) == "index":
            directory = posixpath.dirname(stem)
            return f"/{directory}/" if directory else "/"
        return f"/{stem}"

    @property
    def layout(self) -> str:
        """Return the page layout requested in front-matter (``doc`` by default)."""
        value = self.front_matter.get("layout")
        return str(value) if value else "doc"


__all__ = ["Document", "Header"]
