r"""Scan Markdown headings and build a document outline.

This module turns ATX and setext headings into
:class:`~sitepress.content.models.Header` records. Slugs follow the same rules
the renderer uses for heading ids, so the outline stored in page data always
links to real anchors.

Example
-------
>>> from sitepress.content.headings import extract_headers
>>> headers = extract_headers("## What is it?\nBody\n\n### Details\nMore")
>>> headers[0].slug, headers[0].children[0].link
('what-is-it', '#details')
"""

from __future__ import annotations

import dataclasses as dc
import html
import re
import typing as typ
import unicodedata

from sitepress._constants import DEFAULT_HEADER_LEVELS
from sitepress.content.models import Header

HEADING_PATTERN = re.compile(r"^(#{1,6})[ \t]*(.*?)[ \t]*#*[ \t]*$")
FENCE_PATTERN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
CUSTOM_ID_PATTERN = re.compile(r"[ \t]*\{#([A-Za-z0-9_-]+)\}[ \t]*$")
INLINE_LINK_PATTERN = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")
INLINE_CODE_PATTERN = re.compile(r"(`+)(.+?)\1")
EMPHASIS_PATTERN = re.compile(r"\*{1,3}|(?<!\w)_{1,3}|_{1,3}(?!\w)")
HTML_TAG_PATTERN = re.compile(r"<[^>]+>")
ESCAPE_PATTERN = re.compile(r"\\([!-/:-@\[-`{-~])")
QUOTE_PREFIX = re.compile(r"^(?: {0,3}>[ ]?)+")
LIST_PREFIX = re.compile(r"^ {0,3}(?:[*+-]|\d+\.)[ \t]+")
SETEXT_PATTERN = re.compile(r"^[=-]+[ ]*$")

SLUG_CONTROL = re.compile(r"[\u0000-\u001f]")
SLUG_SPECIAL = re.compile(r"[\s~`!@#$%^&*()\-_+=\[\]{}|\\;:\"'“”‘’<>,.?/]+")
SLUG_COMBINING = re.compile(r"[\u0300-\u036f]")


@dc.dataclass(slots=True)
class Heading:
    """A heading found in the Markdown body, in document order."""

    level: int
    title: str
    slug: str


def slugify(title: str) -> str:
    """Return the anchor slug for a heading title.

    >>> slugify("What can I do with this solution?")
    'what-can-i-do-with-this-solution'
    >>> slugify("1. Install")
    '_1-install'
    """
    normalized = unicodedata.normalize("NFKD", title)
    slug = SLUG_COMBINING.sub("", normalized)
    slug = SLUG_CONTROL.sub("", slug)
    slug = SLUG_SPECIAL.sub("-", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    slug = re.sub(r"^(\d)", r"_\1", slug)
    return slug.lower()


class SlugRegistry:
    """Hand out slugs that are unique within one document."""

    def __init__(self) -> None:
        self._used: set[str] = set()

    def claim(self, title: str, custom: str | None = None) -> str:
        """Return a unique slug for ``title``, honouring a custom id verbatim."""
        if custom:
            self._used.add(custom)
            return custom
        base = slugify(title) or "heading"
        candidate = base
        suffix = 1
        while candidate in self._used:
            candidate = f"{base}-{suffix}"
            suffix += 1
        self._used.add(candidate)
        return candidate


def _clean_inline(text: str) -> str:
    text = HTML_TAG_PATTERN.sub("", text)
    text = EMPHASIS_PATTERN.sub("", text)
    text = ESCAPE_PATTERN.sub(r"\1", text)
    return html.unescape(text)


def clean_heading(text: str) -> tuple[str, str | None]:
    """Strip inline Markdown from a heading and split off a ``{#id}`` suffix.

    Code spans keep their text verbatim, the way the renderer displays them.

    >>> clean_heading("The `<br>` tag {#br}")
    ('The <br> tag', 'br')
    """
    custom = None
    match = CUSTOM_ID_PATTERN.search(text)
    if match:
        custom = match.group(1)
        text = text[: match.start()]
    text = INLINE_LINK_PATTERN.sub(r"\1", text)
    parts: list[str] = []
    position = 0
    for code in INLINE_CODE_PATTERN.finditer(text):
        parts.append(_clean_inline(text[position : code.start()]))
        parts.append(code.group(2).strip())
        position = code.end()
    parts.append(_clean_inline(text[position:]))
    return "".join(parts).strip(), custom


def _content_lines(markdown_text: str) -> list[tuple[int, str | None]]:
    """Return ``(quote_depth, text)`` per line, with ``None`` for fenced code."""
    lines: list[tuple[int, str | None]] = []
    fence: str | None = None
    for raw in markdown_text.splitlines():
        quote = QUOTE_PREFIX.match(raw)
        depth = quote.group(0).count(">") if quote else 0
        line = raw[quote.end() :] if quote else raw
        fence_match = FENCE_PATTERN.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            lines.append((depth, None))
            continue
        lines.append((depth, None if fence is not None else line))
    return lines


def _setext_level(
    lines: list[tuple[int, str | None]], idx: int, depth: int
) -> int | None:
    """Return the level set by an underline following line ``idx``, if any."""
    if idx + 1 >= len(lines):
        return None
    next_depth, underline = lines[idx + 1]
    if underline is None or next_depth != depth or not SETEXT_PATTERN.match(underline):
        return None
    return 1 if underline.startswith("=") else 2


def scan_headings(markdown_text: str) -> list[Heading]:
    """Return every heading outside fenced code blocks, in order.

    ATX headings (``## Title``) are found on any line, also after list
    markers. Setext headings (a title underlined with ``=`` or ``-``) are
    found where the title opens a block. Blockquote markers are ignored, so
    headings inside quotes are listed too.

    >>> [h.slug for h in scan_headings("Setup\\n-----\\n\\n## Setup\\n")]
    ['setup', 'setup-1']
    """
    headings: list[Heading] = []
    registry = SlugRegistry()
    lines = _content_lines(markdown_text)
    block_start = True
    idx = 0
    while idx < len(lines):
        depth, line = lines[idx]
        opens_block = block_start or (idx > 0 and lines[idx - 1][0] != depth)
        idx += 1
        if line is None or not line.strip():
            block_start = True
            continue
        block_start = False
        match = HEADING_PATTERN.match(LIST_PREFIX.sub("", line, count=1))
        if match:
            level, text = len(match.group(1)), match.group(2)
        elif opens_block and not line.startswith(("    ", "\t")):
            setext = _setext_level(lines, idx - 1, depth)
            if setext is None:
                continue
            level, text = setext, line
            idx += 1
        else:
            continue
        title, custom = clean_heading(text.strip())
        headings.append(Heading(level, title, registry.claim(title, custom)))
        block_start = True
    return headings


def nest_headings(
    headings: typ.Iterable[Heading], levels: tuple[int, ...] = DEFAULT_HEADER_LEVELS
) -> tuple[Header, ...]:
    """Nest the headings whose level is in ``levels`` into an outline tree."""
    roots: list[dict[str, typ.Any]] = []
    stack: list[dict[str, typ.Any]] = []
    for heading in headings:
        if heading.level not in levels:
            continue
        node = {"heading": heading, "children": []}
        while stack and stack[-1]["heading"].level >= heading.level:
            stack.pop()
        if stack:
            stack[-1]["children"].append(node)
        else:
            roots.append(node)
        stack.append(node)
    return tuple(_freeze(node) for node in roots)


def _freeze(node: dict[str, typ.Any]) -> Header:
    heading: Heading = node["heading"]
    return Header(
        level=heading.level,
        title=heading.title,
        slug=heading.slug,
        link=f"#{heading.slug}",
        children=tuple(_freeze(child) for child in node["children"]),
    )


def extract_headers(
    markdown_text: str, levels: tuple[int, ...] = DEFAULT_HEADER_LEVELS
) -> tuple[Header, ...]:
    """Return the nested outline of ``markdown_text`` for the given levels."""
    return nest_headings(scan_headings(markdown_text), levels)


__all__ = [
    "Heading",
    "SlugRegistry",
    "clean_heading",
    "extract_headers",
    "nest_headings",
    "scan_headings",
    "slugify",
]
