"""Helpers for rewriting site links and heading anchors in rendered Markdown.

Two Markdown tree processors live here. :class:`HeaderAnchorTreeprocessor`
gives each heading a stable ``id`` and a trailing ``#`` permalink, and
:class:`SiteLinkTreeprocessor` rewrites intra-site links so they carry the
configured base path exactly once, marks external links to open in a new tab,
and swaps image references for their published asset URLs.
"""

from __future__ import annotations

import html
import posixpath
import re
import typing as typ
from urllib.parse import urlsplit
from xml.etree import ElementTree as etree

from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import ETX, STX

from sitepress._constants import ASSET_SUFFIXES, CONTENT_SUFFIX, OUTPUT_SUFFIX
from sitepress.content.headings import SlugRegistry

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from sitepress.config import SiteConfig
    from sitepress.generator.assets import AssetCollector
else:  # pragma: no cover - type-checking fallback
    Markdown = typ.Any
    Element = typ.Any

EXTERNAL_PREFIXES = ("http://", "https://", "mailto:", "tel:", "data:", "javascript:")
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
ESCAPED_CHAR = re.compile(f"{STX}([0-9]+){ETX}")
PLACEHOLDER = re.compile(f"{STX}[^{ETX}]*{ETX}")


def is_external(target: str) -> bool:
    """Return ``True`` when ``target`` leaves the site."""
    lower = target.lower()
    return lower.startswith(EXTERNAL_PREFIXES) or target.startswith("//") or "://" in target


def _with_output_suffix(path: str, *, clean_urls: bool) -> str:
    """Map a content or page path onto its published file.

    Any suffix outside :data:`ASSET_SUFFIXES` is part of a page name, so
    ``/release-v1.2`` publishes as ``/release-v1.2.html``.
    """
    if path.endswith("/"):
        return path
    stem, suffix = posixpath.splitext(path)
    if suffix == CONTENT_SUFFIX:
        if posixpath.basename(stem) == "index" and clean_urls:
            return stem[: -len("index")]
        return stem if clean_urls else stem + OUTPUT_SUFFIX
    if suffix == OUTPUT_SUFFIX or suffix.lower() in ASSET_SUFFIXES:
        return path
    return path if clean_urls else path + OUTPUT_SUFFIX


def resolve_site_link(
    target: str | None, config: SiteConfig, *, current_dir: str = ""
) -> str | None:
    """Return the published URL for an internal link, or ``None``.

    External links, fragment-only links, and empty targets yield ``None`` so
    callers keep them untouched. Relative paths are resolved against
    ``current_dir`` (the POSIX directory of the linking document). Links that
    already carry the base prefix are not prefixed again.

    >>> from sitepress.config import SiteConfig
    >>> site = SiteConfig(title="Docs", base="/docs/")
    >>> resolve_site_link("./setup.md#install", site, current_dir="guide")
    '/docs/guide/setup.html#install'
    >>> resolve_site_link("/docs/guide/setup.html", site)
    '/docs/guide/setup.html'
    """
    if not target or target.startswith("#") or is_external(target):
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None

    path = parsed.path
    base = config.base or "/"
    if path.startswith("/"):
        if base != "/" and path.startswith(base):
            path = "/" + path[len(base) :]
    else:
        joined = posixpath.normpath(posixpath.join("/", current_dir, path))
        path = joined + "/" if path.endswith("/") and joined != "/" else joined

    url = config.with_base(_with_output_suffix(path, clean_urls=config.clean_urls))
    if parsed.query:
        url = f"{url}?{parsed.query}"
    if parsed.fragment:
        url = f"{url}#{parsed.fragment}"
    return url


def resolve_href(target: str, config: SiteConfig, *, current_dir: str = "") -> str:
    """Return the rewritten URL for internal links and ``target`` otherwise."""
    return resolve_site_link(target, config, current_dir=current_dir) or target


def normalize_route(link: str, config: SiteConfig) -> str:
    """Reduce a link to the route it points at, for active-entry matching.

    >>> from sitepress.config import SiteConfig
    >>> site = SiteConfig(title="Docs", base="/docs/")
    >>> normalize_route("/docs/guide/index.html", site)
    '/guide/'
    >>> normalize_route("/introduction.md", site)
    '/introduction'
    """
    path = urlsplit(link).path
    base = config.base or "/"
    if base != "/" and path.startswith(base):
        path = "/" + path[len(base) :]
    for suffix in (CONTENT_SUFFIX, OUTPUT_SUFFIX):
        if path.endswith(suffix):
            path = path[: -len(suffix)]
            break
    if path == "/index" or path.endswith("/index"):
        path = path[: -len("index")]
    return path or "/"


def _is_asset_link(target: str) -> bool:
    """Return True when ``target`` names a downloadable file rather than a page.

    >>> _is_asset_link("./terra3.pdf"), _is_asset_link("/release-v1.2")
    (True, False)
    """
    suffix = posixpath.splitext(urlsplit(target).path)[1]
    return suffix.lower() in ASSET_SUFFIXES


def _heading_text(element: Element) -> str:
    """Return the plain text of a heading as displayed to the reader."""
    text = "".join(element.itertext())
    text = ESCAPED_CHAR.sub(lambda match: chr(int(match.group(1))), text)
    return html.unescape(PLACEHOLDER.sub("", text)).strip()


class HeaderAnchorTreeprocessor(Treeprocessor):
    """Assign unique ids and ``#`` permalinks to every heading."""

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Annotate headings in document order."""
        registry = SlugRegistry()
        for element in list(root.iter()):
            if element.tag not in HEADING_TAGS:
                continue
            slug = registry.claim(_heading_text(element), element.get("id"))
            element.set("id", slug)
            element.set("tabindex", "-1")
            if len(element):
                last = element[-1]
                last.tail = (last.tail or "") + " "
            else:
                element.text = (element.text or "") + " "
            anchor = etree.SubElement(element, "a")
            anchor.set("class", "header-anchor")
            anchor.set("href", f"#{slug}")
            anchor.set("aria-hidden", "true")
            anchor.text = "#"
        return root


class SiteLinkTreeprocessor(Treeprocessor):
    """Rewrite anchors and images relative to the published site."""

    def __init__(
        self,
        md: Markdown,
        config: SiteConfig,
        document_path: str,
        assets: AssetCollector,
    ) -> None:
        super().__init__(md)
        self.config = config
        self.document_path = document_path
        self.current_dir = posixpath.dirname(document_path)
        self.assets = assets

    def run(self, root: Element) -> Element:  # pragma: no cover - Markdown API
        """Rewrite every ``a`` and ``img`` element in the parsed tree."""
        for element in root.iter():
            if element.tag == "a":
                self._rewrite_anchor(element)
            elif element.tag == "img":
                src = element.get("src")
                if src and not is_external(src):
                    element.set("src", self.assets.resolve(src, self.document_path))
        return root

    def _rewrite_anchor(self, element: Element) -> None:
        href = element.get("href")
        if not href or element.get("class") == "header-anchor":
            return
        if not is_external(href) and _is_asset_link(href):
            element.set("href", self.assets.resolve(href, self.document_path))
            return
        if is_external(href):
            if href.lower().startswith(("http://", "https://", "//")):
                element.set("target", "_blank")
                element.set("rel", "noreferrer")
            return
        rewritten = resolve_site_link(href, self.config, current_dir=self.current_dir)
        if rewritten:
            element.set("href", rewritten)


class SiteLinkExtension(Extension):
    """Register the heading and link tree processors for one document.

    A fresh instance is created per rendered document because it carries the
    document's path and collects the assets it references.
    """

    def __init__(
        self, config: SiteConfig, document_path: str, assets: AssetCollector
    ) -> None:
        super().__init__()
        self.config = config
        self.document_path = document_path
        self.assets = assets

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the tree processors on the Markdown instance."""
        md.treeprocessors.register(
            HeaderAnchorTreeprocessor(md), "sitepress_header_anchors", 6
        )
        md.treeprocessors.register(
            SiteLinkTreeprocessor(md, self.config, self.document_path, self.assets),
            "sitepress_site_links",
            5,
        )


__all__ = [
    "HeaderAnchorTreeprocessor",
    "SiteLinkExtension",
    "SiteLinkTreeprocessor",
    "is_external",
    "normalize_route",
    "resolve_href",
    "resolve_site_link",
]
