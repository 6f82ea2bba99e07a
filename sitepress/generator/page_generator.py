"""Render documents into output units and write them to disk.

This module is the third build stage. :class:`PageRenderer` combines one
:class:`~sitepress.content.Document` with the shared, read-only
:class:`~sitepress.config.SiteConfig`: it resolves the output path, renders
the Markdown body (heading anchors, base-aware links, hashed assets), projects
the navigation and sidebar trees, and serializes the page data. ``emit``
persists the result. Rendering never mutates the renderer, so one instance can
serve many worker threads.

Example
-------
>>> from pathlib import Path
>>> from sitepress.config import load_site_config
>>> from sitepress.content import ContentSource
>>> from sitepress.generator import PageRenderer
>>> config = load_site_config(Path("docs/.sitepress/config.yaml"))  # doctest: +SKIP
>>> renderer = PageRenderer(config, content_root=Path("docs"))  # doctest: +SKIP
>>> for document in ContentSource(Path("docs")):  # doctest: +SKIP
...     renderer.emit(renderer.render(document), Path("dist"))
PosixPath('dist/index.html')
"""

from __future__ import annotations

import datetime as dt
import json
import os
import shutil
import tempfile
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError

from sitepress._constants import (
    CONTENT_SUFFIX,
    OUTPUT_SUFFIX,
    PAGE_DATA_TEMPLATE,
    TITLE_PLACEHOLDER,
)
from sitepress.errors import RenderError
from sitepress.generator.assets import AssetCollector
from sitepress.generator.links import SiteLinkExtension, resolve_href
from sitepress.generator.models import AssetRef, OutputUnit
from sitepress.generator.navigation import build_nav, build_sidebar, find_neighbours
from sitepress.generator.renderer import HtmlContentRenderer

if typ.TYPE_CHECKING:
    from sitepress.config import SiteConfig
    from sitepress.content import Document

LAYOUT_TEMPLATES = {
    "doc": "doc.jinja",
    "page": "page.jinja",
    "home": "home.jinja",
}


def output_path_for(relative_path: str) -> str:
    """Return the HTML path inside the output directory for a content path.

    >>> output_path_for("guide/overview.md")
    'guide/overview.html'
    """
    return relative_path.removesuffix(CONTENT_SUFFIX) + OUTPUT_SUFFIX


def data_path_for(relative_path: str) -> str:
    """Return the page-data path inside the output directory.

    >>> data_path_for("guide/overview.md")
    'assets/guide_overview.md.json'
    """
    return PAGE_DATA_TEMPLATE.format(name=relative_path.replace("/", "_"))


def serialize_page_data(page_data: typ.Mapping[str, typ.Any]) -> str:
    """Serialize page data deterministically."""
    return json.dumps(page_data, sort_keys=True, ensure_ascii=False, default=str)


class PageRenderer:
    """Turn documents into themed HTML pages plus page-data payloads."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        content_root: Path,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the renderer and its Jinja environment.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration shared by every page.
        content_root : Path
            Root of the content tree; relative asset references resolve
            against it.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package
            templates.
        """
        self.config = config
        self.content_root = content_root
        default_templates = Path(__file__).resolve().parents[1] / "templates"
        self.templates_dir = templates_dir or default_templates
        self.markdown = HtmlContentRenderer(config.build.pygments_style)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["withbase"] = config.with_base
        self.env.filters["sitelink"] = lambda link: resolve_href(link, config)

    def render(self, document: Document) -> OutputUnit:
        """Render ``document`` into an :class:`OutputUnit` without touching disk.

        Raises
        ------
        RenderError
            If an asset reference cannot be resolved or the template fails.
        """
        output_path = output_path_for(document.relative_path)
        assets = AssetCollector(self.config, self.content_root)
        extension = SiteLinkExtension(self.config, document.relative_path, assets)
        content_html = self.markdown.markdown(document.body, [extension])

        page_data = self._build_page_data(document, output_path)
        route = document.route
        nav = build_nav(self.config.theme.nav, self.config, route)
        sidebar: list[dict[str, typ.Any]] = []
        if document.layout == "doc":
            sidebar = build_sidebar(
                self.config.theme.sidebar_for(route), self.config, route
            )
        previous_link, next_link = find_neighbours(sidebar)

        context = {
            "site": self.config,
            "theme": self.config.theme,
            "page": document,
            "frontmatter": document.front_matter,
            "html_title": self._format_page_title(document),
            "description": document.description or self.config.description,
            "content_html": content_html,
            "nav": nav,
            "sidebar": sidebar,
            "previous_link": previous_link,
            "next_link": next_link,
            "edit_url": self._edit_url(document),
            "last_updated": _format_timestamp(document.last_updated),
            "pygments_css": self.markdown.stylesheet,
            "page_data_json": serialize_page_data(page_data).replace("</", "<\\/"),
        }
        template_name = LAYOUT_TEMPLATES.get(document.layout, LAYOUT_TEMPLATES["doc"])
        try:
            html = self.env.get_template(template_name).render(**context)
        except TemplateError as exc:
            msg = f"template '{template_name}' failed: {exc}"
            raise RenderError(document.relative_path, msg) from exc
        if not html.endswith("\n"):
            html += "\n"

        return OutputUnit(
            relative_path=document.relative_path,
            output_path=output_path,
            url=self.config.with_base(f"/{output_path}"),
            html=html,
            page_data=page_data,
            data_path=data_path_for(document.relative_path),
            assets=tuple(dict.fromkeys(assets.refs)),
        )

    def emit(self, unit: OutputUnit, output_dir: Path) -> Path:
        """Write the page, its page data and its assets below ``output_dir``.

        Returns
        -------
        Path
            Path of the written HTML file.
        """
        html_path = output_dir / unit.output_path
        html_path.parent.mkdir(parents=True, exist_ok=True)
        html_path.write_text(unit.html, encoding="utf-8")

        data_path = output_dir / unit.data_path
        data_path.parent.mkdir(parents=True, exist_ok=True)
        data_path.write_text(serialize_page_data(unit.page_data), encoding="utf-8")

        for asset in unit.assets:
            _publish_asset(asset, output_dir)
        return html_path

    def render_not_found(self) -> str:
        """Render the site-wide ``404.html`` page."""
        context = {
            "site": self.config,
            "theme": self.config.theme,
            "html_title": f"404 | {self.config.title}",
            "description": self.config.description,
            "nav": build_nav(self.config.theme.nav, self.config, ""),
            "pygments_css": "",
        }
        html = self.env.get_template("404.jinja").render(**context)
        return html if html.endswith("\n") else html + "\n"

    def _build_page_data(
        self, document: Document, output_path: str
    ) -> dict[str, typ.Any]:
        """Return the metadata payload mirrored alongside the page."""
        page_data: dict[str, typ.Any] = {
            "title": document.title,
            "description": document.description,
            "frontmatter": document.front_matter,
            "headers": [header.to_payload() for header in document.headers],
            "relativePath": document.relative_path,
            "outputPath": output_path,
        }
        if document.last_updated is not None:
            page_data["lastUpdated"] = document.last_updated
        return page_data

    def _format_page_title(self, document: Document) -> str:
        """Compose the HTML title from the page title and the title template."""
        template = document.front_matter.get("titleTemplate", self.config.title_template)
        if template is False:
            return document.title
        suffix = str(template) if template else self.config.title
        if TITLE_PLACEHOLDER in suffix:
            return suffix.replace(TITLE_PLACEHOLDER, document.title)
        if suffix == document.title:
            return suffix
        return f"{document.title} | {suffix}"

    def _edit_url(self, document: Document) -> str | None:
        """Return the edit link for ``document`` unless disabled in front-matter."""
        edit_link = self.config.theme.edit_link
        if edit_link is None or document.front_matter.get("editLink") is False:
            return None
        return edit_link.url_for(document.relative_path)


def _format_timestamp(timestamp: int | None) -> dict[str, str] | None:
    """Return display and ISO forms of an epoch-millisecond timestamp."""
    if timestamp is None:
        return None
    moment = dt.datetime.fromtimestamp(timestamp / 1000, tz=dt.UTC)
    return {"iso": moment.isoformat(), "display": moment.strftime("%b %d, %Y")}


def _publish_asset(asset: AssetRef, output_dir: Path) -> None:
    """Copy an asset into place atomically; identical names mean identical bytes."""
    target = output_dir / asset.target
    if target.exists():
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(dir=target.parent, prefix=".tmp-")
    os.close(handle)
    try:
        shutil.copyfile(asset.source, temp_name)
        os.replace(temp_name, target)
    finally:
        Path(temp_name).unlink(missing_ok=True)


__all__ = [
    "PageRenderer",
    "data_path_for",
    "output_path_for",
    "serialize_page_data",
]
