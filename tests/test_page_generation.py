"""Tests for rendering documents into themed HTML pages.

The sample site uses the base path ``/terraform-aws-terra3/``, so every
internal URL asserted here must carry that prefix exactly once.
"""

from __future__ import annotations

import dataclasses as dc
import hashlib
import re
import typing as typ

import msgspec.json as msgspec_json
import pytest
from bs4 import BeautifulSoup

from sitepress.config import SidebarGroup, SidebarItem
from sitepress.content import load_document
from sitepress.errors import RenderError
from sitepress.generator import PageRenderer
from sitepress.generator.page_generator import data_path_for, output_path_for

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitepress.config import SiteConfig
    from sitepress.generator import OutputUnit

BASE = "/terraform-aws-terra3/"


class PageData(typ.TypedDict, total=False):
    title: str
    description: str
    frontmatter: dict[str, typ.Any]
    headers: list[dict[str, typ.Any]]
    relativePath: str
    outputPath: str
    lastUpdated: int


def _render(site_root: Path, config: SiteConfig, name: str) -> OutputUnit:
    document = load_document(site_root / name, site_root, last_updated=False)
    return PageRenderer(config, content_root=site_root).render(document)


def _soup(unit: OutputUnit) -> BeautifulSoup:
    return BeautifulSoup(unit.html, "html.parser")


def _article_links(soup: BeautifulSoup) -> dict[str, typ.Any]:
    article = soup.select_one("article.doc-article")
    assert article is not None
    return {link.get_text(): link for link in article.find_all("a")}


def test_output_paths_mirror_content_paths() -> None:
    assert output_path_for("overview.md") == "overview.html"
    assert output_path_for("guide/index.md") == "guide/index.html"
    assert data_path_for("overview.md") == "assets/overview.md.json"


def test_page_url_carries_the_base_path(
    site_root: Path, site_config: SiteConfig
) -> None:
    unit = _render(site_root, site_config, "overview.md")

    assert unit.relative_path == "overview.md"
    assert unit.output_path == "overview.html"
    assert unit.url == f"{BASE}overview.html"
    assert unit.data_path == "assets/overview.md.json"


def test_internal_links_get_the_base_exactly_once(
    site_root: Path, site_config: SiteConfig
) -> None:
    links = _article_links(_soup(_render(site_root, site_config, "overview.md")))

    assert links["introduction"]["href"] == f"{BASE}introduction.html"
    assert links["get started"]["href"] == f"{BASE}getting-started.html#prerequisites"
    assert links["same introduction"]["href"] == f"{BASE}introduction.html"
    for name in ("introduction", "get started", "same introduction"):
        assert links[name]["href"].count(BASE) == 1
        assert links[name].get("target") is None


def test_external_links_open_in_a_new_tab(
    site_root: Path, site_config: SiteConfig
) -> None:
    links = _article_links(_soup(_render(site_root, site_config, "overview.md")))

    aws = links["AWS"]
    assert aws["href"] == "https://aws.amazon.com/"
    assert aws["target"] == "_blank"
    assert aws["rel"] == ["noreferrer"]


def test_clean_urls_drop_the_html_suffix(
    site_root: Path, site_config: SiteConfig
) -> None:
    config = dc.replace(site_config, clean_urls=True)

    links = _article_links(_soup(_render(site_root, config, "overview.md")))

    assert links["introduction"]["href"] == f"{BASE}introduction"
    assert links["get started"]["href"] == f"{BASE}getting-started#prerequisites"


def test_heading_ids_match_page_data_slugs(
    site_root: Path, site_config: SiteConfig
) -> None:
    unit = _render(site_root, site_config, "overview.md")
    soup = _soup(unit)

    slugs: list[str] = []
    for header in unit.page_data["headers"]:
        slugs.append(header["slug"])
        slugs.extend(child["slug"] for child in header["children"])
    rendered = [
        heading["id"] for heading in soup.select("article.doc-article h2, article.doc-article h3")
    ]

    assert slugs == [
        "what-is-terra3",
        "architecture",
        "motivation",
        "what-can-i-do-with-this-solution",
    ]
    assert rendered == slugs
    anchor = soup.select_one("h2#what-is-terra3 a.header-anchor")
    assert anchor is not None
    assert anchor["href"] == "#what-is-terra3"
    assert anchor["aria-hidden"] == "true"


def test_outline_slugs_follow_rendered_heading_text(
    site_root: Path, site_config: SiteConfig
) -> None:
    (site_root / "syntax.md").write_text(
        "# Syntax\n\n"
        "## The `<br>` tag\n\n"
        "Setup\n-----\n\n"
        "## Setup\n\n"
        "> ## Quoted note\n",
        encoding="utf-8",
    )
    unit = _render(site_root, site_config, "syntax.md")
    soup = _soup(unit)

    headers = unit.page_data["headers"]
    rendered = [
        heading["id"] for heading in soup.select("article.doc-article h2, article.doc-article h3")
    ]

    assert [header["slug"] for header in headers] == [
        "the-br-tag",
        "setup",
        "setup-1",
        "quoted-note",
    ]
    assert rendered == [header["slug"] for header in headers]
    assert headers[0]["title"] == "The <br> tag"


def test_dotted_page_names_are_page_links(
    site_root: Path, site_config: SiteConfig
) -> None:
    (site_root / "releases.md").write_text(
        "# Releases\n\nSee [v1.2](/release-v1.2) and [notes](./notes.v2).\n",
        encoding="utf-8",
    )

    links = _article_links(_soup(_render(site_root, site_config, "releases.md")))

    assert links["v1.2"]["href"] == f"{BASE}release-v1.2.html"
    assert links["notes"]["href"] == f"{BASE}notes.v2.html"


def test_outline_links_to_level_two_and_three_headings(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "overview.md"))

    outline = [link["href"] for link in soup.select("aside.outline a.outline-link")]

    assert outline == [
        "#what-is-terra3",
        "#architecture",
        "#motivation",
        "#what-can-i-do-with-this-solution",
    ]


def test_relative_images_are_content_hashed(
    site_root: Path, site_config: SiteConfig
) -> None:
    unit = _render(site_root, site_config, "overview.md")
    image = _soup(unit).select_one("article.doc-article img")
    assert image is not None

    digest = hashlib.sha256((site_root / "images" / "diagram.png").read_bytes())
    expected = f"assets/diagram.{digest.hexdigest()[:8]}.png"
    assert image["src"] == f"{BASE}{expected}"
    assert [asset.target for asset in unit.assets] == [expected]
    assert unit.assets[0].source == (site_root / "images" / "diagram.png").resolve()


def test_public_assets_keep_their_path(
    site_root: Path, site_config: SiteConfig
) -> None:
    (site_root / "logo-page.md").write_text("![logo](/logo.png)\n", encoding="utf-8")

    unit = _render(site_root, site_config, "logo-page.md")
    image = _soup(unit).select_one("article.doc-article img")

    assert image is not None
    assert image["src"] == f"{BASE}logo.png"
    assert unit.assets == ()


@pytest.mark.parametrize(
    "reference",
    ["./images/missing.png", "/missing-logo.png", "../outside.png"],
)
def test_unresolvable_assets_raise_render_errors(
    site_root: Path, site_config: SiteConfig, reference: str
) -> None:
    (site_root.parent / "outside.png").write_bytes(b"outside")
    (site_root / "broken.md").write_text(
        f"# Broken\n\n![missing]({reference})\n", encoding="utf-8"
    )

    with pytest.raises(RenderError) as excinfo:
        _render(site_root, site_config, "broken.md")

    assert excinfo.value.path == "broken.md"
    assert excinfo.value.asset == reference
    assert reference in str(excinfo.value)


def test_only_the_current_page_is_active_in_the_sidebar(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "introduction.md"))

    active = soup.select("aside.sidebar a.is-active")

    assert [link.get_text() for link in active] == ["Introduction"]
    assert active[0]["href"] == f"{BASE}introduction.html"
    assert active[0]["aria-current"] == "page"
    hrefs = [link["href"] for link in soup.select("aside.sidebar a.sidebar-link")]
    assert hrefs == [f"{BASE}introduction.html", f"{BASE}getting-started.html"]


def test_pages_outside_the_sidebar_have_no_active_entry(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "overview.md"))

    assert soup.select("aside.sidebar a.sidebar-link")
    assert soup.select("aside.sidebar a.is-active") == []
    assert soup.select_one("nav.prev-next") is None


def test_sidebar_group_link_can_be_the_active_entry(
    site_root: Path, site_config: SiteConfig
) -> None:
    group = SidebarGroup(
        text="Overview",
        link="/overview",
        items=(SidebarItem(text="Introduction", link="/introduction"),),
        collapsible=True,
        collapsed=True,
    )
    config = dc.replace(site_config, theme=dc.replace(site_config.theme, sidebar=(group,)))

    soup = _soup(_render(site_root, config, "overview.md"))

    active = soup.select("aside.sidebar a.is-active")
    assert [link.get_text() for link in active] == ["Overview"]
    assert active[0]["href"] == f"{BASE}overview.html"
    assert soup.select_one("aside.sidebar details[open]") is not None
    following = soup.select_one("a.prev-next__link--next")
    assert following is not None
    assert following.get_text() == "Introduction"



def test_pager_links_follow_sidebar_order(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "introduction.md"))

    following = soup.select_one("a.prev-next__link--next")

    assert following is not None
    assert following.get_text() == "Getting Started"
    assert following["href"] == f"{BASE}getting-started.html"
    assert soup.select_one("a.prev-next__link--prev") is None


def test_doc_chrome_comes_from_the_theme(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "overview.md"))

    assert soup.title is not None
    assert soup.title.get_text() == "Overview | Terra3"
    edit = soup.select_one("a.edit-link")
    assert edit is not None
    assert edit["href"] == (
        "https://github.com/it-objects/terraform-aws-terra3/edit/main/gh-pages/docs/"
        "overview.md"
    )
    assert edit.get_text() == "Edit this page on GitHub"
    nav = soup.select_one("a.nav-link")
    assert nav is not None
    assert nav["href"] == "https://www.it-objects.de/cloud/"
    assert nav["target"] == "_blank"
    social = soup.select_one("a.social-link--github")
    assert social is not None
    assert social["href"] == "https://github.com/it-objects/terraform-aws-terra3"
    copyright_line = soup.select_one(".site-footer__copyright")
    assert copyright_line is not None
    assert copyright_line.get_text() == "Copyright © 2022 it-objects GmbH"
    assert soup.select_one("p.last-updated") is None


def test_edit_link_can_be_disabled_per_page(
    site_root: Path, site_config: SiteConfig
) -> None:
    (site_root / "no-edit.md").write_text(
        "---\neditLink: false\n---\n# No edit\n", encoding="utf-8"
    )

    soup = _soup(_render(site_root, site_config, "no-edit.md"))

    assert soup.select_one("a.edit-link") is None


def test_home_layout_renders_hero_and_features(
    site_root: Path, site_config: SiteConfig
) -> None:
    soup = _soup(_render(site_root, site_config, "index.md"))

    assert soup.title is not None
    assert soup.title.get_text() == (
        "Terra3 | Terraform module for quickly ramping-up 3-tier solutions in AWS"
    )
    name = soup.select_one("h1.hero__name")
    assert name is not None
    assert name.get_text() == "Terra3"
    actions = {link.get_text(): link["href"] for link in soup.select("a.hero__action")}
    assert actions == {
        "Get Started!": f"{BASE}overview.html",
        "View on GitHub": "https://github.com/it-objects/terraform-aws-terra3",
    }
    image = soup.select_one("img.hero__image")
    assert image is not None
    assert image["src"] == f"{BASE}logo.png"
    features = [title.get_text() for title in soup.select(".feature__title")]
    assert features == ["Quick and easy"]
    assert soup.select_one("aside.sidebar") is None


def test_page_data_describes_the_document(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    renderer = PageRenderer(site_config, content_root=site_root)
    document = load_document(site_root / "overview.md", site_root, last_updated=False)
    output_dir = tmp_path / "dist"

    written = renderer.emit(renderer.render(document), output_dir)

    assert written == output_dir / "overview.html"
    data = msgspec_json.decode(
        (output_dir / "assets" / "overview.md.json").read_bytes(), type=PageData
    )
    assert data["title"] == "Overview"
    assert data["description"] == ""
    assert data["frontmatter"] == {}
    assert data["relativePath"] == "overview.md"
    assert data["outputPath"] == "overview.html"
    assert "lastUpdated" not in data
    assert [header["title"] for header in data["headers"]] == [
        "What is Terra3",
        "Motivation",
        "What can I do with this solution?",
    ]
    embedded = BeautifulSoup(written.read_text(encoding="utf-8"), "html.parser")
    script = embedded.select_one("script#page-data")
    assert script is not None
    assert msgspec_json.decode(script.get_text(), type=PageData) == data


def test_emit_publishes_hashed_assets(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    renderer = PageRenderer(site_config, content_root=site_root)
    document = load_document(site_root / "overview.md", site_root, last_updated=False)
    unit = renderer.render(document)
    output_dir = tmp_path / "dist"

    renderer.emit(unit, output_dir)
    renderer.emit(unit, output_dir)

    published = output_dir / unit.assets[0].target
    assert published.read_bytes() == (site_root / "images" / "diagram.png").read_bytes()
    assert re.fullmatch(r"diagram\.[0-9a-f]{8}\.png", published.name)
    assert not list(published.parent.glob(".tmp-*"))


def test_rendering_is_repeatable(site_root: Path, site_config: SiteConfig) -> None:
    first = _render(site_root, site_config, "overview.md")
    second = _render(site_root, site_config, "overview.md")

    assert first.html == second.html
    assert first.page_data == second.page_data


def test_last_updated_is_shown_when_enabled(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    config = dc.replace(site_config, last_updated=True)
    document = dc.replace(
        load_document(site_root / "overview.md", site_root, last_updated=False),
        last_updated=1666208500000,
    )

    unit = PageRenderer(config, content_root=site_root).render(document)
    stamp = _soup(unit).select_one("p.last-updated time")

    assert unit.page_data["lastUpdated"] == 1666208500000
    assert stamp is not None
    assert stamp["datetime"] == "2022-10-19T19:41:40+00:00"
    assert stamp.get_text() == "Oct 19, 2022"


def test_page_layout_has_no_sidebar(site_root: Path, site_config: SiteConfig) -> None:
    (site_root / "introduction.md").write_text(
        "---\nlayout: page\n---\n# Introduction\n", encoding="utf-8"
    )

    soup = _soup(_render(site_root, site_config, "introduction.md"))

    assert soup.select_one("aside.sidebar") is None
    heading = soup.select_one("h1#introduction")
    assert heading is not None
