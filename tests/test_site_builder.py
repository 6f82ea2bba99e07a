"""Tests for whole-site builds: determinism, error policies and extras."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import pytest

from sitepress.builder import SiteBuilder
from sitepress.errors import ContentParseError, RenderError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitepress.config import SiteConfig

PAGES = ("getting-started.html", "index.html", "introduction.html", "overview.html")


def _snapshot(root: Path) -> dict[str, bytes]:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def _add_broken_page(site_root: Path) -> None:
    (site_root / "broken.md").write_text(
        "# Broken\n\n![missing](./images/missing.png)\n", encoding="utf-8"
    )


def test_build_writes_pages_data_assets_and_public_files(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    output_dir = tmp_path / "dist"

    report = SiteBuilder(site_config, site_root, output_dir).run()

    assert report.ok
    for page in PAGES:
        assert (output_dir / page).is_file()
    assert (output_dir / "assets" / "overview.md.json").is_file()
    assert (output_dir / "logo.png").read_bytes() == (
        site_root / "public" / "logo.png"
    ).read_bytes()
    assert list((output_dir / "assets").glob("diagram.*.png"))
    assert (output_dir / "404.html").is_file()
    assert report.written == sorted(report.written)
    assert output_dir / "404.html" in report.written
    assert not (output_dir / ".sitepress").exists()


def test_builds_are_byte_identical(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"

    SiteBuilder(site_config, site_root, first).run()
    SiteBuilder(site_config, site_root, second, workers=4).run()

    assert _snapshot(first) == _snapshot(second)


def test_not_found_page_links_home(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    output_dir = tmp_path / "dist"

    SiteBuilder(site_config, site_root, output_dir).run()
    html = (output_dir / "404.html").read_text(encoding="utf-8")

    assert "<title>404 | Terra3</title>" in html
    assert 'href="/terraform-aws-terra3/"' in html


def test_fail_fast_stops_at_the_first_render_error(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    _add_broken_page(site_root)
    output_dir = tmp_path / "dist"

    report = SiteBuilder(site_config, site_root, output_dir, fail_fast=True).run()

    assert not report.ok
    assert len(report.errors) == 1
    error = report.errors[0]
    assert isinstance(error, RenderError)
    assert error.path == "broken.md"
    assert error.asset == "./images/missing.png"
    assert not (output_dir / "overview.html").exists()
    assert not (output_dir / "broken.html").exists()


@pytest.mark.parametrize("workers", [1, 3])
def test_collect_mode_renders_everything_else(
    site_root: Path, site_config: SiteConfig, tmp_path: Path, workers: int
) -> None:
    _add_broken_page(site_root)
    output_dir = tmp_path / "dist"

    report = SiteBuilder(
        site_config, site_root, output_dir, fail_fast=False, workers=workers
    ).run()

    assert [error.path for error in report.errors] == ["broken.md"]
    for page in PAGES:
        assert (output_dir / page).is_file()
    assert not (output_dir / "broken.html").exists()


def test_invalid_content_aborts_by_default(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    (site_root / "broken.md").write_text("---\ntitle: [unclosed\n---\n", encoding="utf-8")

    with pytest.raises(ContentParseError, match="broken.md"):
        SiteBuilder(site_config, site_root, tmp_path / "dist").run()


def test_invalid_content_can_be_skipped(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    (site_root / "broken.md").write_text("---\ntitle: [unclosed\n---\n", encoding="utf-8")
    config = dc.replace(
        site_config, build=dc.replace(site_config.build, skip_invalid_content=True)
    )
    output_dir = tmp_path / "dist"

    report = SiteBuilder(config, site_root, output_dir).run()

    assert len(report.errors) == 1
    assert isinstance(report.errors[0], ContentParseError)
    for page in PAGES:
        assert (output_dir / page).is_file()


def test_excluded_sources_are_not_built(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    (site_root / "drafts").mkdir()
    (site_root / "drafts" / "wip.md").write_text("# WIP\n", encoding="utf-8")
    config = dc.replace(
        site_config, build=dc.replace(site_config.build, src_exclude=("drafts/*",))
    )
    output_dir = tmp_path / "dist"

    SiteBuilder(config, site_root, output_dir).run()

    assert not (output_dir / "drafts").exists()


def test_shared_images_are_published_once(
    site_root: Path, site_config: SiteConfig, tmp_path: Path
) -> None:
    (site_root / "guide").mkdir()
    (site_root / "guide" / "architecture.md").write_text(
        "# Architecture\n\n![](../images/diagram.png)\n", encoding="utf-8"
    )
    output_dir = tmp_path / "dist"

    report = SiteBuilder(site_config, site_root, output_dir).run()

    assert report.ok
    assert len(list((output_dir / "assets").glob("diagram.*.png"))) == 1
