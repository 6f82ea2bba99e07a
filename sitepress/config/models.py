"""Typed dataclasses describing sitepress site configuration structures."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from sitepress.errors import ConfigurationError


@dc.dataclass(frozen=True, slots=True)
class NavItem:
    """Top navigation entry: a plain link or a dropdown of nested items."""

    text: str
    link: str | None = None
    items: tuple[NavItem, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class SidebarItem:
    """Sidebar leaf link or nested item group."""

    text: str
    link: str | None = None
    items: tuple[SidebarItem, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class SidebarGroup:
    """Collapsible group of sidebar items."""

    text: str
    items: tuple[SidebarItem, ...] = ()
    link: str | None = None
    collapsible: bool = False
    collapsed: bool = False


@dc.dataclass(frozen=True, slots=True)
class FooterConfig:
    """Footer copy shown at the bottom of every page."""

    message: str = ""
    copyright: str = ""


@dc.dataclass(frozen=True, slots=True)
class EditLinkConfig:
    """URL template linking each page to its editable source."""

    pattern: str
    text: str = "Edit this page"

    def url_for(self, relative_path: str) -> str:
        """Return the edit URL for the document at ``relative_path``."""
        return self.pattern.replace(":path", relative_path)


@dc.dataclass(frozen=True, slots=True)
class SocialLink:
    """Icon link rendered in the navigation bar."""

    icon: str
    link: str


Sidebar = tuple[SidebarGroup, ...] | dict[str, tuple[SidebarGroup, ...]]


@dc.dataclass(frozen=True, slots=True)
class ThemeConfig:
    """Visual and navigational settings from the ``themeConfig`` block."""

    nav: tuple[NavItem, ...] = ()
    sidebar: Sidebar = ()
    footer: FooterConfig | None = None
    edit_link: EditLinkConfig | None = None
    social_links: tuple[SocialLink, ...] = ()
    logo: str | None = None
    site_title: str | typ.Literal[False] | None = None
    last_updated_text: str = "Last Updated"
    outline_title: str = "On this page"

    def sidebar_for(self, route: str) -> tuple[SidebarGroup, ...]:
        """Return the sidebar groups that apply to ``route``.

        A multi-sidebar configuration maps route prefixes to group lists; the
        longest matching prefix wins. Routes without a match get no sidebar.
        """
        if not isinstance(self.sidebar, dict):
            return self.sidebar
        matches = [prefix for prefix in self.sidebar if route.startswith(prefix)]
        if not matches:
            return ()
        return self.sidebar[max(matches, key=len)]


@dc.dataclass(frozen=True, slots=True)
class BuildOptions:
    """Generator behaviour switches from the ``build`` block."""

    fail_fast: bool = True
    skip_invalid_content: bool = False
    workers: int = 1
    src_exclude: tuple[str, ...] = ()
    public_dir: str = "public"
    pygments_style: str = "monokai"


@dc.dataclass(frozen=True, slots=True)
class SiteConfig:
    """Process-wide configuration resolved once before rendering."""

    title: str
    base: str = "/"
    description: str = ""
    lang: str = "en-US"
    last_updated: bool = False
    title_template: str | None = None
    clean_urls: bool = False
    theme: ThemeConfig = dc.field(default_factory=ThemeConfig)
    build: BuildOptions = dc.field(default_factory=BuildOptions)

    def __post_init__(self) -> None:
        """Enforce the base path invariant."""
        if self.base and not (self.base.startswith("/") and self.base.endswith("/")):
            msg = f"must start and end with '/', got {self.base!r}"
            raise ConfigurationError("base", msg)

    def with_base(self, path: str) -> str:
        """Prefix a site-absolute ``path`` with the base exactly once."""
        base = self.base or "/"
        if path.startswith(base):
            return path
        return base + path.lstrip("/")


__all__ = [
    "BuildOptions",
    "EditLinkConfig",
    "FooterConfig",
    "NavItem",
    "Sidebar",
    "SidebarGroup",
    "SidebarItem",
    "SiteConfig",
    "SocialLink",
    "ThemeConfig",
]
