"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from sitepress._constants import EDIT_LINK_PLACEHOLDER
from sitepress.errors import ConfigurationError

from .helpers import (
    _check_keys,
    _field,
    _get_bool,
    _get_int,
    _get_str,
    _get_str_list,
    _require_list,
    _require_mapping,
)
from .models import (
    BuildOptions,
    EditLinkConfig,
    FooterConfig,
    NavItem,
    Sidebar,
    SidebarGroup,
    SidebarItem,
    SiteConfig,
    SocialLink,
    ThemeConfig,
)

SITE_KEYS = frozenset(
    {
        "title",
        "base",
        "description",
        "lastUpdated",
        "lang",
        "titleTemplate",
        "cleanUrls",
        "themeConfig",
        "build",
    }
)
THEME_KEYS = frozenset(
    {
        "nav",
        "sidebar",
        "footer",
        "editLink",
        "socialLinks",
        "logo",
        "siteTitle",
        "lastUpdatedText",
        "outlineTitle",
    }
)
BUILD_KEYS = frozenset(
    {
        "failFast",
        "skipInvalidContent",
        "workers",
        "srcExclude",
        "publicDir",
        "pygmentsStyle",
    }
)
DEFAULT_EDIT_LINK_TEXT = "Edit this page"
LINK_KEYS = frozenset({"text", "link", "items"})
SIDEBAR_GROUP_KEYS = frozenset({"text", "link", "items", "collapsible", "collapsed"})


def load_site_config(path: Path) -> SiteConfig:
    """Load and validate the site configuration stored at ``path``.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML (or JSON) configuration file, for example
        ``docs/.sitepress/config.yaml``.

    Returns
    -------
    SiteConfig
        Fully validated configuration with every option resolved to its
        declared default when absent.

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable or unparsable, or if any option is
        missing, unrecognized or of the wrong type.

    Examples
    --------
    >>> from pathlib import Path
    >>> from sitepress.config import load_site_config
    >>> config = load_site_config(Path("docs/.sitepress/config.yaml"))  # doctest: +SKIP
    >>> config.base  # doctest: +SKIP
    '/terraform-aws-terra3/'
    """
    if not path.exists():
        raise ConfigurationError(str(path), "configuration file not found")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"cannot read configuration file: {exc}"
        raise ConfigurationError(str(path), msg) from exc

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(text)
    except YAMLError as exc:
        raise ConfigurationError(str(path), f"cannot parse YAML: {exc}") from exc
    if loaded is None:
        loaded = {}
    return build_site_config(_require_mapping(loaded, str(path)))


def build_site_config(raw: typ.Mapping[str, typ.Any]) -> SiteConfig:
    """Validate a raw configuration mapping and build a :class:`SiteConfig`."""
    _check_keys(raw, SITE_KEYS, "")
    title = _get_str(raw, "title", "")
    if not title.strip():
        raise ConfigurationError("title", "must not be empty")

    theme_raw = raw.get("themeConfig") or {}
    build_raw = raw.get("build") or {}

    return SiteConfig(
        title=title,
        base=_get_str(raw, "base", "", "/"),
        description=_get_str(raw, "description", "", ""),
        lang=_get_str(raw, "lang", "", "en-US"),
        last_updated=_get_bool(raw, "lastUpdated", "", default=False),
        title_template=_get_str(raw, "titleTemplate", "", None),
        clean_urls=_get_bool(raw, "cleanUrls", "", default=False),
        theme=_build_theme_config(_require_mapping(theme_raw, "themeConfig")),
        build=_build_build_options(_require_mapping(build_raw, "build")),
    )


def _build_theme_config(payload: typ.Mapping[str, typ.Any]) -> ThemeConfig:
    """Build the ThemeConfig from the ``themeConfig`` mapping."""
    prefix = "themeConfig"
    _check_keys(payload, THEME_KEYS, prefix)

    site_title = payload.get("siteTitle")
    if site_title is not None and site_title is not False:
        site_title = _get_str(payload, "siteTitle", prefix)

    nav_raw = payload.get("nav") or []
    nav = tuple(
        _build_nav_item(item, f"{prefix}.nav[{idx}]")
        for idx, item in enumerate(_require_list(nav_raw, f"{prefix}.nav"))
    )

    base = ThemeConfig()
    return ThemeConfig(
        nav=nav,
        sidebar=_build_sidebar(payload.get("sidebar"), f"{prefix}.sidebar"),
        footer=_build_footer(payload.get("footer"), f"{prefix}.footer"),
        edit_link=_build_edit_link(payload.get("editLink"), f"{prefix}.editLink"),
        social_links=_build_social_links(
            payload.get("socialLinks"), f"{prefix}.socialLinks"
        ),
        logo=_get_str(payload, "logo", prefix, None),
        site_title=site_title,
        last_updated_text=_get_str(
            payload, "lastUpdatedText", prefix, base.last_updated_text
        ),
        outline_title=_get_str(payload, "outlineTitle", prefix, base.outline_title),
    )


def _build_nav_item(value: object, field: str) -> NavItem:
    """Build a NavItem, requiring either ``link`` or nested ``items``."""
    payload = _require_mapping(value, field)
    _check_keys(payload, LINK_KEYS, field)
    text = _get_str(payload, "text", field)
    link = _get_str(payload, "link", field, None)
    items_raw = payload.get("items")
    items: tuple[NavItem, ...] = ()
    if items_raw is not None:
        items = tuple(
            _build_nav_item(child, f"{field}.items[{idx}]")
            for idx, child in enumerate(_require_list(items_raw, f"{field}.items"))
        )
    if link is None and not items:
        raise ConfigurationError(field, "entry needs either 'link' or 'items'")
    return NavItem(text=text, link=link, items=items)


def _build_sidebar(value: object, field: str) -> Sidebar:
    """Build a single sidebar or a route-prefix keyed multi-sidebar."""
    if value is None:
        return ()
    if isinstance(value, dict):
        sidebars: dict[str, tuple[SidebarGroup, ...]] = {}
        for prefix, groups in value.items():
            key = str(prefix)
            if not key.startswith("/"):
                raise ConfigurationError(
                    _field(field, key), "sidebar route prefix must start with '/'"
                )
            sidebars[key] = _build_sidebar_groups(groups, _field(field, key))
        return sidebars
    return _build_sidebar_groups(value, field)


def _build_sidebar_groups(value: object, field: str) -> tuple[SidebarGroup, ...]:
    """Build the ordered sidebar groups of one sidebar."""
    groups: list[SidebarGroup] = []
    for idx, entry in enumerate(_require_list(value, field)):
        entry_field = f"{field}[{idx}]"
        payload = _require_mapping(entry, entry_field)
        _check_keys(payload, SIDEBAR_GROUP_KEYS, entry_field)
        items_raw = payload.get("items")
        link = _get_str(payload, "link", entry_field, None)
        if items_raw is None:
            if link is None:
                raise ConfigurationError(
                    entry_field, "entry needs either 'link' or 'items'"
                )
            # A bare link at the top level becomes a single-item group.
            items = (SidebarItem(text=_get_str(payload, "text", entry_field), link=link),)
            groups.append(SidebarGroup(text="", items=items))
            continue
        items = tuple(
            _build_sidebar_item(child, f"{entry_field}.items[{child_idx}]")
            for child_idx, child in enumerate(
                _require_list(items_raw, f"{entry_field}.items")
            )
        )
        groups.append(
            SidebarGroup(
                text=_get_str(payload, "text", entry_field),
                items=items,
                link=link,
                collapsible=_get_bool(
                    payload, "collapsible", entry_field, default=False
                ),
                collapsed=_get_bool(payload, "collapsed", entry_field, default=False),
            )
        )
    return tuple(groups)


def _build_sidebar_item(value: object, field: str) -> SidebarItem:
    """Build a SidebarItem, requiring either ``link`` or nested ``items``."""
    payload = _require_mapping(value, field)
    _check_keys(payload, LINK_KEYS, field)
    text = _get_str(payload, "text", field)
    link = _get_str(payload, "link", field, None)
    items_raw = payload.get("items")
    items: tuple[SidebarItem, ...] = ()
    if items_raw is not None:
        items = tuple(
            _build_sidebar_item(child, f"{field}.items[{idx}]")
            for idx, child in enumerate(_require_list(items_raw, f"{field}.items"))
        )
    if link is None and not items:
        raise ConfigurationError(field, "entry needs either 'link' or 'items'")
    return SidebarItem(text=text, link=link, items=items)


def _build_footer(value: object, field: str) -> FooterConfig | None:
    """Build the footer block when present."""
    if value is None:
        return None
    payload = _require_mapping(value, field)
    _check_keys(payload, {"message", "copyright"}, field)
    return FooterConfig(
        message=_get_str(payload, "message", field, ""),
        copyright=_get_str(payload, "copyright", field, ""),
    )


def _build_edit_link(value: object, field: str) -> EditLinkConfig | None:
    """Build the edit-link template, which must carry a ``:path`` placeholder."""
    if value is None:
        return None
    payload = _require_mapping(value, field)
    _check_keys(payload, {"pattern", "text"}, field)
    pattern = _get_str(payload, "pattern", field)
    if EDIT_LINK_PLACEHOLDER not in pattern:
        raise ConfigurationError(
            _field(field, "pattern"),
            f"URL template must contain the '{EDIT_LINK_PLACEHOLDER}' placeholder",
        )
    return EditLinkConfig(
        pattern=pattern,
        text=_get_str(payload, "text", field, DEFAULT_EDIT_LINK_TEXT),
    )


def _build_social_links(value: object, field: str) -> tuple[SocialLink, ...]:
    """Build the ordered social links."""
    if value is None:
        return ()
    links: list[SocialLink] = []
    for idx, entry in enumerate(_require_list(value, field)):
        entry_field = f"{field}[{idx}]"
        payload = _require_mapping(entry, entry_field)
        _check_keys(payload, {"icon", "link"}, entry_field)
        links.append(
            SocialLink(
                icon=_get_str(payload, "icon", entry_field),
                link=_get_str(payload, "link", entry_field),
            )
        )
    return tuple(links)


def _build_build_options(payload: typ.Mapping[str, typ.Any]) -> BuildOptions:
    """Build generator behaviour switches from the ``build`` mapping."""
    prefix = "build"
    _check_keys(payload, BUILD_KEYS, prefix)
    base = BuildOptions()
    return BuildOptions(
        fail_fast=_get_bool(payload, "failFast", prefix, default=base.fail_fast),
        skip_invalid_content=_get_bool(
            payload, "skipInvalidContent", prefix, default=base.skip_invalid_content
        ),
        workers=_get_int(payload, "workers", prefix, default=base.workers, minimum=1),
        src_exclude=_get_str_list(payload, "srcExclude", prefix),
        public_dir=_get_str(payload, "publicDir", prefix, base.public_dir),
        pygments_style=_get_str(payload, "pygmentsStyle", prefix, base.pygments_style),
    )


__all__ = ["build_site_config", "load_site_config"]
