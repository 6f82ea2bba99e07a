"""Project the configured navigation trees onto a single rendered page.

The projections are plain dictionaries consumed by the Jinja templates. An
entry is flagged ``active`` when its link points at the page being rendered;
groups and dropdowns are ``active`` when any descendant is.
"""

from __future__ import annotations

import typing as typ

from sitepress.generator.links import is_external, normalize_route, resolve_href

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from sitepress.config import NavItem, SidebarGroup, SidebarItem, SiteConfig


def _project_link(
    text: str, link: str | None, config: SiteConfig, route: str
) -> dict[str, typ.Any]:
    external = bool(link) and is_external(link)
    active = bool(link) and not external and normalize_route(link, config) == route
    return {
        "text": text,
        "href": resolve_href(link, config) if link else None,
        "external": external,
        "active": active,
        "items": [],
    }


def build_nav(
    items: cabc.Iterable[NavItem], config: SiteConfig, route: str
) -> list[dict[str, typ.Any]]:
    """Return the top navigation entries for the page at ``route``."""
    entries: list[dict[str, typ.Any]] = []
    for item in items:
        entry = _project_link(item.text, item.link, config, route)
        if item.items:
            entry["items"] = build_nav(item.items, config, route)
            entry["active"] = entry["active"] or any(
                child["active"] for child in entry["items"]
            )
        entries.append(entry)
    return entries


def _build_sidebar_items(
    items: cabc.Iterable[SidebarItem], config: SiteConfig, route: str
) -> list[dict[str, typ.Any]]:
    entries: list[dict[str, typ.Any]] = []
    for item in items:
        entry = _project_link(item.text, item.link, config, route)
        entry["items"] = _build_sidebar_items(item.items, config, route)
        entry["has_active_child"] = any(
            child["active"] or child["has_active_child"] for child in entry["items"]
        )
        entries.append(entry)
    return entries


def build_sidebar(
    groups: cabc.Iterable[SidebarGroup], config: SiteConfig, route: str
) -> list[dict[str, typ.Any]]:
    """Return the sidebar groups for the page at ``route``.

    A group with a ``link`` gets a linked title that can itself be the active
    entry. A collapsed group is rendered expanded when it contains the active
    page.
    """
    projected: list[dict[str, typ.Any]] = []
    for group in groups:
        entry = _project_link(group.text, group.link, config, route)
        items = _build_sidebar_items(group.items, config, route)
        contains_active = entry["active"] or any(
            item["active"] or item["has_active_child"] for item in items
        )
        projected.append(
            {
                **entry,
                "collapsible": group.collapsible,
                "collapsed": group.collapsed and not contains_active,
                "contains_active": contains_active,
                "items": items,
            }
        )
    return projected


def _flatten(items: cabc.Iterable[dict[str, typ.Any]]) -> cabc.Iterator[dict[str, typ.Any]]:
    for item in items:
        if item["href"] and not item["external"]:
            yield item
        yield from _flatten(item["items"])


def find_neighbours(
    sidebar: list[dict[str, typ.Any]],
) -> tuple[dict[str, typ.Any] | None, dict[str, typ.Any] | None]:
    """Return the sidebar entries before and after the active one."""
    links = list(_flatten(sidebar))
    for idx, item in enumerate(links):
        if item["active"]:
            previous = links[idx - 1] if idx > 0 else None
            following = links[idx + 1] if idx + 1 < len(links) else None
            return previous, following
    return None, None


__all__ = ["build_nav", "build_sidebar", "find_neighbours"]
