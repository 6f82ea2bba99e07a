"""Configuration models and loader for sitepress.

Exports
-------
- ``load_site_config``: read and validate the site configuration file.
- ``build_site_config``: validate an already-parsed configuration mapping.
- ``SiteConfig`` and the nested theme/navigation/build dataclasses.
"""

from __future__ import annotations

from sitepress.errors import ConfigurationError

from .loader import build_site_config, load_site_config
from .models import (
    BuildOptions,
    EditLinkConfig,
    FooterConfig,
    NavItem,
    SidebarGroup,
    SidebarItem,
    SiteConfig,
    SocialLink,
    ThemeConfig,
)

__all__ = [
    "BuildOptions",
    "ConfigurationError",
    "EditLinkConfig",
    "FooterConfig",
    "NavItem",
    "SidebarGroup",
    "SidebarItem",
    "SiteConfig",
    "SocialLink",
    "ThemeConfig",
    "build_site_config",
    "load_site_config",
]
