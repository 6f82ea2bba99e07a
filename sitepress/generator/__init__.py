"""Utilities for rendering documents and emitting the static site bundle."""

from .assets import AssetCollector
from .links import SiteLinkExtension, normalize_route, resolve_site_link
from .models import AssetRef, OutputUnit
from .page_generator import PageRenderer
from .renderer import HtmlContentRenderer

__all__ = [
    "AssetCollector",
    "AssetRef",
    "HtmlContentRenderer",
    "OutputUnit",
    "PageRenderer",
    "SiteLinkExtension",
    "normalize_route",
    "resolve_site_link",
]
