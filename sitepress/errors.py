"""Exception hierarchy raised while building a sitepress site.

Every error carries enough context (file path, field name, asset path) for the
CLI to print an actionable message. Filesystem failures are not wrapped: they
surface as plain :class:`OSError` and always abort the run.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class SitepressError(Exception):
    """Base class for all sitepress build errors."""


class ConfigurationError(SitepressError, ValueError):
    """Raised when the site configuration is missing or invalid.

    Attributes
    ----------
    field : str
        Dotted path of the offending option (for example
        ``themeConfig.editLink.pattern``).
    """

    def __init__(self, field: str, problem: str) -> None:
        self.field = field
        self.problem = problem
        super().__init__(f"Invalid configuration field '{field}': {problem}")


class ContentParseError(SitepressError):
    """Raised when a content file's front-matter or encoding is malformed."""

    def __init__(self, path: Path | str, problem: str) -> None:
        self.path = str(path)
        self.problem = problem
        super().__init__(f"{self.path}: {problem}")


class RenderError(SitepressError):
    """Raised when a document cannot be rendered into an output unit."""

    def __init__(self, path: str, problem: str, *, asset: str | None = None) -> None:
        self.path = path
        self.asset = asset
        self.problem = problem
        super().__init__(f"{path}: {problem}")


__all__ = [
    "ConfigurationError",
    "ContentParseError",
    "RenderError",
    "SitepressError",
]
