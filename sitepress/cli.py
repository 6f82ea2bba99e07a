"""Cyclopts CLI entrypoint for building sitepress documentation sites.

The ``sitepress`` console script defined here renders a tree of Markdown
pages into a static bundle. Typical usage runs ``sitepress build docs dist``
locally or in CI; the configuration is read from
``docs/.sitepress/config.yaml`` unless ``--config`` points elsewhere.

Exit status is ``0`` on success, ``2`` when the configuration is invalid and
``1`` for any other fatal or collected build error. Written paths are printed
after the build; error messages are printed once, together, on stderr.

Examples
--------
Build the site with the default configuration:

>>> from sitepress.cli import app
>>> app(["build", "docs", "dist"])  # doctest: +SKIP

Collect every rendering error instead of stopping at the first one:

>>> app(["build", "docs", "dist", "--no-fail-fast", "--workers", "4"])  # doctest: +SKIP
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG_PATH
from .builder import SiteBuilder
from .config import load_site_config
from .errors import ConfigurationError, SitepressError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

EXIT_BUILD_ERROR = 1
EXIT_CONFIG_ERROR = 2

app = App(name="sitepress", help="Static documentation site generator.")


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def _report_errors(errors: cabc.Iterable[BaseException]) -> None:
    """Print every collected error message once, on stderr."""
    for error in errors:
        print(f"error: {error}", file=sys.stderr)


@app.command(help="Build the static site from a content tree.")
def build(
    content_root: typ.Annotated[
        Path, Parameter(help="Directory containing the Markdown sources")
    ],
    output_dir: typ.Annotated[
        Path, Parameter(help="Directory receiving the generated site")
    ],
    *,
    config: typ.Annotated[
        Path | None,
        Parameter(help="Path to the site config (default: <content>/.sitepress/config.yaml)"),
    ] = None,
    fail_fast: typ.Annotated[
        bool | None,
        Parameter(help="Abort on the first rendering error (overrides build.failFast)"),
    ] = None,
    workers: typ.Annotated[
        int | None,
        Parameter(help="Number of render threads (overrides build.workers)"),
    ] = None,
) -> None:
    """Build the documentation site.

    Parameters
    ----------
    content_root : Path
        Directory containing the authored Markdown pages.
    output_dir : Path
        Directory receiving the HTML pages, page data and assets.
    config : Path or None, optional
        Site configuration file; defaults to
        ``<content_root>/.sitepress/config.yaml``.
    fail_fast : bool or None, optional
        Stop at the first rendering error when ``True``; collect all errors
        when ``False``. ``None`` defers to the configuration.
    workers : int or None, optional
        Render documents on this many threads. ``None`` defers to the
        configuration.

    Raises
    ------
    SystemExit
        With status ``2`` on a configuration error and ``1`` on any other
        build failure.
    """
    config_path = config or content_root / DEFAULT_CONFIG_PATH
    try:
        site_config = load_site_config(config_path)
    except ConfigurationError as exc:
        _report_errors([exc])
        raise SystemExit(EXIT_CONFIG_ERROR) from exc

    builder = SiteBuilder(
        site_config, content_root, output_dir, fail_fast=fail_fast, workers=workers
    )
    try:
        report = builder.run()
    except (SitepressError, OSError) as exc:
        _report_errors([exc])
        raise SystemExit(EXIT_BUILD_ERROR) from exc

    for path in report.written:
        print(f"wrote {_format_path(path)}")
    if not report.ok:
        _report_errors(report.errors)
        raise SystemExit(EXIT_BUILD_ERROR)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``sitepress`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
