"""Static documentation site generator.

This package turns a tree of Markdown pages with YAML front-matter and a
single site configuration file into a deployable static bundle, exposed
through the ``sitepress`` console script.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from sitepress import main
>>> main()  # doctest: +SKIP
>>> callable(main)
True
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
