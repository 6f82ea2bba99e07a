"""Orchestrate a full site build from content tree to output directory.

:class:`SiteBuilder` wires the three stages together. The configuration is
resolved by the caller and shared read-only; documents are loaded lazily and
each one is rendered and emitted independently, optionally on a thread pool.
Rendering failures are collected in a :class:`BuildReport` (stopping early in
fail-fast mode), while filesystem errors always propagate.

Example
-------
>>> from pathlib import Path
>>> from sitepress.builder import SiteBuilder
>>> from sitepress.config import load_site_config
>>> config = load_site_config(Path("docs/.sitepress/config.yaml"))  # doctest: +SKIP
>>> report = SiteBuilder(config, Path("docs"), Path("dist")).run()  # doctest: +SKIP
>>> report.ok  # doctest: +SKIP
True
"""

from __future__ import annotations

import dataclasses as dc
import shutil
import typing as typ
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from sitepress._constants import NOT_FOUND_PAGE
from sitepress.content import ContentSource
from sitepress.errors import RenderError, SitepressError
from sitepress.generator import PageRenderer

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from sitepress.config import SiteConfig
    from sitepress.content import Document


@dc.dataclass(slots=True)
class BuildReport:
    """Outcome of one build: written files and collected errors."""

    written: list[Path] = dc.field(default_factory=list)
    errors: list[SitepressError] = dc.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return ``True`` when the build finished without errors."""
        return not self.errors


class SiteBuilder:
    """Build every document below a content root into an output directory."""

    def __init__(
        self,
        config: SiteConfig,
        content_root: Path,
        output_dir: Path,
        *,
        fail_fast: bool | None = None,
        workers: int | None = None,
        templates_dir: Path | None = None,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration.
        content_root : Path
            Directory holding the Markdown sources.
        output_dir : Path
            Destination of the static bundle.
        fail_fast : bool, optional
            Override ``build.failFast`` from the configuration.
        workers : int, optional
            Override ``build.workers`` from the configuration.
        templates_dir : Path, optional
            Alternative Jinja template directory.
        """
        self.config = config
        self.content_root = content_root
        self.output_dir = output_dir
        self.fail_fast = config.build.fail_fast if fail_fast is None else fail_fast
        self.workers = config.build.workers if workers is None else max(1, workers)
        self.renderer = PageRenderer(
            config, content_root=content_root, templates_dir=templates_dir
        )

    def run(self) -> BuildReport:
        """Render and write the whole site.

        Returns
        -------
        BuildReport
            Written paths in sorted order plus any collected errors.

        Raises
        ------
        ContentParseError
            If a document is malformed and ``build.skipInvalidContent`` is off.
        OSError
            If reading sources or writing outputs fails.
        """
        report = BuildReport()
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report.written.extend(self._copy_public_dir())

        on_error = report.errors.append if self.config.build.skip_invalid_content else None
        documents = ContentSource(
            self.content_root,
            exclude=self.config.build.src_exclude,
            public_dir=self.config.build.public_dir,
            last_updated=self.config.last_updated,
            on_error=on_error,
        )
        if self.workers > 1:
            self._run_parallel(documents, report)
        else:
            self._run_serial(documents, report)

        not_found = self.output_dir / NOT_FOUND_PAGE
        not_found.write_text(self.renderer.render_not_found(), encoding="utf-8")
        report.written.append(not_found)
        report.written.sort()
        return report

    def _render_one(self, document: Document) -> Path:
        unit = self.renderer.render(document)
        return self.renderer.emit(unit, self.output_dir)

    def _run_serial(
        self, documents: cabc.Iterable[Document], report: BuildReport
    ) -> None:
        for document in documents:
            try:
                report.written.append(self._render_one(document))
            except RenderError as exc:
                report.errors.append(exc)
                if self.fail_fast:
                    return

    def _run_parallel(
        self, documents: cabc.Iterable[Document], report: BuildReport
    ) -> None:
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            futures: list[Future[Path]] = []
            try:
                for document in documents:
                    futures.append(pool.submit(self._render_one, document))
            except BaseException:
                _cancel_pending(futures)
                raise
            for future in as_completed(futures):
                if future.cancelled():
                    continue
                try:
                    report.written.append(future.result())
                except RenderError as exc:
                    report.errors.append(exc)
                    if self.fail_fast:
                        _cancel_pending(futures)
                except BaseException:
                    _cancel_pending(futures)
                    raise
        report.errors.sort(key=str)

    def _copy_public_dir(self) -> list[Path]:
        """Copy the public directory verbatim into the output directory."""
        public = self.content_root / self.config.build.public_dir
        if not public.is_dir():
            return []
        shutil.copytree(public, self.output_dir, dirs_exist_ok=True)
        return [
            self.output_dir / path.relative_to(public)
            for path in public.rglob("*")
            if path.is_file()
        ]


def _cancel_pending(futures: cabc.Iterable[Future[Path]]) -> None:
    """Stop scheduling work that has not started; in-flight work finishes."""
    for future in futures:
        future.cancel()


__all__ = ["BuildReport", "SiteBuilder"]
