"""Shared dataclasses used by the page generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


@dc.dataclass(frozen=True, slots=True)
class AssetRef:
    """A source file published under the output directory.

    Attributes
    ----------
    source : Path
        Absolute path of the referenced file in the content tree.
    target : str
        POSIX path of the copy inside the output directory.
    """

    source: Path
    target: str


@dc.dataclass(frozen=True, slots=True)
class OutputUnit:
    """The rendered artefact for one document.

    Attributes
    ----------
    relative_path : str
        Content path of the source document.
    output_path : str
        POSIX path of the HTML file inside the output directory.
    url : str
        Public URL of the page, including the base prefix.
    html : str
        Complete rendered page markup.
    page_data : Mapping
        Metadata payload: title, description, frontmatter, headers,
        relativePath, outputPath and (when enabled) lastUpdated.
    data_path : str
        POSIX path of the serialized page data inside the output directory.
    assets : tuple[AssetRef, ...]
        Files the page references that must be copied alongside it.
    """

    relative_path: str
    output_path: str
    url: str
    html: str
    page_data: typ.Mapping[str, typ.Any]
    data_path: str
    assets: tuple[AssetRef, ...] = ()


__all__ = ["AssetRef", "OutputUnit"]
