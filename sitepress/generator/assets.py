"""Resolve asset references to content-addressed or public-directory URLs."""

from __future__ import annotations

import hashlib
import posixpath
import typing as typ
from urllib.parse import unquote, urlsplit

from sitepress._constants import ASSET_DIGEST_LENGTH, ASSET_NAME_TEMPLATE, ASSETS_DIR
from sitepress.errors import RenderError
from sitepress.generator.models import AssetRef

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitepress.config import SiteConfig


class AssetCollector:
    """Resolve the asset references of one document and record the copies.

    Relative references are resolved against the document's directory and
    published as ``assets/<stem>.<digest><suffix>``, where the digest is a
    prefix of the file's SHA-256. Site-absolute references must exist in the
    public directory, which is copied verbatim.
    """

    def __init__(self, config: SiteConfig, content_root: Path) -> None:
        self.config = config
        self.content_root = content_root.resolve()
        self.public_root = self.content_root / config.build.public_dir
        self.refs: list[AssetRef] = []

    def resolve(self, reference: str, document_path: str) -> str:
        """Return the published URL for ``reference`` found in ``document_path``.

        Raises
        ------
        RenderError
            If the referenced file does not exist.
        """
        parsed = urlsplit(reference)
        path = unquote(parsed.path)
        if path.startswith("/"):
            url = self._resolve_public(path, reference, document_path)
        else:
            url = self._resolve_relative(path, reference, document_path)
        if parsed.fragment:
            url = f"{url}#{parsed.fragment}"
        return url

    def _resolve_public(self, path: str, reference: str, document_path: str) -> str:
        base = self.config.base or "/"
        if base != "/" and path.startswith(base):
            path = "/" + path[len(base) :]
        candidate = self.public_root / path.lstrip("/")
        if not candidate.is_file():
            raise _missing(document_path, reference)
        return self.config.with_base(path)

    def _resolve_relative(self, path: str, reference: str, document_path: str) -> str:
        joined = posixpath.normpath(
            posixpath.join(posixpath.dirname(document_path), path)
        )
        candidate = (self.content_root / joined).resolve()
        if not candidate.is_relative_to(self.content_root) or not candidate.is_file():
            raise _missing(document_path, reference)
        digest = hashlib.sha256(candidate.read_bytes()).hexdigest()
        name = ASSET_NAME_TEMPLATE.format(
            stem=candidate.stem,
            digest=digest[:ASSET_DIGEST_LENGTH],
            suffix=candidate.suffix,
        )
        target = f"{ASSETS_DIR}/{name}"
        self.refs.append(AssetRef(source=candidate, target=target))
        return self.config.with_base(f"/{target}")


def _missing(document_path: str, reference: str) -> RenderError:
    return RenderError(
        document_path, f"cannot resolve asset '{reference}'", asset=reference
    )


__all__ = ["AssetCollector"]
