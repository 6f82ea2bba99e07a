r"""Split, parse, and serialize YAML front-matter blocks.

Front-matter is loaded with a ruamel.yaml round-trip instance so that dumping
an unchanged mapping reproduces the authored block byte for byte.

Example
-------
>>> from sitepress.content.front_matter import split_front_matter
>>> split_front_matter("---\ntitle: Overview\n---\n# Body\n")
('title: Overview\n', '# Body\n')
"""

from __future__ import annotations

import io
import sys
import typing as typ

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from sitepress.errors import ContentParseError

FENCE = "---"
BYTE_ORDER_MARK = "\ufeff"
DEFAULT_INDENT: typ.Final[dict[str, int]] = {"mapping": 2, "sequence": 4, "offset": 2}


def _build_roundtrip_yaml(indent: typ.Mapping[str, int] | None = None) -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = sys.maxsize
    yaml.indent(**(indent or DEFAULT_INDENT))
    return yaml


def _is_block(node: CommentedMap | CommentedSeq) -> bool:
    return bool(node) and node.lc.col is not None and not node.fa.flow_style()


def _authored_indent(node: object, found: dict[str, int]) -> None:
    """Record the nesting offsets of ``node`` from its loaded line/column marks.

    Only the first block mapping and the first block sequence seen under a key
    are measured; later collections are expected to follow the same layout.
    """
    if isinstance(node, CommentedSeq):
        for item in node:
            _authored_indent(item, found)
        return
    if not isinstance(node, CommentedMap) or not node.lc.data:
        return
    for key, value in node.items():
        marks = node.lc.data.get(key)
        if marks is not None and isinstance(value, (CommentedMap, CommentedSeq)):
            key_col = marks[1]
            if isinstance(value, CommentedMap) and _is_block(value):
                found.setdefault("mapping", value.lc.col - key_col)
            elif isinstance(value, CommentedSeq) and _is_block(value):
                first = (value.lc.data or {}).get(0)
                if first is not None and first[0] == value.lc.line:
                    found.setdefault("offset", value.lc.col - key_col)
                    found.setdefault("sequence", first[1] - key_col)
        _authored_indent(value, found)


def front_matter_indent(front_matter: typ.Mapping[str, typ.Any]) -> dict[str, int]:
    """Return the ``mapping``, ``sequence`` and ``offset`` indents of a block.

    Mappings built in code carry no line marks and get the defaults
    (two-space mappings, sequences indented two spaces under their key).

    Examples
    --------
    >>> front_matter_indent(parse_front_matter("tags:\\n- aws\\n"))
    {'mapping': 2, 'sequence': 2, 'offset': 0}
    """
    found: dict[str, int] = {}
    _authored_indent(front_matter, found)
    indent = dict(DEFAULT_INDENT)
    if "sequence" in found:
        indent["sequence"] = found["sequence"]
        indent["offset"] = found["offset"]
    if found.get("mapping", 0) > 0:
        indent["mapping"] = found["mapping"]
    return indent


def split_front_matter(text: str, path: str = "<string>") -> tuple[str | None, str]:
    """Return the raw front-matter block (or ``None``) and the remaining body.

    Raises
    ------
    ContentParseError
        If the text opens a front-matter fence that is never closed.
    """
    text = text.removeprefix(BYTE_ORDER_MARK)
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != FENCE:
        return None, text
    for idx in range(1, len(lines)):
        if lines[idx].rstrip("\r\n") == FENCE:
            return "".join(lines[1:idx]), "".join(lines[idx + 1 :])
    raise ContentParseError(path, "front-matter block is not terminated by '---'")


def parse_front_matter(source: str | None, path: str = "<string>") -> CommentedMap:
    """Parse a raw front-matter block into a round-trip mapping.

    Raises
    ------
    ContentParseError
        If the YAML is malformed or its top level is not a mapping.
    """
    if source is None or not source.strip():
        return CommentedMap()
    try:
        loaded = _build_roundtrip_yaml().load(source)
    except YAMLError as exc:
        msg = f"malformed front-matter: {exc}"
        raise ContentParseError(path, msg) from exc
    if loaded is None:
        return CommentedMap()
    if not isinstance(loaded, CommentedMap):
        raise ContentParseError(path, "front-matter must be a mapping")
    return loaded


def dump_front_matter(front_matter: typ.Mapping[str, typ.Any]) -> str:
    """Serialize front-matter back to YAML using the round-trip settings.

    The indentation is measured from the parsed mapping, so an unchanged
    block is written back exactly as it was authored. Long scalars are never
    folded.
    """
    if not front_matter:
        return ""
    buffer = io.StringIO()
    _build_roundtrip_yaml(front_matter_indent(front_matter)).dump(front_matter, buffer)
    return buffer.getvalue()


__all__ = [
    "dump_front_matter",
    "front_matter_indent",
    "parse_front_matter",
    "split_front_matter",
]
