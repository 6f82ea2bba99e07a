"""Content loading: parse authored Markdown pages into documents."""

from .front_matter import dump_front_matter, parse_front_matter, split_front_matter
from .headings import extract_headers, slugify
from .loader import ContentSource, load_document
from .models import Document, Header

__all__ = [
    "ContentSource",
    "Document",
    "Header",
    "dump_front_matter",
    "extract_headers",
    "load_document",
    "parse_front_matter",
    "slugify",
    "split_front_matter",
]
