"""Common literal values used across sitepress.

These constants keep filenames and suffixes centralized so the loader, the
renderer, templates, and tests can import the same values without drifting.
Intended for internal use within the sitepress package.

Examples
--------
>>> from sitepress import _constants
>>> _constants.PAGE_DATA_TEMPLATE.format(name="guide_intro.md")
'assets/guide_intro.md.json'
>>> _constants.DEFAULT_CONFIG_PATH.as_posix()
'.sitepress/config.yaml'
"""

from pathlib import Path

CONTENT_SUFFIX = ".md"
OUTPUT_SUFFIX = ".html"
ASSETS_DIR = "assets"
PAGE_DATA_TEMPLATE = ASSETS_DIR + "/{name}.json"
ASSET_NAME_TEMPLATE = "{stem}.{digest}{suffix}"
ASSET_DIGEST_LENGTH = 8
NOT_FOUND_PAGE = "404.html"
DEFAULT_CONFIG_PATH = Path(".sitepress/config.yaml")
DEFAULT_HEADER_LEVELS = (2, 3)
EDIT_LINK_PLACEHOLDER = ":path"
TITLE_PLACEHOLDER = ":title"
# Link suffixes served as files; any other suffix is part of a page name.
ASSET_SUFFIXES = frozenset(
    {
        ".avif", ".bmp", ".css", ".csv", ".doc", ".docx", ".epub", ".gif",
        ".gz", ".ico", ".jpeg", ".jpg", ".js", ".json", ".mov", ".mp3", ".mp4",
        ".ogg", ".pdf", ".png", ".svg", ".tar", ".tf", ".tgz", ".tiff", ".ttf",
        ".txt", ".wav", ".webm", ".webp", ".woff", ".woff2", ".xml", ".yaml",
        ".yml", ".zip",
    }
)  # fmt: skip
