#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for adoc2node.

Constants are organized by category:
1. Source Selection - Which source nodes are processed
2. Attributes - Document attribute conventions
3. Node Shape - Identity and type of the emitted content nodes
4. Extensions - Plugin discovery settings
5. Configuration Files - Names searched by the config loader
6. Logging - Command line log levels
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Source Selection
# =============================================================================

DEFAULT_FILE_EXTENSIONS: tuple[str, ...] = ("adoc", "asciidoc")

# =============================================================================
# Attributes
# =============================================================================

DEFAULT_IMAGES_DIR = "/images@"
IMAGES_DIR_ATTRIBUTE = "imagesdir"
PAGE_ATTRIBUTE_PREFIX = "page-"

# Trailing marker for attribute values the document is allowed to override
SOFT_SET_SUFFIX = "@"

DEFAULT_BACKEND = "html5"
DEFAULT_DOCTYPE = "article"

# Attributes whose presence in the header declares revision info
REVISION_ATTRIBUTES: tuple[str, ...] = ("revnumber", "revdate", "revremark")

# =============================================================================
# Node Shape
# =============================================================================

NODE_TYPE = "Asciidoc"
NODE_MEDIA_TYPE = "text/html"
NODE_ID_SEED_SUFFIX = " >>> ASCIIDOC"

# Subtitle separator used when partitioning a document title
TITLE_SEPARATOR = ": "

# =============================================================================
# Extensions
# =============================================================================

EXTENSION_ENTRY_POINT_GROUP = "adoc2node.extensions"

# =============================================================================
# Configuration Files
# =============================================================================

CONFIG_FILENAMES: tuple[str, ...] = (
    ".adoc2node.toml",
    ".adoc2node.yaml",
    ".adoc2node.yml",
    ".adoc2node.json",
)
PYPROJECT_TOOL_SECTION = "adoc2node"

# =============================================================================
# Logging
# =============================================================================

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DEFAULT_LOG_LEVEL: LogLevelName = "WARNING"
