#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Command-line interface for adoc2node.

Converts AsciiDoc files into content nodes and prints them as JSON. Plugin
options come from a configuration file (discovered automatically, given with
``--config`` or named by the ``ADOC2NODE_CONFIG`` environment variable) and
can be adjusted with command line flags.

Examples
--------
Convert one file::

    $ adoc2node docs/guide.adoc

Use a site path prefix and set attributes::

    $ adoc2node docs/*.adoc --path-prefix /blog -a icons=font -a sectnums

Register an extension and write the nodes to a file::

    $ adoc2node guide.adoc --plugin my_site.asciidoc:register --out nodes.json

"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, get_args

from rich.console import Console

from adoc2node import __version__
from adoc2node.collaborators import InMemoryContentGraph, LoggingReporter, NodeApi, SourceNode
from adoc2node.config import load_config_file, load_discovered_config
from adoc2node.constants import DEFAULT_LOG_LEVEL, LogLevelName
from adoc2node.exceptions import Adoc2NodeError
from adoc2node.extensions import ExtensionRegistry
from adoc2node.logging_utils import configure_logging
from adoc2node.options import resolve_file_extensions
from adoc2node.transformer import AsciidocTransformer, NodeState

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

CONFIG_ENV_VAR = "ADOC2NODE_CONFIG"


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="adoc2node",
        description="Convert AsciiDoc files into HTML content nodes with document metadata.",
    )
    parser.add_argument("input", nargs="+", type=Path, help="AsciiDoc files to convert")
    parser.add_argument("--config", type=Path, help="Configuration file (TOML, YAML, JSON or pyproject.toml)")
    parser.add_argument("--no-config", action="store_true", help="Do not discover a configuration file")
    parser.add_argument("--path-prefix", default="", help="Site path prefix applied to imagesdir")
    parser.add_argument(
        "--ext",
        dest="extensions",
        action="append",
        metavar="EXT",
        help="File extension to process (repeatable, replaces the configured list)",
    )
    parser.add_argument(
        "-a",
        "--attribute",
        dest="attributes",
        action="append",
        default=[],
        metavar="NAME[=VALUE]",
        help="Document attribute; NAME sets it, NAME! unsets it (repeatable)",
    )
    parser.add_argument(
        "--plugin",
        dest="plugins",
        action="append",
        default=[],
        metavar="REF",
        help="Extension to register after the configured ones (repeatable)",
    )
    parser.add_argument("--out", type=Path, help="Write the nodes to this file instead of stdout")
    parser.add_argument("--compact", action="store_true", help="Print compact JSON without highlighting")
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=list(get_args(LogLevelName)),
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument("--log-file", help="Also write log output to this file")
    parser.add_argument("--trace", action="store_true", help="Timestamped log output with logger names")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_attribute_argument(value: str) -> tuple[str, Any]:
    """Turn ``NAME=VALUE``, ``NAME`` or ``NAME!`` into an attribute pair.

    Examples
    --------
    >>> parse_attribute_argument("icons=font")
    ('icons', 'font')
    >>> parse_attribute_argument("sectnums")
    ('sectnums', True)
    >>> parse_attribute_argument("toc!")
    ('toc', False)

    """
    name, separator, attribute_value = value.partition("=")
    name = name.strip()
    if not name:
        raise argparse.ArgumentTypeError(f"Invalid attribute: '{value}'")
    if separator:
        return name, attribute_value
    if name.endswith("!"):
        return name[:-1], False
    return name, True


def build_plugin_options(args: argparse.Namespace, base: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """Combine configuration file options with command line overrides."""
    options: dict[str, Any] = dict(base or {})

    if args.extensions:
        options.pop("file_extensions", None)
        options["fileExtensions"] = list(args.extensions)

    if args.attributes:
        attributes = dict(options.get("attributes") or {})
        for raw in args.attributes:
            name, value = parse_attribute_argument(raw)
            attributes[name] = value
        options["attributes"] = attributes

    if args.plugins:
        options["plugins"] = [*(options.get("plugins") or []), *({"resolve": ref} for ref in args.plugins)]

    return options


async def convert_files(
    paths: Sequence[Path],
    plugin_options: Mapping[str, Any],
    path_prefix: str = "",
    registry: Optional[ExtensionRegistry] = None,
) -> tuple[InMemoryContentGraph, LoggingReporter, list[NodeState]]:
    """Convert files concurrently into an in-memory content graph.

    Returns
    -------
    tuple
        The graph holding the created nodes, the reporter holding any
        failures and the state of each file, in input order

    """
    graph = InMemoryContentGraph()
    reporter = LoggingReporter()
    api = NodeApi(actions=graph, reporter=reporter, path_prefix=path_prefix)
    transformer = AsciidocTransformer(plugin_options, registry=registry)

    nodes = [SourceNode.from_path(path) for path in paths]
    states = await asyncio.gather(*(transformer.on_create_node(node, api) for node in nodes))
    return graph, reporter, list(states)


def _load_options(args: argparse.Namespace) -> dict[str, Any]:
    config_path = args.config
    if config_path is None and not args.no_config:
        env_config = os.environ.get(CONFIG_ENV_VAR)
        if env_config:
            config_path = Path(env_config)

    if config_path is not None:
        base = load_config_file(config_path)
    elif args.no_config:
        base = {}
    else:
        base = load_discovered_config()
    return build_plugin_options(args, base)


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, log_file=args.log_file, trace_mode=args.trace)

    try:
        plugin_options = _load_options(args)
    except (Adoc2NodeError, argparse.ArgumentTypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    missing = [path for path in args.input if not path.is_file()]
    if missing:
        for path in missing:
            print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_FILE_ERROR

    supported = resolve_file_extensions(plugin_options)
    for path in args.input:
        if path.suffix.lstrip(".") not in supported:
            logger.warning(f"Skipping {path}: extension not in {list(supported)}")

    try:
        graph, reporter, _ = asyncio.run(convert_files(args.input, plugin_options, args.path_prefix))
    except Adoc2NodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Could not read input: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    payload = [record.to_dict() for record in graph.nodes.values()]
    text = json.dumps(payload, ensure_ascii=False, indent=None if args.compact else 2)

    if args.out:
        args.out.write_text(text + "\n", encoding="utf-8")
    elif args.compact:
        print(text)
    else:
        Console().print_json(text)

    return EXIT_ERROR if reporter.failed else EXIT_SUCCESS


__all__ = ["build_plugin_options", "convert_files", "create_parser", "main", "parse_attribute_argument"]
