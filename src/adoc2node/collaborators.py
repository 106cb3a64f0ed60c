#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/collaborators.py
"""Interfaces to the build system the transformer plugs into.

The transformer never stores nodes itself. It talks to:

- node actions (``create_node`` and ``create_parent_child_link``)
- a content loader returning the source text of a node
- an id factory and a digest function
- a build reporter receiving fatal errors

The site generator supplies real implementations. The defaults in this
module (an in-memory graph, a file loader, UUID5 ids, MD5 digests and a
logging reporter) are used by the command line front end and the tests.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import uuid
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, Union

from adoc2node.records import DocumentRecord

logger = logging.getLogger(__name__)

NODE_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "https://pypi.org/project/adoc2node/")


@dataclass(frozen=True)
class SourceNode:
    """File node the transformer is asked about.

    Parameters
    ----------
    id : str
        Node identity
    extension : str
        File extension without the leading dot
    absolute_path : str, optional
        Location of the source file
    content : str, optional
        Source text, for nodes that do not live on disk

    """

    id: str
    extension: str
    absolute_path: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> SourceNode:
        """Build a node for a file, with an id derived from its resolved path."""
        resolved = Path(path).resolve()
        return cls(
            id=create_node_id(str(resolved)),
            extension=resolved.suffix.lstrip("."),
            absolute_path=str(resolved),
        )


class NodeActions(Protocol):
    """Content graph operations used for each converted node."""

    def create_node(self, node: DocumentRecord) -> Any:
        """Store a new node."""
        ...

    def create_parent_child_link(self, parent: SourceNode, child: DocumentRecord) -> Any:
        """Link a created node to the node it was derived from."""
        ...


class BuildReporter(Protocol):
    """Receiver of build-fatal errors."""

    def panic_on_build(self, message: str) -> Any:
        """Report an error that fails the build."""
        ...


ContentLoader = Callable[[SourceNode], Awaitable[str]]
NodeIdFactory = Callable[[str], str]
DigestFactory = Callable[[Mapping[str, Any]], str]


async def load_file_content(node: SourceNode) -> str:
    """Return the source text of a node.

    Raises
    ------
    ValueError
        If the node has neither inline content nor a path

    """
    if node.content is not None:
        return node.content
    if node.absolute_path is None:
        raise ValueError(f"Node {node.id} has no content and no path")
    return await asyncio.to_thread(Path(node.absolute_path).read_text, encoding="utf-8")


def create_node_id(seed: str) -> str:
    """Derive a deterministic node id from a seed string."""
    return str(uuid.uuid5(NODE_ID_NAMESPACE, seed))


def create_content_digest(value: Mapping[str, Any]) -> str:
    """Return the MD5 hex digest of a value's canonical JSON form."""
    payload = json.dumps(value, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.md5(payload.encode("utf-8"), usedforsecurity=False).hexdigest()


class InMemoryContentGraph:
    """Content graph keeping nodes and parent/child links in memory."""

    def __init__(self) -> None:
        """Initialize an empty graph."""
        self.nodes: dict[str, DocumentRecord] = {}
        self.links: list[tuple[str, str]] = []

    def create_node(self, node: DocumentRecord) -> None:
        """Store a node, replacing any node with the same id."""
        if node.id in self.nodes:
            logger.warning(f"Node {node.id} already exists, replacing it")
        self.nodes[node.id] = node

    def create_parent_child_link(self, parent: SourceNode, child: DocumentRecord) -> None:
        """Record that ``child`` was derived from ``parent``."""
        self.links.append((parent.id, child.id))

    def children_of(self, parent_id: str) -> list[DocumentRecord]:
        """Return the nodes derived from a parent, in creation order."""
        return [self.nodes[child_id] for linked_parent, child_id in self.links if linked_parent == parent_id]


class LoggingReporter:
    """Reporter that logs fatal errors and remembers them."""

    def __init__(self) -> None:
        """Initialize with no reported errors."""
        self.panics: list[str] = []

    def panic_on_build(self, message: str) -> None:
        """Log the error and record it."""
        logger.error(message)
        self.panics.append(message)

    @property
    def failed(self) -> bool:
        """Return True once any error was reported."""
        return bool(self.panics)


@dataclass
class NodeApi:
    """Collaborators handed to the transformer for each node.

    Parameters
    ----------
    actions : NodeActions
        Content graph operations
    reporter : BuildReporter
        Receiver of fatal errors
    load_node_content : callable, default :func:`load_file_content`
        Coroutine function returning a node's source text
    create_node_id : callable, default :func:`create_node_id`
        Deterministic id factory
    create_content_digest : callable, default :func:`create_content_digest`
        Digest over the assembled node
    path_prefix : str, default ""
        Site path prefix

    """

    actions: NodeActions
    reporter: BuildReporter
    load_node_content: ContentLoader = field(default=load_file_content)
    create_node_id: NodeIdFactory = field(default=create_node_id)
    create_content_digest: DigestFactory = field(default=create_content_digest)
    path_prefix: str = ""


__all__ = [
    "BuildReporter",
    "ContentLoader",
    "DigestFactory",
    "InMemoryContentGraph",
    "LoggingReporter",
    "NodeActions",
    "NodeApi",
    "NodeIdFactory",
    "SourceNode",
    "create_content_digest",
    "create_node_id",
    "load_file_content",
]
