#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/transformer.py
"""Turn AsciiDoc source nodes into HTML content nodes.

:meth:`AsciidocTransformer.on_create_node` is called once per source node
by the build orchestrator. For a node with a supported extension it:

1. normalizes the plugin options (cached per configuration value)
2. registers the configured extensions on a fresh processor, in order
3. loads the node content
4. parses and converts the document to HTML
5. extracts title, revision, author and ``page-*`` attributes
6. creates the content node and links it to its source node

Failures in steps 4-6 are reported to the build reporter once and leave no
node behind. Errors raised while registering extensions propagate.

Examples
--------
    >>> graph, reporter = InMemoryContentGraph(), LoggingReporter()
    >>> transformer = AsciidocTransformer({"attributes": {"showtitle": True}})
    >>> state = await transformer.on_create_node(
    ...     SourceNode.from_path("docs/guide.adoc"), NodeApi(actions=graph, reporter=reporter)
    ... )

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from adoc2node.collaborators import NodeApi, SourceNode
from adoc2node.constants import NODE_ID_SEED_SUFFIX, PAGE_ATTRIBUTE_PREFIX
from adoc2node.exceptions import DocumentConversionError
from adoc2node.extensions import ExtensionRegistry, register_extensions
from adoc2node.options import OptionsCache, ProcessorOptions, resolve_file_extensions
from adoc2node.processor import AsciidocProcessor, ConvertedDocument
from adoc2node.records import Author, DocumentRecord, Revision, Title

logger = logging.getLogger(__name__)


class NodeState(str, Enum):
    """Final state of one ``on_create_node`` call."""

    SKIPPED = "skipped"
    EMITTED = "emitted"
    FAILED = "failed"


def extract_page_attributes(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Collect ``page-*`` attributes with the prefix stripped.

    Examples
    --------
    >>> extract_page_attributes({"page-category": "tech", "title": "x"})
    {'category': 'tech'}

    """
    return {
        key[len(PAGE_ATTRIBUTE_PREFIX) :]: value
        for key, value in attributes.items()
        if key.startswith(PAGE_ATTRIBUTE_PREFIX)
    }


def extract_revision(document: ConvertedDocument) -> Optional[Revision]:
    """Return the revision record, or None when none is declared."""
    if not document.has_revision_info():
        return None
    return Revision(
        date=document.get_revision_date(),
        number=document.get_revision_number(),
        remark=document.get_revision_remark(),
    )


def extract_author(document: ConvertedDocument) -> Optional[Author]:
    """Return the author record, or None when no author is declared."""
    if not document.get_author():
        return None
    return Author(
        full_name=document.get_attribute("author") or "",
        first_name=document.get_attribute("firstname") or "",
        last_name=document.get_attribute("lastname") or "",
        middle_name=document.get_attribute("middlename") or "",
        author_initials=document.get_attribute("authorinitials") or "",
        email=document.get_attribute("email") or "",
    )


def extract_title(document: ConvertedDocument) -> Title:
    """Return the partitioned title; the subtitle is empty when absent."""
    title = document.get_document_title(partition=True)
    return Title(
        main=title.main,
        subtitle=title.subtitle if title.has_subtitle else "",
        combined=title.combined,
    )


class AsciidocTransformer:
    """Convert AsciiDoc source nodes into content nodes.

    One instance is meant to live as long as the build: it owns the cache of
    normalized options.

    Parameters
    ----------
    plugin_options : Mapping, optional
        Raw plugin configuration used when a call does not pass its own
    registry : ExtensionRegistry, optional
        Registry used to look up extensions, defaults to the global one
    options_cache : OptionsCache, optional
        Cache for normalized options, a new one by default

    """

    def __init__(
        self,
        plugin_options: Optional[Mapping[str, Any]] = None,
        registry: Optional[ExtensionRegistry] = None,
        options_cache: Optional[OptionsCache] = None,
    ) -> None:
        """Initialize the transformer."""
        self.plugin_options: Mapping[str, Any] = plugin_options if plugin_options is not None else {}
        self.registry = registry
        self.options_cache = options_cache if options_cache is not None else OptionsCache()

    def supports(self, node: SourceNode, plugin_options: Optional[Mapping[str, Any]] = None) -> bool:
        """Return True when the node's extension is configured for processing."""
        options = self.plugin_options if plugin_options is None else plugin_options
        return node.extension in resolve_file_extensions(options)

    async def on_create_node(
        self,
        node: SourceNode,
        api: NodeApi,
        plugin_options: Optional[Mapping[str, Any]] = None,
    ) -> NodeState:
        """Process one source node.

        Parameters
        ----------
        node : SourceNode
            Node created by the build
        api : NodeApi
            Build collaborators
        plugin_options : Mapping, optional
            Raw plugin configuration overriding the instance default

        Returns
        -------
        NodeState
            ``SKIPPED``, ``EMITTED`` or ``FAILED``

        """
        raw_options = self.plugin_options if plugin_options is None else plugin_options
        if not self.supports(node, raw_options):
            logger.debug(f"Skipping node {node.id} with extension '{node.extension}'")
            return NodeState.SKIPPED

        options = self.options_cache.get(raw_options, api.path_prefix)
        processor = AsciidocProcessor()
        await register_extensions(processor, options.path_prefix, options, self.registry)

        content = await api.load_node_content(node)

        try:
            record = await self._build_record(node, content, processor, options, api)
            api.actions.create_node(record)
            api.actions.create_parent_child_link(parent=node, child=record)
        except Exception as e:
            error = DocumentConversionError(
                str(e), node_id=node.id, path=node.absolute_path, original_error=e
            )
            logger.debug(f"Conversion of node {node.id} failed", exc_info=True)
            api.reporter.panic_on_build(f"Error processing Asciidoc {error.location}:\n\n{error.message}")
            return NodeState.FAILED

        logger.debug(f"Created Asciidoc node {record.id} for {node.id}")
        return NodeState.EMITTED

    async def _build_record(
        self,
        node: SourceNode,
        content: str,
        processor: AsciidocProcessor,
        options: ProcessorOptions,
        api: NodeApi,
    ) -> DocumentRecord:
        parsed = await processor.load(content, options)
        document = await parsed.convert()

        record = DocumentRecord(
            id=api.create_node_id(f"{node.id}{NODE_ID_SEED_SUFFIX}"),
            parent=node.id,
            html=document.html,
            document=extract_title(document),
            revision=extract_revision(document),
            author=extract_author(document),
            page_attributes=extract_page_attributes(document.get_attributes()),
        )
        return record.with_digest(api.create_content_digest(record.to_dict()))


__all__ = [
    "AsciidocTransformer",
    "NodeState",
    "extract_author",
    "extract_page_attributes",
    "extract_revision",
    "extract_title",
]
