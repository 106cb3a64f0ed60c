"""adoc2node - AsciiDoc to HTML content nodes for static-site content graphs.

adoc2node converts AsciiDoc sources into content nodes carrying the rendered
HTML together with the document metadata a site template needs: the title
split into main title and subtitle, the author, revision information and the
``page-*`` attributes. Parsing and HTML rendering are done by ``all2md``;
this package selects options, registers extensions and shapes the result.

Examples
--------
Convert a node inside a build:

    >>> from adoc2node import AsciidocTransformer, InMemoryContentGraph, LoggingReporter, NodeApi, SourceNode
    >>> transformer = AsciidocTransformer({"attributes": {"icons": "font"}})
    >>> graph = InMemoryContentGraph()
    >>> api = NodeApi(actions=graph, reporter=LoggingReporter(), path_prefix="/blog")
    >>> await transformer.on_create_node(SourceNode.from_path("guide.adoc"), api)
    <NodeState.EMITTED: 'emitted'>

Register an extension by name:

    >>> from adoc2node import extension_registry
    >>> extension_registry.register("heading-ids", AddHeadingIdsTransform)

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

__version__ = "1.0.0"

from adoc2node.collaborators import (
    InMemoryContentGraph,
    LoggingReporter,
    NodeApi,
    SourceNode,
    create_content_digest,
    create_node_id,
    load_file_content,
)
from adoc2node.exceptions import (
    Adoc2NodeError,
    ConfigurationError,
    DocumentConversionError,
    ExtensionLoadError,
)
from adoc2node.extensions import (
    ExtensionContext,
    ExtensionRegistry,
    extension_registry,
    register_extensions,
)
from adoc2node.options import (
    ExtensionDescriptor,
    OptionsCache,
    ProcessorOptions,
    normalize_options,
    with_path_prefix,
)
from adoc2node.processor import AsciidocProcessor, ConvertedDocument, DocumentTitle, ParsedDocument
from adoc2node.records import Author, DocumentRecord, Revision, Title
from adoc2node.transformer import AsciidocTransformer, NodeState, extract_page_attributes

__all__ = [
    "__version__",
    # Transformer
    "AsciidocTransformer",
    "NodeState",
    "extract_page_attributes",
    # Processor
    "AsciidocProcessor",
    "ConvertedDocument",
    "DocumentTitle",
    "ParsedDocument",
    # Options
    "ExtensionDescriptor",
    "OptionsCache",
    "ProcessorOptions",
    "normalize_options",
    "with_path_prefix",
    # Extensions
    "ExtensionContext",
    "ExtensionRegistry",
    "extension_registry",
    "register_extensions",
    # Records
    "Author",
    "DocumentRecord",
    "Revision",
    "Title",
    # Collaborators
    "InMemoryContentGraph",
    "LoggingReporter",
    "NodeApi",
    "SourceNode",
    "create_content_digest",
    "create_node_id",
    "load_file_content",
    # Exceptions
    "Adoc2NodeError",
    "ConfigurationError",
    "DocumentConversionError",
    "ExtensionLoadError",
]
