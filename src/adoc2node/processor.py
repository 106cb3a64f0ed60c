#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2node/processor.py
"""AsciiDoc processor built on the ``all2md`` parser and HTML renderer.

A conversion goes through two document states:

1. :class:`ParsedDocument` - returned by :meth:`AsciidocProcessor.load`.
   Holds the parsed AST and the resolved attributes but exposes no metadata.
2. :class:`ConvertedDocument` - returned by :meth:`ParsedDocument.convert`.
   Adds the rendered HTML and is the only state that answers title, author,
   revision and attribute queries.

Parsing and rendering are CPU-bound, so both run in a worker thread.

Examples
--------
    >>> processor = AsciidocProcessor()
    >>> parsed = await processor.load("= Title\\n\\nBody.", normalize_options({}))
    >>> converted = await parsed.convert()
    >>> converted.get_document_title()
    'Title'

"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal, Optional, Union, overload

from all2md.ast.nodes import Document, Heading
from all2md.ast.transforms import NodeTransformer
from all2md.ast.utils import extract_text
from all2md.options.asciidoc import AsciiDocOptions
from all2md.options.html import HtmlRendererOptions
from all2md.parsers.asciidoc import AsciiDocParser
from all2md.renderers.html import HtmlRenderer

from adoc2node.constants import (
    DEFAULT_BACKEND,
    DEFAULT_DOCTYPE,
    IMAGES_DIR_ATTRIBUTE,
    REVISION_ATTRIBUTES,
    SOFT_SET_SUFFIX,
)
from adoc2node.exceptions import ConfigurationError
from adoc2node.header import DocumentHeader, partition_title, read_header, substitute_attribute_references
from adoc2node.options import ProcessorOptions
from adoc2node.transforms import ImagesDirTransform

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentTitle:
    """Document title split into main title and subtitle.

    Parameters
    ----------
    main : str
        Title without the subtitle
    subtitle : str or None
        Text after the last ``": "``, if any
    combined : str
        Full title as written

    """

    main: str
    subtitle: Optional[str]
    combined: str

    @property
    def has_subtitle(self) -> bool:
        """Return True when the title carries a subtitle."""
        return self.subtitle is not None


def resolve_attributes(
    option_attributes: Mapping[str, Any], header_attributes: Mapping[str, Optional[str]]
) -> tuple[dict[str, str], set[str]]:
    """Merge option attributes with attributes declared by the document.

    Option attributes win over document entries unless their value ends with
    ``@``, which marks a default the document may override. ``True`` sets an
    attribute to the empty string and ``False``/``None`` unsets and locks it.

    Parameters
    ----------
    option_attributes : Mapping
        Attributes from :class:`ProcessorOptions`
    header_attributes : Mapping
        Attributes declared by the document header (``None`` = unset)

    Returns
    -------
    tuple of (dict, set)
        Resolved attributes and the names the document may not change

    """
    resolved: dict[str, str] = {"backend": DEFAULT_BACKEND, "doctype": DEFAULT_DOCTYPE}
    locked: set[str] = set()
    locked_unset: set[str] = set()

    for name, value in option_attributes.items():
        if value is False or value is None:
            locked.add(name)
            locked_unset.add(name)
            resolved.pop(name, None)
            continue
        text = "" if value is True else str(value)
        if text.endswith(SOFT_SET_SUFFIX):
            resolved[name] = text[: -len(SOFT_SET_SUFFIX)]
        else:
            resolved[name] = text
            locked.add(name)

    for name, header_value in header_attributes.items():
        if name in locked:
            continue
        if header_value is None:
            resolved.pop(name, None)
        else:
            resolved[name] = header_value

    for name in locked_unset:
        resolved.pop(name, None)
    return resolved, locked


def _attribute_preamble(attributes: Mapping[str, str]) -> str:
    """Render attributes as entries so the parser can resolve ``{name}``."""
    lines = []
    for name, value in attributes.items():
        flattened = " ".join(value.split())
        lines.append(f":{name}: {flattened}".rstrip())
    return "\n".join(lines) + "\n\n" if lines else ""


class ConvertedDocument:
    """Document handle after conversion to HTML.

    Parameters
    ----------
    html : str
        Rendered HTML fragment
    document : Document
        Transformed ``all2md`` AST the HTML was rendered from
    header : DocumentHeader
        Header read from the source
    attributes : Mapping[str, str]
        Final document attributes

    """

    def __init__(self, html: str, document: Document, header: DocumentHeader, attributes: Mapping[str, str]):
        """Initialize the converted document."""
        self.html = html
        self.document = document
        self._header = header
        self._attributes = MappingProxyType(dict(attributes))

    @overload
    def get_document_title(self, partition: Literal[False] = ...) -> str: ...

    @overload
    def get_document_title(self, partition: Literal[True]) -> DocumentTitle: ...

    def get_document_title(self, partition: bool = False) -> Union[str, DocumentTitle]:
        """Return the document title.

        The header title is used when present, otherwise the first section
        heading, otherwise an empty title.

        Parameters
        ----------
        partition : bool, default False
            Return a :class:`DocumentTitle` split into main and subtitle
            instead of the combined string

        """
        combined = self._attributes.get("doctitle")
        if combined is None:
            combined = self._first_section_title() or ""
        if not partition:
            return combined
        main, subtitle = partition_title(combined)
        return DocumentTitle(main=main, subtitle=subtitle, combined=combined)

    def _first_section_title(self) -> Optional[str]:
        for child in self.document.children:
            if isinstance(child, Heading):
                return extract_text(child.content, joiner="")
        return None

    def has_header(self) -> bool:
        """Return True when the source declares a document title."""
        return self._header.title is not None

    def has_revision_info(self) -> bool:
        """Return True when any revision attribute is set."""
        return any(name in self._attributes for name in REVISION_ATTRIBUTES)

    def get_revision_date(self) -> Optional[str]:
        """Return the ``revdate`` attribute."""
        return self._attributes.get("revdate")

    def get_revision_number(self) -> Optional[str]:
        """Return the ``revnumber`` attribute."""
        return self._attributes.get("revnumber")

    def get_revision_remark(self) -> Optional[str]:
        """Return the ``revremark`` attribute."""
        return self._attributes.get("revremark")

    def get_author(self) -> Optional[str]:
        """Return the primary author's full name, or None."""
        return self._attributes.get("author") or None

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return a single attribute value."""
        return self._attributes.get(name, default)

    def get_attributes(self) -> dict[str, str]:
        """Return a copy of every document attribute."""
        return dict(self._attributes)


class ParsedDocument:
    """Document handle after parsing, before conversion.

    Metadata is deliberately not readable here: transforms registered on the
    processor may still change the document during :meth:`convert`.
    """

    def __init__(
        self,
        processor: AsciidocProcessor,
        ast: Document,
        header: DocumentHeader,
        attributes: Mapping[str, str],
    ):
        """Initialize the parsed document."""
        self._processor = processor
        self._ast = ast
        self._header = header
        self._attributes = dict(attributes)
        self._converted: Optional[ConvertedDocument] = None

    @property
    def ast(self) -> Document:
        """Return the parsed ``all2md`` AST."""
        return self._ast

    async def convert(self) -> ConvertedDocument:
        """Apply the processor transforms and render HTML.

        Converting twice returns the first result.
        """
        if self._converted is None:
            self._converted = await asyncio.to_thread(self._convert)
        return self._converted

    def _convert(self) -> ConvertedDocument:
        document = self._ast
        imagesdir = self._attributes.get(IMAGES_DIR_ATTRIBUTE, "")
        for transform in [ImagesDirTransform(imagesdir), *self._processor.transforms]:
            result = transform.transform(document)
            if isinstance(result, Document):
                document = result
            else:
                logger.warning(f"{type(transform).__name__} did not return a Document, ignoring its result")

        renderer = HtmlRenderer(HtmlRendererOptions(standalone=False))
        html = renderer.render_to_string(document)
        return ConvertedDocument(html=html, document=document, header=self._header, attributes=self._attributes)


class AsciidocProcessor:
    """Parse AsciiDoc sources into document handles.

    Extensions customise conversion by registering ``all2md``
    :class:`~all2md.ast.transforms.NodeTransformer` instances, which run in
    registration order after the built-in ``imagesdir`` transform.

    Parameters
    ----------
    transforms : list of NodeTransformer, optional
        Transforms to register up front

    """

    def __init__(self, transforms: Optional[list[NodeTransformer]] = None):
        """Initialize the processor."""
        self._transforms: list[NodeTransformer] = list(transforms or [])

    @property
    def transforms(self) -> tuple[NodeTransformer, ...]:
        """Return the registered transforms in registration order."""
        return tuple(self._transforms)

    def register_transform(self, transform: NodeTransformer) -> None:
        """Register an AST transform to run during conversion.

        Raises
        ------
        TypeError
            If ``transform`` is not a NodeTransformer

        """
        if not isinstance(transform, NodeTransformer):
            raise TypeError(f"Expected a NodeTransformer, got {type(transform).__name__}")
        self._transforms.append(transform)
        logger.debug(f"Registered transform: {type(transform).__name__}")

    async def load(self, text: str, options: ProcessorOptions) -> ParsedDocument:
        """Parse an AsciiDoc source.

        Parameters
        ----------
        text : str
            AsciiDoc source
        options : ProcessorOptions
            Normalized options

        Returns
        -------
        ParsedDocument
            Handle to convert next

        Raises
        ------
        ConfigurationError
            If ``parser_options`` are not valid ``AsciiDocOptions`` fields
        all2md.exceptions.ParsingError
            If the underlying parser fails

        """
        return await asyncio.to_thread(self._parse, text, options)

    def _parse(self, text: str, options: ProcessorOptions) -> ParsedDocument:
        try:
            parser_options = AsciiDocOptions(**dict(options.parser_options))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid parserOptions: {e}", parameter_name="parserOptions", original_error=e) from e

        option_attributes, option_locked = resolve_attributes(options.attributes, {})
        header = read_header(text, option_attributes, option_locked)
        attributes, locked = resolve_attributes(options.attributes, header.attributes)
        if header.title is not None and "doctitle" not in locked:
            attributes["doctitle"] = substitute_attribute_references(header.title, dict(attributes))

        parser = AsciiDocParser(parser_options)
        ast = parser.parse(_attribute_preamble(attributes) + header.body + "\n")

        if parser_options.parse_attributes:
            self._merge_body_attributes(attributes, dict(parser.attributes), locked)

        return ParsedDocument(self, ast=ast, header=header, attributes=attributes)

    @staticmethod
    def _merge_body_attributes(attributes: dict[str, str], body_attributes: dict[str, Any], locked: set[str]) -> None:
        # Entries in the body may add, change or unset attributes the options don't lock
        for name in list(attributes):
            if name not in locked and name not in body_attributes:
                del attributes[name]
        for name, value in body_attributes.items():
            if name in locked:
                continue
            attributes[name] = substitute_attribute_references(value, attributes) if value is not None else ""


__all__ = [
    "AsciidocProcessor",
    "ConvertedDocument",
    "DocumentTitle",
    "ParsedDocument",
    "resolve_attributes",
]
