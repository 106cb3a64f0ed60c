#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the AsciiDoc processor and its document handles."""

import logging

import pytest
from all2md.ast import Document, Image
from all2md.ast.transforms import NodeTransformer

from adoc2node.exceptions import ConfigurationError
from adoc2node.options import normalize_options
from adoc2node.processor import AsciidocProcessor, ConvertedDocument, DocumentTitle, resolve_attributes


async def convert(text: str, plugin_options=None, path_prefix=None, processor=None) -> ConvertedDocument:
    processor = processor or AsciidocProcessor()
    parsed = await processor.load(text, normalize_options(plugin_options or {}, path_prefix))
    return await parsed.convert()


class RecordingImageTransform(NodeTransformer):
    """Remember the image URLs seen during conversion."""

    def __init__(self):
        self.seen = []

    def visit_image(self, node: Image) -> Image:
        self.seen.append(node.url)
        return super().visit_image(node)


class DroppingTransform(NodeTransformer):
    """Transform that fails to return a document."""

    def transform(self, node):
        return None


@pytest.mark.unit
class TestResolveAttributes:
    """Tests for merging option and document attributes."""

    def test_defaults(self):
        resolved, locked = resolve_attributes({}, {})
        assert resolved == {"backend": "html5", "doctype": "article"}
        assert locked == set()

    def test_option_value_locks_attribute(self):
        resolved, locked = resolve_attributes({"icons": "font"}, {"icons": "image"})
        assert resolved["icons"] == "font"
        assert "icons" in locked

    def test_soft_value_can_be_overridden(self):
        resolved, locked = resolve_attributes({"icons": "font@"}, {"icons": "image"})
        assert resolved["icons"] == "image"
        assert "icons" not in locked

    def test_soft_value_used_when_not_overridden(self):
        resolved, _ = resolve_attributes({"imagesdir": "/blog/images@"}, {})
        assert resolved["imagesdir"] == "/blog/images"

    def test_true_sets_empty_string(self):
        resolved, _ = resolve_attributes({"sectnums": True}, {})
        assert resolved["sectnums"] == ""

    def test_false_unsets_and_locks(self):
        resolved, locked = resolve_attributes({"toc": False}, {"toc": "left"})
        assert "toc" not in resolved
        assert "toc" in locked

    def test_false_can_unset_default(self):
        resolved, _ = resolve_attributes({"doctype": False}, {})
        assert "doctype" not in resolved

    def test_document_unset(self):
        resolved, _ = resolve_attributes({"icons": "font@"}, {"icons": None})
        assert "icons" not in resolved

    def test_non_string_values_stringified(self):
        resolved, _ = resolve_attributes({"toclevels": 3}, {})
        assert resolved["toclevels"] == "3"


@pytest.mark.unit
class TestConversion:
    """Tests for loading and converting documents."""

    @pytest.mark.asyncio
    async def test_title_and_body(self):
        document = await convert("= Title\n\nBody.")
        assert "<p>Body.</p>" in document.html
        assert "<h1" not in document.html
        assert document.get_document_title() == "Title"
        assert document.has_header()

    @pytest.mark.asyncio
    async def test_partitioned_title(self):
        document = await convert("= Main Title: The Subtitle\n\nBody.")
        title = document.get_document_title(partition=True)
        assert title == DocumentTitle(main="Main Title", subtitle="The Subtitle", combined="Main Title: The Subtitle")
        assert title.has_subtitle

    @pytest.mark.asyncio
    async def test_title_without_subtitle(self):
        document = await convert("= Plain\n\nBody.")
        title = document.get_document_title(partition=True)
        assert title.main == "Plain"
        assert title.subtitle is None
        assert not title.has_subtitle

    @pytest.mark.asyncio
    async def test_title_falls_back_to_first_section(self):
        document = await convert("== Section One\n\nText.\n\n== Section Two\n")
        assert document.get_document_title() == "Section One"
        assert not document.has_header()

    @pytest.mark.asyncio
    async def test_missing_title_is_empty(self):
        document = await convert("Only a paragraph.\n")
        assert document.get_document_title() == ""
        title = document.get_document_title(partition=True)
        assert title.main == ""
        assert title.subtitle is None

    @pytest.mark.asyncio
    async def test_title_attribute_reference(self):
        document = await convert("= {product} Guide\n\nBody.", {"attributes": {"product": "Widget"}})
        assert document.get_document_title() == "Widget Guide"

    @pytest.mark.asyncio
    async def test_body_attribute_reference(self):
        document = await convert("= Title\n\nUse {product}.", {"attributes": {"product": "Widget"}})
        assert "<p>Use Widget.</p>" in document.html

    @pytest.mark.asyncio
    async def test_header_metadata(self):
        document = await convert(
            "= Title\nJane Q. Doe <jane@example.com>\nv1.2, 2024-05-01: Second draft\n:page-category: tech\n\nBody."
        )
        assert document.get_author() == "Jane Q. Doe"
        assert document.get_attribute("email") == "jane@example.com"
        assert document.has_revision_info()
        assert document.get_revision_number() == "1.2"
        assert document.get_revision_date() == "2024-05-01"
        assert document.get_revision_remark() == "Second draft"
        assert document.get_attribute("page-category") == "tech"

    @pytest.mark.asyncio
    async def test_no_metadata(self):
        document = await convert("= Title\n\nBody.")
        assert document.get_author() is None
        assert not document.has_revision_info()
        assert document.get_revision_date() is None
        assert document.get_attribute("missing", "fallback") == "fallback"

    @pytest.mark.asyncio
    async def test_locked_option_attribute_wins(self):
        document = await convert("= Title\n:icons: image\n\nBody.", {"attributes": {"icons": "font"}})
        assert document.get_attribute("icons") == "font"

    @pytest.mark.asyncio
    async def test_soft_option_attribute_overridden(self):
        document = await convert("= Title\n:icons: image\n\nBody.", {"attributes": {"icons": "font@"}})
        assert document.get_attribute("icons") == "image"

    @pytest.mark.asyncio
    async def test_false_option_attribute_unset(self):
        document = await convert("= Title\n:toc: left\n\nBody.", {"attributes": {"toc": False}})
        assert document.get_attribute("toc") is None

    @pytest.mark.asyncio
    async def test_body_attribute_entries_collected(self):
        document = await convert("= Title\n\nBody.\n\n:page-late: yes\n")
        assert document.get_attribute("page-late") == "yes"

    @pytest.mark.asyncio
    async def test_header_entry_references_option_attribute(self):
        document = await convert("= Title\n:page-link: {base}/guide\n\nBody.", {"attributes": {"base": "/docs"}})
        assert document.get_attribute("page-link") == "/docs/guide"

    @pytest.mark.asyncio
    async def test_body_entry_references_earlier_attributes(self):
        document = await convert("= T\n:a: x\n\n:page-b: {a}y\n\nBody.")
        assert document.get_attribute("page-b") == "xy"

    @pytest.mark.asyncio
    async def test_body_entries_respect_locks(self):
        document = await convert("= Title\n\nBody.\n\n:icons: image\n", {"attributes": {"icons": "font"}})
        assert document.get_attribute("icons") == "font"

    @pytest.mark.asyncio
    async def test_header_attributes_kept_without_attribute_parsing(self):
        document = await convert(
            "= Title\n:page-layout: post\n\nBody.", {"parserOptions": {"parse_attributes": False}}
        )
        assert document.get_attribute("page-layout") == "post"
        assert "<p>Body.</p>" in document.html

    @pytest.mark.asyncio
    async def test_get_attributes_returns_copy(self):
        document = await convert("= Title\n\nBody.")
        attributes = document.get_attributes()
        attributes["doctitle"] = "Changed"
        assert document.get_document_title() == "Title"

    @pytest.mark.asyncio
    async def test_invalid_parser_options(self):
        processor = AsciidocProcessor()
        options = normalize_options({"parserOptions": {"no_such_option": True}})
        with pytest.raises(ConfigurationError) as exc_info:
            await processor.load("= Title\n\nBody.", options)
        assert exc_info.value.parameter_name == "parserOptions"

    @pytest.mark.asyncio
    async def test_convert_twice_returns_same_document(self):
        parsed = await AsciidocProcessor().load("= Title\n\nBody.", normalize_options({}))
        first = await parsed.convert()
        second = await parsed.convert()
        assert first is second
        assert isinstance(parsed.ast, Document)


@pytest.mark.unit
class TestImagesDir:
    """Tests for image target resolution during conversion."""

    @pytest.mark.asyncio
    async def test_default_imagesdir(self):
        document = await convert("= Title\n\nimage::diagram.png[Diagram]\n")
        assert 'src="/images/diagram.png"' in document.html

    @pytest.mark.asyncio
    async def test_prefixed_imagesdir(self):
        document = await convert("= Title\n\nimage::diagram.png[Diagram]\n", {}, "/blog")
        assert 'src="/blog/images/diagram.png"' in document.html
        assert document.get_attribute("imagesdir") == "/blog/images"

    @pytest.mark.asyncio
    async def test_document_overrides_default_imagesdir(self):
        document = await convert("= Title\n:imagesdir: media\n\nimage::diagram.png[Diagram]\n")
        assert 'src="media/diagram.png"' in document.html

    @pytest.mark.asyncio
    async def test_locked_imagesdir(self):
        document = await convert(
            "= Title\n:imagesdir: media\n\nimage::diagram.png[Diagram]\n", {"attributes": {"imagesdir": "/assets"}}
        )
        assert 'src="/assets/diagram.png"' in document.html

    @pytest.mark.asyncio
    async def test_absolute_and_remote_targets_untouched(self):
        document = await convert(
            "= Title\n\nimage::/static/logo.png[Logo]\n\nimage::https://example.com/a.png[Remote]\n"
        )
        assert 'src="/static/logo.png"' in document.html
        assert 'src="https://example.com/a.png"' in document.html


@pytest.mark.unit
class TestTransforms:
    """Tests for transforms registered on the processor."""

    def test_register_rejects_non_transformer(self):
        with pytest.raises(TypeError):
            AsciidocProcessor().register_transform(object())  # type: ignore[arg-type]

    def test_transforms_in_registration_order(self):
        first, second = RecordingImageTransform(), RecordingImageTransform()
        processor = AsciidocProcessor([first])
        processor.register_transform(second)
        assert processor.transforms == (first, second)

    @pytest.mark.asyncio
    async def test_registered_transform_sees_resolved_images(self):
        recorder = RecordingImageTransform()
        processor = AsciidocProcessor()
        processor.register_transform(recorder)
        await convert("= Title\n\nimage::diagram.png[Diagram]\n", processor=processor)
        assert recorder.seen == ["/images/diagram.png"]

    @pytest.mark.asyncio
    async def test_non_document_result_ignored(self, caplog):
        processor = AsciidocProcessor([DroppingTransform()])
        with caplog.at_level(logging.WARNING, logger="adoc2node.processor"):
            document = await convert("= Title\n\nBody.", processor=processor)
        assert "<p>Body.</p>" in document.html
        assert "DroppingTransform did not return a Document" in caplog.text
