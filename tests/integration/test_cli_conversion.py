#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Integration tests for the command line front end."""

import argparse
import json

import pytest

from adoc2node import cli
from adoc2node.cli import (
    EXIT_ERROR,
    EXIT_FILE_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    build_plugin_options,
    convert_files,
    create_parser,
    main,
    parse_attribute_argument,
)
from adoc2node.collaborators import create_node_id
from adoc2node.transformer import NodeState

GUIDE = """= Install Guide: Quick Start
Jane Doe <jane@example.com>
v1.0, 2024-06-01
:page-category: docs

Follow the steps.

image::setup.png[Setup]
"""


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the CLI from reconfiguring the root logger during tests."""
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)


@pytest.fixture
def guide(tmp_path):
    path = tmp_path / "guide.adoc"
    path.write_text(GUIDE, encoding="utf-8")
    return path


def run_compact(capsys, *argv):
    code = main([*argv, "--no-config", "--compact"])
    return code, json.loads(capsys.readouterr().out)


@pytest.mark.cli
class TestArgumentHelpers:
    """Tests for attribute and option helpers."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("icons=font", ("icons", "font")),
            ("imagesdir=/img@", ("imagesdir", "/img@")),
            ("sectnums", ("sectnums", True)),
            ("toc!", ("toc", False)),
            ("empty=", ("empty", "")),
        ],
    )
    def test_parse_attribute_argument(self, raw, expected):
        assert parse_attribute_argument(raw) == expected

    def test_parse_attribute_argument_rejects_empty_name(self):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_attribute_argument("=value")

    def test_build_plugin_options_merges_overrides(self):
        args = create_parser().parse_args(
            ["a.adoc", "--ext", "asc", "-a", "icons=font", "-a", "toc!", "--plugin", "pkg.ext:register"]
        )
        base = {
            "file_extensions": ["adoc"],
            "attributes": {"icons": "image", "showtitle": True},
            "plugins": [{"resolve": "configured"}],
        }
        options = build_plugin_options(args, base)
        assert options["fileExtensions"] == ["asc"]
        assert "file_extensions" not in options
        assert options["attributes"] == {"icons": "font", "showtitle": True, "toc": False}
        assert options["plugins"] == [{"resolve": "configured"}, {"resolve": "pkg.ext:register"}]
        assert base["attributes"] == {"icons": "image", "showtitle": True}

    def test_build_plugin_options_without_overrides(self):
        args = create_parser().parse_args(["a.adoc"])
        assert build_plugin_options(args, {"attributes": {"icons": "font"}}) == {"attributes": {"icons": "font"}}


@pytest.mark.cli
@pytest.mark.integration
class TestMain:
    """Tests for the main entry point."""

    def test_converts_file(self, capsys, guide):
        code, nodes = run_compact(capsys, str(guide), "--path-prefix", "/blog")

        assert code == EXIT_SUCCESS
        (node,) = nodes
        source_id = create_node_id(str(guide.resolve()))
        assert node["parent"] == source_id
        assert node["id"] == create_node_id(f"{source_id} >>> ASCIIDOC")
        assert node["internal"]["type"] == "Asciidoc"
        assert node["internal"]["contentDigest"]
        assert node["document"] == {
            "title": "Install Guide: Quick Start",
            "subtitle": "Quick Start",
            "main": "Install Guide",
        }
        assert node["author"]["fullName"] == "Jane Doe"
        assert node["revision"] == {"date": "2024-06-01", "number": "1.0", "remark": None}
        assert node["pageAttributes"] == {"category": "docs"}
        assert 'src="/blog/images/setup.png"' in node["html"]

    def test_output_file(self, tmp_path, guide):
        out = tmp_path / "nodes.json"
        assert main([str(guide), "--no-config", "--out", str(out)]) == EXIT_SUCCESS
        nodes = json.loads(out.read_text(encoding="utf-8"))
        assert nodes[0]["document"]["main"] == "Install Guide"

    def test_attribute_flags(self, capsys, tmp_path):
        path = tmp_path / "doc.adoc"
        path.write_text("= Doc\n:icons: image\n\nBody.\n", encoding="utf-8")
        code, nodes = run_compact(capsys, str(path), "-a", "page-layout=post")
        assert code == EXIT_SUCCESS
        assert nodes[0]["pageAttributes"] == {"layout": "post"}

    def test_unsupported_extension_skipped(self, capsys, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("= Notes\n", encoding="utf-8")
        code, nodes = run_compact(capsys, str(path))
        assert code == EXIT_SUCCESS
        assert nodes == []

    def test_custom_extension(self, capsys, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("= Notes\n\nBody.\n", encoding="utf-8")
        code, nodes = run_compact(capsys, str(path), "--ext", "txt")
        assert code == EXIT_SUCCESS
        assert nodes[0]["document"]["title"] == "Notes"

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.adoc"), "--no-config"]) == EXIT_FILE_ERROR
        assert "File not found" in capsys.readouterr().err

    def test_undecodable_input(self, tmp_path, capsys):
        path = tmp_path / "latin.adoc"
        path.write_bytes(b"= T\n\n\xff\xfe body")
        assert main([str(path), "--no-config", "--compact"]) == EXIT_FILE_ERROR
        assert "Error: Could not read input" in capsys.readouterr().err

    def test_missing_config(self, tmp_path, guide, capsys):
        assert main([str(guide), "--config", str(tmp_path / "missing.toml")]) == EXIT_VALIDATION_ERROR
        assert "does not exist" in capsys.readouterr().err

    def test_config_from_environment(self, tmp_path, guide, capsys, monkeypatch):
        config = tmp_path / "site.json"
        config.write_text(json.dumps({"attributes": {"page-section": "guides"}}), encoding="utf-8")
        monkeypatch.setenv(cli.CONFIG_ENV_VAR, str(config))

        code = main([str(guide), "--compact"])

        assert code == EXIT_SUCCESS
        nodes = json.loads(capsys.readouterr().out)
        assert nodes[0]["pageAttributes"] == {"category": "docs", "section": "guides"}

    def test_conversion_failure_exit_code(self, tmp_path, guide, capsys):
        config = tmp_path / "bad.json"
        config.write_text(json.dumps({"parserOptions": {"no_such_option": 1}}), encoding="utf-8")

        code = main([str(guide), "--config", str(config), "--compact"])

        assert code == EXIT_ERROR
        assert json.loads(capsys.readouterr().out) == []

    def test_unknown_plugin(self, guide, capsys):
        code = main([str(guide), "--no-config", "--plugin", "adoc2node_no_such_extension_module"])
        assert code == EXIT_ERROR
        assert "Could not load AsciiDoc extension" in capsys.readouterr().err


@pytest.mark.integration
class TestConvertFiles:
    """Tests for concurrent conversion of several files."""

    @pytest.mark.asyncio
    async def test_states_in_input_order(self, tmp_path, guide):
        other = tmp_path / "other.asciidoc"
        other.write_text("== Only Section\n\nText.\n", encoding="utf-8")
        skipped = tmp_path / "readme.md"
        skipped.write_text("# Readme\n", encoding="utf-8")

        graph, reporter, states = await convert_files([guide, skipped, other], {})

        assert states == [NodeState.EMITTED, NodeState.SKIPPED, NodeState.EMITTED]
        assert not reporter.failed
        assert len(graph.nodes) == 2
        titles = sorted(record.document.combined for record in graph.nodes.values())
        assert titles == ["Install Guide: Quick Start", "Only Section"]

    @pytest.mark.asyncio
    async def test_each_node_linked_to_its_source(self, tmp_path, guide):
        graph, _, _ = await convert_files([guide], {})
        source_id = create_node_id(str(guide.resolve()))
        (record,) = graph.children_of(source_id)
        assert record.parent == source_id
