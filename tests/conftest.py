#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Pytest configuration and shared fixtures for the adoc2node test suite.

The fixtures stand in for the build system: a recording content graph, a
reporter collecting fatal errors and a node API with deterministic ids and
digests.
"""

from __future__ import annotations

from typing import Any

import pytest

from adoc2node.collaborators import NodeApi, SourceNode
from adoc2node.extensions import ExtensionRegistry


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


class RecordingActions:
    """Node actions that remember every call in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.created: list[Any] = []

    def create_node(self, node: Any) -> None:
        self.calls.append(("create_node", node))
        self.created.append(node)

    def create_parent_child_link(self, parent: Any, child: Any) -> None:
        self.calls.append(("create_parent_child_link", (parent, child)))


class RecordingReporter:
    """Reporter that stores panic messages instead of failing."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def panic_on_build(self, message: str) -> None:
        self.messages.append(message)


def make_content_loader(sources: dict[str, str]):
    """Return a content loader serving text by node id."""

    async def load(node: SourceNode) -> str:
        return sources[node.id]

    return load


@pytest.fixture
def actions() -> RecordingActions:
    """Recording node actions."""
    return RecordingActions()


@pytest.fixture
def reporter() -> RecordingReporter:
    """Recording build reporter."""
    return RecordingReporter()


@pytest.fixture
def sources() -> dict[str, str]:
    """Source texts by node id; tests fill it in."""
    return {}


@pytest.fixture
def api(actions, reporter, sources) -> NodeApi:
    """Node API with deterministic ids and digests."""
    return NodeApi(
        actions=actions,
        reporter=reporter,
        load_node_content=make_content_loader(sources),
        create_node_id=lambda seed: f"id:{seed}",
        create_content_digest=lambda value: "digest",
    )


@pytest.fixture
def registry() -> ExtensionRegistry:
    """Extension registry isolated from installed entry points."""
    return ExtensionRegistry(entry_point_group="adoc2node.tests.no-such-group")
