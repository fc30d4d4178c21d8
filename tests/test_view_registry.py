"""Tests for anchor_bot.view_registry module."""

from __future__ import annotations

import pytest

from anchor_bot.config import AnchorConfig
from anchor_bot.view_registry import ViewRegistry
from anchor_bot.views import EmbedView, HlsView, OfflineView


class TestResolve:

    def test_every_alias_returned_unchanged(self, sample_config: AnchorConfig, registry: ViewRegistry):
        for name, view in sample_config.alias.items():
            assert registry.resolve(name) is view

    def test_alias_keeps_title(self, registry: ViewRegistry):
        view = registry.resolve("cam")
        assert isinstance(view, HlsView)
        assert view.title == "Street cam"

    @pytest.mark.parametrize("token", ["https://example.org", "Demo", "demo ", "", "ftp://weird"])
    def test_non_alias_becomes_embed(self, registry: ViewRegistry, token: str):
        assert registry.resolve(token) == EmbedView(url=token, fill=False)

    def test_fill_mode(self, registry: ViewRegistry):
        assert registry.resolve("https://x", "fill") == EmbedView(url="https://x", fill=True)

    @pytest.mark.parametrize("mode", [None, "", "FILL", "fill ", "contain"])
    def test_other_modes_do_not_fill(self, registry: ViewRegistry, mode):
        assert registry.resolve("https://x", mode).fill is False

    def test_alias_is_case_sensitive(self, registry: ViewRegistry):
        assert registry.resolve("DEMO") == EmbedView(url="DEMO")

    def test_offline_alias(self, registry: ViewRegistry):
        assert isinstance(registry.resolve("blank"), OfflineView)


class TestReadOnly:

    def test_source_mutation_does_not_leak(self):
        source = {"a": EmbedView(url="https://a")}
        registry = ViewRegistry(source)
        source["b"] = HlsView(url="https://b")
        source["a"] = OfflineView()
        assert registry.resolve("b") == EmbedView(url="b")
        assert registry.resolve("a") == EmbedView(url="https://a")
        assert len(registry) == 1

    def test_empty_registry(self):
        registry = ViewRegistry({})
        assert registry.resolve("x") == EmbedView(url="x")
