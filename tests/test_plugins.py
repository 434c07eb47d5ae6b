"""Tests for the plugin discovery system."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

from codeanalyzer.plugins import PROVIDER_GROUP, discover_plugins, discover_providers


def _make_entry_point(name: str, value: str, group: str):
    """Create a mock entry point."""
    ep = MagicMock()
    ep.name = name
    ep.value = value
    ep.group = group
    return ep


class TestDiscoverPlugins:
    def test_discovers_entry_points(self):
        mock_class = type("MockProvider", (), {})
        ep = _make_entry_point("mock", "mock_pkg:MockProvider", PROVIDER_GROUP)
        ep.load.return_value = mock_class

        with patch("codeanalyzer.plugins.entry_points", return_value=[ep]) as mock_eps:
            result = discover_plugins(PROVIDER_GROUP)

        assert result == {"mock": mock_class}
        mock_eps.assert_called_once_with(group=PROVIDER_GROUP)

    def test_handles_load_error(self):
        """A plugin that fails to import is skipped, the rest still load."""
        broken = _make_entry_point("broken", "broken_pkg:Bad", PROVIDER_GROUP)
        broken.load.side_effect = ImportError("no module")
        good = _make_entry_point("good", "good_pkg:Good", PROVIDER_GROUP)
        good.load.return_value = object

        with patch("codeanalyzer.plugins.entry_points", return_value=[broken, good]):
            result = discover_plugins(PROVIDER_GROUP)

        assert list(result) == ["good"]

    def test_empty_group(self):
        with patch("codeanalyzer.plugins.entry_points", return_value=[]):
            assert discover_plugins(PROVIDER_GROUP) == {}


class TestProviderRegistration:
    def test_discover_providers_uses_group(self):
        with patch("codeanalyzer.plugins.discover_plugins", return_value={}) as mock_discover:
            discover_providers()
        mock_discover.assert_called_once_with("codeanalyzer.providers")

    def test_registry_falls_back_to_builtins(self, monkeypatch):
        from codeanalyzer import providers

        monkeypatch.setattr(providers, "PROVIDERS", {})
        with patch("codeanalyzer.plugins.discover_providers", return_value={}):
            names = providers.get_provider_names()

        assert names == ["anthropic", "ollama"]

    def test_registry_uses_discovered(self, monkeypatch):
        from codeanalyzer import providers

        custom = type("Custom", (), {})
        monkeypatch.setattr(providers, "PROVIDERS", {})
        with patch("codeanalyzer.plugins.discover_providers", return_value={"custom": custom}):
            assert providers.get_provider_names() == ["custom"]
