"""Tests for reconfig.yaml manifest loading."""

from pathlib import Path

import pytest
import yaml

from reconfig import MalformedContent, MissingEnvironment, Registry
from reconfig.core.manifest import ENVIRONMENT_VARIABLE, ManifestLoader, apply_manifest


@pytest.fixture(autouse=True)
def _no_env_override(monkeypatch):
    monkeypatch.delenv(ENVIRONMENT_VARIABLE, raising=False)


class TestManifestLoader:
    """Test ManifestLoader functionality."""

    def test_init_with_explicit_path(self, tmp_path):
        """Test initialization with explicit manifest path."""
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text("sources: []")

        loader = ManifestLoader(manifest)
        assert loader.config_path == manifest.resolve()

    def test_init_with_nonexistent_explicit_path(self, tmp_path):
        loader = ManifestLoader(tmp_path / "nonexistent.yaml")
        assert loader.config_path is None
        assert loader.load() == {}
        assert loader.get_sources() == []

    def test_find_manifest_in_parent_dir(self, tmp_path, monkeypatch):
        """Test finding reconfig.yaml in a parent directory."""
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text("sources: []")
        subdir = tmp_path / "a" / "b"
        subdir.mkdir(parents=True)
        monkeypatch.chdir(subdir)

        loader = ManifestLoader()
        assert loader.config_path.resolve() == manifest.resolve()

    def test_no_manifest_found(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert ManifestLoader().config_path is None

    def test_load_invalid_yaml(self, tmp_path):
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text("invalid: yaml: content: [")

        loader = ManifestLoader(manifest)
        with pytest.raises(MalformedContent, match="Invalid reconfig.yaml"):
            loader.load()

    def test_load_non_mapping(self, tmp_path):
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text("- a\n- b\n")

        with pytest.raises(MalformedContent, match="must be a mapping"):
            ManifestLoader(manifest).load()

    def test_environment_settings(self, tmp_path, monkeypatch):
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text(yaml.dump({"environment": "staging", "required_environments": "prod"}))

        loader = ManifestLoader(manifest)
        assert loader.get_environment() == "staging"
        assert loader.get_required_environments() == ["prod"]

        monkeypatch.setenv(ENVIRONMENT_VARIABLE, "qa")
        assert loader.get_environment() == "qa"

    def test_parse_source_relative_to_manifest(self, tmp_path):
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text("sources: []")
        loader = ManifestLoader(manifest)

        parsed = loader.parse_source({"path": "config/app.yaml", "nested": "svc", "optional": True})
        assert parsed["path"] == manifest.resolve().parent / "config" / "app.yaml"
        assert parsed["path"].is_absolute()
        assert parsed["nested"] == "svc"
        assert parsed["optional"] is True
        assert parsed["raw"] is False

    def test_parse_source_absolute_path(self, tmp_path):
        loader = ManifestLoader(tmp_path / "missing.yaml")
        parsed = loader.parse_source({"path": "/etc/app.yaml", "raw": True})
        assert parsed["path"] == Path("/etc/app.yaml")
        assert parsed["raw"] is True
        assert parsed["nested"] is None

    def test_parse_source_missing_path(self):
        loader = ManifestLoader()
        with pytest.raises(ValueError, match="must have a 'path'"):
            loader.parse_source({"nested": "svc"})
        with pytest.raises(ValueError):
            loader.parse_source("config/app.yaml")


class TestApplyManifest:
    """Test registering the manifest's sources."""

    def _write_manifest(self, tmp_path, data):
        manifest = tmp_path / "reconfig.yaml"
        manifest.write_text(yaml.dump(data))
        return ManifestLoader(manifest)

    def test_registers_sources_in_order(self, tmp_path, write_config):
        write_config("config/base.yaml", {"default": {"x": "base", "db": {"port": 1}}, "prod": {"x": "base-prod"}})
        write_config("config/override.yaml", {"default": {"x": "override"}, "prod": {"x": "override-prod"}})
        write_config("config/svc.json", {"name": "api"})
        loader = self._write_manifest(
            tmp_path,
            {
                "sources": [
                    {"path": "config/base.yaml"},
                    {"path": "config/override.yaml"},
                    {"path": "config/local.yaml", "optional": True},
                    {"path": "config/svc.json", "raw": True, "nested": "svc"},
                ]
            },
        )

        registry = apply_manifest(Registry(), loader)
        assert [d.source_id for d in registry.registrations] == [
            str(tmp_path.resolve() / "config" / name)
            for name in ("base.yaml", "override.yaml", "local.yaml", "svc.json")
        ]
        assert registry.tree.to_dict() == {
            "x": "override",
            "db": {"port": 1},
            "svc": {"name": "api"},
        }

        registry.set_environment("prod")
        assert registry.tree["x"] == "override-prod"
        assert "db" not in registry.tree

    def test_environment_from_manifest(self, tmp_path, write_config):
        write_config("app.yaml", {"staging": {"k": 2}})
        loader = self._write_manifest(tmp_path, {"environment": "staging", "sources": [{"path": "app.yaml"}]})

        registry = apply_manifest(Registry(), loader)
        assert registry.environment == "staging"
        assert registry.tree["k"] == 2

    def test_explicit_environment_wins(self, tmp_path, write_config):
        write_config("app.yaml", {"staging": {"k": 2}, "prod": {"k": 3}})
        loader = self._write_manifest(tmp_path, {"environment": "staging", "sources": [{"path": "app.yaml"}]})

        registry = apply_manifest(Registry(), loader, environment="prod")
        assert registry.tree["k"] == 3

    def test_required_environments_enforced(self, tmp_path, write_config):
        write_config("app.yaml", {"default": {"k": 1}})
        loader = self._write_manifest(
            tmp_path, {"required_environments": ["default", "prod"], "sources": [{"path": "app.yaml"}]}
        )

        registry = Registry()
        with pytest.raises(MissingEnvironment):
            apply_manifest(registry, loader)
        assert registry.get_required_environments() == ["default", "prod"]
        assert registry.registrations == []
