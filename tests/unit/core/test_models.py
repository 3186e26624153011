"""Tests for core data models."""

from __future__ import annotations

from pathlib import Path

import pytest

from nsenum.core.exceptions import InvalidQueryError
from nsenum.core.models import DiscoveredType, Manifest, ModulePath, TypeInfo


class TestModulePath:
    """Tests for ModulePath."""

    def test_parse_trims_separators(self) -> None:
        path = ModulePath.parse("\\Datto\\Core\\")
        assert path.segments == ("Datto", "Core")
        assert str(path) == "Datto\\Core"

    def test_parse_empty_is_root(self) -> None:
        assert ModulePath.parse("").is_root
        assert ModulePath.parse("\\").is_root
        assert not ModulePath.parse("App").is_root

    def test_rejects_empty_segment(self) -> None:
        with pytest.raises(InvalidQueryError):
            ModulePath.parse("App\\\\Plugins")

    def test_is_case_sensitive(self) -> None:
        assert ModulePath.parse("App\\Plugins") != ModulePath.parse("app\\plugins")

    def test_child_does_not_mutate(self) -> None:
        parent = ModulePath.parse("App")
        child = parent.child("Plugins")
        assert child.segments == ("App", "Plugins")
        assert parent.segments == ("App",)

    def test_common_prefix_length(self) -> None:
        app_plugins = ModulePath.parse("App\\Plugins")
        assert app_plugins.common_prefix_length(ModulePath.parse("App\\Plugins\\Extra")) == 2
        assert app_plugins.common_prefix_length(ModulePath.parse("App\\Other")) == 1
        assert app_plugins.common_prefix_length(ModulePath.parse("Vendor\\Plugins")) == 0

    def test_startswith(self) -> None:
        path = ModulePath.parse("App\\Plugins\\Foo")
        assert path.startswith(ModulePath.parse("App\\Plugins"))
        assert not path.startswith(ModulePath.parse("App\\Other"))

    def test_qualify(self) -> None:
        assert ModulePath.parse("App\\Plugins").qualify("Foo") == "App\\Plugins\\Foo"
        assert ModulePath().qualify("Foo") == "Foo"


class TestManifestFromMapping:
    """Tests for Manifest.from_mapping."""

    def test_resolves_relative_roots(self, tmp_path: Path) -> None:
        manifest = Manifest.from_mapping(tmp_path, {"App\\": ["src/", "/abs/lib"]})

        assert len(manifest.entries) == 1
        entry = manifest.entries[0]
        assert entry.prefix == ModulePath.parse("App")
        assert entry.roots == (tmp_path / "src", Path("/abs/lib"))

    def test_packages(self, tmp_path: Path) -> None:
        manifest = Manifest.from_mapping(tmp_path, {}, packages={"acme/tools": "vendor/acme/tools"})
        assert manifest.packages == {"acme/tools": tmp_path / "vendor" / "acme" / "tools"}


class TestDiscoveredType:
    def test_fqcn(self) -> None:
        discovered = DiscoveredType(ModulePath.parse("App\\Plugins"), "Foo", Path("Foo.php"))
        assert discovered.fqcn == "App\\Plugins\\Foo"


class TestTypeInfo:
    def test_implements_ignores_leading_backslash(self) -> None:
        info = TypeInfo("App\\Foo", interfaces=frozenset({"App\\Contracts\\Runnable"}))
        assert info.implements("\\App\\Contracts\\Runnable")
        assert info.implements("App\\Contracts\\Runnable")
        assert not info.implements("Runnable")
