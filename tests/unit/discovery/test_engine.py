"""Tests for the discovery engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator
from unittest.mock import patch

import pytest

from nsenum.config.ignore import IgnorePatterns
from nsenum.core.exceptions import InvalidQueryError
from nsenum.core.models import Manifest, ModulePath, TypeInfo
from nsenum.discovery.engine import DiscoveryEngine

FOO = "App\\Plugins\\Foo"


@pytest.fixture
def plugins(project: Any) -> Any:
    """The App\\Plugins -> src/Plugins project holding Foo implementing Runnable."""
    project.php_class("src/Plugins/Foo.php", "App\\Plugins", header="class Foo implements Runnable {")
    return project


def _engine(project: Any, mapping: Any = None, **kwargs: Any) -> DiscoveryEngine:
    manifest = Manifest.from_mapping(project.root, mapping or {"App\\Plugins": ["src/Plugins"]})
    return DiscoveryEngine(manifest, **kwargs)


class TestDiscover:
    """Tests for DiscoveryEngine.discover."""

    def test_lists_declared_classes(self, plugins: Any, counting_introspector: Any) -> None:
        introspector = counting_introspector()
        engine = _engine(plugins, introspector=introspector)

        assert engine.discover("App\\Plugins", []) == [FOO]
        assert introspector.total_calls == 0

    def test_filters_by_interface(self, plugins: Any, counting_introspector: Any) -> None:
        introspector = counting_introspector({FOO: TypeInfo(FOO, frozenset({"Runnable"}))})
        engine = _engine(plugins, introspector=introspector)

        assert engine.discover("App\\Plugins", [{"implements": "Runnable"}]) == [FOO]
        assert engine.discover("App\\Plugins", [{"implements": "Other"}]) == []

    def test_accepts_module_path(self, plugins: Any, counting_introspector: Any) -> None:
        engine = _engine(plugins, introspector=counting_introspector())
        assert engine.discover(ModulePath.parse("App\\Plugins")) == [FOO]

    @pytest.mark.parametrize("namespace", ["", "\\", ModulePath()])
    def test_root_namespace_is_rejected(self, plugins: Any, namespace: Any) -> None:
        with pytest.raises(InvalidQueryError):
            _engine(plugins).discover(namespace)

    def test_malformed_conditions_are_rejected(self, plugins: Any) -> None:
        with pytest.raises(InvalidQueryError):
            _engine(plugins).discover("App\\Plugins", [{"abstract": "no"}])

    def test_unknown_condition_rejected_before_scanning(self, plugins: Any, counting_introspector: Any) -> None:
        introspector = counting_introspector()
        with pytest.raises(InvalidQueryError, match="did you mean 'abstract'"):
            _engine(plugins, introspector=introspector).discover("App\\Plugins", [{"abstrac": True}])
        assert introspector.total_calls == 0

    def test_unknown_condition_ignored_when_permissive(self, plugins: Any, counting_introspector: Any) -> None:
        engine = _engine(plugins, introspector=counting_introspector(), permissive=True)
        assert engine.discover("App\\Plugins", [{"extends": "Base"}]) == [FOO]

    def test_recurses_into_subnamespaces(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Sub/Bar.php", "App\\Plugins\\Sub")

        result = _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == [FOO, "App\\Plugins\\Sub\\Bar"]

    @pytest.mark.parametrize("dirname", ["123abc", "with-dash", "v2", ".hidden"])
    def test_skips_directories_that_are_not_namespace_segments(
        self, plugins: Any, counting_introspector: Any, dirname: str
    ) -> None:
        plugins.php_class(f"src/Plugins/{dirname}/Baz.php", f"App\\Plugins\\{dirname}")

        result = _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == [FOO]

    def test_directory_layout_decides_the_namespace(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Misplaced.php", "App\\Other")

        result = _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == [FOO]

    def test_ignores_non_source_files(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php("src/Plugins/Notes.md", "namespace App\\Plugins;\nclass Notes {\n")

        result = _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == [FOO]

    def test_lexical_order(self, project: Any, counting_introspector: Any) -> None:
        project.php_class("src/Plugins/Zeta.php", "App\\Plugins")
        project.php_class("src/Plugins/Alpha.php", "App\\Plugins")
        project.php_class("src/Plugins/Mid/Inner.php", "App\\Plugins\\Mid")

        result = _engine(project, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == ["App\\Plugins\\Alpha", "App\\Plugins\\Mid\\Inner", "App\\Plugins\\Zeta"]

    def test_query_below_manifest_prefix(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Sub/Bar.php", "App\\Plugins\\Sub")
        engine = _engine(plugins, {"App\\": ["src"]}, introspector=counting_introspector())

        assert engine.discover("App\\Plugins\\Sub") == ["App\\Plugins\\Sub\\Bar"]

    def test_query_above_manifest_prefix(self, plugins: Any, counting_introspector: Any) -> None:
        engine = _engine(plugins, {"App\\Plugins\\": ["src/Plugins"]}, introspector=counting_introspector())
        assert engine.discover("App") == [FOO]

    def test_unrelated_namespace_finds_nothing(self, plugins: Any) -> None:
        assert _engine(plugins).discover("Vendor\\Plugins") == []

    def test_overlapping_entries_are_deduplicated(self, plugins: Any, counting_introspector: Any) -> None:
        introspector = counting_introspector({FOO: TypeInfo(FOO, frozenset({"Runnable"}))})
        engine = _engine(
            plugins,
            {"App\\": ["src"], "App\\Plugins\\": ["src/Plugins", "src/Plugins/"]},
            introspector=introspector,
        )

        assert engine.discover("App\\Plugins", [{"implements": "Runnable"}]) == [FOO]
        assert introspector.calls == {FOO: 1}

    def test_one_directory_under_two_prefixes(self, project: Any, counting_introspector: Any) -> None:
        project.php_class("src/Alpha.php", "App\\A")
        project.php_class("src/Beta.php", "App\\B")
        engine = _engine(project, {"App\\A": ["src"], "App\\B": ["src"]}, introspector=counting_introspector())

        assert engine.discover("App") == ["App\\A\\Alpha", "App\\B\\Beta"]

    def test_symlink_cycle_is_not_followed(self, plugins: Any, counting_introspector: Any) -> None:
        (plugins.root / "src" / "Plugins" / "Loop").symlink_to(plugins.root / "src" / "Plugins")

        assert _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins") == [FOO]

    def test_inaccessible_subdirectory_is_skipped(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Locked/Hidden.php", "App\\Plugins\\Locked")
        plugins.php_class("src/Plugins/Zed/Last.php", "App\\Plugins\\Zed")
        iterdir = Path.iterdir

        def guarded(self: Path) -> Iterator[Path]:
            if self.name == "Locked":
                raise PermissionError(13, "Permission denied", str(self))
            return iterdir(self)

        with patch.object(Path, "iterdir", guarded):
            result = _engine(plugins, introspector=counting_introspector()).discover("App\\Plugins")

        assert result == [FOO, "App\\Plugins\\Zed\\Last"]

    def test_same_class_in_two_roots_is_reported_once(self, project: Any, counting_introspector: Any) -> None:
        project.php_class("src/Plugins/Foo.php", "App\\Plugins")
        project.php_class("lib/Plugins/Foo.php", "App\\Plugins")
        project.php_class("lib/Plugins/Extra.php", "App\\Plugins")
        introspector = counting_introspector()
        engine = _engine(project, {"App\\Plugins": ["src/Plugins", "lib/Plugins"]}, introspector=introspector)

        assert engine.discover("App\\Plugins", [{"abstract": False}]) == [FOO, "App\\Plugins\\Extra"]
        assert introspector.calls == {FOO: 1, "App\\Plugins\\Extra": 1}

    def test_each_query_introspects_afresh(self, plugins: Any, counting_introspector: Any) -> None:
        introspector = counting_introspector()
        engine = _engine(plugins, introspector=introspector)

        engine.discover("App\\Plugins", [{"abstract": False}])
        engine.discover("App\\Plugins", [{"abstract": False}])

        assert introspector.calls == {FOO: 2}

    def test_abstract_filter(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Base.php", "App\\Plugins", header="abstract class Base {")
        base = "App\\Plugins\\Base"
        introspector = counting_introspector({base: TypeInfo(base, abstract=True)})
        engine = _engine(plugins, introspector=introspector)

        assert engine.discover("App\\Plugins", [{"abstract": False}]) == [FOO]
        assert engine.discover("App\\Plugins", [{"abstract": True}]) == [base]

    def test_ignore_patterns_prune_the_walk(self, plugins: Any, counting_introspector: Any) -> None:
        plugins.php_class("src/Plugins/Legacy/Old.php", "App\\Plugins\\Legacy")
        plugins.php_class("src/Plugins/Generated.php", "App\\Plugins")
        ignore = IgnorePatterns(["src/Plugins/Legacy/", "Generated.php"])

        result = _engine(plugins, introspector=counting_introspector(), ignore=ignore).discover("App\\Plugins")

        assert result == [FOO]

    def test_default_introspector_reads_sources(self, project: Any) -> None:
        project.php_class(
            "src/Plugins/Foo.php",
            "App\\Plugins",
            header="class Foo implements Runnable {",
            preamble="use App\\Contracts\\Runnable;",
        )
        project.php_class("src/Plugins/Bar.php", "App\\Plugins")

        engine = _engine(project)

        assert engine.discover("App\\Plugins", [{"implements": "App\\Contracts\\Runnable"}]) == [FOO]
