"""Shared fixtures: throwaway Composer projects built under tmp_path."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

import nsenum.enumerator as enumerator_module
import nsenum.manifest.loader as loader_module
from nsenum.bootstrap.paths import NSENUM_ROOT_ENV
from nsenum.core.models import TypeInfo


class ComposerProject:
    """Builds a minimal Composer project tree on disk."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self._installed: List[Dict[str, Any]] = []

    def composer_json(
        self,
        psr4: Optional[Dict[str, Any]] = None,
        psr0: Optional[Dict[str, Any]] = None,
        dev_psr4: Optional[Dict[str, Any]] = None,
    ) -> Path:
        autoload: Dict[str, Any] = {}
        if psr4:
            autoload["psr-4"] = psr4
        if psr0:
            autoload["psr-0"] = psr0
        data: Dict[str, Any] = {"name": "acme/app", "autoload": autoload}
        if dev_psr4:
            data["autoload-dev"] = {"psr-4": dev_psr4}
        path = self.root / "composer.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    def package(self, name: str, psr4: Dict[str, Any], composer2: bool = True) -> Path:
        """Register an installed package and write vendor/composer/installed.json."""
        entry: Dict[str, Any] = {"name": name, "autoload": {"psr-4": psr4}}
        if composer2:
            entry["install-path"] = f"../{name}"
        self._installed.append(entry)

        installed = self.root / "vendor" / "composer" / "installed.json"
        installed.parent.mkdir(parents=True, exist_ok=True)
        payload: Any = {"packages": self._installed, "dev": True} if composer2 else self._installed
        installed.write_text(json.dumps(payload), encoding="utf-8")

        package_dir = self.root / "vendor" / name
        package_dir.mkdir(parents=True, exist_ok=True)
        return package_dir

    def php(self, relative: str, content: str) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def php_class(
        self,
        relative: str,
        namespace: str,
        header: Optional[str] = None,
        body: str = "",
        preamble: str = "",
    ) -> Path:
        """Write a conventionally formatted class file.

        ``header`` defaults to ``class <FileName> {``.
        """
        name = Path(relative).stem
        header = header or f"class {name} {{"
        content = f"<?php\n\nnamespace {namespace};\n{preamble}\n{header}\n{body}\n}}\n"
        return self.php(relative, content)


@pytest.fixture
def project(tmp_path: Path) -> ComposerProject:
    return ComposerProject(tmp_path / "proj")


class CountingIntrospector:
    """Introspector stub that answers from a table and counts calls per class."""

    def __init__(self, infos: Optional[Dict[str, TypeInfo]] = None) -> None:
        self.infos = infos or {}
        self.calls: Dict[str, int] = {}

    def inspect(self, fqcn: str, path: Optional[Path] = None) -> TypeInfo:
        self.calls[fqcn] = self.calls.get(fqcn, 0) + 1
        return self.infos.get(fqcn, TypeInfo(fqcn=fqcn))

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture(autouse=True)
def _isolated_process_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fresh manifest cache and default enumerator, and no root override, per test."""
    monkeypatch.setattr(loader_module, "_MANIFEST_CACHE", {})
    monkeypatch.setattr(enumerator_module, "_DEFAULT", None)
    monkeypatch.delenv(NSENUM_ROOT_ENV, raising=False)


@pytest.fixture
def counting_introspector() -> type[CountingIntrospector]:
    """The counting stub class; instantiate it with the TypeInfo table a test needs."""
    return CountingIntrospector
