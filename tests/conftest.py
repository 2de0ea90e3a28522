"""Shared pytest fixtures for tempo tests."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest

from tempo.context import create_registry
from tempo.templatefuncs.loader.finder import find_provider_file
from tempo.templatefuncs.loader.introspect import IntrospectionResult
from tempo.templatefuncs.loader.metadata import ExtensionModuleMetadata
from tempo.templatefuncs.registry import FunctionRegistry

SHOUT_PROVIDER = dedent(
    """\
    def shout(s):
        return s.upper() + "!"


    def whisper(s):
        return s.lower()


    class StringsProvider:
        def get_functions(self):
            return {"shout": shout, "whisper": whisper}


    Provider = StringsProvider()
    """
)


class FakeVCS:
    """VersionControl double that records calls and creates directories."""

    def __init__(self, provider_source: str = SHOUT_PROVIDER) -> None:
        self.provider_source = provider_source
        self.calls: list[tuple[str, Path]] = []

    def clone(self, url: str, path: Path) -> None:
        self.calls.append(("clone", path))
        self._populate(path)

    def update(self, path: Path) -> None:
        self.calls.append(("update", path))
        (path / "provider.py").write_text(self.provider_source)

    def force_reclone(self, url: str, path: Path) -> None:
        self.calls.append(("force_reclone", path))
        shutil.rmtree(path, ignore_errors=True)
        self._populate(path)

    def is_valid_repo(self, path: Path) -> bool:
        return (path / ".git").exists()

    @property
    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    def _populate(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        (path / ".git").mkdir(exist_ok=True)
        (path / "provider.py").write_text(self.provider_source)


class FakeToolchain:
    """BuildToolchain double that records calls and never builds anything."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def resolve_dependencies(self, module_root: Path) -> None:
        self.calls.append("resolve_dependencies")

    def build(self, module_root: Path, entry_dir: Path, output: Path) -> Path:
        self.calls.append("build")
        return output


class FakePipeline:
    """
    IntrospectionPipeline double.

    Reports the fixed ``functions`` list when given, otherwise the names
    listed on a ``# functions: a, b`` first line of ``provider.py``.
    """

    python = sys.executable

    def __init__(self, functions: list[str] | None = None, error: Exception | None = None) -> None:
        self.functions = functions
        self.error = error
        self.loaded: list[ExtensionModuleMetadata] = []

    def load(self, metadata: ExtensionModuleMetadata) -> IntrospectionResult:
        self.loaded.append(metadata)
        if self.error is not None:
            raise self.error
        functions = self.functions
        if functions is None:
            first_line = metadata.descriptor_path.read_text().splitlines()[0]
            functions = [n.strip() for n in first_line.split(":", 1)[1].split(",") if n.strip()]
        return IntrospectionResult(
            metadata=metadata,
            artifact=metadata.build_dir / "provider.pyz",
            functions=list(functions),
        )


@pytest.fixture
def registry() -> FunctionRegistry:
    """A registry without built-ins."""
    return create_registry(with_builtins=False)


@pytest.fixture
def fake_vcs() -> FakeVCS:
    return FakeVCS(provider_source="# functions: shout, whisper\n" + SHOUT_PROVIDER)


@pytest.fixture
def fake_pipeline() -> FakePipeline:
    return FakePipeline()


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def make_module(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating an extension module directory with a provider.py."""

    def _make(source: str = SHOUT_PROVIDER, name: str = "funcs", package: str = "") -> Path:
        root = tmp_path / name
        descriptor_dir = root / package if package else root
        descriptor_dir.mkdir(parents=True, exist_ok=True)
        (descriptor_dir / "provider.py").write_text(dedent(source))
        return root

    return _make


@pytest.fixture
def shout_metadata(make_module: Callable[..., Path]) -> ExtensionModuleMetadata:
    """Metadata for a module exposing ``shout`` and ``whisper``."""
    return find_provider_file(make_module())


