"""Run-scoped application context."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from tempo.config import TempoConfig
from tempo.logging import get_logger
from tempo.templatefuncs.loader.introspect import IntrospectionPipeline
from tempo.templatefuncs.loader.manager import ExtensionLoader
from tempo.templatefuncs.providers import BUILTIN_PROVIDERS
from tempo.templatefuncs.registry import FunctionRegistry
from tempo.vcs import VersionControl

logger = get_logger("context")


def create_registry(with_builtins: bool = True) -> FunctionRegistry:
    """A fresh registry, pre-filled with the built-in providers."""
    registry = FunctionRegistry()
    if with_builtins:
        for name, provider in BUILTIN_PROVIDERS.items():
            registry.register_provider(provider, source=f"builtin:{name}")
    return registry


@dataclass
class AppContext:
    """Everything a single CLI invocation works with."""

    cwd: Path
    config: TempoConfig
    registry: FunctionRegistry
    loader: ExtensionLoader

    @classmethod
    def create(
        cls,
        cwd: Path | None = None,
        config: TempoConfig | None = None,
        vcs: VersionControl | None = None,
        pipeline: IntrospectionPipeline | None = None,
    ) -> AppContext:
        cwd = cwd or Path.cwd()
        config = config or TempoConfig.load(cwd)
        registry = create_registry()
        loader = ExtensionLoader(registry, vcs=vcs, pipeline=pipeline)
        logger.debug("Context created (cwd=%s, tempo_root=%s)", cwd, config.tempo_root)
        return cls(cwd=cwd, config=config, registry=registry, loader=loader)

    def load_configured_providers(self, force: bool = False) -> dict[str, list[str]]:
        """Register the providers listed in the configuration file."""
        return self.loader.load_providers(
            self.config.templates.function_providers,
            self.config.tempo_root,
            force=force,
        )

    def close(self) -> None:
        self.loader.close()

    def __enter__(self) -> AppContext:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
