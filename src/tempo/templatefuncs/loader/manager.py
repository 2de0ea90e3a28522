"""
Extension loader - installs function providers and registers their functions.

Two entry points are offered to the CLI:

- ``install_and_register(data_dir, repo_url, force)`` clones or updates a
  provider repository under ``<data_dir>/extensions/<name>`` and registers it
- ``register_from_local_path(path)`` registers a provider already on disk

Both run the same stages: locate ``provider.py``, check it declares
``Provider``, build and run the introspection artifact, then register one
``RemoteFunction`` per reported name.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from tempo.config import FunctionProviderEntry
from tempo.errors import RepositoryStateError, TempoError
from tempo.logging import get_logger
from tempo.templatefuncs.loader.channel import ExtensionChannel, RemoteFunction
from tempo.templatefuncs.loader.finder import find_provider_file
from tempo.templatefuncs.loader.introspect import IntrospectionPipeline
from tempo.templatefuncs.loader.resolver import (
    EXTENSIONS_DIR,
    extension_clone_path,
    extract_name_from_path,
    extract_name_from_url,
    is_usable_clone_name,
)
from tempo.templatefuncs.loader.validator import validate_provider_presence
from tempo.templatefuncs.registry import FunctionRegistry
from tempo.vcs import GitClient, VersionControl

logger = get_logger("loader.manager")


class ExtensionLoader:
    """
    Loads external function providers into a ``FunctionRegistry``.

    The loader owns the provider processes started for registered
    functions; call ``close()`` (or use it as a context manager) when the
    run is over.

    Example:
        registry = FunctionRegistry()
        with ExtensionLoader(registry) as loader:
            loader.install_and_register(Path(".tempo-files"), "https://github.com/acme/funcs.git")
            render_template("{{ shout('hi') }}", {}, registry)
    """

    def __init__(
        self,
        registry: FunctionRegistry,
        vcs: VersionControl | None = None,
        pipeline: IntrospectionPipeline | None = None,
    ) -> None:
        self.registry = registry
        self.vcs: VersionControl = vcs or GitClient()
        self.pipeline = pipeline or IntrospectionPipeline()
        self._channels: dict[Path, ExtensionChannel] = {}
        # Replaced channels stay reachable from functions dropped by an update
        self._retired: list[ExtensionChannel] = []

    def install_and_register(
        self,
        data_dir: Path,
        repo_url: str,
        force: bool = False,
    ) -> list[str]:
        """
        Make sure a usable clone of *repo_url* exists, then register it.

        - no clone yet: clone it
        - valid clone: pull it, or wipe and clone again when *force* is set
        - directory that is not a repository: refuse unless *force* is set

        Returns:
            Names of the registered functions

        Raises:
            RepositoryStateError: If the clone directory cannot be used
        """
        logger.info("Checking repository state for %s", repo_url)
        if not is_usable_clone_name(extract_name_from_url(repo_url)):
            raise RepositoryStateError(f"cannot derive a repository name from '{repo_url}'")

        clone_path = extension_clone_path(Path(data_dir), repo_url)
        if clone_path.resolve().parent != (Path(data_dir) / EXTENSIONS_DIR).resolve():
            raise RepositoryStateError(
                f"clone path {clone_path} for '{repo_url}' is outside {Path(data_dir) / EXTENSIONS_DIR}"
            )

        if not clone_path.exists():
            self.vcs.clone(repo_url, clone_path)
        elif not clone_path.is_dir():
            raise RepositoryStateError(
                f"function provider path {clone_path} exists but is not a directory"
            )
        elif force:
            self.vcs.force_reclone(repo_url, clone_path)
        elif self.vcs.is_valid_repo(clone_path):
            self.vcs.update(clone_path)
        else:
            raise RepositoryStateError(
                f"function provider folder {clone_path} already exists but is not a "
                "valid repository. Use --force to re-clone or manually remove the folder."
            )

        return self.register_from_local_path(clone_path)

    def register_from_local_path(self, path: Path) -> list[str]:
        """
        Register the functions of the provider found under *path*.

        Returns:
            Names of the registered functions
        """
        logger.info("Loading functions from %s", path)

        metadata = find_provider_file(Path(path))
        validate_provider_presence(metadata.descriptor_path)
        result = self.pipeline.load(metadata)

        source = extract_name_from_path(str(metadata.module_root))
        channel = self._replace_channel(
            ExtensionChannel(
                result.artifact,
                metadata.module_root,
                python=self.pipeline.python,
                name=source,
            )
        )
        for name in result.functions:
            self.registry.register(name, RemoteFunction(name, channel), source=source)
            logger.info("Registered function %s", name)

        logger.info("Function provider successfully loaded: %s", metadata.module_root)
        return list(result.functions)

    def load_providers(
        self,
        entries: Iterable[FunctionProviderEntry],
        data_dir: Path,
        force: bool = False,
    ) -> dict[str, list[str]]:
        """
        Register every provider in *entries*, stopping at the first failure.

        Returns:
            Provider name -> registered function names
        """
        loaded: dict[str, list[str]] = {}
        for entry in entries:
            if entry.type == "url":
                loaded[entry.name or extract_name_from_url(entry.value)] = (
                    self.install_and_register(data_dir, entry.value, force=force)
                )
            elif entry.type == "path":
                loaded[entry.name or extract_name_from_path(entry.value)] = (
                    self.register_from_local_path(Path(entry.value))
                )
            else:
                raise TempoError(f"unknown provider type: {entry.type}")
        return loaded

    def close(self) -> None:
        """Stop all provider processes started by this loader."""
        for channel in [*self._channels.values(), *self._retired]:
            channel.close()
        self._channels.clear()
        self._retired.clear()

    def _replace_channel(self, channel: ExtensionChannel) -> ExtensionChannel:
        previous = self._channels.get(channel.cwd)
        if previous is not None:
            previous.close()
            self._retired.append(previous)
        self._channels[channel.cwd] = channel
        return channel

    def __enter__(self) -> ExtensionLoader:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
