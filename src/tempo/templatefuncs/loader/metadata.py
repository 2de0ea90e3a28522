"""Metadata describing a located function provider."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DESCRIPTOR_FILENAME = "provider.py"
DESCRIPTOR_MODULE = "provider"

# Environment and cache directories that never hold provider sources
SKIP_DIRS = frozenset({"__pycache__", "node_modules", "venv", "env", "site-packages"})


def is_skipped_dir(name: str) -> bool:
    """Whether a directory called *name* is left out of the search and the build."""
    return name.startswith(".") or name in SKIP_DIRS


@dataclass(frozen=True)
class ExtensionModuleMetadata:
    """Where a provider lives inside an extension checkout."""

    descriptor_path: Path  # Absolute path to provider.py
    module_root: Path  # Directory the search started from
    package_name: str  # Dotted package holding provider.py ("" at top level)
    source_dir: Path  # Directory that must be on sys.path to import it

    @property
    def import_path(self) -> str:
        """Dotted import path of the descriptor module."""
        if self.package_name:
            return f"{self.package_name}.{DESCRIPTOR_MODULE}"
        return DESCRIPTOR_MODULE

    @property
    def build_dir(self) -> Path:
        """Scratch directory for the introspection program."""
        return self.module_root / ".tempo"
