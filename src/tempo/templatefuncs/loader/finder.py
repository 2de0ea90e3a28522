"""Locate ``provider.py`` inside an extension checkout."""
from __future__ import annotations

import os
from pathlib import Path

from tempo.errors import DescriptorNotFoundError, PackageNameError
from tempo.logging import get_logger
from tempo.templatefuncs.loader.metadata import (
    DESCRIPTOR_FILENAME,
    ExtensionModuleMetadata,
    is_skipped_dir,
)

logger = get_logger("loader.finder")

SOURCE_ROOT_DIR = "src"


def find_provider_file(module_root: Path) -> ExtensionModuleMetadata:
    """
    Walk *module_root* depth-first and return metadata for the first ``provider.py``.

    Within a directory the descriptor is checked before any subdirectory is
    entered, and subdirectories are visited in sorted order. Hidden and
    environment directories are skipped.

    Raises:
        DescriptorNotFoundError: If no descriptor exists under the root
        PackageNameError: If the descriptor's directory is not importable
    """
    module_root = Path(module_root).resolve()
    if not module_root.is_dir():
        raise DescriptorNotFoundError(f"module root does not exist: {module_root}")

    descriptor = _walk(module_root)
    if descriptor is None:
        raise DescriptorNotFoundError(
            f"missing required {DESCRIPTOR_FILENAME} file in the module {module_root}"
        )

    logger.debug("Found provider descriptor: %s", descriptor)
    package_name, source_dir = _package_for(descriptor, module_root)
    return ExtensionModuleMetadata(
        descriptor_path=descriptor,
        module_root=module_root,
        package_name=package_name,
        source_dir=source_dir,
    )


def _walk(directory: Path) -> Path | None:
    candidate = directory / DESCRIPTOR_FILENAME
    if candidate.is_file():
        return candidate

    try:
        entries = sorted(os.scandir(directory), key=lambda e: e.name)
    except OSError as e:
        logger.debug("Cannot scan %s: %s", directory, e)
        return None

    for entry in entries:
        if not entry.is_dir(follow_symlinks=False):
            continue
        if is_skipped_dir(entry.name):
            continue
        found = _walk(Path(entry.path))
        if found is not None:
            return found
    return None


def _package_for(descriptor: Path, module_root: Path) -> tuple[str, Path]:
    """Derive the dotted package name and the import root of *descriptor*."""
    parts = list(descriptor.parent.relative_to(module_root).parts)
    source_dir = module_root
    if parts and parts[0] == SOURCE_ROOT_DIR:
        parts = parts[1:]
        source_dir = module_root / SOURCE_ROOT_DIR

    for part in parts:
        if not part.isidentifier():
            raise PackageNameError(
                f"failed to determine package name for {descriptor}: "
                f"'{part}' is not a valid Python package name"
            )
    return ".".join(parts), source_dir
