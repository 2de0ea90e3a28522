"""Loading of external function providers."""
from __future__ import annotations

from tempo.templatefuncs.loader.channel import ExtensionChannel, RemoteFunction
from tempo.templatefuncs.loader.finder import find_provider_file
from tempo.templatefuncs.loader.introspect import (
    IntrospectionPipeline,
    IntrospectionResult,
    parse_manifest,
)
from tempo.templatefuncs.loader.manager import ExtensionLoader
from tempo.templatefuncs.loader.metadata import ExtensionModuleMetadata
from tempo.templatefuncs.loader.resolver import (
    extension_clone_path,
    extract_name_from_path,
    extract_name_from_url,
    is_usable_clone_name,
)
from tempo.templatefuncs.loader.toolchain import BuildToolchain, PythonToolchain
from tempo.templatefuncs.loader.validator import validate_provider_presence

__all__ = [
    "BuildToolchain",
    "ExtensionChannel",
    "ExtensionLoader",
    "ExtensionModuleMetadata",
    "IntrospectionPipeline",
    "IntrospectionResult",
    "PythonToolchain",
    "RemoteFunction",
    "extension_clone_path",
    "extract_name_from_path",
    "extract_name_from_url",
    "find_provider_file",
    "is_usable_clone_name",
    "parse_manifest",
    "validate_provider_presence",
]
