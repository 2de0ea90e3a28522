"""
tempo - template rendering with pluggable template functions.

Templates are rendered with Jinja2 and can call functions from a
``FunctionRegistry``. Besides the built-in providers, functions can come
from external provider modules, loaded from a git repository or a local
directory.

Example:
    from pathlib import Path

    from tempo import ExtensionLoader, render_template
    from tempo.context import create_registry

    registry = create_registry()
    with ExtensionLoader(registry) as loader:
        loader.register_from_local_path(Path("./my-funcs"))
        print(render_template("{{ shout(name) }}", {"name": "tempo"}, registry))
"""

from tempo.config import FunctionProviderEntry, TemplatesConfig, TempoConfig
from tempo.context import AppContext, create_registry
from tempo.errors import (
    BuildError,
    CapabilityNotSatisfiedError,
    ConfigError,
    DescriptorNotFoundError,
    DescriptorSyntaxError,
    EmptyFunctionSetError,
    ExecutionError,
    ExtensionCallError,
    InvalidProviderError,
    NilProviderError,
    PackageNameError,
    ProviderDeclarationError,
    RenderError,
    RepositoryStateError,
    TempoError,
    ToolchainError,
    UnknownFunctionError,
    VersionControlError,
)
from tempo.logging import get_logger, set_level, setup_logging
from tempo.render import render_file, render_template
from tempo.templatefuncs import FunctionMap, FunctionProvider, FunctionRegistry
from tempo.templatefuncs.loader import ExtensionLoader, IntrospectionPipeline
from tempo.vcs import GitClient, VersionControl

__version__ = "0.1.0"

__all__ = [
    # Config
    "TempoConfig",
    "TemplatesConfig",
    "FunctionProviderEntry",
    # Context
    "AppContext",
    "create_registry",
    # Functions
    "FunctionMap",
    "FunctionProvider",
    "FunctionRegistry",
    # Loading
    "ExtensionLoader",
    "IntrospectionPipeline",
    "GitClient",
    "VersionControl",
    # Rendering
    "render_template",
    "render_file",
    # Logging
    "setup_logging",
    "get_logger",
    "set_level",
    # Errors
    "TempoError",
    "ConfigError",
    "RepositoryStateError",
    "VersionControlError",
    "ToolchainError",
    "InvalidProviderError",
    "DescriptorNotFoundError",
    "PackageNameError",
    "ProviderDeclarationError",
    "DescriptorSyntaxError",
    "CapabilityNotSatisfiedError",
    "NilProviderError",
    "EmptyFunctionSetError",
    "BuildError",
    "ExecutionError",
    "UnknownFunctionError",
    "RenderError",
    "ExtensionCallError",
]
