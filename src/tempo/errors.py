"""
Error types raised by tempo.

Every failure of an extension load is terminal for that attempt. Errors that
come from an external tool keep the tool's output in ``diagnostics`` so the
CLI can show it to the operator unchanged.
"""

from __future__ import annotations


class TempoError(Exception):
    """Base class for all tempo errors."""

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.diagnostics = diagnostics

    def __str__(self) -> str:
        if self.diagnostics:
            return f"{self.message}\n{self.diagnostics.rstrip()}"
        return self.message


class ConfigError(TempoError):
    """Raised when the configuration file cannot be read or parsed."""


class RepositoryStateError(TempoError):
    """Raised when an extension clone directory is not usable as-is."""


class VersionControlError(TempoError):
    """Raised when a git operation fails."""


class ToolchainError(TempoError):
    """Raised by a build toolchain; ``diagnostics`` holds the raw tool output."""


# ---------------------------------------------------------------------------
# Provider errors
# ---------------------------------------------------------------------------


class InvalidProviderError(TempoError):
    """Base class for errors caused by a malformed function provider."""


class DescriptorNotFoundError(InvalidProviderError):
    """No ``provider.py`` was found under the module root."""


class PackageNameError(InvalidProviderError):
    """The package holding ``provider.py`` could not be determined."""


class ProviderDeclarationError(InvalidProviderError):
    """``provider.py`` does not declare a module-level ``Provider``."""


class DescriptorSyntaxError(ProviderDeclarationError):
    """``provider.py`` could not be parsed."""


class CapabilityNotSatisfiedError(InvalidProviderError):
    """``Provider`` does not implement ``FunctionProvider``."""


class NilProviderError(InvalidProviderError):
    """``Provider`` is declared but set to ``None``."""


class EmptyFunctionSetError(InvalidProviderError):
    """The provider exposes no functions."""


class BuildError(TempoError):
    """Building the introspection artifact failed."""


class ExecutionError(TempoError):
    """Running the introspection artifact failed or produced bad output."""


# ---------------------------------------------------------------------------
# Render-time errors
# ---------------------------------------------------------------------------


class UnknownFunctionError(TempoError):
    """A template called a function that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"function '{name}' is not registered")
        self.name = name


class RenderError(TempoError):
    """A template could not be parsed or rendered."""


class ExtensionCallError(TempoError):
    """A function exposed by an extension raised an error."""
