"""
Registry of template functions.

The registry maps function names to callables and is consumed by the
template renderer. It only grows during a run: names can be overwritten
(last write wins) but never removed.

Example:
    from tempo.templatefuncs.registry import FunctionRegistry

    registry = FunctionRegistry()
    registry.register("shout", lambda s: s.upper())
    registry.register_provider(TextProvider())

    funcs = registry.lookup()
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from tempo.errors import UnknownFunctionError
from tempo.logging import get_logger
from tempo.templatefuncs.provider import FunctionProvider

logger = get_logger("templatefuncs.registry")


class FunctionRegistry:
    """
    A name -> callable table for template functions.

    Thread Safety:
        Registration is not protected by locks. Extensions are loaded one
        after another from a single thread.
    """

    def __init__(self) -> None:
        self._functions: dict[str, Callable[..., Any]] = {}
        self._sources: dict[str, str] = {}

    def register(self, name: str, fn: Callable[..., Any], source: str = "") -> None:
        """
        Register a single function, replacing any previous one with that name.

        Raises:
            ValueError: If name is empty or fn is not callable
        """
        if not name:
            raise ValueError("Function name must not be empty")
        if not callable(fn):
            raise ValueError(f"Function '{name}' is not callable")

        if name in self._functions:
            logger.debug("Overriding function: %s", name)
        self._functions[name] = fn
        self._sources[name] = source or "manual"
        logger.debug("Registered function: %s (source=%s)", name, source or "manual")

    def register_all(self, functions: Mapping[str, Callable[..., Any]], source: str = "") -> None:
        """Register every entry of *functions*."""
        for name, fn in functions.items():
            self.register(name, fn, source=source)

    def register_provider(self, provider: FunctionProvider, source: str = "") -> None:
        """Register all functions handed out by *provider*."""
        self.register_all(provider.get_functions(), source=source)

    def lookup(self) -> Mapping[str, Callable[..., Any]]:
        """Read-only view of the current mapping."""
        return MappingProxyType(self._functions)

    def get(self, name: str) -> Callable[..., Any]:
        """
        Get a function by name.

        Raises:
            UnknownFunctionError: If no function has that name
        """
        try:
            return self._functions[name]
        except KeyError:
            raise UnknownFunctionError(name) from None

    def source_of(self, name: str) -> str:
        """Where the function registered under *name* came from."""
        if name not in self._sources:
            raise UnknownFunctionError(name)
        return self._sources[name]

    def names(self) -> list[str]:
        """Sorted names of all registered functions."""
        return sorted(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __repr__(self) -> str:
        return f"FunctionRegistry([{', '.join(self.names())}])"
