"""
The function provider capability.

A provider is any object with a ``get_functions()`` method returning a
mapping of template function names to callables. Extension packages expose
one as the module-level ``Provider`` value of their ``provider.py``::

    from tempo.templatefuncs import FunctionProvider

    class StringsProvider:
        def get_functions(self):
            return {"shout": lambda s: s.upper() + "!"}

    Provider: FunctionProvider = StringsProvider()
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

FunctionMap = Mapping[str, Callable[..., Any]]


@runtime_checkable
class FunctionProvider(Protocol):
    """Anything that can hand out a name -> callable mapping."""

    def get_functions(self) -> FunctionMap: ...
