"""Function providers shipped with tempo."""
from __future__ import annotations

from tempo.templatefuncs.providers import lookup, text
from tempo.templatefuncs.provider import FunctionProvider

BUILTIN_PROVIDERS: dict[str, FunctionProvider] = {
    "text": text.Provider,
    "lookup": lookup.Provider,
}

__all__ = ["BUILTIN_PROVIDERS"]
