"""
Template functions: the provider capability, the registry and the
built-in providers.
"""

from tempo.templatefuncs.provider import FunctionMap, FunctionProvider
from tempo.templatefuncs.registry import FunctionRegistry

__all__ = [
    "FunctionMap",
    "FunctionProvider",
    "FunctionRegistry",
]
