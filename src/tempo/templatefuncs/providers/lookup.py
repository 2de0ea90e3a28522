"""Built-in nested lookup for template data."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def lookup(data: Mapping[str, Any], key: str) -> Any:
    """
    Retrieve a value from nested mappings using a dot-separated key.

    Returns ``None`` when any segment is missing or not a mapping. An empty
    key returns *data* itself.
    """
    if key == "":
        return data

    value: Any = data
    for part in key.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return None
        value = value[part]
    return value


class LookupProvider:
    """Exposes ``lookup``."""

    def get_functions(self) -> dict[str, Any]:
        return {"lookup": lookup}


Provider = LookupProvider()
