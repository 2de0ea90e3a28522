"""Built-in string helpers for templates."""
from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import Any


def is_empty(s: str) -> bool:
    """Check if a string is empty or whitespace only."""
    return s.strip() == ""


def is_valid_value(value: str, allowed_values: Iterable[str]) -> bool:
    """Check if *value* is one of *allowed_values*."""
    return value in allowed_values


def normalize_path(path: str) -> str:
    """Normalize a path: resolve ``.``/``..``, drop outer slashes and whitespace."""
    path = path.strip()

    # Only dots
    if path.strip(".") == "":
        return ""

    cleaned = posixpath.normpath(path.replace("\\", "/"))
    return cleaned.strip("/")


def title_case(word: str) -> str:
    """Capitalize the first letter and keep the rest as-is."""
    if not word:
        return ""
    return word[0].upper() + word[1:]


def snake_to_title(s: str) -> str:
    """Convert ``snake_case`` to ``Snake Case``."""
    return " ".join(title_case(word) for word in s.split("_"))


class TextProvider:
    """
    Supported functions:
      - ``normalize_path``: normalizes a path string.
      - ``is_empty``: checks if a string is blank.
      - ``is_valid_value``: checks membership in a list of allowed values.
      - ``title_case``: capitalizes the first letter of a word.
      - ``snake_to_title``: converts a snake_case string to Title Case.
    """

    def get_functions(self) -> dict[str, Any]:
        return {
            "normalize_path": normalize_path,
            "is_empty": is_empty,
            "is_valid_value": is_valid_value,
            "title_case": title_case,
            "snake_to_title": snake_to_title,
        }


Provider = TextProvider()
