"""Repository reference -> local clone path."""
from __future__ import annotations

import re
from pathlib import Path

EXTENSIONS_DIR = "extensions"

_SEPARATORS = re.compile(r"[/:\\]")


def extract_name_from_url(url: str) -> str:
    """
    Extract the repository name from a URL, removing ``.git`` if present.

    ``https://github.com/user/repo.git`` -> ``repo``
    ``git@github.com:user/repo`` -> ``repo``
    """
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return _SEPARATORS.split(url)[-1]


def extract_name_from_path(path: str) -> str:
    """Extract the last folder name from a path."""
    if not path:
        return ""
    return Path(path.rstrip("/\\")).name or path


def is_usable_clone_name(name: str) -> bool:
    """Whether *name* can be used as a single directory below ``extensions``."""
    if name in ("", ".", ".."):
        return False
    return "/" not in name and "\\" not in name


def extension_clone_path(data_dir: Path, repo_url: str) -> Path:
    """Local clone directory for *repo_url*: ``<data_dir>/extensions/<name>``."""
    return Path(data_dir) / EXTENSIONS_DIR / extract_name_from_url(repo_url)
