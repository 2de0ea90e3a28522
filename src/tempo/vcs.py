"""Version-control client used to fetch function providers."""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from tempo.errors import VersionControlError
from tempo.logging import get_logger, log_tool_output

logger = get_logger("vcs")


class VersionControl(Protocol):
    """Operations the extension installer needs from a VCS client."""

    def clone(self, url: str, path: Path) -> None: ...

    def update(self, path: Path) -> None: ...

    def force_reclone(self, url: str, path: Path) -> None: ...

    def is_valid_repo(self, path: Path) -> bool: ...


class GitClient:
    """VersionControl implementation backed by the ``git`` executable."""

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def clone(self, url: str, path: Path) -> None:
        """Clone *url* into *path*."""
        logger.info("Cloning repository %s into %s", url, path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._run(["clone", url, str(path)], cwd=path.parent)

    def update(self, path: Path) -> None:
        """Pull the latest changes in an existing clone."""
        logger.info("Updating existing repository %s", path)
        self._run(["pull"], cwd=path)

    def force_reclone(self, url: str, path: Path) -> None:
        """Remove *path* entirely and clone *url* again."""
        logger.warning("Force-cloning repository. Removing existing folder %s", path)
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise VersionControlError(f"failed to remove existing repository: {e}") from e
        self.clone(url, path)

    def is_valid_repo(self, path: Path) -> bool:
        """A path is a valid repository when it has a ``.git`` entry."""
        return (path / ".git").exists()

    def _run(self, args: list[str], cwd: Path) -> None:
        cmd = [self.executable, *args]
        logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
        except OSError as e:
            raise VersionControlError(f"failed to run {self.executable}: {e}") from e
        if result.returncode != 0:
            raise VersionControlError(
                f"'{' '.join(cmd)}' failed with exit code {result.returncode}",
                diagnostics=result.stderr or result.stdout,
            )
        log_tool_output(logger, "git", result.stdout + result.stderr)
