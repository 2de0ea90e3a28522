"""
Build toolchain used to turn an extension into an introspection artifact.

The default toolchain drives the running interpreter:

- dependencies are installed with ``pip install --target`` into the
  extension's ``.tempo/site-packages``
- sources are byte-compiled with ``compileall`` so syntax errors surface
  as build failures
- the introspection program is packed with ``zipapp`` and checked once in
  ``check`` mode, which reports a provider lacking ``get_functions``
"""

from __future__ import annotations

import re
import subprocess
import sys
import tomllib
from pathlib import Path
from typing import Protocol

from tempo.errors import ToolchainError
from tempo.logging import get_logger, log_tool_output
from tempo.templatefuncs.loader.metadata import SKIP_DIRS

logger = get_logger("loader.toolchain")

DEPENDENCIES_DIR = "site-packages"


class BuildToolchain(Protocol):
    """Operations the introspection pipeline needs from a build toolchain."""

    def resolve_dependencies(self, module_root: Path) -> None: ...

    def build(self, module_root: Path, entry_dir: Path, output: Path) -> Path: ...


def dependencies_dir(module_root: Path) -> Path:
    """Directory extension dependencies are installed into."""
    return module_root / ".tempo" / DEPENDENCIES_DIR


def compile_exclude_pattern(module_root: Path) -> str:
    """
    ``compileall -x`` pattern matching files under a hidden or skipped directory.

    Hidden files and the directories the provider search skips (``.git``,
    ``.tempo``, ``venv``, ``node_modules``, ...) are matched at any depth.
    """
    skipped = "|".join(re.escape(name) for name in sorted(SKIP_DIRS))
    return (
        re.escape(str(module_root))
        + r"[\\/](?:[^\\/]+[\\/])*(?:\.[^\\/]*|"
        + skipped
        + r")(?:[\\/]|$)"
    )


def read_requirements(module_root: Path) -> list[str]:
    """
    Requirements declared by an extension.

    ``requirements.txt`` wins over ``[project].dependencies`` in
    ``pyproject.toml``. Comments and blank lines are ignored.
    """
    requirements_file = module_root / "requirements.txt"
    if requirements_file.is_file():
        lines = requirements_file.read_text(encoding="utf-8").splitlines()
        return [
            line.strip()
            for line in lines
            if line.strip() and not line.strip().startswith("#")
        ]

    pyproject = module_root / "pyproject.toml"
    if pyproject.is_file():
        try:
            with open(pyproject, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ToolchainError(f"failed to parse {pyproject}", diagnostics=str(e)) from e
        return list(data.get("project", {}).get("dependencies", []))

    return []


class PythonToolchain:
    """BuildToolchain backed by pip, compileall and zipapp."""

    def __init__(self, python: str | None = None, timeout: float | None = None) -> None:
        self.python = python or sys.executable
        self.timeout = timeout

    def resolve_dependencies(self, module_root: Path) -> None:
        """Install the extension's requirements next to its sources."""
        requirements = read_requirements(module_root)
        if not requirements:
            logger.debug("No dependencies declared in %s", module_root)
            return

        target = dependencies_dir(module_root)
        target.mkdir(parents=True, exist_ok=True)
        logger.info("Installing %d dependencies into %s", len(requirements), target)
        self._run(
            [
                "-m", "pip", "install",
                "--quiet",
                "--disable-pip-version-check",
                "--upgrade",
                "--target", str(target),
                *requirements,
            ],
            cwd=module_root,
            what="resolve dependencies",
        )

    def build(self, module_root: Path, entry_dir: Path, output: Path) -> Path:
        """Compile the extension, pack *entry_dir* into *output* and check it."""
        self._run(
            [
                "-m", "compileall", "-q",
                "-x", compile_exclude_pattern(module_root),
                str(module_root),
            ],
            cwd=module_root,
            what="compile provider package",
        )

        output.parent.mkdir(parents=True, exist_ok=True)
        self._run(
            ["-m", "zipapp", str(entry_dir), "-o", str(output)],
            cwd=module_root,
            what="package introspection program",
        )

        self._run([str(output), "check"], cwd=module_root, what="check provider")
        logger.debug("Built introspection artifact %s", output)
        return output

    def _run(self, args: list[str], cwd: Path, what: str) -> None:
        cmd = [self.python, *args]
        logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(f"failed to {what}: timed out after {e.timeout}s") from e
        except OSError as e:
            raise ToolchainError(f"failed to {what}: {e}") from e

        if result.returncode != 0:
            raise ToolchainError(
                f"failed to {what} in {cwd} (exit code {result.returncode})",
                diagnostics="\n".join(
                    part for part in (result.stdout, result.stderr) if part.strip()
                ),
            )
        log_tool_output(logger, what, result.stdout + result.stderr)
