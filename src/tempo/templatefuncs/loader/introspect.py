"""
Build-and-introspect pipeline.

Providers are never imported into the tempo process. Instead a small
program is generated next to the extension sources, packed into an
executable zip archive and run in its own interpreter. The program reports
which functions the provider exposes as one JSON line on stdout::

    {"functions": ["shout", "whisper"]}

or one of two sentinel payloads::

    {"error": "Provider is None"}
    {"error": "Provider does not implement FunctionProvider"}

The same artifact started with ``serve`` answers function calls, see
:mod:`tempo.templatefuncs.loader.channel`.
"""

from __future__ import annotations

import json
import string
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from tempo.errors import (
    BuildError,
    CapabilityNotSatisfiedError,
    EmptyFunctionSetError,
    ExecutionError,
    NilProviderError,
    TempoError,
    ToolchainError,
)
from tempo.logging import get_logger
from tempo.templatefuncs.loader.metadata import ExtensionModuleMetadata
from tempo.templatefuncs.loader.toolchain import (
    BuildToolchain,
    PythonToolchain,
    dependencies_dir,
)

logger = get_logger("loader.introspect")

ARTIFACT_NAME = "provider.pyz"
ENTRY_DIR_NAME = "build"

NIL_PROVIDER_MESSAGE = "Provider is None"
NOT_A_PROVIDER_MESSAGE = "Provider does not implement FunctionProvider"
MISSING_METHOD_SIGNATURE = "missing method get_functions"

PROGRAM_TEMPLATE = string.Template(r'''"""Introspection program generated by tempo. Safe to delete."""
import importlib
import json
import os
import sys

IMPORT_PATH = $import_path
SEARCH_PATHS = $search_paths

NIL_PROVIDER = {"error": $nil_message}
NOT_A_PROVIDER = {"error": $not_a_provider_message}
MISSING_METHOD = $missing_method

# Anything the provider prints goes to stderr; stdout carries JSON only.
_stdout = sys.stdout
sys.stdout = sys.stderr


def emit(payload):
    _stdout.write(json.dumps(payload, default=str) + "\n")
    _stdout.flush()


def load_provider():
    for path in reversed(SEARCH_PATHS):
        sys.path.insert(0, path)
    module = importlib.import_module(IMPORT_PATH)
    return getattr(module, "Provider", None)


def get_functions(provider):
    accessor = getattr(provider, "get_functions", None)
    if not callable(accessor):
        return None
    functions = accessor()
    if not hasattr(functions, "keys") or not hasattr(functions, "__getitem__"):
        return None
    return functions


def check():
    provider = load_provider()
    if provider is not None and not callable(getattr(provider, "get_functions", None)):
        sys.stderr.write(
            "%s: %s does not implement FunctionProvider (%s)\n"
            % (IMPORT_PATH, type(provider).__name__, MISSING_METHOD)
        )
        return 1
    return 0


def manifest():
    provider = load_provider()
    if provider is None:
        emit(NIL_PROVIDER)
        return 1
    functions = get_functions(provider)
    if functions is None:
        emit(NOT_A_PROVIDER)
        return 1
    emit({"functions": sorted(str(name) for name in functions.keys())})
    return 0


def serve():
    provider = load_provider()
    if provider is None:
        emit(NIL_PROVIDER)
        return 1
    functions = get_functions(provider)
    if functions is None:
        emit(NOT_A_PROVIDER)
        return 1

    for line in sys.stdin:
        if not line.strip():
            continue
        try:
            request = json.loads(line)
        except ValueError as e:
            emit({"id": None, "error": "invalid request: %s" % e})
            continue
        request_id = request.get("id")
        name = request.get("function")
        try:
            fn = functions[name]
        except KeyError:
            emit({"id": request_id, "error": "unknown function: %s" % name})
            continue
        try:
            result = fn(*request.get("args", []), **request.get("kwargs", {}))
        except Exception as e:
            emit({"id": request_id, "error": "%s: %s" % (type(e).__name__, e)})
            continue
        emit({"id": request_id, "result": result})
    return 0


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "manifest"
    modes = {"manifest": manifest, "check": check, "serve": serve}
    if mode not in modes:
        sys.stderr.write("unknown mode: %s\n" % mode)
        sys.exit(2)
    sys.exit(modes[mode]())
''')


@dataclass
class IntrospectionResult:
    """What the pipeline learned about a provider."""

    metadata: ExtensionModuleMetadata
    artifact: Path
    functions: list[str] = field(default_factory=list)


def render_introspection_program(metadata: ExtensionModuleMetadata) -> str:
    """Source of the introspection program for *metadata*."""
    search_paths = [str(metadata.source_dir), str(dependencies_dir(metadata.module_root))]
    return PROGRAM_TEMPLATE.substitute(
        import_path=repr(metadata.import_path),
        search_paths=repr(search_paths),
        nil_message=repr(NIL_PROVIDER_MESSAGE),
        not_a_provider_message=repr(NOT_A_PROVIDER_MESSAGE),
        missing_method=repr(MISSING_METHOD_SIGNATURE),
    )


def write_introspection_program(metadata: ExtensionModuleMetadata) -> Path:
    """Write ``__main__.py`` for *metadata* and return the directory holding it."""
    entry_dir = metadata.build_dir / ENTRY_DIR_NAME
    entry_dir.mkdir(parents=True, exist_ok=True)
    (entry_dir / "__main__.py").write_text(
        render_introspection_program(metadata), encoding="utf-8",
    )
    return entry_dir


def classify_build_failure(error: ToolchainError) -> TempoError:
    """Map a toolchain failure to the error reported to the operator."""
    if MISSING_METHOD_SIGNATURE in error.diagnostics:
        return CapabilityNotSatisfiedError(
            f"invalid function provider: {NOT_A_PROVIDER_MESSAGE} ({MISSING_METHOD_SIGNATURE})",
            diagnostics=error.diagnostics,
        )
    return BuildError(
        f"failed to compile provider package: {error.message}",
        diagnostics=error.diagnostics,
    )


def parse_manifest(stdout: str, returncode: int = 0, stderr: str = "") -> list[str]:
    """
    Parse the artifact's output into a list of function names.

    Raises:
        NilProviderError: On the nil-provider sentinel
        CapabilityNotSatisfiedError: On the not-a-provider sentinel
        ExecutionError: On a non-zero exit or malformed output
        EmptyFunctionSetError: When the provider exposes no functions
    """
    lines = [line for line in stdout.splitlines() if line.strip()]
    payload = None
    if lines:
        try:
            payload = json.loads(lines[-1])
        except ValueError:
            payload = None

    if isinstance(payload, dict) and "error" in payload:
        if payload["error"] == NIL_PROVIDER_MESSAGE:
            raise NilProviderError(f"invalid function provider: {NIL_PROVIDER_MESSAGE}")
        if payload["error"] == NOT_A_PROVIDER_MESSAGE:
            raise CapabilityNotSatisfiedError(
                f"invalid function provider: {NOT_A_PROVIDER_MESSAGE}",
            )

    if returncode != 0:
        raise ExecutionError(
            f"failed to execute provider artifact (exit code {returncode})",
            diagnostics=stderr,
        )

    functions = payload.get("functions") if isinstance(payload, dict) else None
    if not isinstance(functions, list) or not all(isinstance(n, str) for n in functions):
        raise ExecutionError(
            "failed to parse function list from provider",
            diagnostics=stdout or stderr,
        )
    if any(not name.strip() for name in functions):
        raise ExecutionError(
            "provider returned an empty function name",
            diagnostics=stdout or stderr,
        )

    if not functions:
        raise EmptyFunctionSetError("invalid function provider: no functions found in Provider")
    return functions


class IntrospectionPipeline:
    """
    Generates, builds and runs the introspection artifact for a provider.

    Example:
        pipeline = IntrospectionPipeline()
        result = pipeline.load(find_provider_file(Path("./my-funcs")))
        print(result.functions)
    """

    def __init__(
        self,
        toolchain: BuildToolchain | None = None,
        python: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.python = python or sys.executable
        self.toolchain = toolchain or PythonToolchain(python=self.python, timeout=timeout)
        self.timeout = timeout

    def load(self, metadata: ExtensionModuleMetadata) -> IntrospectionResult:
        """Build the artifact for *metadata* and return the functions it reports."""
        logger.info("Importing provider package %s", metadata.import_path)
        entry_dir = write_introspection_program(metadata)

        try:
            self.toolchain.resolve_dependencies(metadata.module_root)
        except ToolchainError as e:
            raise BuildError(
                f"failed to resolve dependencies in {metadata.module_root}",
                diagnostics=e.diagnostics,
            ) from e

        artifact = metadata.build_dir / ARTIFACT_NAME
        try:
            self.toolchain.build(metadata.module_root, entry_dir, artifact)
        except ToolchainError as e:
            raise classify_build_failure(e) from e

        functions = self.run(artifact, metadata.module_root)
        return IntrospectionResult(metadata=metadata, artifact=artifact, functions=functions)

    def run(self, artifact: Path, module_root: Path) -> list[str]:
        """Execute *artifact* inside *module_root* and parse its manifest."""
        logger.debug("Running introspection artifact %s", artifact)
        try:
            result = subprocess.run(
                [self.python, str(artifact)],
                cwd=module_root,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutionError(
                f"failed to execute provider artifact: timed out after {e.timeout}s"
            ) from e
        except OSError as e:
            raise ExecutionError(f"failed to execute provider artifact: {e}") from e

        return parse_manifest(result.stdout, result.returncode, result.stderr)
