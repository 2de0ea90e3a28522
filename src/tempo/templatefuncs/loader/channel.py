"""
JSON-line channel to a running provider artifact.

Functions discovered by introspection are registered as ``RemoteFunction``
proxies. Calling one forwards the call to the provider's artifact, started
lazily in ``serve`` mode and kept alive for the rest of the run.

Requests (written to the artifact's stdin):
- {"id": 1, "function": "shout", "args": ["hi"], "kwargs": {}}

Responses (read from the artifact's stdout):
- {"id": 1, "result": "HI!"}
- {"id": 1, "error": "ValueError: ..."}

Arguments and results must be JSON-serializable; other results come back
as their ``str()``.
"""

from __future__ import annotations

import itertools
import json
import subprocess
import sys
import threading
from pathlib import Path
from typing import Any

from tempo.errors import ExecutionError, ExtensionCallError
from tempo.logging import get_logger

logger = get_logger("loader.channel")


class ExtensionChannel:
    """A persistent ``serve``-mode process for one provider artifact."""

    def __init__(
        self,
        artifact: Path,
        cwd: Path,
        python: str | None = None,
        name: str = "",
    ) -> None:
        self.artifact = artifact
        self.cwd = cwd
        self.python = python or sys.executable
        self.name = name or cwd.name
        self._process: subprocess.Popen[str] | None = None
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def call(self, function: str, args: tuple[Any, ...] = (), kwargs: dict[str, Any] | None = None) -> Any:
        """
        Call *function* in the provider process and return its result.

        Raises:
            ExtensionCallError: If the function raised or is unknown
            ExecutionError: If the provider process is not answering
        """
        with self._lock:
            process = self._ensure_started()
            request_id = next(self._ids)
            request = {
                "id": request_id,
                "function": function,
                "args": list(args),
                "kwargs": kwargs or {},
            }
            try:
                line = json.dumps(request)
            except TypeError as e:
                raise ExtensionCallError(
                    f"arguments for '{function}' are not JSON-serializable: {e}"
                ) from e

            if process.stdin is None or process.stdout is None:
                raise ExecutionError(f"provider '{self.name}' has no open pipes")
            try:
                process.stdin.write(line + "\n")
                process.stdin.flush()
                reply = process.stdout.readline()
            except (BrokenPipeError, OSError) as e:
                raise ExecutionError(f"provider '{self.name}' stopped responding: {e}") from e

            if not reply:
                code = process.poll()
                raise ExecutionError(
                    f"provider '{self.name}' exited unexpectedly (exit code {code})"
                )

        try:
            response = json.loads(reply)
        except ValueError as e:
            raise ExecutionError(
                f"provider '{self.name}' sent a malformed response", diagnostics=reply,
            ) from e

        if response.get("id") != request_id:
            raise ExecutionError(
                f"provider '{self.name}' answered request {response.get('id')}, "
                f"expected {request_id}"
            )
        if "error" in response:
            raise ExtensionCallError(f"{self.name}.{function}: {response['error']}")
        return response.get("result")

    def close(self, timeout: float = 5.0) -> None:
        """Stop the provider process if it was started."""
        with self._lock:
            process = self._process
            self._process = None
        if process is None:
            return

        logger.debug("Closing channel to %s", self.name)
        if process.stdin is not None:
            try:
                process.stdin.close()
            except OSError:
                pass
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Provider %s did not exit, killing it", self.name)
            process.kill()
            process.wait()
        if process.stdout is not None:
            process.stdout.close()

    def _ensure_started(self) -> subprocess.Popen[str]:
        if self._process is not None and self._process.poll() is None:
            return self._process

        logger.debug("Starting provider %s in serve mode", self.name)
        try:
            self._process = subprocess.Popen(
                [self.python, str(self.artifact), "serve"],
                cwd=self.cwd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            raise ExecutionError(f"failed to start provider '{self.name}': {e}") from e
        return self._process

    def __enter__(self) -> ExtensionChannel:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class RemoteFunction:
    """Callable that forwards to a function living in a provider process."""

    __slots__ = ("name", "channel")

    def __init__(self, name: str, channel: ExtensionChannel) -> None:
        self.name = name
        self.channel = channel

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.channel.call(self.name, args, kwargs)

    def __repr__(self) -> str:
        return f"RemoteFunction({self.channel.name}.{self.name})"
