"""
Template rendering with registered functions.

Templates are Jinja2 templates. Every function in the registry is exposed
as a template global, and any undefined value is an error::

    {{ title_case(name) }} lives at {{ normalize_path(path) }}
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from tempo.errors import RenderError, UnknownFunctionError
from tempo.templatefuncs.registry import FunctionRegistry


class _FunctionAwareUndefined(StrictUndefined):
    """Calling an undefined name reports an unknown function."""

    def __getattr__(self, name: str) -> Any:
        # Probed by jinja2's Context.call before the object is called
        if name == "jinja_pass_arg":
            raise AttributeError(name)
        return super().__getattr__(name)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise UnknownFunctionError(self._undefined_name or "<unknown>")


def create_environment(registry: FunctionRegistry) -> Environment:
    """Jinja2 environment exposing the functions in *registry*."""
    env = Environment(
        undefined=_FunctionAwareUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.update(registry.lookup())
    return env


def render_template(content: str, data: dict[str, Any], registry: FunctionRegistry) -> str:
    """
    Render *content* with *data* and the registry's functions.

    Raises:
        UnknownFunctionError: If the template calls an unregistered function
        RenderError: If the template is invalid or uses undefined data
    """
    env = create_environment(registry)
    try:
        return env.from_string(content).render(data)
    except TemplateError as e:
        raise RenderError(f"failed to render template: {e}") from e


def render_file(path: Path, data: dict[str, Any], registry: FunctionRegistry) -> str:
    """Render the template stored in *path*."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise RenderError(f"failed to read template {path}: {e}") from e
    return render_template(content, data, registry)
