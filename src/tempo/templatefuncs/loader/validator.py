"""Syntactic check that ``provider.py`` declares ``Provider``."""
from __future__ import annotations

import ast
from pathlib import Path

from tempo.errors import DescriptorSyntaxError, ProviderDeclarationError

PROVIDER_NAME = "Provider"


def validate_provider_presence(descriptor_path: Path) -> None:
    """
    Check that *descriptor_path* assigns a module-level ``Provider``.

    Only the presence of the name is checked. Whether the value actually
    implements ``FunctionProvider`` is verified when the provider is built.
    """
    try:
        source = Path(descriptor_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ProviderDeclarationError(f"failed to read {descriptor_path}: {e}") from e

    try:
        tree = ast.parse(source, filename=str(descriptor_path))
    except SyntaxError as e:
        raise DescriptorSyntaxError(
            f"failed to parse {Path(descriptor_path).name}: {e.msg} (line {e.lineno})"
        ) from e

    for node in tree.body:
        if isinstance(node, ast.Assign):
            targets = node.targets
        elif isinstance(node, ast.AnnAssign):
            targets = [node.target]
        else:
            continue
        if any(PROVIDER_NAME in _names(target) for target in targets):
            return

    raise ProviderDeclarationError(
        "invalid function provider: missing required module-level Provider variable"
    )


def _names(target: ast.expr) -> list[str]:
    if isinstance(target, ast.Name):
        return [target.id]
    if isinstance(target, (ast.Tuple, ast.List)):
        return [name for elt in target.elts for name in _names(elt)]
    return []
