"""
Command-line interface for tempo.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tempo.config import FunctionProviderEntry
from tempo.context import AppContext
from tempo.errors import ConfigError, TempoError
from tempo.logging import set_level, setup_logging
from tempo.render import render_file
from tempo.templatefuncs.loader.resolver import extract_name_from_path, extract_name_from_url

console = Console()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="tempo - template rendering with pluggable functions",
        prog="tempo",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # register functions
    register_parser = subparsers.add_parser("register", help="Extend tempo")
    register_subparsers = register_parser.add_subparsers(
        dest="register_command", help="Register commands"
    )
    functions_parser = register_subparsers.add_parser(
        "functions",
        aliases=["f"],
        help="Register a function provider from a local path or a remote repository",
    )
    functions_parser.add_argument("-n", "--name", default="", help="Name for the function provider")
    functions_parser.add_argument("-u", "--url", default="", help="Repository URL")
    functions_parser.add_argument("-p", "--path", default="", help="Path to a local provider module")
    functions_parser.add_argument(
        "--force",
        action="store_true",
        help="Force re-cloning the repository and pull the latest changes",
    )

    # functions list
    funcs_parser = subparsers.add_parser("functions", help="Template functions")
    funcs_subparsers = funcs_parser.add_subparsers(dest="functions_command", help="Function commands")
    list_parser = funcs_subparsers.add_parser("list", help="List available template functions")
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )

    # render
    render_parser = subparsers.add_parser("render", help="Render a template file")
    render_parser.add_argument("file", help="Template file")
    render_parser.add_argument(
        "-d",
        "--data",
        help="YAML file with template data",
    )
    render_parser.add_argument(
        "-o",
        "--output",
        help="Write the result to this file instead of stdout",
    )

    args = parser.parse_args(argv)

    # Setup logging based on verbosity
    if getattr(args, "verbose", False):
        setup_logging("DEBUG", rich=True)
    else:
        setup_logging("WARNING", rich=True)

    try:
        if args.command == "register":
            cmd_register(args)
        elif args.command == "functions":
            cmd_functions(args)
        elif args.command == "render":
            cmd_render(args)
        else:
            parser.print_help()
    except TempoError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


def _create_context(args: Any) -> AppContext:
    """Create the run context; the config's log level applies unless -v was given."""
    ctx = AppContext.create()
    if not getattr(args, "verbose", False):
        set_level(ctx.config.log_level)
    return ctx


def resolve_provider_entries(name: str, url: str, path: str) -> list[FunctionProviderEntry]:
    """
    Turn ``--name/--url/--path`` into provider entries.

    Without ``--name`` the name comes from the URL, or from the path. When
    both a URL and a path are given, two providers are returned, named
    ``<name>-repo`` and ``<name>-local``.
    """
    if not name:
        if url:
            name = extract_name_from_url(url)
        elif path:
            name = extract_name_from_path(path)

    if url and path:
        return [
            FunctionProviderEntry(name=f"{name}-repo", type="url", value=url),
            FunctionProviderEntry(name=f"{name}-local", type="path", value=path),
        ]

    entries = []
    if url:
        entries.append(FunctionProviderEntry(name=name, type="url", value=url))
    if path:
        entries.append(FunctionProviderEntry(name=name, type="path", value=path))
    return entries


def cmd_register(args: argparse.Namespace) -> None:
    """Register function providers."""
    if args.register_command not in ("functions", "f"):
        console.print("[yellow]Usage: tempo register functions [--name] [--url] [--path] [--force][/yellow]")
        return

    entries = resolve_provider_entries(args.name, args.url, args.path)
    if not entries:
        console.print("[red]Either --url or --path is required[/red]")
        sys.exit(1)

    with _create_context(args) as ctx:
        for entry in entries:
            if entry.type == "url":
                console.print(f"Fetching functions from repository [cyan]{escape(entry.value)}[/cyan]")
            else:
                console.print(f"Registering functions from local package [cyan]{escape(entry.value)}[/cyan]")
            loaded = ctx.loader.load_providers([entry], ctx.config.tempo_root, force=args.force)
            for names in loaded.values():
                for name in names:
                    console.print(f"  [green]✓[/green] {name}")

    console.print("[green]Functions successfully registered![/green]")


def cmd_functions(args: argparse.Namespace) -> None:
    """Template function commands."""
    if args.functions_command == "list":
        _functions_list(args)
    else:
        console.print("[yellow]Usage: tempo functions list [--json][/yellow]")


def _functions_list(args: argparse.Namespace) -> None:
    """List built-in and configured template functions."""
    with _create_context(args) as ctx:
        ctx.load_configured_providers()
        registry = ctx.registry

        if args.json:
            data = [{"name": n, "source": registry.source_of(n)} for n in registry.names()]
            console.print_json(json.dumps(data, indent=2))
            return

        table = Table(title="Template Functions")
        table.add_column("Name", style="cyan")
        table.add_column("Source", style="dim")

        for name in registry.names():
            table.add_row(name, registry.source_of(name))

        console.print(table)
        console.print(f"\n[dim]Total: {len(registry)} functions[/dim]")


def _load_data(path: str | None) -> dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse data file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"failed to read data file {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"data file {path} must contain a mapping")
    return data or {}


def cmd_render(args: argparse.Namespace) -> None:
    """Render a template file."""
    with _create_context(args) as ctx:
        ctx.load_configured_providers()
        data = {**ctx.config.templates.user_data, **_load_data(args.data)}
        output = render_file(Path(args.file), data, ctx.registry)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        console.print(f"[green]Rendered {escape(args.file)} -> {escape(args.output)}[/green]")
    else:
        console.out(output, end="", highlight=False)


if __name__ == "__main__":
    main()
