"""
Auto-discovery CLI dispatcher for filemerge.

Root commands live in ``cli/commands/*.py``; every other subfolder with
command modules becomes a domain (``filemerge migrate analyze``). Each
command module exposes ``SUMMARY``, ``register_args(parser)`` and
``main(args) -> int``. Adding a command means adding a module.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any

from filemerge.cli._utils import configure_logging


def _load_command(module_name: str, default_summary: str) -> dict[str, Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        print(f"Warning: Could not import {module_name}: {e}", file=sys.stderr)
        return None
    return {
        "module": module,
        "summary": getattr(module, "SUMMARY", default_summary),
        "register_args": getattr(module, "register_args", None),
        "main": getattr(module, "main", None),
    }


@lru_cache(maxsize=1)
def discover_domains() -> dict[str, Path]:
    """
    Discover all CLI domain subfolders (migrate, ...).

    Returns:
        Dict mapping domain name to directory path
    """
    cli_dir = Path(__file__).parent
    domains = {}
    for item in cli_dir.iterdir():
        if item.name == "commands":
            continue
        if item.is_dir() and not item.name.startswith("_"):
            # Must have at least one non-init .py file
            has_commands = any(
                f.suffix == ".py" and not f.name.startswith("_")
                for f in item.iterdir()
            )
            if has_commands:
                domains[item.name] = item
    return domains


@lru_cache(maxsize=32)
def discover_commands(package: str) -> dict[str, dict[str, Any]]:
    """
    Discover all command modules in ``filemerge.cli.<package>``.

    Args:
        package: Subpackage name (``commands`` or a domain name)

    Returns:
        Dict mapping command name to command info dict
    """
    commands_dir = Path(__file__).parent / package
    commands: dict[str, dict[str, Any]] = {}
    if not commands_dir.exists():
        return commands

    for item in sorted(commands_dir.glob("*.py")):
        if item.name.startswith("_"):
            continue
        info = _load_command(f"filemerge.cli.{package}.{item.stem}", item.stem)
        if info is not None:
            commands[item.stem] = info
    return commands


def _register(subparsers: Any, commands: dict[str, dict[str, Any]]) -> None:
    for cmd_name, cmd_info in sorted(commands.items()):
        primary_name = cmd_name.replace("_", "-")
        aliases = [cmd_name] if primary_name != cmd_name else []
        cmd_parser = subparsers.add_parser(
            primary_name,
            aliases=aliases,
            help=cmd_info["summary"],
        )
        # Let module register its own arguments
        if cmd_info["register_args"]:
            cmd_info["register_args"](cmd_parser)
        # Set the main function as default handler
        if cmd_info["main"]:
            cmd_parser.set_defaults(_func=cmd_info["main"])


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser with auto-discovered domains and commands.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="filemerge",
        description="filemerge - layered configuration file composition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="domain",
        title="commands",
        description="Available commands",
        metavar="<command>",
    )

    # Top-level commands (no domain prefix)
    _register(subparsers, discover_commands("commands"))

    for domain_name in sorted(discover_domains().keys()):
        domain_commands = discover_commands(domain_name)
        if not domain_commands:
            continue
        domain_parser = subparsers.add_parser(
            domain_name,
            help=f"{domain_name.title()} commands",
        )
        cmd_subparsers = domain_parser.add_subparsers(
            dest="command",
            title="commands",
            description=f"Available {domain_name} commands",
            metavar="<command>",
        )
        _register(cmd_subparsers, domain_commands)

    return parser


def _get_version() -> str:
    from filemerge import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the filemerge CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    # If no command specified, show help
    if not args.domain:
        parser.print_help()
        return 0

    func: Callable[[argparse.Namespace], int] | None = getattr(args, "_func", None)
    if func is None:
        # Domain without a subcommand: show the domain help
        domain_parser = parser._subparsers._group_actions[0].choices.get(args.domain)
        if domain_parser:
            domain_parser.print_help()
        return 1

    configure_logging(verbose=bool(getattr(args, "verbose", False)))
    try:
        return func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli_entry() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli_entry()
