"""Lyven CLI — inspect an application's routes and configuration.

Entry point registered as ``lyven`` in ``pyproject.toml``::

    [project.scripts]
    lyven = "lyven.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``lyven`` command."""
    parser = argparse.ArgumentParser(
        prog="lyven",
        description="Lyven — dependency injection and declarative routing.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- lyven routes -----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List discovered routes")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    routes_parser.add_argument(
        "--method",
        default=None,
        help="Only show routes for this HTTP verb",
    )

    # -- lyven config -----------------------------------------------------
    config_parser = subparsers.add_parser("config", help="Print the configuration summary")
    config_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )
    config_parser.add_argument(
        "--properties",
        action="store_true",
        help="Also print every property, defaults included",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from lyven.cli._routes import run_routes

        run_routes(args)
    elif args.command == "config":
        from lyven.cli._config import run_config

        run_config(args)
