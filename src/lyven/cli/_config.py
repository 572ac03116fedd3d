"""``lyven config`` — print the configuration summary of an app."""

import argparse
import sys

from lyven.cli._resolve import resolve_or_exit
from lyven.errors import LyvenError
from lyven.summary import render_properties


def run_config(args: argparse.Namespace) -> None:
    app = resolve_or_exit(args)
    try:
        app._ensure_frozen()
    except LyvenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(app.configuration_summary(), end="")
    if args.properties:
        print(render_properties(app.properties), end="")
