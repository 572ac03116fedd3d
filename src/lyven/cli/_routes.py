"""``lyven routes`` — list discovered routes.

Builds the app's route table and prints METHOD, PATH and HANDLER for
every route, in matching order.
"""

import argparse
import sys

from lyven.cli._resolve import resolve_or_exit
from lyven.errors import LyvenError


def run_routes(args: argparse.Namespace) -> None:
    app = resolve_or_exit(args)
    try:
        router = app.router
    except LyvenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = router.all_routes()
    if args.method:
        verb = args.method.upper()
        routes = [r for r in routes if r.method == verb]
    if not routes:
        print("No routes registered.")
        return

    rows = [(r.method, r.path, r.handler_name) for r in routes]

    width_method = max(6, *(len(r[0]) for r in rows))  # "METHOD" header
    width_path = max(4, *(len(r[1]) for r in rows))  # "PATH" header

    fmt = f"{{:<{width_method}}}  {{:<{width_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    sep_len = width_method + width_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, handler in rows:
        print(fmt.format(method, path, handler))
