from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from sparkgraph import GraphEngine, SparkgraphError, load_graph_config
from sparkgraph.adapters import coerce_timestamp


LOGGER = logging.getLogger("sparkgraph.cli")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="sparkgraph")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Compute chart geometry for a history file and print it as JSON.")
    render.add_argument("config", type=Path, help="Graph config (.toml or .json).")
    render.add_argument("history", type=Path, help="JSON list of {timestamp, state} entries.")
    render.add_argument("--now", default=None, help="ISO-8601 reference time. Default: current UTC time.")
    render.add_argument("--current", default=None, help="Current entity state appended as the newest sample.")
    render.add_argument("--indent", type=int, default=2)

    validate = sub.add_parser("validate", help="Parse a graph config and report problems.")
    validate.add_argument("config", type=Path)
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "validate":
        try:
            config = load_graph_config(args.config)
        except (OSError, SparkgraphError) as exc:
            print(f"invalid: {exc}", file=sys.stderr)
            return 1
        print(f"ok: chart_type={config.chart_type.value} aggregate={config.aggregate.value}")
        return 0

    if args.command == "render":
        try:
            config = load_graph_config(args.config)
            history = json.loads(args.history.read_text(encoding="utf-8"))
            now = coerce_timestamp(args.now) if args.now is not None else None
        except (OSError, json.JSONDecodeError, SparkgraphError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        engine = GraphEngine(config)
        if args.current is not None:
            engine.set_current(args.current)
        snapshot = engine.update(history, now=now)
        LOGGER.info("rendered %d points with %d error(s)", len(snapshot.points), len(snapshot.errors))
        print(json.dumps(snapshot.to_dict(), indent=args.indent, sort_keys=True, allow_nan=False))
        return 0 if not snapshot.errors else 2

    raise RuntimeError(f"unsupported command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
