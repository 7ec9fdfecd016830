#!/usr/bin/env python3
"""
cqlexec CLI - Main entry point.

Usage:
    cqlexec init                                   # Write default cqlexec.yaml
    cqlexec query "SELECT * FROM users"            # Run against the configured cluster
    cqlexec query --url sqlite:///app.db "SELECT 1" # Run against a SQLAlchemy URL
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..api import close, connect, execute
from ..config import DEFAULT_CONFIG_PATH, CqlExecConfig, apply_config, load_config
from ..core.errors import CqlExecError


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    config_path = Path(args.config)

    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists. Use --force to overwrite.", file=sys.stderr)
        return 1

    CqlExecConfig().save(config_path)
    print(f"Created {config_path}")
    return 0


def _open(args: argparse.Namespace, config: CqlExecConfig):
    """Return (session, owner): owner is what must be closed afterwards."""
    if args.url:
        from sqlalchemy import create_engine

        engine = create_engine(args.url)
        return connect(engine), engine

    from ..drivers.cassandra_session import build_cluster

    cluster = build_cluster(config.cluster)
    return connect(cluster, args.keyspace or config.cluster.keyspace), cluster


def cmd_query(args: argparse.Namespace) -> int:
    """Execute one statement and print its rows as JSON lines."""
    config = load_config(args.config)
    if args.consistency:
        config.execution.consistency = args.consistency
    try:
        apply_config(config)
    except CqlExecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        session, owner = _open(args, config)
    except Exception as e:
        print(f"Error connecting: {e}", file=sys.stderr)
        return 1

    try:
        if args.run_async:
            pending = execute(session, args.statement, async_=True, tracing=args.tracing)
            rows = pending.result(timeout=args.timeout)
            if pending.failed():
                print(f"Error: {rows}", file=sys.stderr)
                return 1
        else:
            rows = execute(session, args.statement, tracing=args.tracing)
    except FutureTimeoutError:
        print(f"Error: no result within {args.timeout}s", file=sys.stderr)
        return 1
    except CqlExecError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        close(owner)

    for row in rows:
        print(json.dumps(row, default=str))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cqlexec",
        description="cqlexec - execute statements against a database session"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", "-c", default=DEFAULT_CONFIG_PATH, help="Config file path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Write default configuration")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing config")

    # query
    query_parser = subparsers.add_parser("query", help="Execute a statement")
    query_parser.add_argument("statement", help="Query text")
    query_parser.add_argument("--url", help="SQLAlchemy database URL instead of the configured cluster")
    query_parser.add_argument("--keyspace", "-k", help="Keyspace to connect to")
    query_parser.add_argument("--consistency", help="Consistency level (one, quorum, local_quorum, ...)")
    query_parser.add_argument("--tracing", action="store_true", help="Enable driver tracing")
    query_parser.add_argument("--async", dest="run_async", action="store_true", help="Use the async path")
    query_parser.add_argument("--timeout", type=float, default=30.0, help="Async wait timeout in seconds")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(level=parsed.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "query": cmd_query,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
