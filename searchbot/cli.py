"""Command-line entry point: run the HTTP server or a one-off search."""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from loguru import logger

from searchbot import __logo__, __version__
from searchbot.config.loader import load_config
from searchbot.config.schema import Config
from searchbot.search.client import SearchClient
from searchbot.search.errors import SearchError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="searchbot", description=f"{__logo__} searchbot")
    parser.add_argument("--version", action="version", version=f"searchbot {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    search = sub.add_parser("search", help="Search one provider for one or more terms")
    search.add_argument("provider", choices=SearchClient.providers() + ["duckduckgo"])
    search.add_argument("terms", nargs="+")
    output = search.add_mutually_exclusive_group()
    output.add_argument("--summary", action="store_true", help="Print a text summary")
    output.add_argument("--digest", action="store_true", help="Print a prose digest (google)")
    search.add_argument("--no-url", action="store_true", help="Omit URLs from text output")
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def serve(config: Config, host: str | None, port: int | None) -> int:
    import uvicorn

    from searchbot.server.app import create_app

    bind_host = host or config.server.host
    bind_port = port or int(os.environ.get("PORT") or config.server.port)
    logger.info("Server is listening to http://localhost:{}", bind_port)
    uvicorn.run(create_app(config), host=bind_host, port=bind_port, log_level="warning")
    return 0


async def run_search(config: Config, args: argparse.Namespace) -> str:
    client = SearchClient(config.search)
    show_url = not args.no_url
    if args.digest:
        return await client.search_digest(show_url, *args.terms, provider=args.provider)
    if args.summary:
        return await client.search_summary(args.provider, show_url, *args.terms)
    items = await client.search(args.provider, *args.terms)
    return json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    config = load_config(args.config)

    if args.command == "serve":
        return serve(config, args.host, args.port)

    try:
        print(asyncio.run(run_search(config, args)))
    except SearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0
