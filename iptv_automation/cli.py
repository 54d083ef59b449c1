"""
Command line interface

    iptv-automation serve [--host HOST] [--port PORT]
    iptv-automation lookup USERNAME [USERNAME ...] [--json]
    iptv-automation credentials NAME
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import Settings
from .credentials import CredentialGenerator
from .exceptions import AutomationError
from .services.panel.lookup_client import LookupClient
from .services.panel.session_manager import SessionManager


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # keep httpx request lines out of normal output
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="IPTV panel automation service",
        prog="iptv-automation",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging output"
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    serve = subcommands.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", type=str, default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3007)")

    lookup = subcommands.add_parser("lookup", help="Look up subscribers on the configured panel")
    lookup.add_argument("usernames", nargs="+", metavar="USERNAME")
    lookup.add_argument("--json", action="store_true", help="Print raw JSON instead of a table")

    credentials = subcommands.add_parser("credentials", help="Generate a username/password pair")
    credentials.add_argument("name", metavar="NAME", help="Customer name")

    return parser


async def run_lookup(settings: Settings, usernames: list[str]) -> dict:
    session_manager = SessionManager(
        settings.default_panel,
        ttl_seconds=settings.session_ttl_seconds,
        timeout_seconds=settings.lookup_timeout_seconds,
    )
    try:
        results = await LookupClient(session_manager).bulk_lookup(usernames)
    finally:
        await session_manager.close()

    return {
        username: entry.to_dict() if hasattr(entry, "to_dict") else entry
        for username, entry in results.items()
    }


def render_lookup_table(console: Console, results: dict):
    table = Table(title="Subscriber lookup", box=box.ROUNDED)
    table.add_column("Username", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Expires", style="magenta")
    table.add_column("Connections", justify="right")
    table.add_column("Notes", style="dim")

    for username, entry in results.items():
        if entry is None:
            table.add_row(username, "[yellow]not found[/yellow]", "-", "-", "-")
        elif "error" in entry:
            table.add_row(username, "[red]error[/red]", "-", "-", entry["error"])
        else:
            status = "[green]enabled[/green]" if entry["enabled"] else "[red]disabled[/red]"
            table.add_row(
                entry["username"],
                status,
                entry["expireDate"] or "-",
                entry["connections"],
                entry["notes"] or "-"
            )

    console.print(table)


def serve(settings: Settings, host: Optional[str], port: Optional[int]):
    import uvicorn

    from .server import create_app

    settings.host = host or settings.host
    settings.port = port or settings.port
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point"""
    args = create_argument_parser().parse_args(argv)
    setup_logging(args.verbose)
    console = Console()

    if args.command == "credentials":
        generator = CredentialGenerator()
        console.print(f"[cyan]Username:[/cyan] {generator.generate_username(args.name)}")
        console.print(f"[cyan]Password:[/cyan] {generator.generate_password()}")
        return 0

    settings = Settings.from_env()

    if args.command == "serve":
        serve(settings, args.host, args.port)
        return 0

    try:
        results = asyncio.run(run_lookup(settings, args.usernames))
    except AutomationError as e:
        console.print(f"[red]Lookup failed: {e.message}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1

    if args.json:
        print(json.dumps(results, indent=2))
    else:
        render_lookup_table(console, results)
    return 0 if all(entry is not None and "error" not in entry for entry in results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
