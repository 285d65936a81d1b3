"""
Scratch session smoke test

Logs in, shows the identity behind the session, and optionally lists
"My Stuff" projects or logs out again.
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .config import load_config, load_credentials
from .core.exceptions import SessionError
from .logging_setup import setup_logging
from .providers.scratch import Scratch
from .providers.scratch.auth import mask
from .providers.scratch.client import MY_STUFF_FILTERS, MY_STUFF_SORTS
from .session.lifecycle import Session

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="Scratch session smoke test")
    parser.add_argument("--config", default=None, help="Config file path")
    parser.add_argument("--log-file", default=None, help="Write a debug log here")
    parser.add_argument("-v", "--verbose", action="store_true")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Password login
    login_parser = subparsers.add_parser("login", help="Login with username/password")
    login_parser.add_argument(
        "--credentials",
        default="credentials.json",
        help='JSON file with {"username": ..., "password": ...}',
    )
    login_parser.add_argument(
        "--remember", action="store_true", help="Store the session cookie for resume"
    )
    login_parser.add_argument(
        "--logout", action="store_true", help="Log out again after showing the user"
    )

    # Resume with stored cookie
    resume_parser = subparsers.add_parser("resume", help="Login with a stored cookie")
    resume_parser.add_argument("username")

    # Stored sessions
    subparsers.add_parser("sessions", help="List users with a stored cookie")

    # Logout a stored session
    logout_parser = subparsers.add_parser("logout", help="Logout a stored session")
    logout_parser.add_argument("username")
    logout_parser.add_argument("--keep-identity", action="store_true")

    # My Stuff listing
    mystuff_parser = subparsers.add_parser("mystuff", help="List My Stuff projects")
    mystuff_parser.add_argument("username", help="User with a stored session cookie")
    mystuff_parser.add_argument("--page", type=int, default=1)
    mystuff_parser.add_argument("--sort", default="", choices=MY_STUFF_SORTS)
    mystuff_parser.add_argument("--filter", default="all", choices=MY_STUFF_FILTERS)
    mystuff_parser.add_argument("--ascending", action="store_true")

    return parser.parse_args(argv)


def show_session(console: Console, session: Session):
    """Print the identity behind a session"""
    identity = session.identity
    table = Table(title=f"Session for {session.username or '<unknown>'}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("State", session.state.name)
    table.add_row("xtoken", session.acquisition_state.name)
    table.add_row("User ID", str(identity.id))
    table.add_row("Joined", identity.date_joined)
    table.add_row("Thumbnail", identity.thumbnail_url or "-")
    table.add_row("Banned", str(identity.banned))
    roles = [name for name, value in vars(identity.roles).items() if value]
    table.add_row("Roles", ", ".join(roles) or "-")
    if session.last_error:
        table.add_row("Last error", str(session.last_error))

    console.print(table)


async def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    console = Console()

    scratch = Scratch(load_config(args.config))

    try:
        if args.command == "login":
            username, password = load_credentials(args.credentials)
            session = await scratch.login(username, password, remember=args.remember)
            show_session(console, session)
            if args.logout:
                confirmed = await scratch.logout(session)
                console.print(f"Logged out (confirmed by server: {confirmed})")

        elif args.command == "resume":
            session = await scratch.resume(args.username)
            show_session(console, session)

        elif args.command == "sessions":
            stored = await scratch.storage.load_all()
            table = Table(title="Stored sessions")
            table.add_column("Username", style="cyan")
            table.add_column("Cookie", style="magenta")
            for username, cookies in sorted(stored.items()):
                table.add_row(username, mask(cookies.session_cookie))
            console.print(table)

        elif args.command == "logout":
            session = await scratch.resume(args.username)
            confirmed = await scratch.logout(session, keep_identity=args.keep_identity)
            console.print(f"Logged out (confirmed by server: {confirmed})")

        elif args.command == "mystuff":
            session = await scratch.resume(args.username)
            projects = await scratch.client.get_my_stuff_projects(
                session,
                page=args.page,
                sort_by=args.sort,
                filter_by=args.filter,
                descending=not args.ascending,
            )
            table = Table(title=f"My Stuff ({args.filter}, page {args.page})")
            table.add_column("ID", style="cyan")
            table.add_column("Title", style="magenta")
            for project in projects:
                fields = project.get("fields", {})
                table.add_row(str(project.get("pk", "")), str(fields.get("title", "")))
            console.print(table)

        else:
            raise ValueError(f"Unknown command: {args.command}")

    except (SessionError, ValueError, FileNotFoundError) as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        return 1

    return 0


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
