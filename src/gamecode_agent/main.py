"""
Game Code Agent CLI Entry Point

Logs in to the game site, keeps the session on disk and submits codes with it.

Usage:
    gamecode-agent login --session-id me --username alice
    gamecode-agent submit ABC123 --session-id me
    gamecode-agent logout --session-id me
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from rich.prompt import Prompt

from gamecode_agent.config import configure_logging
from gamecode_agent.service import GameCodeService, create_service
from gamecode_agent.store import now_ms
from gamecode_agent.tui import (
    print_error,
    print_feedback,
    print_result,
    print_sessions,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="gamecode-agent",
        description="Submit game codes through a saved browser session",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    gamecode-agent login --session-id me --username alice
    gamecode-agent submit ABC123 --session-id me
    gamecode-agent submit ABC123 --session-id me --debug
        """,
    )

    parser.add_argument(
        "--dev",
        action="store_true",
        help="Development mode with debug output",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser("login", help="Log in and save the session")
    login.add_argument("--session-id", "-s", required=True, help="Key to store the session under")
    login.add_argument("--username", "-u", default=None, help="Account name (prompted if omitted)")
    login.add_argument("--password", "-p", default=None, help="Password (prompted if omitted)")
    login.add_argument("--debug", action="store_true", help="Show the browser and slow it down")

    submit = subparsers.add_parser("submit", help="Submit a game code")
    submit.add_argument("code", help="Game code to submit")
    submit.add_argument("--session-id", "-s", required=True, help="Session saved by login")
    submit.add_argument("--debug", action="store_true", help="Show the browser and slow it down")

    logout = subparsers.add_parser("logout", help="Forget a saved session")
    logout.add_argument("--session-id", "-s", required=True, help="Session to forget")

    subparsers.add_parser("health", help="Check that the service is alive")
    subparsers.add_parser("sessions", help="List saved sessions")

    return parser


async def run_login(
    service: GameCodeService,
    session_id: str,
    username: Optional[str],
    password: Optional[str],
    debug: bool = False,
) -> bool:
    """
    Log in, prompting for missing credentials.

    Returns:
        True if the session was saved
    """
    if not username:
        username = Prompt.ask("Username")
    if not password:
        password = Prompt.ask("Password", password=True)

    response = await service.login(username, password, session_id, debug)
    if response.ok:
        print_result(f"Logged in, session saved as '{session_id}'", success=True)
    elif response.status_code == 500:
        print_error(response.body.get("message", "Server error"), error_type="ServerError")
    else:
        print_result(
            response.body.get("message") or response.body.get("error", "Login failed"),
            success=False,
        )
    return response.ok


async def run_submit(
    service: GameCodeService,
    code: str,
    session_id: str,
    debug: bool = False,
) -> bool:
    """
    Submit a code and show the page feedback.

    Returns:
        True if the site reported at least one success
    """
    response = await service.submit_code(code, session_id, debug)

    if response.status_code == 401:
        print_error(
            response.body.get("message", "Session expired or invalid"),
            error_type="SessionInvalid",
            suggestion=f"Run 'gamecode-agent login --session-id {session_id}' again",
        )
        return False
    if not response.ok:
        print_error(
            response.body.get("message") or response.body.get("error", "Submission failed"),
            error_type="ServerError" if response.status_code == 500 else "UsageError",
        )
        return False

    success = bool(response.body.get("success"))
    print_feedback(response.body.get("messages", []), success=success)
    print_result(response.body.get("message", ""), success=success)
    return success


def run_sessions(service: GameCodeService) -> None:
    store = service.store
    now = now_ms()
    rows = []
    for session_id in store.ids():
        record = store.get(session_id)
        rows.append((session_id, record.age_ms(now) if record else None))
    print_sessions(rows)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.dev else None,
        verbose=args.dev,
        json_format=True if args.json_logs else None,
    )

    service = create_service()

    if args.command == "login":
        success = asyncio.run(run_login(
            service,
            session_id=args.session_id,
            username=args.username,
            password=args.password,
            debug=args.debug,
        ))
        return 0 if success else 1

    if args.command == "submit":
        success = asyncio.run(run_submit(
            service,
            code=args.code,
            session_id=args.session_id,
            debug=args.debug,
        ))
        return 0 if success else 1

    if args.command == "logout":
        service.logout(args.session_id)
        print_result(f"Session '{args.session_id}' logged out", success=True)
        return 0

    if args.command == "health":
        response = service.health()
        print_result(f"{response.body['status']} at {response.body['timestamp']}", success=True)
        return 0

    if args.command == "sessions":
        run_sessions(service)
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
