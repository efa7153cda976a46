"""CLI entry point for the Event Calendar application."""

import argparse
import logging
import sys
from typing import Callable, Optional

# Initialize SSL truststore early, before any HTTPS calls
from .utils.ssl_utils import init_ssl
init_ssl()

from .app import CalendarApp
from .auth.base import IdentityProvider
from .auth.local_auth import LocalIdentityProvider
from .auth.session import build_identity_provider
from .auth.token_cache import SessionCache
from .config import AppConfig
from .models.month import Month
from .store.base import DocumentStore
from .store.firestore_store import FirestoreDocumentStore
from .store.memory_store import InMemoryDocumentStore
from .utils.exceptions import CalendarAppError, ConfigurationError
from .utils.logging import setup_logging
from .view.grid import compute_month_grid
from .view.render import render_view
from .view.state import ViewState

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  next, n                  Show the next month
  prev, p                  Show the previous month
  today                    Jump to the current month
  title <text>             Set the new event's title
  date <YYYY-MM-DD>        Set the new event's date
  submit                   Add the new event
  add <YYYY-MM-DD> <title> Set both fields and add the event
  delete <id>              Delete an event
  signout                  Switch to a fresh anonymous identity
  show                     Redraw the calendar
  help                     Show this help
  quit, q                  Exit"""


def build_backend(config: AppConfig, local: bool) -> tuple[IdentityProvider, DocumentStore]:
    """
    Create the identity provider and document store.

    Raises:
        ConfigurationError: If Firebase is not configured and ``local`` is False
    """
    if local:
        logger.info("Using local in-memory backend")
        return LocalIdentityProvider(), InMemoryDocumentStore()

    provider = build_identity_provider(config)
    store = FirestoreDocumentStore(
        config.firebase,
        token_provider=provider.get_id_token,
        poll_interval=config.poll_interval_seconds,
    )
    return provider, store


def run_command(app: CalendarApp, line: str, output: Callable[[str], None] = print) -> bool:
    """
    Execute one interactive command.

    Args:
        app: Running calendar app
        line: Raw input line
        output: Where to write replies that are not part of the view

    Returns:
        False when the user asked to quit
    """
    command, _, rest = line.strip().partition(" ")
    command = command.lower()
    rest = rest.strip()

    if not command:
        return True
    if command in ("quit", "q", "exit"):
        return False

    if command in ("next", "n"):
        app.next_month()
    elif command in ("prev", "p"):
        app.previous_month()
    elif command == "today":
        app.go_to_today()
    elif command == "title":
        app.set_draft(title=rest)
    elif command == "date":
        app.set_draft(date=rest)
    elif command == "submit":
        app.submit_draft()
    elif command == "add":
        event_date, _, title = rest.partition(" ")
        app.add_event(title=title, date=event_date)
    elif command in ("delete", "del", "rm"):
        app.delete_event(rest)
    elif command == "signout":
        app.sign_out()
    elif command == "show":
        output(render_screen(app.state))
    elif command == "help":
        output(HELP_TEXT)
    else:
        output(f"Unknown command: {command} (type 'help')")
    return True


def render_screen(state: ViewState) -> str:
    """Render one state on its own, never mixing in newer state."""
    return render_view(state, compute_month_grid(state.reference_month, state.events))


def interactive(app: CalendarApp) -> int:
    """Read commands until EOF or quit, redrawing on every state change."""
    unsubscribe = app.view.subscribe(lambda state: print("\n" + render_screen(state)))
    print("\n" + render_screen(app.state))
    print("Type 'help' for commands.")
    try:
        while True:
            try:
                line = input("> ")
            except EOFError:
                break
            if not run_command(app, line):
                break
    except KeyboardInterrupt:
        print()
    finally:
        unsubscribe()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Event Calendar - month view of your events stored in Firebase"
    )
    parser.add_argument(
        "--month",
        type=str,
        default=None,
        help="Month to display (YYYY-MM format, default: current month)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Print the month once and exit",
    )
    parser.add_argument(
        "--add",
        metavar="TITLE",
        type=str,
        default=None,
        help="Add an event with this title (requires --date) and exit",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Date of the event to add (YYYY-MM-DD format)",
    )
    parser.add_argument(
        "--delete",
        metavar="EVENT_ID",
        type=str,
        default=None,
        help="Delete the event with this ID and exit",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Seconds --show waits for the first snapshot (default: 30)",
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Use an in-memory backend instead of Firebase (nothing is saved)",
    )
    parser.add_argument(
        "--clear-session",
        action="store_true",
        help="Forget the cached identity",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )

    args = parser.parse_args(argv)
    config = AppConfig()

    # Setup logging
    log_level = "DEBUG" if args.verbose else config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    try:
        if args.clear_session:
            SessionCache(
                cache_location=config.session_cache_path,
                encrypted=config.session_cache_encrypted,
            ).clear()
            print("Session cache cleared")
            return 0

        reference_month = None
        if args.month:
            try:
                reference_month = Month.parse(args.month)
            except ValueError as e:
                logger.error(str(e))
                return 1

        if args.add is not None and not args.date:
            logger.error("--add requires --date (YYYY-MM-DD)")
            return 1

        provider, store = build_backend(config, args.local)
        app = CalendarApp(config, provider, store)
        if reference_month:
            app.go_to_month(reference_month)

        try:
            app.start()

            if args.add is not None:
                result = app.add_event(title=args.add, date=args.date)
                print(result.message)
                return 0 if result.ok else 1

            if args.delete is not None:
                result = app.delete_event(args.delete)
                print(result.message)
                return 0 if result.ok else 1

            if args.show:
                if not app.wait_for_events(timeout=args.timeout):
                    logger.warning("No event snapshot received")
                print(render_screen(app.state))
                return 0

            return interactive(app)
        finally:
            app.close()

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"Configuration error: {e}. Set FIREBASE_CONFIG or run with --local.", file=sys.stderr)
        return 1
    except CalendarAppError as e:
        logger.error(f"Calendar error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
