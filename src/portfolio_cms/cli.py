from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Sequence

from portfolio_cms.client import PortfolioApi
from portfolio_cms.errors import ApiError, ValidationError
from portfolio_cms.services import SessionStore
from portfolio_cms.tui_rendering import render_list, render_user_details_markdown
from portfolio_cms.workflows import DESCRIPTORS, RecordingNotifier, controller_for

logger = logging.getLogger(__name__)

USER_SECTION = "user"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-cms", description="Manage your portfolio content."
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--api-url", help="API base URL (defaults to PORTFOLIO_API_URL)")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in and remember the session")
    login.add_argument("identifier", nargs="?", help="Username or email")

    commands.add_parser("logout", help="Forget the stored session")
    commands.add_parser("whoami", help="Show the signed-in user")

    list_cmd = commands.add_parser("list", help="List the items of one section")
    list_cmd.add_argument("section", choices=[*DESCRIPTORS, USER_SECTION])
    list_cmd.add_argument("--search", default="", help="Case-insensitive filter")

    commands.add_parser("tui", help="Open the terminal interface")
    return parser


def _open(api_url: str | None) -> tuple[PortfolioApi, SessionStore]:
    api = PortfolioApi(api_url)
    store = SessionStore()
    store.bind(api)
    store.restore()
    return api, store


async def _login(api: PortfolioApi, store: SessionStore, identifier: str | None) -> int:
    identifier = identifier or input("Username or email: ")
    password = getpass.getpass("Password: ")
    try:
        user = await store.login(identifier, password)
    except ValidationError as exc:
        print(f"❌ {exc.first_message()}")
        return 1
    except ApiError as exc:
        print(f"❌ {exc.message}")
        return 1
    finally:
        await api.aclose()
    print(f"✅ Logged in as {user.username}")
    return 0


async def _whoami(api: PortfolioApi, store: SessionStore) -> int:
    if not store.authenticated:
        print("Not logged in.")
        return 1
    try:
        user = await store.refresh_identity()
    except ApiError as exc:
        print(f"❌ {exc.message}")
        return 1
    finally:
        await api.aclose()
    print(f"{user.name or user.username} <{user.email}> (@{user.username})")
    return 0


async def _list(api: PortfolioApi, store: SessionStore, section: str, search: str) -> int:
    if not store.authenticated:
        print("Not logged in. Run `portfolio-cms login` first.")
        return 1
    try:
        if section == USER_SECTION:
            details = await api.user_details.get()
            print(render_user_details_markdown(details))
            return 0

        notifier = RecordingNotifier()
        controller = controller_for(section, api, notifier=notifier)
        await controller.load()
    except ApiError as exc:
        print(f"❌ {exc.message}")
        return 1
    finally:
        await api.aclose()

    if notifier.errors:
        for message in notifier.errors:
            print(f"❌ {message}")
        return 1
    controller.set_search(search)
    print(f"{controller.descriptor.plural}")
    print("-" * 60)
    print(render_list(section, controller.visible_items))
    return 0


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse ``argv`` and run the chosen command.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    api, store = _open(args.api_url)

    if args.command == "login":
        return asyncio.run(_login(api, store, args.identifier))
    if args.command == "logout":
        store.logout()
        print("Logged out.")
        return 0
    if args.command == "whoami":
        return asyncio.run(_whoami(api, store))
    if args.command == "list":
        return asyncio.run(_list(api, store, args.section, args.search))

    from portfolio_cms.tui import PortfolioCMSApp

    PortfolioCMSApp(api=api, store=store).run()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the CLI application."""
    try:
        return run_cli(argv)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user. Exiting.")
        return 130
    except Exception as exc:
        logger.exception("Unexpected error")
        print(f"\n❌ Unexpected error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
