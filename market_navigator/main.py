#!/usr/bin/env python3
"""
Market Navigator CLI - Main Entry Point

Usage:
    market-navigator signin                 # Sign in (prompts for password)
    market-navigator whoami                 # Show the signed-in user
    market-navigator profile --sector Seafood --hs-code 0306
    market-navigator admin login            # Admin session for trade data
    market-navigator trade-data upload exports.csv
    market-navigator forum posts --category general
"""

import argparse
import asyncio
import sys
from typing import Optional, List, Dict, Any, Callable, Awaitable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table

from market_navigator.config import NavigatorConfig
from market_navigator.exceptions import NavigatorError, ConfigurationError
from market_navigator.logging_config import logger
from market_navigator.models import (
    User,
    Admin,
    SignupData,
    ProfileUpdate,
    UserType,
    UserRole,
    Sector,
)
from market_navigator.navigator import MarketNavigator, get_navigator


CommandHandler = Callable[[MarketNavigator, argparse.Namespace, Console], Awaitable[bool]]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="market-navigator",
        description="Market Navigator - export market intelligence from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  market-navigator signin                         Sign in to your account
  market-navigator signup                         Create an account
  market-navigator whoami                         Show who is signed in
  market-navigator profile --target-country US    Update your trade profile
  market-navigator admin login                    Sign in as trade-data admin
  market-navigator trade-data summary             Admin: trade data summary
  market-navigator forum posts --search shrimp    Browse the community forum

Environment:
  MARKET_NAVIGATOR_API_URL      Backend base URL (default http://localhost:3001/api)
  MARKET_NAVIGATOR_CONFIG_DIR   Where tokens and config.json live
        """
    )

    parser.add_argument(
        "--api-url",
        help="Backend API base URL"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging and full tracebacks"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ==================== User session ====================
    signin_parser = subparsers.add_parser("signin", help="Sign in")
    signin_parser.add_argument("--email", "-e", help="Account email")
    signin_parser.add_argument("--password", "-p", help="Password (prompted when omitted)")

    signup_parser = subparsers.add_parser("signup", help="Create an account")
    signup_parser.add_argument("--email", "-e")
    signup_parser.add_argument("--password", "-p")
    signup_parser.add_argument("--company-name")
    signup_parser.add_argument("--contact-person")
    signup_parser.add_argument("--user-type", choices=[t.value for t in UserType])
    signup_parser.add_argument("--role", choices=[r.value for r in UserRole])
    signup_parser.add_argument("--sector", choices=[s.value for s in Sector], default=Sector.NOT_SPECIFIED.value)
    signup_parser.add_argument("--hs-code", default="")
    signup_parser.add_argument("--target-country", action="append", dest="target_countries", default=[])

    subparsers.add_parser("signout", help="Sign out")
    subparsers.add_parser("whoami", help="Show the signed-in user")

    profile_parser = subparsers.add_parser("profile", help="Show or update your profile")
    profile_parser.add_argument("--sector", choices=[s.value for s in Sector])
    profile_parser.add_argument("--hs-code")
    profile_parser.add_argument(
        "--target-country",
        action="append",
        dest="target_countries",
        help="Repeat for several countries; replaces the current list"
    )
    profile_parser.add_argument("--company-name")
    profile_parser.add_argument("--contact-person")

    # ==================== Admin ====================
    admin_parser = subparsers.add_parser("admin", help="Admin session")
    admin_sub = admin_parser.add_subparsers(dest="admin_command")
    admin_login = admin_sub.add_parser("login", help="Sign in as admin")
    admin_login.add_argument("--admin-id", "-a")
    admin_login.add_argument("--password", "-p")
    admin_sub.add_parser("verify", help="Check the stored admin session")
    admin_sub.add_parser("logout", help="End the admin session")

    # ==================== Trade data ====================
    trade_parser = subparsers.add_parser("trade-data", help="Trade data administration")
    trade_sub = trade_parser.add_subparsers(dest="trade_command")
    upload_parser = trade_sub.add_parser("upload", help="Upload a CSV export")
    upload_parser.add_argument("csv_file")
    trade_sub.add_parser("summary", help="Show the trade data summary")
    clear_parser = trade_sub.add_parser("clear", help="Delete all trade data")
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    # ==================== Forum ====================
    forum_parser = subparsers.add_parser("forum", help="Community forum")
    forum_sub = forum_parser.add_subparsers(dest="forum_command")
    posts_parser = forum_sub.add_parser("posts", help="List posts")
    posts_parser.add_argument("--category")
    posts_parser.add_argument("--search")
    posts_parser.add_argument("--page", type=int, default=1)
    posts_parser.add_argument("--limit", type=int, default=10)
    post_parser = forum_sub.add_parser("post", help="Show one post with replies")
    post_parser.add_argument("post_id")
    forum_sub.add_parser("stats", help="Forum statistics")

    return parser


# ==================== Output ====================

def _show_user_panel(console: Console, user: User) -> None:
    """Display user info panel"""
    countries = ", ".join(user.target_countries) or "-"
    completed = "[green]complete[/green]" if user.profile_completed else "[yellow]incomplete[/yellow]"

    content = (
        f"[bold]Company:[/bold] {escape(user.company_name)}\n"
        f"[bold]Contact:[/bold] {escape(user.contact_person)}\n"
        f"[bold]Email:[/bold] {escape(user.email)}\n"
        f"[bold]Type:[/bold] {escape(user.user_type)} {escape(user.role)}\n"
        f"\n"
        f"[bold]Sector:[/bold] {escape(user.sector)}\n"
        f"[bold]HS code:[/bold] {escape(user.hs_code or '-')}\n"
        f"[bold]Target countries:[/bold] {escape(countries)}\n"
        f"[bold]Profile:[/bold] {completed}"
    )
    console.print(Panel(
        content,
        title="[bold cyan]Account[/bold cyan]",
        border_style="cyan"
    ))


def _show_admin_panel(console: Console, admin: Admin) -> None:
    console.print(Panel(
        f"[green]Admin session active[/green]\n\n"
        f"[bold]Admin ID:[/bold] {escape(admin.admin_id or admin.id)}",
        title="[bold magenta]Admin[/bold magenta]",
        border_style="magenta"
    ))


def _not_signed_in(console: Console) -> None:
    console.print(Panel(
        "[red]Not signed in[/red]\n\n"
        "Sign in using: [cyan]market-navigator signin[/cyan]\n"
        "New here? [cyan]market-navigator signup[/cyan]",
        border_style="red"
    ))


def _data(response: Any) -> Any:
    """The backend wraps most answers as {success, data}"""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


# ==================== User commands ====================

async def cmd_signin(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    email = args.email or Prompt.ask("Email", console=console)
    password = args.password or Prompt.ask("Password", password=True, console=console)

    user = await navigator.auth.sign_in(email, password)

    console.print("\n[green]✓ Signed in[/green]")
    console.print(f"Welcome, [bold]{escape(user.contact_person or user.email)}[/bold]!")
    if not user.profile_completed:
        console.print("\nYour trade profile is incomplete. Try:")
        console.print("  [cyan]market-navigator profile --sector Seafood --hs-code 0306 --target-country US[/cyan]")
    return True


async def cmd_signup(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    data = SignupData(
        email=args.email or Prompt.ask("Email", console=console),
        password=args.password or Prompt.ask("Password", password=True, console=console),
        company_name=args.company_name or Prompt.ask("Company name", console=console),
        contact_person=args.contact_person or Prompt.ask("Contact person", console=console),
        user_type=UserType(args.user_type or Prompt.ask(
            "Company based in",
            choices=[t.value for t in UserType],
            default=UserType.INDIAN.value,
            console=console
        )),
        role=UserRole(args.role or Prompt.ask(
            "Role",
            choices=[r.value for r in UserRole],
            default=UserRole.SELLER.value,
            console=console
        )),
        sector=args.sector,
        hs_code=args.hs_code,
        target_countries=args.target_countries,
    )

    user = await navigator.auth.sign_up(data)

    console.print("\n[green]✓ Account created[/green]")
    _show_user_panel(console, user)
    return True


async def cmd_signout(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    navigator.auth.sign_out()
    console.print("[green]✓ Signed out[/green]")
    return True


async def cmd_whoami(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    user = await navigator.auth.initialize()
    if user is None:
        _not_signed_in(console)
        return False
    _show_user_panel(console, user)
    return True


async def cmd_profile(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    user = await navigator.auth.initialize()
    if user is None:
        _not_signed_in(console)
        return False

    update = ProfileUpdate(
        company_name=args.company_name,
        contact_person=args.contact_person,
        sector=args.sector,
        hs_code=args.hs_code,
        target_countries=args.target_countries,
    )
    if not update.is_empty():
        user = await navigator.auth.update_profile(update)
        console.print("[green]✓ Profile updated[/green]")

    _show_user_panel(console, user)
    return True


# ==================== Admin commands ====================

async def cmd_admin(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    admin_auth = navigator.admin_auth

    if args.admin_command == "login":
        admin_id = args.admin_id or Prompt.ask("Admin ID", console=console)
        password = args.password or Prompt.ask("Password", password=True, console=console)
        result = await admin_auth.login(admin_id, password)
        return bool(result)

    if args.admin_command == "verify":
        result = await admin_auth.verify_token()
        if result:
            _show_admin_panel(console, result.record)
        else:
            console.print(f"[red]✗ No admin session:[/red] {escape(result.message)}")
        return bool(result)

    if args.admin_command == "logout":
        admin_auth.logout()
        return True

    console.print("[yellow]Choose one of: login, verify, logout[/yellow]")
    return False


# ==================== Trade data commands ====================

async def cmd_trade_data(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    trade_data = navigator.trade_data

    if args.trade_command == "upload":
        response = await trade_data.upload_csv(args.csv_file)
        console.print(f"[green]✓ {escape((response or {}).get('message', 'Upload complete'))}[/green]")
        return True

    if args.trade_command == "summary":
        response = await trade_data.get_summary()
        console.print_json(data=_data(response))
        return True

    if args.trade_command == "clear":
        if not args.yes and not Confirm.ask(
            "Delete ALL trade data records?", default=False, console=console
        ):
            console.print("[yellow]Cancelled[/yellow]")
            return False
        response = await trade_data.clear()
        console.print(f"[green]✓ {escape((response or {}).get('message', 'Trade data cleared'))}[/green]")
        return True

    console.print("[yellow]Choose one of: upload, summary, clear[/yellow]")
    return False


# ==================== Forum commands ====================

def _show_posts_table(console: Console, posts: List[Dict[str, Any]], pagination: Dict[str, Any]) -> None:
    table = Table(title="Community Forum", show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Author")
    table.add_column("Likes", justify="right")
    table.add_column("Replies", justify="right")

    for post in posts:
        author = post.get("author") or {}
        title = post.get("title", "")
        if post.get("isPinned"):
            title = f"📌 {title}"
        if post.get("isAnswered"):
            title = f"{title} ✓"
        table.add_row(
            str(post.get("id", "")),
            escape(title),
            escape(post.get("category", "")),
            escape(author.get("name", "")),
            str(post.get("likes", 0)),
            str(post.get("commentsCount", 0)),
        )

    console.print(table)
    if pagination:
        console.print(
            f"[dim]Page {pagination.get('currentPage', 1)} of {pagination.get('totalPages', 1)}"
            f" ({pagination.get('totalRecords', len(posts))} posts)[/dim]"
        )


def _show_post(console: Console, post: Dict[str, Any]) -> None:
    author = post.get("author") or {}
    byline = f"{author.get('name', '')} ({author.get('company', '')})"
    console.print(Panel(
        f"{escape(post.get('content', ''))}\n\n[dim]{escape(byline)}[/dim]",
        title=f"[bold]{escape(post.get('title', ''))}[/bold]",
        subtitle=escape(post.get("category", "")),
        border_style="cyan"
    ))
    for reply in post.get("replies") or []:
        reply_author = (reply.get("author") or {}).get("name", "")
        marker = "[green]✓ accepted[/green] " if reply.get("isAcceptedAnswer") else ""
        console.print(f"  {marker}[bold]{escape(reply_author)}:[/bold] {escape(reply.get('content', ''))}")


async def cmd_forum(navigator: MarketNavigator, args: argparse.Namespace, console: Console) -> bool:
    forum = navigator.forum

    if args.forum_command == "posts":
        response = await forum.get_posts(
            category=args.category,
            search=args.search,
            page=args.page,
            limit=args.limit,
        )
        data = _data(response) or {}
        posts = data.get("posts", []) if isinstance(data, dict) else []
        if not posts:
            console.print("[dim]No posts found[/dim]")
            return True
        _show_posts_table(console, posts, response.get("pagination") or {})
        return True

    if args.forum_command == "post":
        response = await forum.get_post(args.post_id)
        _show_post(console, _data(response) or {})
        return True

    if args.forum_command == "stats":
        response = await forum.get_stats()
        console.print_json(data=_data(response))
        return True

    console.print("[yellow]Choose one of: posts, post, stats[/yellow]")
    return False


COMMANDS: Dict[str, CommandHandler] = {
    "signin": cmd_signin,
    "signup": cmd_signup,
    "signout": cmd_signout,
    "whoami": cmd_whoami,
    "profile": cmd_profile,
    "admin": cmd_admin,
    "trade-data": cmd_trade_data,
    "forum": cmd_forum,
}


def _build_navigator(args: argparse.Namespace) -> MarketNavigator:
    config = NavigatorConfig.load_default()
    if args.api_url:
        config.api_base_url = args.api_url
    if args.verbose:
        config.verbose = True
        config.log_level = "DEBUG"
    config.__post_init__()
    return get_navigator(config)


def main(
    argv: Optional[List[str]] = None,
    navigator: Optional[MarketNavigator] = None,
    console: Optional[Console] = None
):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    console = console or Console()

    try:
        navigator = navigator or _build_navigator(args)
        success = asyncio.run(COMMANDS[args.command](navigator, args, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        sys.exit(1)
    except ConfigurationError as e:
        console.print(f"\n[red]✗ Configuration error:[/red] {escape(e.message)}")
        sys.exit(1)
    except NavigatorError as e:
        if args.verbose:
            logger.log_error_with_context(e, f"command {args.command}", error_code=e.code)
        console.print(f"\n[red]✗ {escape(e.message)}[/red]")
        sys.exit(1)
    except (ValueError, OSError) as e:
        if args.verbose:
            logger.log_error_with_context(e, f"command {args.command}")
        console.print(f"\n[red]✗ Error:[/red] {escape(str(e))}")
        sys.exit(1)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
