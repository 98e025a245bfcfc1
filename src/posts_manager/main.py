"""Posts manager console: manage CMS posts and categories from a terminal.

Every command restores the remembered session first, so `login` (which
remembers the session by default) is needed once per machine.

Usage:
    python -m src.posts_manager.main login --email admin@example.com
    python -m src.posts_manager.main posts --page 2 --search launch
    python -m src.posts_manager.main create-post --title "Hello" --content "..."
    python -m src.posts_manager.main toggle-publish <documentId>
    python -m src.posts_manager.main delete-post <documentId> --yes
"""

from __future__ import annotations

import argparse
import getpass
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from src.common.config import Settings
from src.common.logging import setup_logging

from .client import CMSClient
from .errors import CMSError
from .listing import PostListController
from .models import CategoryFormData, Post, PostFormData
from .notifications import Notification, Notifier
from .orchestrator import MutationOrchestrator
from .session import SessionStore
from .storage import JsonFileStore, KeyValueStore


@dataclass
class App:
    """The long-lived objects shared by every command."""
    settings: Settings
    client: CMSClient
    notifier: Notifier
    session: SessionStore
    listing: PostListController
    orchestrator: MutationOrchestrator


def build_app(
    settings: Settings,
    storage: KeyValueStore | None = None,
    client: CMSClient | None = None,
) -> App:
    """Wire one client, session, list controller and orchestrator together."""
    notifier = Notifier()
    client = client or CMSClient.from_settings(settings.cms)
    storage = storage if storage is not None else JsonFileStore(settings.cms.session_file)
    session = SessionStore(client, storage, notifier)
    listing = PostListController(
        client, session, notifier, search_delay=settings.cms.search_debounce_seconds
    )
    orchestrator = MutationOrchestrator(
        client,
        session,
        notifier,
        reload_posts=listing.reload,
        reload_categories=listing.load_categories,
    )
    return App(settings, client, notifier, session, listing, orchestrator)


def _print_notice(notice: Notification) -> None:
    tag = "ERROR" if notice.is_error else "OK"
    print(f"  [{tag}] {notice.message}")


def _print_posts(app: App) -> None:
    listing = app.listing
    print(f"\n{'=' * 78}")
    print(f"  Posts - page {listing.current_page}/{listing.total_pages}"
          + (f"  (search: {listing.search_term!r})" if listing.search_term else ""))
    print(f"{'=' * 78}")
    if not listing.posts:
        print("  No posts found.\n")
        return
    print(f"  {'Document ID':<26} {'Status':<10} {'Title':<38}")
    print(f"  {'-' * 26} {'-' * 10} {'-' * 38}")
    for post in listing.posts:
        title = post.title if len(post.title) <= 38 else post.title[:35] + "..."
        print(f"  {post.document_id:<26} {post.status.value:<10} {title:<38}")
    print()


def _print_categories(app: App) -> None:
    print(f"\n  {'Document ID':<26} {'Name':<24} {'Slug':<24}")
    print(f"  {'-' * 26} {'-' * 24} {'-' * 24}")
    for category in app.listing.categories:
        print(f"  {category.document_id:<26} {category.name:<24} {category.slug:<24}")
    print()


def _find_listed_post(app: App, document_id: str) -> Optional[Post]:
    """Walk the post list page by page looking for ``document_id``."""
    result = app.listing.load(1)
    while True:
        for post in result.items:
            if post.document_id == document_id:
                return post
        page = app.listing.current_page
        if not app.listing.has_next:
            return None
        result = app.listing.next_page()
        if result is None or app.listing.current_page == page:
            return None  # failed load, stop walking


def _post_form(args: argparse.Namespace) -> PostFormData:
    return PostFormData(
        title=args.title,
        description=args.description,
        content=args.content,
        slug=args.slug,
        category_id=args.category_id,
    )


def _prompt_confirm(post: Post) -> bool:
    answer = input(f'Are you sure you want to delete "{post.title}"? [y/N] ')
    return answer.strip().lower() in ("y", "yes")


# --- Commands ---

def cmd_login(app: App, args: argparse.Namespace) -> int:
    email = args.email or app.settings.cms.admin_email
    if not email:
        print("  --email is required (or set ADMIN_EMAIL)")
        return 2
    password = args.password or app.settings.cms.admin_password or getpass.getpass("Password: ")
    try:
        app.session.login(email, password, remember_me=not args.no_remember)
    except CMSError:
        return 1
    return 0


def cmd_logout(app: App, args: argparse.Namespace) -> int:
    app.session.logout()
    return 0


def cmd_whoami(app: App, args: argparse.Namespace) -> int:
    state = app.session.state
    if app.session.is_authenticated:
        print(f"  Logged in as {app.session.email}")
    else:
        print(f"  Not logged in ({state.value})")
    return 0


def cmd_posts(app: App, args: argparse.Namespace) -> int:
    if args.page < 1:
        print("  --page must be 1 or greater")
        return 2
    app.listing.load(args.page, args.search)
    _print_posts(app)
    return 0


def cmd_categories(app: App, args: argparse.Namespace) -> int:
    app.listing.load_categories()
    _print_categories(app)
    return 0


def cmd_show(app: App, args: argparse.Namespace) -> int:
    try:
        post = app.listing.find_post(args.slug)
    except CMSError as exc:
        print(f"  {exc.message}")
        return 1
    if post is None:
        print(f"  No post with slug {args.slug!r}")
        return 1
    print(f"\n  {post.title}  [{post.status.value}]")
    print(f"  slug: {post.slug}  documentId: {post.document_id}")
    if post.category:
        print(f"  category: {post.category.name}")
    if post.description:
        print(f"\n  {post.description}")
    if post.content:
        print(f"\n{post.content}\n")
    return 0


def cmd_create_post(app: App, args: argparse.Namespace) -> int:
    try:
        post = app.orchestrator.create_post(_post_form(args))
    except CMSError:
        return 1
    print(f"  {post.document_id}  [{post.status.value}]  {post.title}")
    return 0


def cmd_update_post(app: App, args: argparse.Namespace) -> int:
    try:
        app.orchestrator.update_post(args.document_id, _post_form(args))
    except CMSError:
        return 1
    return 0


def cmd_delete_post(app: App, args: argparse.Namespace) -> int:
    post = _find_listed_post(app, args.document_id)
    if post is None:
        print(f"  No post with documentId {args.document_id!r}")
        return 1
    confirm: Callable[[Post], bool] = (lambda _post: True) if args.yes else _prompt_confirm
    return 0 if app.orchestrator.delete_post(post, confirm) else 1


def cmd_toggle_publish(app: App, args: argparse.Namespace) -> int:
    post = _find_listed_post(app, args.document_id)
    if post is None:
        print(f"  No post with documentId {args.document_id!r}")
        return 1
    return 0 if app.orchestrator.toggle_publish(post) else 1


def cmd_create_category(app: App, args: argparse.Namespace) -> int:
    form = CategoryFormData.from_name(args.name)
    if args.slug:
        form.slug = args.slug
    try:
        category = app.orchestrator.create_category(form)
    except CMSError:
        return 1
    print(f"  {category.document_id}  {category.name}  ({category.slug})")
    return 0


# Commands that work without a session
_PUBLIC_COMMANDS = {"login", "logout", "whoami", "show"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Posts manager: manage CMS posts and categories",
    )
    parser.add_argument("--settings", type=str, default=None, help="Path to settings.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in as CMS admin")
    p.add_argument("--email", type=str, default=None)
    p.add_argument("--password", type=str, default=None)
    p.add_argument("--no-remember", action="store_true", default=False,
                   help="Do not persist the session (it ends with this command)")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Forget the session").set_defaults(func=cmd_logout)
    sub.add_parser("whoami", help="Show the session state").set_defaults(func=cmd_whoami)

    p = sub.add_parser("posts", help="List posts")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--search", type=str, default="")
    p.set_defaults(func=cmd_posts)

    sub.add_parser("categories", help="List categories").set_defaults(func=cmd_categories)

    p = sub.add_parser("show", help="Show a post by slug (public API)")
    p.add_argument("slug", type=str)
    p.set_defaults(func=cmd_show)

    for name, func in (("create-post", cmd_create_post), ("update-post", cmd_update_post)):
        p = sub.add_parser(name, help=f"{name.split('-')[0].capitalize()} a post")
        if name == "update-post":
            p.add_argument("document_id", type=str)
        p.add_argument("--title", type=str, required=True)
        p.add_argument("--description", type=str, default="")
        p.add_argument("--content", type=str, default="")
        p.add_argument("--slug", type=str, default="")
        p.add_argument("--category-id", type=str, default=None)
        p.set_defaults(func=func)

    p = sub.add_parser("delete-post", help="Delete a post")
    p.add_argument("document_id", type=str)
    p.add_argument("--yes", action="store_true", default=False, help="Skip confirmation")
    p.set_defaults(func=cmd_delete_post)

    p = sub.add_parser("toggle-publish", help="Publish a draft or unpublish a post")
    p.add_argument("document_id", type=str)
    p.set_defaults(func=cmd_toggle_publish)

    p = sub.add_parser("create-category", help="Create a category")
    p.add_argument("--name", type=str, required=True)
    p.add_argument("--slug", type=str, default="")
    p.set_defaults(func=cmd_create_category)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.load(Path(args.settings) if args.settings else None)
    setup_logging(settings.logging.level, module_name="src.posts_manager")

    app = build_app(settings)
    app.notifier.subscribe(_print_notice)
    try:
        app.session.initialize()
        if args.command not in _PUBLIC_COMMANDS and not app.session.is_authenticated:
            print("  Not logged in. Run the `login` command first.")
            return 1
        return args.func(app, args)
    finally:
        app.listing.cancel_search()
        app.client.close()


if __name__ == "__main__":
    sys.exit(main())
