"""List/pagination controller for the posts view.

Tracks the current page, the page count, the loading flag and the last
loaded snapshot of posts and categories. Nothing here is a cache: every
navigation fetches again.

In-flight loads are never cancelled. When two loads overlap, whichever
response arrives last overwrites the state, so a slow earlier request can
replace the result of a newer one.
"""

from __future__ import annotations

import logging
import threading
from functools import partial
from typing import Any, Callable, Optional

from .client import CMSClient
from .errors import CMSError
from .models import Category, PaginationState, Post, PostPage
from .notifications import Notifier
from .session import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DELAY = 0.5

TimerFactory = Callable[[float, Callable[[], None]], Any]


class Debouncer:
    """Run ``callback`` only after ``delay`` seconds without a new call.

    Each call cancels the pending one, so a burst of calls results in a
    single callback carrying the arguments of the last call.

    Args:
        delay: Quiet period in seconds.
        callback: Function to run once the quiet period ends.
        timer_factory: Builds a startable, cancellable timer from
            ``(delay, function)``; ``threading.Timer`` by default.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Any],
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.delay = delay
        self.callback = callback
        self._timer_factory = timer_factory
        self._timer: Any = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            timer = self._timer_factory(
                self.delay, partial(self._fire, self._generation, args, kwargs)
            )
            timer.daemon = True
            self._timer = timer
        timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._generation += 1

    def _fire(self, generation: int, args: tuple, kwargs: dict) -> None:
        with self._lock:
            if generation != self._generation:
                return  # superseded
            self._timer = None
        self.callback(*args, **kwargs)


class PostListController:
    """Drives paged, searchable loads of posts plus the category list."""

    def __init__(
        self,
        client: CMSClient,
        session: SessionStore,
        notifier: Notifier | None = None,
        search_delay: float = DEFAULT_SEARCH_DELAY,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.client = client
        self.session = session
        self.notifier = notifier or session.notifier
        self.posts: list[Post] = []
        self.categories: list[Category] = []
        self.loading = False
        self.current_page = 1
        self.total_pages = 1
        self.search_term = ""
        self._loaded = False
        self._debounced_search = Debouncer(search_delay, self._search_now, timer_factory)

    # --- Loading ---

    def load(self, page: int = 1, search_term: str = "") -> PostPage:
        """Fetch one page of posts and make it the current state.

        A failed load is reported and leaves the previous snapshot in place.
        Page numbers below 1, or past the last page of an already loaded
        listing for the same search, return the snapshot without a request.
        """
        if page < 1 or (
            self._loaded and search_term == self.search_term and page > self.total_pages
        ):
            logger.debug("Page %d out of range (1..%d)", page, self.total_pages)
            return self.snapshot()

        self.loading = True
        try:
            result = self.client.list_posts(self.session.auth_token, page, search_term)
        except CMSError as exc:
            logger.error("Load posts error: %s", exc)
            self.notifier.error("Failed to load posts")
            return self.snapshot()
        finally:
            self.loading = False

        self.posts = result.items
        self.current_page = result.page
        self.total_pages = result.page_count
        self.search_term = search_term
        self._loaded = True
        return result

    def reload(self) -> PostPage:
        """Load the current page again with the active search."""
        return self.load(self.current_page, self.search_term)

    def load_categories(self) -> list[Category]:
        try:
            self.categories = self.client.list_categories(self.session.auth_token)
        except CMSError as exc:
            logger.error("Load categories error: %s", exc)
            self.notifier.error("Failed to load categories")
            self.categories = []
        return self.categories

    def load_initial(self) -> Optional[PostPage]:
        """First load after authentication: page 1 and the categories."""
        if not self.session.is_authenticated:
            return None
        result = self.load()
        self.load_categories()
        return result

    def find_post(self, slug: str) -> Optional[Post]:
        """Look up a single post by slug through the public API."""
        return self.client.get_post_by_slug(slug, token=self.session.auth_token or None)

    def snapshot(self) -> PostPage:
        """Current state as a PostPage, without a request."""
        return PostPage(
            items=list(self.posts),
            pagination=PaginationState(
                page=self.current_page,
                page_size=self.client.page_size,
                page_count=self.total_pages,
                total=len(self.posts),
            ),
        )

    # --- Navigation ---

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def can_go_to(self, page: int) -> bool:
        return 1 <= page <= max(self.total_pages, 1)

    def go_to_page(self, page: int) -> Optional[PostPage]:
        """Load ``page`` if it is in range; out-of-range pages send nothing."""
        if not self.can_go_to(page):
            logger.debug("Page %d out of range (1..%d)", page, self.total_pages)
            return None
        return self.load(page, self.search_term)

    def next_page(self) -> Optional[PostPage]:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> Optional[PostPage]:
        return self.go_to_page(self.current_page - 1)

    # --- Search ---

    def set_search_term(self, term: str) -> None:
        """Schedule a page-1 search once typing pauses."""
        if not self.session.auth_token:
            return
        self._debounced_search(term)

    def cancel_search(self) -> None:
        self._debounced_search.cancel()

    @property
    def search_pending(self) -> bool:
        return self._debounced_search.pending

    def _search_now(self, term: str) -> None:
        self.load(1, term)
