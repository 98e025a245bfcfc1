"""HTTP client for the headless CMS admin and REST APIs.

One method per backend operation. Every method except ``admin_login``
takes the bearer token explicitly and refuses to send a request without
it. Non-2xx responses become typed errors (see ``errors.py``).

Usage:
    with CMSClient.from_settings(settings.cms) as client:
        token = client.admin_login("admin@example.com", "secret")
        page = client.list_posts(token, page=1, search_term="launch")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests
from pydantic import ValidationError

from src.common.config import CMSSettings, normalize_base_url

from .errors import AuthError, AuthRequiredError, HttpError, NetworkError
from .models import (
    Category,
    CategoryFormData,
    PaginationState,
    Post,
    PostFormData,
    PostPage,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/admin/login"
POSTS_PATH = "/content-manager/collection-types/api::post.post"
CATEGORIES_PATH = "/content-manager/collection-types/api::category.category"
REST_POSTS_PATH = "/api/posts"
REST_CATEGORIES_PATH = "/api/categories"

DEFAULT_PAGE_SIZE = 10


def _normalize_category_list(body: Any) -> Optional[list[Category]]:
    """Turn a category list response into Categories.

    Accepts the content-manager envelope (``results``) and the REST
    envelope (``data``). A null or empty list is a valid, empty answer.
    Returns None when the body has neither shape.
    """
    if not isinstance(body, dict):
        return None
    for key in ("results", "data"):
        if key not in body:
            continue
        entries = body[key]
        if entries is None:
            return []
        if isinstance(entries, list):
            return [Category.from_api(entry) for entry in entries if isinstance(entry, dict)]
    return None


@dataclass(frozen=True)
class CategoryAttempt:
    """One candidate request in the category fallback chain."""
    name: str
    path: str
    params: dict[str, str] = field(default_factory=dict)
    normalize: Callable[[Any], Optional[list[Category]]] = _normalize_category_list


# Tried strictly in order; the first 2xx with a recognizable body wins.
CATEGORY_ATTEMPTS: tuple[CategoryAttempt, ...] = (
    CategoryAttempt("Content Manager (draft)", CATEGORIES_PATH, {"status": "draft"}),
    CategoryAttempt("Content Manager (no status)", CATEGORIES_PATH),
    CategoryAttempt("REST API", REST_CATEGORIES_PATH, {"populate": "*"}),
    CategoryAttempt("REST API (simple)", REST_CATEGORIES_PATH),
)


def _unwrap_entry(body: Any) -> Any:
    """Return the entry from either a bare or a ``{"data": {...}}`` body."""
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        return body["data"]
    return body


class CMSClient:
    """Client for the CMS content-manager (admin) and public REST endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str = "",
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout: float | None = None,
        session: requests.Session | None = None,
        category_attempts: tuple[CategoryAttempt, ...] = CATEGORY_ATTEMPTS,
    ) -> None:
        self.base_url = normalize_base_url(base_url or "")
        self.api_token = api_token
        self.page_size = page_size
        self.timeout = timeout
        self.category_attempts = category_attempts
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: CMSSettings, **kwargs: Any) -> CMSClient:
        return cls(
            base_url=settings.base_url,
            api_token=settings.api_token,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
            **kwargs,
        )

    # --- Authentication ---

    def admin_login(self, email: str, password: str) -> str:
        """Exchange admin credentials for a bearer token.

        Raises:
            AuthError: Backend rejected the credentials (any non-2xx).
            NetworkError: Backend unreachable.
        """
        logger.info("Attempting admin login for %s", email)
        response = self._request(
            "POST", LOGIN_PATH, json={"email": email, "password": password}
        )
        body = self._json(response)
        if not response.ok:
            raise AuthError(
                _error_message(body, f"Admin login failed: {response.status_code}"),
                response.status_code,
            )

        token = None
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            token = body["data"].get("token")
        if not token:
            raise AuthError("Admin login response did not include a token", response.status_code)
        return token

    def validate_token(self, token: str) -> bool:
        """Check a token with a one-item authenticated read. Never raises."""
        if not token:
            return False
        try:
            response = self._request(
                "GET",
                POSTS_PATH,
                token=token,
                params={"pagination[page]": "1", "pagination[pageSize]": "1"},
            )
        except NetworkError as exc:
            logger.error("Token validation error: %s", exc)
            return False
        return response.ok

    # --- Posts ---

    def list_posts(
        self,
        token: str,
        page: int = 1,
        search_term: str = "",
    ) -> PostPage:
        """Load one page of posts (drafts and published), newest first."""
        _require_token(token)
        params = {
            "pagination[page]": str(page),
            "pagination[pageSize]": str(self.page_size),
            "populate[category]": "true",
            "populate[image]": "true",
            "sort": "createdAt:desc",
            "status": "draft",  # draft view includes published documents
        }
        if search_term:
            params["filters[title][$containsi]"] = search_term

        response = self._request("GET", POSTS_PATH, token=token, params=params)
        body = self._check(response, "Load posts")
        return self._parse_post_page(body, page)

    def create_post(self, token: str, form: PostFormData) -> Post:
        """Create a post, then try to publish it.

        A failed auto-publish is logged and swallowed: the post exists as a
        draft and is returned as such. Only a failed create raises.
        """
        _require_token(token)
        payload = form.to_payload(fill_slug=True)
        logger.info("Creating post '%s'", form.title)
        response = self._request("POST", POSTS_PATH, token=token, json=payload)
        post = _parse_post(_unwrap_entry(self._check(response, "Create post")), "Create post")

        if not post.document_id:
            return post
        try:
            published = self.publish_post(token, post.document_id)
        except (HttpError, NetworkError) as exc:
            logger.warning("Auto-publish failed for %s: %s", post.document_id, exc)
            return post
        logger.info("Post %s auto-published", post.document_id)
        return published or post

    def update_post(self, token: str, document_id: str, form: PostFormData) -> Post:
        _require_token(token)
        _require_document_id(document_id)
        response = self._request(
            "PUT", f"{POSTS_PATH}/{document_id}", token=token, json=form.to_payload()
        )
        return _parse_post(_unwrap_entry(self._check(response, "Update post")), "Update post")

    def delete_post(self, token: str, document_id: str) -> None:
        _require_token(token)
        _require_document_id(document_id)
        response = self._request("DELETE", f"{POSTS_PATH}/{document_id}", token=token)
        self._check(response, "Delete post")
        logger.info("Deleted post %s", document_id)

    def publish_post(self, token: str, document_id: str) -> Optional[Post]:
        """Publish a post. Returns the published entry when the backend echoes it."""
        return self._post_action(token, document_id, "publish")

    def unpublish_post(self, token: str, document_id: str) -> Optional[Post]:
        """Unpublish a post. Returns the draft entry when the backend echoes it."""
        return self._post_action(token, document_id, "unpublish")

    def get_post_by_slug(self, slug: str, token: str | None = None) -> Optional[Post]:
        """Read a single post through the public REST API.

        Uses the session token when given, else the static API token.
        """
        token = token or self.api_token
        _require_token(token)
        params = {
            "filters[slug][$eq]": slug,
            "populate[category]": "true",
            "populate[image]": "true",
        }
        response = self._request("GET", REST_POSTS_PATH, token=token, params=params)
        body = self._check(response, "Load post")
        entries = body.get("data") if isinstance(body, dict) else None
        if not entries:
            return None
        if isinstance(entries, dict):
            return _parse_post(entries, "Load post")
        return _parse_post(entries[0], "Load post")

    # --- Categories ---

    def list_categories(self, token: str) -> list[Category]:
        """Load categories, trying each candidate endpoint in order.

        The first attempt answering 2xx with a recognizable list (even an
        empty one) ends the chain. When every attempt fails the result is
        an empty list, never an error.
        """
        _require_token(token)
        for attempt in self.category_attempts:
            logger.debug("Trying %s...", attempt.name)
            try:
                response = self._request(
                    "GET", attempt.path, token=token, params=attempt.params or None
                )
            except NetworkError as exc:
                logger.warning("%s error: %s", attempt.name, exc)
                continue

            if not response.ok:
                logger.warning("%s failed: %d", attempt.name, response.status_code)
                continue

            categories = attempt.normalize(self._json(response))
            if categories is None:
                logger.warning("%s returned an unrecognized body", attempt.name)
                continue

            logger.info("Loaded %d categories from %s", len(categories), attempt.name)
            return categories

        logger.error("All category loading attempts failed")
        return []

    def create_category(self, token: str, form: CategoryFormData) -> Category:
        """Create a category via content-manager, falling back to REST."""
        _require_token(token)
        payload = form.to_payload()
        try:
            response = self._request("POST", CATEGORIES_PATH, token=token, json=payload)
            body = self._check(response, "Create category")
        except (HttpError, NetworkError) as exc:
            logger.info("Content Manager category create failed (%s), trying REST API", exc)
            response = self._request(
                "POST", REST_CATEGORIES_PATH, token=token, json={"data": payload}
            )
            body = self._check(response, "Create category")
        return Category.from_api(_unwrap_entry(body))

    def update_category(
        self, token: str, document_id: str, form: CategoryFormData
    ) -> Category:
        _require_token(token)
        _require_document_id(document_id)
        response = self._request(
            "PUT", f"{CATEGORIES_PATH}/{document_id}", token=token, json=form.to_payload()
        )
        return Category.from_api(_unwrap_entry(self._check(response, "Update category")))

    def delete_category(self, token: str, document_id: str) -> None:
        _require_token(token)
        _require_document_id(document_id)
        response = self._request("DELETE", f"{CATEGORIES_PATH}/{document_id}", token=token)
        self._check(response, "Delete category")

    # --- Internals ---

    def _post_action(self, token: str, document_id: str, action: str) -> Optional[Post]:
        _require_token(token)
        _require_document_id(document_id)
        response = self._request(
            "POST", f"{POSTS_PATH}/{document_id}/actions/{action}", token=token
        )
        body = self._check(response, f"{action.capitalize()} post")
        entry = _unwrap_entry(body)
        if isinstance(entry, dict) and entry.get("documentId") and entry.get("title"):
            return _parse_post(entry, f"{action.capitalize()} post")
        return None

    def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> requests.Response:
        """Send one request. Transport failures become NetworkError."""
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise NetworkError(f"Could not reach CMS at {self.base_url}: {exc}") from exc

        logger.debug(
            "%s %s -> %d (token %s)",
            method, path, response.status_code, "present" if token else "missing",
        )
        return response

    def _check(self, response: requests.Response, action: str) -> Any:
        """Return the JSON body of a 2xx response, else raise a typed error."""
        body = self._json(response)
        if response.ok:
            return body
        message = _error_message(body, f"{action} failed: {response.status_code}")
        logger.error("%s error (%d): %s", action, response.status_code, message)
        if response.status_code == 401:
            raise AuthError(message, response.status_code)
        raise HttpError(message, response.status_code)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def _parse_post_page(self, body: Any, requested_page: int) -> PostPage:
        """Read either the content-manager or the REST list envelope."""
        body = body if isinstance(body, dict) else {}
        if "results" in body:
            entries = body.get("results") or []
            raw_pagination = body.get("pagination")
        else:
            entries = body.get("data") or []
            raw_pagination = (body.get("meta") or {}).get("pagination")

        items = []
        for entry in entries:
            try:
                items.append(Post.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping malformed post entry: %s", exc)

        pagination = None
        if raw_pagination:
            try:
                pagination = PaginationState.model_validate(raw_pagination)
            except ValidationError as exc:
                logger.warning("Ignoring malformed pagination: %s", exc)
        if pagination is None:
            pagination = PaginationState(
                page=max(requested_page, 1),
                page_size=self.page_size,
                page_count=1,
                total=len(items),
            )
        return PostPage(items=items, pagination=pagination)

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> CMSClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _require_token(token: str | None) -> None:
    if not token:
        raise AuthRequiredError()


def _require_document_id(document_id: str) -> None:
    if not document_id:
        raise ValueError("document_id is required")


def _parse_post(entry: Any, action: str) -> Post:
    """Validate a single post entry; a malformed one is a backend error."""
    try:
        return Post.model_validate(entry)
    except ValidationError as exc:
        raise HttpError(f"{action} returned a malformed post") from exc


def _error_message(body: Any, default: str) -> str:
    """Prefer the backend's ``error.message`` over the generic message."""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return default
