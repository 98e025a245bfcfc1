"""Mutation orchestrator: the write flows behind the editor.

Create, update and category create re-raise on failure so the form stays
open. Delete and publish toggle only report failures through the notifier;
the list view keeps going.
"""

from __future__ import annotations

import logging
from typing import Callable

from .client import CMSClient
from .errors import CMSError
from .models import Category, CategoryFormData, Post, PostFormData
from .notifications import Notifier
from .session import SessionStore

logger = logging.getLogger(__name__)

Reload = Callable[[], object]
Confirm = Callable[[Post], bool]


def _noop() -> None:
    return None


class MutationOrchestrator:
    """Sequences user-triggered writes against the CMS.

    Args:
        client: CMS client used for every call.
        session: Source of the bearer token, read at call time.
        notifier: Side channel for success and error notices.
        reload_posts: Called after a successful post mutation, typically
            the list controller's ``reload`` (reloads the current page).
        reload_categories: Called after a category is created.
    """

    def __init__(
        self,
        client: CMSClient,
        session: SessionStore,
        notifier: Notifier | None = None,
        reload_posts: Reload = _noop,
        reload_categories: Reload = _noop,
    ) -> None:
        self.client = client
        self.session = session
        self.notifier = notifier or session.notifier
        self.reload_posts = reload_posts
        self.reload_categories = reload_categories

    def create_post(self, form: PostFormData) -> Post:
        try:
            post = self.client.create_post(self.session.auth_token, form)
        except CMSError as exc:
            logger.error("Create post error: %s", exc)
            self.notifier.error(exc.message or "Failed to create post")
            raise
        self.notifier.success("Post created successfully!")
        self.reload_posts()
        return post

    def update_post(self, document_id: str, form: PostFormData) -> Post:
        try:
            post = self.client.update_post(self.session.auth_token, document_id, form)
        except CMSError as exc:
            logger.error("Update post error: %s", exc)
            self.notifier.error(exc.message or "Failed to update post")
            raise
        self.notifier.success("Post updated successfully!")
        self.reload_posts()
        return post

    def delete_post(self, post: Post, confirm: Confirm) -> bool:
        """Delete a post once ``confirm(post)`` agrees.

        Returns:
            True when the post was deleted. False when the user declined or
            the call failed (the failure is reported, not raised).
        """
        if not confirm(post):
            logger.debug("Delete of %s cancelled", post.document_id)
            return False

        try:
            self.client.delete_post(self.session.auth_token, post.document_id)
        except CMSError as exc:
            logger.error("Delete post error: %s", exc)
            self.notifier.error(exc.message or "Failed to delete post")
            return False
        self.notifier.success("Post deleted successfully!")
        self.reload_posts()
        return True

    def toggle_publish(self, post: Post) -> bool:
        """Publish a draft or unpublish a published post.

        Returns:
            True on success; failures are reported and swallowed.
        """
        publishing = post.published_at is None
        verb = "publish" if publishing else "unpublish"
        token = self.session.auth_token
        try:
            if publishing:
                self.client.publish_post(token, post.document_id)
            else:
                self.client.unpublish_post(token, post.document_id)
        except CMSError as exc:
            logger.error("%s post error: %s", verb.capitalize(), exc)
            self.notifier.error(exc.message or f"Failed to {verb} post")
            return False
        self.notifier.success(f"Post {verb}ed successfully!")
        self.reload_posts()
        return True

    def create_category(self, form: CategoryFormData) -> Category:
        try:
            category = self.client.create_category(self.session.auth_token, form)
        except CMSError as exc:
            logger.error("Create category error: %s", exc)
            self.notifier.error(exc.message or "Failed to create category")
            raise
        self.notifier.success("Category created successfully!")
        self.reload_categories()
        return category
