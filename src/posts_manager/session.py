"""Session store: admin login, remembered sessions and revalidation.

State machine::

    UNINITIALIZED -> INITIALIZING -> AUTHENTICATED | UNAUTHENTICATED
    AUTHENTICATED -> UNAUTHENTICATED   (logout, failed revalidation)

One ``SessionStore`` is created at application start and handed to every
component that needs the token.
"""

from __future__ import annotations

import logging
from enum import Enum

from .client import CMSClient
from .errors import AuthError, CMSError, NetworkError
from .notifications import Notifier
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "posts_manager_auth_token"
EMAIL_KEY = "posts_manager_email"


class SessionState(str, Enum):
    """Lifecycle state of the session."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionStore:
    """Holds the admin token and email for the running process."""

    def __init__(
        self,
        client: CMSClient,
        storage: KeyValueStore,
        notifier: Notifier | None = None,
    ) -> None:
        self.client = client
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.auth_token = ""
        self.email = ""
        self.state = SessionState.UNINITIALIZED

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def is_initializing(self) -> bool:
        return self.state in (SessionState.UNINITIALIZED, SessionState.INITIALIZING)

    def initialize(self) -> SessionState:
        """Restore a remembered session, if any, and revalidate it.

        Runs once; later calls return the settled state without touching
        the backend.
        """
        if not self.is_initializing:
            return self.state

        self.state = SessionState.INITIALIZING
        saved_token = self.storage.get(TOKEN_KEY)
        saved_email = self.storage.get(EMAIL_KEY)

        if not (saved_token and saved_email):
            self.state = SessionState.UNAUTHENTICATED
            return self.state

        logger.info("Found saved authentication, validating token...")
        self.auth_token = saved_token
        self.email = saved_email
        if self.validate_token(saved_token):
            self.state = SessionState.AUTHENTICATED
            self.notifier.success(f"Welcome back, {saved_email}!")
        else:
            self._clear()
            self.notifier.error("Session expired. Please login again.")
        return self.state

    def login(self, email: str, password: str, remember_me: bool = False) -> None:
        """Log in as admin.

        Raises:
            AuthError: Credentials rejected or backend unreachable. Nothing
                is persisted and the session stays unauthenticated.
        """
        try:
            token = self.client.admin_login(email, password)
        except NetworkError as exc:
            logger.error("Admin login error: %s", exc)
            self.notifier.error(exc.message)
            raise AuthError(exc.message) from exc
        except CMSError as exc:
            logger.error("Admin login error: %s", exc)
            self.notifier.error(exc.message or "Admin login failed. Please check your credentials.")
            raise

        if remember_me:
            self.storage.set(TOKEN_KEY, token)
            self.storage.set(EMAIL_KEY, email)

        self.auth_token = token
        self.email = email
        self.state = SessionState.AUTHENTICATED
        self.notifier.success("Successfully logged in as admin!")

    def logout(self) -> None:
        """Drop the session in memory and in storage. Never fails."""
        self._clear()
        self.notifier.success("Successfully signed out!")

    def validate_token(self, token: str) -> bool:
        return self.client.validate_token(token)

    def _clear(self) -> None:
        for key in (TOKEN_KEY, EMAIL_KEY):
            try:
                self.storage.remove(key)
            except OSError as exc:
                logger.warning("Could not clear %s from storage: %s", key, exc)
        self.auth_token = ""
        self.email = ""
        self.state = SessionState.UNAUTHENTICATED
