"""Error taxonomy for CMS calls."""

from __future__ import annotations

from typing import Optional


class CMSError(Exception):
    """Base class for every failure raised by the posts manager."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class HttpError(CMSError):
    """Backend answered with a non-2xx status."""


class AuthError(HttpError):
    """Credentials rejected at login, or a 401 from any endpoint."""


class AuthRequiredError(CMSError):
    """No bearer token was available, so the request was never sent."""

    def __init__(self, message: str = "No auth token available") -> None:
        super().__init__(message)


class NetworkError(CMSError):
    """Transport failure: the backend never produced a response."""
