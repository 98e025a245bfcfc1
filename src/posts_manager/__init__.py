# Posts Manager: authenticated CRUD layer over the headless CMS
"""
Posts manager modules:
- client: HTTP client for the CMS admin and REST APIs
- session: admin login, remembered sessions, token revalidation
- orchestrator: create/update/delete/publish flows with notices
- listing: paged, debounced post list and category list
- storage / notifications: injected persistence and the notice side channel
"""

from .client import CMSClient
from .errors import (
    AuthError,
    AuthRequiredError,
    CMSError,
    HttpError,
    NetworkError,
)
from .listing import Debouncer, PostListController
from .models import (
    Category,
    CategoryFormData,
    PaginationState,
    Post,
    PostFormData,
    PostPage,
    PostStatus,
    slugify,
)
from .notifications import Notification, Notifier
from .orchestrator import MutationOrchestrator
from .session import SessionState, SessionStore
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "AuthError",
    "AuthRequiredError",
    "CMSClient",
    "CMSError",
    "Category",
    "CategoryFormData",
    "Debouncer",
    "HttpError",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "MutationOrchestrator",
    "NetworkError",
    "Notification",
    "Notifier",
    "PaginationState",
    "Post",
    "PostFormData",
    "PostListController",
    "PostPage",
    "PostStatus",
    "SessionState",
    "SessionStore",
    "slugify",
]
