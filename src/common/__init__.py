# Common utilities and shared modules
"""
Shared components used by the posts manager:
- Project configuration
- Logging configuration
"""

from .config import DATA_DIR, PROJECT_ROOT, CMSSettings, Settings
from .logging import setup_logging

__all__ = [
    "CMSSettings",
    "DATA_DIR",
    "PROJECT_ROOT",
    "Settings",
    "setup_logging",
]
