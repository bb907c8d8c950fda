"""
Account service core: credential hashing, session tokens with revocation,
storage-agnostic user repositories and bounded bulk registration.
"""

from .container import ServiceContainer
from .core.config import Settings, get_settings
from .core.exceptions import AccountServiceError, ErrorKind
from .core.logging import configure_logging

__version__ = "1.0.0"

__all__ = [
    "AccountServiceError",
    "ErrorKind",
    "ServiceContainer",
    "Settings",
    "configure_logging",
    "get_settings",
]
