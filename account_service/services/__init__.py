"""
Account use cases and the services they are built from.
"""

from .account_service import AccountService
from .auth import CredentialHasher, TokenClaims, TokenService
from .batch_service import BatchRegistrar, summarize

__all__ = [
    "AccountService",
    "BatchRegistrar",
    "CredentialHasher",
    "TokenClaims",
    "TokenService",
    "summarize",
]
