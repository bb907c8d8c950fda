"""
Credential and token services used by the account service.
"""

from .password_service import CredentialHasher
from .token_service import TokenClaims, TokenService

__all__ = [
    "CredentialHasher",
    "TokenClaims",
    "TokenService",
]
