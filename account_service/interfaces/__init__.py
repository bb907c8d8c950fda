"""
Interface definitions for dependency abstractions.
These Protocol classes define contracts for storage and hashing backends so
that concrete implementations are chosen at construction time.
"""

from .hasher_interface import ICredentialHasher
from .repository_interface import IUserRepository
from .revocation_interface import IRevocationStore

__all__ = [
    "ICredentialHasher",
    "IUserRepository",
    "IRevocationStore"
]
