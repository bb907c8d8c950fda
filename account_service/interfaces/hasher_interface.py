"""
Credential hasher interface for dependency abstraction.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ICredentialHasher(Protocol):
    """Protocol for one-way secret hashing."""

    async def hash(self, secret: str) -> str:
        """
        Hash a secret with a salted, deliberately slow algorithm.

        Raises:
            CredentialError: If hashing fails
        """
        ...

    async def verify(self, secret: str, hash_value: str) -> bool:
        """
        Check a secret against a stored hash.

        Returns:
            True on match; False on mismatch or a structurally invalid hash
        """
        ...
