"""Test data factories for account service testing."""

from .user_factory import RegisterRequestFactory, UserFactory

__all__ = [
    "RegisterRequestFactory",
    "UserFactory",
]
