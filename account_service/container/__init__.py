"""
Composition root for the account service.
"""

from .container import ServiceContainer

__all__ = ["ServiceContainer"]
