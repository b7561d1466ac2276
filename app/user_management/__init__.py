"""
Cookie-based user identification.
"""

from .services import UserService

__all__ = ["UserService"]
