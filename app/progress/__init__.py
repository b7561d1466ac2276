"""
Account progress: persisted XP, level and bonus quiz quota.
"""

from .models import AccountProgress, XpAwardResult
from .services import ProgressService

__all__ = ["AccountProgress", "XpAwardResult", "ProgressService"]
