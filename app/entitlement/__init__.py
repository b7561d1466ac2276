"""
Entitlement module for free/premium admission control.
Covers image uploads, quiz creation and flashcard-deck creation.
"""

from .models import Action, EntitlementConfig, EntitlementResult, EntitlementState, UsageCounters
from .gate import can_perform, record_usage, evaluate
from .manager import EntitlementManager

__all__ = [
    "Action",
    "EntitlementConfig",
    "EntitlementResult",
    "EntitlementState",
    "UsageCounters",
    "can_perform",
    "record_usage",
    "evaluate",
    "EntitlementManager",
]
