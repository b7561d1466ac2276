"""
Entitlement gate: pure admission decisions for rate-limited actions.

Nothing here reads or writes storage. ``can_perform`` and ``evaluate`` never
change the state they are given; ``record_usage`` returns a new state.
"""

from typing import Optional

from study_service.errors import QuotaExceededError

from .models import Action, EntitlementConfig, EntitlementResult, EntitlementState

DEFAULT_CONFIG = EntitlementConfig()

UPGRADE_MESSAGES = {
    Action.IMAGE_UPLOAD: "You've used all free image uploads. Upgrade to Premium for unlimited uploads.",
    Action.QUIZ_CREATE: "You've used all free quizzes. Level up for bonus quizzes or upgrade to Premium.",
    Action.FLASHCARD_DECK_CREATE: "Your free flashcard deck is used. Upgrade to Premium for unlimited decks.",
}

DENIAL_REASONS = {
    Action.IMAGE_UPLOAD: "image_limit",
    Action.QUIZ_CREATE: "quiz_limit",
    Action.FLASHCARD_DECK_CREATE: "free_deck_used",
}


def remaining(action: Action, state: EntitlementState,
              config: EntitlementConfig = DEFAULT_CONFIG) -> Optional[int]:
    """Uses left for ``action``; None for premium accounts."""
    if state.is_premium:
        return None
    if action == Action.IMAGE_UPLOAD:
        return max(0, config.free_image_limit - state.used.image_uploads)
    if action == Action.QUIZ_CREATE:
        return max(0, config.free_quiz_limit + state.bonus_quizzes - state.used.quizzes_created)
    if action == Action.FLASHCARD_DECK_CREATE:
        return 0 if state.used.free_deck_used else 1
    raise ValueError(f"Unknown action: {action}")


def can_perform(action: Action, state: EntitlementState,
                config: EntitlementConfig = DEFAULT_CONFIG) -> bool:
    """Whether ``action`` is permitted right now."""
    if state.is_premium:
        return True
    return remaining(action, state, config) > 0


def evaluate(action: Action, state: EntitlementState,
             config: EntitlementConfig = DEFAULT_CONFIG) -> EntitlementResult:
    """Same decision as ``can_perform`` with details for display."""
    left = remaining(action, state, config)
    if can_perform(action, state, config):
        return EntitlementResult(
            allowed=True,
            action=action,
            is_premium=state.is_premium,
            remaining=left,
            message="Premium: unlimited" if state.is_premium else f"{left} remaining"
        )

    return EntitlementResult(
        allowed=False,
        action=action,
        is_premium=False,
        reason=DENIAL_REASONS[action],
        message=UPGRADE_MESSAGES[action],
        remaining=0,
        upgrade_required=True
    )


def record_usage(action: Action, state: EntitlementState,
                 config: EntitlementConfig = DEFAULT_CONFIG) -> EntitlementState:
    """
    Return ``state`` with one use of ``action`` counted.

    Raises:
        QuotaExceededError: if the action is not permitted; the check must
            pass before usage is recorded
    """
    if not can_perform(action, state, config):
        raise QuotaExceededError(f"{action.value} is not permitted for this account")

    used = state.used
    if action == Action.IMAGE_UPLOAD:
        return state.with_used(image_uploads=used.image_uploads + 1)
    if action == Action.QUIZ_CREATE:
        return state.with_used(quizzes_created=used.quizzes_created + 1)

    # A premium account's decks never use up the free trial
    return state.with_used(
        decks_created=used.decks_created + 1,
        free_deck_used=used.free_deck_used or not state.is_premium,
    )
