"""
xp.py - XP and level arithmetic

Pure functions mapping XP totals to levels and quiz outcomes to XP awards.
Nothing here touches storage; callers commit the results.
"""

from dataclasses import dataclass
from typing import List, Tuple

from .errors import InputValidationError

MAX_LEVEL = 100
FIRST_STEP_COST = 350
STEP_COST_INCREMENT = 50

MILESTONE_INTERVAL = 5
LAST_REGULAR_MILESTONE = 95
MILESTONE_BONUS_QUIZZES = 3
MILESTONE_BONUS_XP = 200
MASTER_BONUS_QUIZZES = 1000

# (minimum percentage, base XP), evaluated highest first
BASE_XP_TABLE: Tuple[Tuple[int, int], ...] = (
    (100, 150),
    (60, 100),
    (50, 70),
    (40, 55),
    (30, 40),
    (20, 20),
    (10, 10),
)


@dataclass(frozen=True)
class LevelInfo:
    """Level and progress derived from a total XP value."""
    level: int
    current_xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    progress_percent: float

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "current_xp": self.current_xp,
            "xp_for_current_level": self.xp_for_current_level,
            "xp_for_next_level": self.xp_for_next_level,
            "progress_percent": self.progress_percent,
        }


@dataclass(frozen=True)
class MilestoneReward:
    """Reward granted when a milestone level is reached."""
    level: int
    bonus_quizzes: int
    bonus_xp_per_quiz: int
    description: str

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "bonus_quizzes": self.bonus_quizzes,
            "bonus_xp_per_quiz": self.bonus_xp_per_quiz,
            "description": self.description,
        }


def xp_threshold(level: int) -> int:
    """Cumulative XP needed to reach ``level``.

    Advancing from level n to n+1 costs 350 + 50*(n-1), so the threshold is
    the sum of that progression over ``level - 1`` steps.
    """
    if level <= 1:
        return 0
    n = level - 1
    return (n * (2 * FIRST_STEP_COST + (n - 1) * STEP_COST_INCREMENT)) // 2


def level_from_xp(total_xp: int) -> int:
    """Highest level whose threshold is covered by ``total_xp``, capped at 100."""
    level = 1
    while level < MAX_LEVEL and xp_threshold(level + 1) <= total_xp:
        level += 1
    return level


def level_info(total_xp: int) -> LevelInfo:
    """Level plus progress towards the next one."""
    level = level_from_xp(total_xp)
    xp_for_current = xp_threshold(level)
    xp_for_next = xp_threshold(level + 1) if level < MAX_LEVEL else xp_for_current

    if level >= MAX_LEVEL:
        progress = 100.0
    else:
        progress = 100.0 * (total_xp - xp_for_current) / (xp_for_next - xp_for_current)
        progress = max(0.0, min(100.0, progress))

    return LevelInfo(
        level=level,
        current_xp=total_xp,
        xp_for_current_level=xp_for_current,
        xp_for_next_level=xp_for_next,
        progress_percent=progress,
    )


def _regular_milestones_reached(level: int) -> int:
    return max(0, min(level, LAST_REGULAR_MILESTONE)) // MILESTONE_INTERVAL


def milestone_bonus_xp(level: int) -> int:
    """Extra XP per quiz earned from every milestone in [5, 95] reached."""
    return MILESTONE_BONUS_XP * _regular_milestones_reached(level)


def bonus_quiz_quota(level: int) -> int:
    """Free quizzes unlocked on top of the base allowance."""
    bonus = MILESTONE_BONUS_QUIZZES * _regular_milestones_reached(level)
    if level >= MAX_LEVEL:
        bonus += MASTER_BONUS_QUIZZES
    return bonus


def base_quiz_xp(percentage: float) -> int:
    for minimum, award in BASE_XP_TABLE:
        if percentage >= minimum:
            return award
    return 0


def quiz_xp_award(correct_count: int, total_count: int, current_level: int) -> int:
    """XP earned for a finished quiz at ``current_level``.

    Pure arithmetic; deduplication happens where the award is committed.

    Raises:
        InputValidationError: for an empty quiz or an impossible score
    """
    if total_count <= 0:
        raise InputValidationError("Cannot award XP for a quiz with no questions")
    if correct_count < 0 or correct_count > total_count:
        raise InputValidationError(
            f"Correct answers ({correct_count}) must be between 0 and {total_count}"
        )

    percentage = 100 * correct_count / total_count
    return base_quiz_xp(percentage) + milestone_bonus_xp(current_level)


def milestone_levels() -> List[int]:
    levels = list(range(MILESTONE_INTERVAL, LAST_REGULAR_MILESTONE + 1, MILESTONE_INTERVAL))
    levels.append(MAX_LEVEL)
    return levels


def is_milestone_level(level: int) -> bool:
    if level == MAX_LEVEL:
        return True
    return MILESTONE_INTERVAL <= level <= LAST_REGULAR_MILESTONE and level % MILESTONE_INTERVAL == 0


def all_milestones() -> List[MilestoneReward]:
    """The static reward table, in level order."""
    milestones = []
    for level in range(MILESTONE_INTERVAL, LAST_REGULAR_MILESTONE + 1, MILESTONE_INTERVAL):
        cumulative = milestone_bonus_xp(level)
        milestones.append(MilestoneReward(
            level=level,
            bonus_quizzes=MILESTONE_BONUS_QUIZZES,
            bonus_xp_per_quiz=MILESTONE_BONUS_XP,
            description=(
                f"+{MILESTONE_BONUS_QUIZZES} free quizzes & +{MILESTONE_BONUS_XP} XP per quiz "
                f"(total: +{cumulative} XP/quiz)"
            ),
        ))
    milestones.append(MilestoneReward(
        level=MAX_LEVEL,
        bonus_quizzes=MASTER_BONUS_QUIZZES,
        bonus_xp_per_quiz=0,
        description=f"+{MASTER_BONUS_QUIZZES} free quizzes - Master status!",
    ))
    return milestones


def milestones_crossed(old_level: int, new_level: int) -> List[MilestoneReward]:
    """Milestones in (old_level, new_level]."""
    return [m for m in all_milestones() if old_level < m.level <= new_level]
