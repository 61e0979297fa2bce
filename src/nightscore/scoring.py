"""
Sleep-quality scoring.

Two interchangeable policies are provided:

  - DurationDeepSleepPolicy (default): duration and deep-sleep percentage,
    50 points each.
  - ThreeFactorPolicy: duration, deep-sleep percentage and sleep efficiency,
    roughly a third each, with its own tier cutoffs.

Every policy is a pure function of its inputs and clamps to [1, 100].
"""

from collections.abc import Sequence
from typing import Protocol

from .config import PolicyName

# (threshold, points), checked top-down; first threshold met wins
Tiers = Sequence[tuple[float, int]]

DURATION_TIERS: Tiers = ((8, 50), (7, 40), (6, 30), (5, 20))
DURATION_FLOOR = 10
DEEP_SLEEP_TIERS: Tiers = ((12, 50), (10, 40), (8, 30), (5, 20))
DEEP_SLEEP_FLOOR = 10

THREE_FACTOR_DURATION_TIERS: Tiers = ((8, 33), (7, 27), (6, 20), (5, 13))
THREE_FACTOR_DEEP_SLEEP_TIERS: Tiers = ((20, 33), (15, 27), (10, 20), (5, 13))
THREE_FACTOR_EFFICIENCY_TIERS: Tiers = ((90, 34), (85, 27), (80, 20), (70, 14))
THREE_FACTOR_FLOOR = 7

MIN_SCORE = 1
MAX_SCORE = 100


def tier_points(value: float, tiers: Tiers, floor: int) -> int:
    for threshold, points in tiers:
        if value >= threshold:
            return points
    return floor


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def duration_points(duration_hours: float) -> int:
    return tier_points(duration_hours, DURATION_TIERS, DURATION_FLOOR)


def deep_sleep_points(deep_sleep_percentage: float) -> int:
    return tier_points(deep_sleep_percentage, DEEP_SLEEP_TIERS, DEEP_SLEEP_FLOOR)


def score(duration_hours: float, deep_sleep_percentage: float) -> int:
    """Canonical two-factor score."""
    return clamp_score(duration_points(duration_hours) + deep_sleep_points(deep_sleep_percentage))


class ScoringPolicy(Protocol):
    name: str

    def score(self, duration_hours: float, deep_sleep_percentage: float, sleep_efficiency: float) -> int: ...


class DurationDeepSleepPolicy:
    name = PolicyName.DURATION_DEEP.value

    def score(self, duration_hours: float, deep_sleep_percentage: float, sleep_efficiency: float) -> int:  # noqa: ARG002
        return score(duration_hours, deep_sleep_percentage)


class ThreeFactorPolicy:
    name = PolicyName.THREE_FACTOR.value

    def score(self, duration_hours: float, deep_sleep_percentage: float, sleep_efficiency: float) -> int:
        total = (
            tier_points(duration_hours, THREE_FACTOR_DURATION_TIERS, THREE_FACTOR_FLOOR)
            + tier_points(deep_sleep_percentage, THREE_FACTOR_DEEP_SLEEP_TIERS, THREE_FACTOR_FLOOR)
            + tier_points(sleep_efficiency, THREE_FACTOR_EFFICIENCY_TIERS, THREE_FACTOR_FLOOR)
        )
        return clamp_score(total)


DEFAULT_POLICY: ScoringPolicy = DurationDeepSleepPolicy()

_POLICIES: dict[str, ScoringPolicy] = {
    PolicyName.DURATION_DEEP.value: DEFAULT_POLICY,
    PolicyName.THREE_FACTOR.value: ThreeFactorPolicy(),
}


def get_policy(name: str | PolicyName) -> ScoringPolicy:
    try:
        return _POLICIES[str(name)]
    except KeyError:
        raise ValueError(f"Unknown scoring policy: {name}") from None
