import pytest

from nightscore.config import PolicyName
from nightscore.scoring import (
    DurationDeepSleepPolicy,
    ThreeFactorPolicy,
    clamp_score,
    deep_sleep_points,
    duration_points,
    get_policy,
    score,
)


@pytest.mark.parametrize(
    ("hours", "expected"),
    [(4.9, 60), (5, 70), (5.9, 70), (6, 80), (6.9, 80), (7, 90), (7.9, 90), (8, 100), (8.1, 100)],
)
def test_duration_sweep_with_high_deep_sleep(hours: float, expected: int) -> None:
    assert score(hours, 13) == expected


def test_mid_range_example() -> None:
    assert duration_points(6.5) == 30
    assert deep_sleep_points(9) == 30
    assert score(6.5, 9) == 60


@pytest.mark.parametrize(
    ("pct", "expected"),
    [(0, 10), (4.99, 10), (5, 20), (7.99, 20), (8, 30), (10, 40), (11.99, 40), (12, 50), (100, 50)],
)
def test_deep_sleep_tiers(pct: float, expected: int) -> None:
    assert deep_sleep_points(pct) == expected


def test_zero_inputs_score_twenty() -> None:
    assert score(0, 0) == 20


def test_clamp() -> None:
    assert clamp_score(0) == 1
    assert clamp_score(150) == 100
    assert clamp_score(55) == 55


def test_default_policy_ignores_efficiency() -> None:
    policy = DurationDeepSleepPolicy()
    assert policy.score(7.5, 11, 0) == policy.score(7.5, 11, 100) == 80


def test_three_factor_policy_tiers() -> None:
    policy = ThreeFactorPolicy()
    assert policy.score(0, 0, 0) == 21
    assert policy.score(8, 20, 90) == 100
    # 27 + 20 + 20
    assert policy.score(7.2, 12, 82) == 67
    # 13 + 13 + 14
    assert policy.score(5, 5, 70) == 40


@pytest.mark.parametrize("policy_name", list(PolicyName))
def test_all_policies_stay_in_bounds(policy_name: PolicyName) -> None:
    policy = get_policy(policy_name)
    for hours in (0, 3, 5, 6, 7, 8, 12, 24):
        for pct in (0, 5, 8, 10, 12, 15, 20, 100):
            for eff in (0, 50, 70, 80, 85, 90, 100):
                assert 1 <= policy.score(hours, pct, eff) <= 100


def test_get_policy_by_name() -> None:
    assert isinstance(get_policy("duration_deep"), DurationDeepSleepPolicy)
    assert isinstance(get_policy(PolicyName.THREE_FACTOR), ThreeFactorPolicy)
    with pytest.raises(ValueError, match="Unknown scoring policy"):
        get_policy("random")


def test_score_is_deterministic() -> None:
    assert {score(6.4, 8.7) for _ in range(50)} == {60}
