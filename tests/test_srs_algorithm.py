from datetime import UTC, datetime, timedelta

import pytest

from vocab_srs.errors import InvalidArgumentError
from vocab_srs.srs import (
    MAX_INTERVAL_DAYS,
    MIN_EASE_FACTOR,
    ReviewQuality,
    add_days,
    calculate_next_review,
    validate_quality,
)


def test_first_pass_gives_one_day_and_raises_ease():
    step = calculate_next_review(ReviewQuality.EASY, repetitions=0, ease_factor=2.5, interval_days=1)
    assert step.repetitions == 1
    assert step.interval_days == 1
    assert step.ease_factor == pytest.approx(2.6)


def test_second_pass_gives_six_days():
    step = calculate_next_review(ReviewQuality.GOOD, repetitions=1, ease_factor=2.6, interval_days=1)
    assert step.repetitions == 2
    assert step.interval_days == 6
    assert step.ease_factor == pytest.approx(2.6)


def test_third_pass_multiplies_previous_interval_by_new_ease():
    step = calculate_next_review(ReviewQuality.EASY, repetitions=2, ease_factor=2.6, interval_days=6)
    assert step.repetitions == 3
    assert step.ease_factor == pytest.approx(2.7)
    assert step.interval_days == 16


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_failed_recall_restarts_schedule(quality):
    step = calculate_next_review(quality, repetitions=7, ease_factor=2.4, interval_days=120)
    assert step.repetitions == 0
    assert step.interval_days == 1
    assert step.ease_factor < 2.4


@pytest.mark.parametrize(
    "quality, delta",
    [(5, 0.10), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.80)],
)
def test_ease_adjustment_table(quality, delta):
    step = calculate_next_review(quality, repetitions=0, ease_factor=2.5, interval_days=1)
    assert step.ease_factor == pytest.approx(max(MIN_EASE_FACTOR, 2.5 + delta))


def test_ease_is_clamped_at_floor():
    step = calculate_next_review(0, repetitions=0, ease_factor=1.35, interval_days=1)
    assert step.ease_factor == MIN_EASE_FACTOR


def test_interval_rounds_half_up():
    # 5 * 1.3 = 6.5 -> 7（偶数丸めなら 6 になる）
    step = calculate_next_review(3, repetitions=2, ease_factor=1.3, interval_days=5)
    assert step.ease_factor == MIN_EASE_FACTOR
    assert step.interval_days == 7


def test_quality_two_is_accepted_and_counts_as_failure():
    step = calculate_next_review(2, repetitions=3, ease_factor=2.5, interval_days=15)
    assert step.repetitions == 0
    assert step.interval_days == 1


@pytest.mark.parametrize("bad", [-1, 6, 2.5, 3.0, True, "3", None])
def test_invalid_quality_is_rejected_not_clamped(bad):
    with pytest.raises(InvalidArgumentError):
        validate_quality(bad)
    with pytest.raises(InvalidArgumentError):
        calculate_next_review(bad, repetitions=0, ease_factor=2.5, interval_days=1)


def test_ui_quality_scale():
    assert [q.value for q in ReviewQuality] == [1, 3, 4, 5]
    assert validate_quality(ReviewQuality.HARD) == 3


def test_interval_is_capped():
    step = calculate_next_review(ReviewQuality.EASY, repetitions=10, ease_factor=2.5, interval_days=30000)
    assert step.repetitions == 11
    assert step.interval_days == MAX_INTERVAL_DAYS

    step = calculate_next_review(ReviewQuality.GOOD, repetitions=11, ease_factor=1.3, interval_days=MAX_INTERVAL_DAYS)
    assert step.interval_days == MAX_INTERVAL_DAYS


def test_add_days_saturates_at_latest_datetime():
    latest = datetime.max.replace(tzinfo=UTC)
    d0 = datetime(2026, 1, 5, tzinfo=UTC)

    assert add_days(d0, 6) == d0 + timedelta(days=6)
    assert add_days(latest - timedelta(days=1), MAX_INTERVAL_DAYS) == latest
    assert add_days(latest, 1) == latest
