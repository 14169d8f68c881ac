import math

import numpy as np
import pytest

from src.processing.filters import default_filter_configuration
from src.processing.metric_registry import MetricKey
from src.processing.scoring import (
    IN_RANGE_PENALTY_CAP,
    NO_FILTER_SCORE,
    active_metrics,
    range_deviation,
    score_array,
    score_counties,
    score_county,
)
from src.processing.statistics import summarize


def test_range_deviation_inside_range():
    # |55000 - 50000| / 45000 * 0.3
    deviation = range_deviation(55000, 5000, 95000, 20000)
    assert deviation == pytest.approx(0.0333, abs=1e-4)


def test_range_deviation_center_and_edges():
    assert range_deviation(50, 0, 100, 10) == 0.0
    assert range_deviation(0, 0, 100, 10) == pytest.approx(IN_RANGE_PENALTY_CAP)
    assert range_deviation(100, 0, 100, 10) == pytest.approx(IN_RANGE_PENALTY_CAP)


def test_range_deviation_outside_range():
    assert range_deviation(110, 0, 100, 10) == pytest.approx(1.3)
    assert range_deviation(-25, 0, 100, 10) == pytest.approx(2.8)


def test_range_deviation_degenerate_range():
    assert range_deviation(12, 10, 10, 4) == pytest.approx(0.5)
    assert range_deviation(10, 10, 10, 4) == 0.0


def test_range_deviation_zero_spread():
    assert range_deviation(10, 10, 10, 0) == 0.0
    assert range_deviation(11, 10, 10, 0) == math.inf
    assert range_deviation(11, 0, 10, 0) == math.inf


def test_range_deviation_non_finite_value():
    assert range_deviation(float("nan"), 0, 100, 10) == math.inf


def test_range_deviation_vectorized():
    values = np.array([50.0, 100.0, 110.0])
    deviations = range_deviation(values, 0, 100, 10)

    assert isinstance(deviations, np.ndarray)
    assert deviations == pytest.approx([0.0, 0.3, 1.3])


def test_in_range_always_beats_out_of_range():
    inside = range_deviation(np.linspace(0, 100, 101), 0, 100, 1e9)
    outside = range_deviation(np.array([-1e-6, 100.000001, 1e6]), 0, 100, 1e9)

    assert inside.max() < outside.min()


def test_no_active_filter_scores_sentinel(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats)

    assert active_metrics(config, sample_stats) == []
    assert all(score_county(c, config, sample_stats) == NO_FILTER_SCORE for c in sample_counties)


def test_disabled_narrowed_filter_is_inactive(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats).with_filter(
        MetricKey.POPULATION, value_range=(10000, 60000), enabled=False
    )

    scores = score_array(sample_counties, config, sample_stats)
    assert (scores == NO_FILTER_SCORE).all()


def test_full_range_filter_does_not_contribute(sample_counties, sample_stats):
    base = default_filter_configuration(sample_stats).with_filter(
        MetricKey.TEMPERATURE, value_range=(60, 70)
    )
    heavier = base.with_filter(MetricKey.POPULATION, importance=5)

    np.testing.assert_allclose(
        score_array(sample_counties, base, sample_stats),
        score_array(sample_counties, heavier, sample_stats),
    )


def test_single_metric_score_equals_deviation(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats).with_filter(
        MetricKey.TEMPERATURE, value_range=(60, 70)
    )
    half_stdev = sample_stats[MetricKey.TEMPERATURE].half_stdev

    for county in sample_counties:
        expected = range_deviation(county.temperature.avg_temp_f, 60, 70, half_stdev)
        assert score_county(county, config, sample_stats) == pytest.approx(expected)


def test_importance_weighted_mean(sample_counties, sample_stats):
    config = (
        default_filter_configuration(sample_stats)
        .with_filter(MetricKey.POPULATION, value_range=(20000, 100000), importance=5)
        .with_filter(MetricKey.MEDIAN_RENT, value_range=(800, 1000), importance=1)
    )
    county = sample_counties[0]

    pop = range_deviation(county.population, 20000, 100000, sample_stats["population"].half_stdev)
    rent = range_deviation(county.rent.median_rent, 800, 1000, sample_stats["median_rent"].half_stdev)

    assert score_county(county, config, sample_stats) == pytest.approx((5 * pop + 1 * rent) / 6)


def test_unset_importance_uses_default(sample_counties, sample_stats):
    explicit = default_filter_configuration(sample_stats).with_filter(
        MetricKey.HOME_VALUE, value_range=(150000, 300000), importance=3
    )
    unset = explicit.with_filter(MetricKey.HOME_VALUE, importance=None)

    assert score_array(sample_counties, unset, sample_stats) == pytest.approx(
        score_array(sample_counties, explicit, sample_stats)
    )


def test_scalar_and_vectorized_scores_match(sample_counties, sample_stats):
    config = (
        default_filter_configuration(sample_stats)
        .with_filter(MetricKey.MEDIAN_AGE, value_range=(35, 39), importance=2)
        .with_filter(MetricKey.TEMPERATURE, value_range=(55, 80), importance=4)
    )

    batch = score_array(sample_counties, config, sample_stats)
    single = [score_county(c, config, sample_stats) for c in sample_counties]

    assert batch.tolist() == single


def test_scores_are_non_negative_when_filtered(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats).with_filter(
        MetricKey.POPULATION, value_range=(1000000, 3000000)
    )

    assert (score_array(sample_counties, config, sample_stats) >= 0).all()


def test_score_counties_series(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats).with_filter(
        MetricKey.MEDIAN_RENT, value_range=(900, 1300)
    )

    scores = score_counties(sample_counties, config, sample_stats)

    assert scores.name == "score"
    assert list(scores.index) == [c.id for c in sample_counties]
    # Cook (1264) sits inside the range, Los Angeles (1702) outside
    assert scores["17031"] <= IN_RANGE_PENALTY_CAP < scores["06037"]


def test_population_range_scenario(county_factory):
    counties = [
        county_factory("01001", "X", "Alabama", 50000, 38.0, 60.0, 150000, 900),
        county_factory("01003", "Y", "Alabama", 200000, 40.0, 62.0, 180000, 950),
        county_factory("01005", "Z", "Alabama", 5000, 42.0, 64.0, 120000, 800),
    ]
    stats = summarize(counties)
    config = default_filter_configuration(stats)
    for key in MetricKey:
        config = config.with_filter(key, enabled=False)
    config = config.with_filter(MetricKey.POPULATION, value_range=(10000, 100000), enabled=True, importance=3)

    x, y = (score_county(c, config, stats) for c in counties[:2])

    assert x < y
    assert x == pytest.approx(abs(50000 - 55000) / 45000 * 0.3)
    assert x == pytest.approx(range_deviation(50000, 10000, 100000, stats["population"].half_stdev))


def test_scoring_is_repeatable(sample_counties, sample_stats):
    config = default_filter_configuration(sample_stats).with_filter(
        MetricKey.HOME_VALUE, value_range=(200000, 400000)
    )

    first = score_array(sample_counties, config, sample_stats)
    second = score_array(sample_counties, config, sample_stats)

    assert first.tobytes() == second.tobytes()
