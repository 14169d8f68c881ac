import numpy as np
import pytest

from src.processing.filters import FilterConfiguration, MetricFilter, default_filter_configuration
from src.processing.metric_registry import MetricKey
from src.processing.presets import (
    SMART_PRESETS,
    SmartPreset,
    apply_preset,
    get_smart_preset,
    median_preset,
    metric_medians,
)
from src.processing.statistics import summarize


@pytest.fixture
def population_counties(county_factory):
    populations = [1000, 5000, 10000, 50000, 100000]
    return [
        county_factory(f"0100{i}", f"County {i}", "Alabama", pop, 35.0 + i, 55.0 + i, 100000 + i * 1000, 700 + i * 10)
        for i, pop in enumerate(populations)
    ]


def test_median_preset_clips_to_absolute_bounds(population_counties):
    stats = summarize(population_counties)
    half_stdev = stats[MetricKey.POPULATION].half_stdev

    config = median_preset(population_counties, stats)

    assert half_stdev == pytest.approx(np.std([1000, 5000, 10000, 50000, 100000]) / 2)
    # 10000 - half_stdev falls below the dataset minimum
    assert config[MetricKey.POPULATION].value_range == (1000.0, pytest.approx(10000 + half_stdev))


def test_median_preset_enables_every_metric(sample_counties, sample_stats):
    config = median_preset(sample_counties, sample_stats)

    for key in MetricKey:
        metric_filter = config[key]
        summary = sample_stats[key]
        assert metric_filter.enabled is True
        assert metric_filter.importance is None
        assert summary.min <= metric_filter.value_range[0] <= metric_filter.value_range[1] <= summary.max


def test_metric_medians_even_count(county_factory):
    counties = [
        county_factory("01001", "A", "Alabama", 100, 30.0, 50.0, 100000, 500),
        county_factory("01003", "B", "Alabama", 300, 40.0, 60.0, 200000, 900),
    ]

    medians = metric_medians(counties)

    assert medians[MetricKey.POPULATION] == 200.0
    assert medians[MetricKey.MEDIAN_AGE] == 35.0
    assert medians[MetricKey.MEDIAN_RENT] == 700.0


def test_get_smart_preset():
    assert get_smart_preset("family_friendly").label == "Family Friendly"

    with pytest.raises(ValueError):
        get_smart_preset("beach_bum")


def test_smart_presets_use_valid_importances():
    for preset in SMART_PRESETS.values():
        assert all(1 <= v <= 5 for v in preset.importances.values())
        for range_min, range_max in preset.ranges.values():
            assert range_min <= range_max


def test_apply_preset_merges_over_current(sample_stats):
    base = default_filter_configuration(sample_stats).with_filter(MetricKey.MEDIAN_AGE, value_range=(33, 39))

    config = apply_preset(base, get_smart_preset("retirement_paradise"))

    assert config[MetricKey.TEMPERATURE].value_range == (58, 75)
    assert config[MetricKey.TEMPERATURE].importance == 5
    # Median age is not ranged by the preset
    assert config[MetricKey.MEDIAN_AGE].value_range == (33, 39)
    assert config[MetricKey.MEDIAN_AGE].importance == 2
    assert all(config[key].enabled for key in MetricKey)


def test_apply_preset_partial_bounds(sample_stats):
    preset = SmartPreset(
        name="cheap_rent",
        label="Cheap Rent",
        description="Rent cap only",
        ranges={MetricKey.MEDIAN_RENT: (None, 800)},
    )
    base = FilterConfiguration(
        filters={MetricKey.MEDIAN_RENT: MetricFilter(value_range=(600, 1500), enabled=False, importance=2)}
    )

    config = apply_preset(base, preset)

    assert config[MetricKey.MEDIAN_RENT] == MetricFilter(value_range=(600, 800), enabled=False, importance=2)


def test_smart_preset_to_dict():
    payload = get_smart_preset("rural_escape").to_dict()

    assert payload["name"] == "rural_escape"
    assert payload["ranges"]["population"] == [43, 15000]
    assert payload["importances"]["population"] == 5
