"""
County Compass - Filter Presets
Ready-to-apply filter configurations

- Median ("typical county") preset: every metric enabled, range bracketing the
  dataset median by one half-stdev on each side, clipped to absolute bounds
- Smart presets: named partial configurations merged over the current one
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from src.processing.filters import FilterConfiguration, MetricFilter
from src.processing.metric_registry import METRICS, MetricKey
from src.processing.statistics import StatisticsSummary, metric_values
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)

MEDIAN_PRESET = "median"


def metric_medians(counties: Sequence[CountyRecord]) -> Dict[MetricKey, float]:
    """
    Median of every metric (mean of the two middle values for even counts).

    Args:
        counties: County records

    Returns:
        Metric key -> median
    """
    medians = {}

    for metric in METRICS:
        values = metric_values(counties, metric.key)
        values = values[np.isfinite(values)]
        medians[metric.key] = float(np.median(values)) if values.size else float("nan")

    return medians


def median_preset(counties: Sequence[CountyRecord], stats: StatisticsSummary) -> FilterConfiguration:
    """
    Filter configuration centered on the typical county.

    Importance is left unset.

    Args:
        counties: County records
        stats: Dataset statistics

    Returns:
        FilterConfiguration with every metric enabled
    """
    medians = metric_medians(counties)
    filters = {}

    for metric in METRICS:
        summary = stats[metric.key]
        median = medians[metric.key]

        filters[metric.key] = MetricFilter(
            value_range=(
                max(summary.min, median - summary.half_stdev),
                min(summary.max, median + summary.half_stdev),
            ),
            enabled=True,
            importance=None,
        )

    return FilterConfiguration(filters=filters)


@dataclass(frozen=True)
class SmartPreset:
    """
    A named partial filter configuration

    Ranges may set either bound; metrics or bounds the preset does not
    mention keep their current values.
    """
    name: str
    label: str
    description: str
    enabled: Dict[MetricKey, bool] = field(default_factory=dict)
    importances: Dict[MetricKey, int] = field(default_factory=dict)
    ranges: Dict[MetricKey, Tuple[Optional[float], Optional[float]]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "description": self.description,
            "enabled": {k.value: v for k, v in self.enabled.items()},
            "importances": {k.value: v for k, v in self.importances.items()},
            "ranges": {k.value: list(v) for k, v in self.ranges.items()},
        }


_ALL_ENABLED = {key: True for key in MetricKey}

SMART_PRESETS: Dict[str, SmartPreset] = {
    p.name: p
    for p in [
        SmartPreset(
            name="retirement_paradise",
            label="Retirement Paradise",
            description="Warm, affordable, peaceful",
            enabled=_ALL_ENABLED,
            importances={
                MetricKey.POPULATION: 2,
                MetricKey.MEDIAN_AGE: 2,
                MetricKey.TEMPERATURE: 5,
                MetricKey.HOME_VALUE: 4,
                MetricKey.MEDIAN_RENT: 4,
            },
            ranges={
                MetricKey.TEMPERATURE: (58, 75),
                MetricKey.POPULATION: (5000, 200000),
                MetricKey.HOME_VALUE: (45200, 250000),
                MetricKey.MEDIAN_RENT: (400, 900),
            },
        ),
        SmartPreset(
            name="family_friendly",
            label="Family Friendly",
            description="Affordable, mid-size, moderate climate",
            enabled=_ALL_ENABLED,
            importances={
                MetricKey.POPULATION: 3,
                MetricKey.MEDIAN_AGE: 3,
                MetricKey.TEMPERATURE: 2,
                MetricKey.HOME_VALUE: 5,
                MetricKey.MEDIAN_RENT: 5,
            },
            ranges={
                MetricKey.POPULATION: (20000, 500000),
                MetricKey.MEDIAN_AGE: (30, 42),
                MetricKey.HOME_VALUE: (100000, 350000),
                MetricKey.MEDIAN_RENT: (500, 1200),
            },
        ),
        SmartPreset(
            name="young_professional",
            label="Young Professional",
            description="Urban, vibrant, career-oriented",
            enabled=_ALL_ENABLED,
            importances={
                MetricKey.POPULATION: 5,
                MetricKey.MEDIAN_AGE: 4,
                MetricKey.TEMPERATURE: 1,
                MetricKey.HOME_VALUE: 2,
                MetricKey.MEDIAN_RENT: 3,
            },
            ranges={
                MetricKey.POPULATION: (100000, 9848406),
                MetricKey.MEDIAN_AGE: (25, 38),
            },
        ),
        SmartPreset(
            name="rural_escape",
            label="Rural Escape",
            description="Small town, low cost, nature",
            enabled=_ALL_ENABLED,
            importances={
                MetricKey.POPULATION: 5,
                MetricKey.MEDIAN_AGE: 1,
                MetricKey.TEMPERATURE: 1,
                MetricKey.HOME_VALUE: 4,
                MetricKey.MEDIAN_RENT: 4,
            },
            ranges={
                MetricKey.POPULATION: (43, 15000),
                MetricKey.HOME_VALUE: (45200, 200000),
                MetricKey.MEDIAN_RENT: (400, 800),
            },
        ),
    ]
}


def get_smart_preset(name: str) -> SmartPreset:
    """Get a smart preset by name"""
    if name not in SMART_PRESETS:
        raise ValueError(f"Unknown preset: {name}")
    return SMART_PRESETS[name]


def apply_preset(config: FilterConfiguration, preset: SmartPreset) -> FilterConfiguration:
    """
    Merge a smart preset over an existing configuration.

    Args:
        config: Current configuration (must cover every metric the preset touches)
        preset: Preset to apply

    Returns:
        New FilterConfiguration
    """
    filters = dict(config.filters)

    for key, current in config.filters.items():
        range_min, range_max = current.value_range
        preset_min, preset_max = preset.ranges.get(key, (None, None))

        filters[key] = MetricFilter(
            value_range=(
                range_min if preset_min is None else preset_min,
                range_max if preset_max is None else preset_max,
            ),
            enabled=preset.enabled.get(key, current.enabled),
            importance=preset.importances.get(key, current.importance),
        )

    logger.debug(f"Applied preset {preset.name}")

    return FilterConfiguration(filters=filters)
