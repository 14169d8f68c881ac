"""
County Compass - Statistics Summary
Summarizes the loaded county dataset once per dataset version

Per metric:
- min / max (absolute slider bounds)
- half standard deviation (population stdev / 2, the deviation scale)
- 8 interior quantile thresholds splitting the values into 9 equal-count buckets

Non-finite values are left out of every statistic.
"""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np

from src.processing.metric_registry import METRICS, MetricKey
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)

QUANTILE_BUCKETS = 9

# Fractional ranks i/9 for i = 1..8
QUANTILE_LEVELS = np.arange(1, QUANTILE_BUCKETS) / QUANTILE_BUCKETS


@dataclass(frozen=True)
class MetricSummary:
    """Summary statistics of one metric across all counties"""
    min: float
    max: float
    half_stdev: float
    quantile_thresholds: Tuple[float, ...]

    @property
    def absolute_range(self) -> Tuple[float, float]:
        return (self.min, self.max)

    def to_dict(self) -> Dict:
        return {
            "min": self.min,
            "max": self.max,
            "half_stdev": self.half_stdev,
            "quantile_thresholds": list(self.quantile_thresholds),
        }


@dataclass(frozen=True)
class StatisticsSummary:
    """Summary statistics of every registered metric"""
    metrics: Dict[MetricKey, MetricSummary]
    county_count: int

    def __getitem__(self, key) -> MetricSummary:
        return self.metrics[MetricKey(key)]

    def to_dict(self) -> Dict:
        return {
            "county_count": self.county_count,
            "metrics": {key.value: summary.to_dict() for key, summary in self.metrics.items()},
        }


def metric_values(counties: Sequence[CountyRecord], key) -> np.ndarray:
    """
    Extract one metric across counties, in input order.

    Args:
        counties: County records
        key: Metric key

    Returns:
        Float array (non-finite values preserved)
    """
    key = MetricKey(key)
    return np.fromiter(
        (county.metric_value(key) for county in counties), dtype=float, count=len(counties)
    )


def compute_quantile_thresholds(values: np.ndarray) -> Tuple[float, ...]:
    """
    Interior quantile thresholds by linear interpolation between closest ranks.

    Threshold i sits at fractional rank i/9 * (n - 1) of the sorted values.

    Args:
        values: Finite metric values (at least one)

    Returns:
        8 non-decreasing thresholds
    """
    thresholds = np.quantile(values, QUANTILE_LEVELS, method="linear")
    return tuple(float(t) for t in thresholds)


def summarize_values(values: np.ndarray) -> MetricSummary:
    """
    Summarize one metric.

    Empty input yields +inf/-inf extremes and NaN spread, matching running
    min/max reducers that never saw a value.

    Args:
        values: Raw metric values

    Returns:
        MetricSummary
    """
    values = np.asarray(values, dtype=float)
    finite = values[np.isfinite(values)]

    if finite.size == 0:
        return MetricSummary(
            min=float("inf"),
            max=float("-inf"),
            half_stdev=float("nan"),
            quantile_thresholds=tuple([float("nan")] * (QUANTILE_BUCKETS - 1)),
        )

    return MetricSummary(
        min=float(finite.min()),
        max=float(finite.max()),
        half_stdev=float(np.std(finite)) / 2,
        quantile_thresholds=compute_quantile_thresholds(finite),
    )


def summarize(counties: Sequence[CountyRecord]) -> StatisticsSummary:
    """
    Summarize every registered metric across the dataset.

    Args:
        counties: All county records (callers must not pass an empty list)

    Returns:
        StatisticsSummary
    """
    if not counties:
        logger.warning("Summarizing an empty county dataset")

    metrics = {}

    for metric in METRICS:
        values = metric_values(counties, metric.key)

        missing = int((~np.isfinite(values)).sum())
        if missing:
            logger.warning(f"Metric {metric.key.value} has {missing} non-finite values, excluded from statistics")

        summary = summarize_values(values)
        metrics[metric.key] = summary

        logger.debug(
            f"Summarized {metric.key.value}: "
            f"min={summary.min:.3f}, max={summary.max:.3f}, half_stdev={summary.half_stdev:.3f}"
        )

    return StatisticsSummary(metrics=metrics, county_count=len(counties))
