"""
County Compass - Deviation Scoring
Turns a filter configuration into one "distance from ideal" score per county

Rules:
- Lower is better; 0 is a county at the center of every active range
- A metric is active when enabled AND narrowed (range differs from its absolute bounds)
- Inside a range: 0 at the center rising to 0.3 at either edge
- Outside a range: 0.3 plus the overshoot in half-stdev units, so every
  out-of-range county scores worse than every in-range one
- Metrics combine as an importance-weighted mean
- No active metric: sentinel -1 for every county
"""

from typing import List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from src.processing.filters import FilterConfiguration, MetricFilter
from src.processing.metric_registry import METRICS, MetricKey
from src.processing.statistics import StatisticsSummary, metric_values
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)

NO_FILTER_SCORE = -1.0

# Deviation at the edge of a range; the floor of every out-of-range deviation
IN_RANGE_PENALTY_CAP = 0.3


def _scaled_distance(distance: np.ndarray, half_stdev: float) -> np.ndarray:
    # A zero distance is 0 even when the metric has no spread
    return np.where(distance == 0, 0.0, distance / half_stdev)


def range_deviation(value, range_min: float, range_max: float, half_stdev: float):
    """
    Deviation of a value from a [min, max] preference range.

    Accepts a scalar or an array of values. Non-finite values get an
    infinite deviation. A zero half-stdev propagates inf.

    Args:
        value: Metric value(s)
        range_min: Lower edge of the preferred range
        range_max: Upper edge of the preferred range
        half_stdev: Metric half standard deviation

    Returns:
        float for scalar input, ndarray otherwise
    """
    values = np.asarray(value, dtype=float)

    with np.errstate(divide="ignore", invalid="ignore"):
        if range_max == range_min:
            deviation = _scaled_distance(np.abs(values - range_min), half_stdev)
        else:
            center = (range_min + range_max) / 2
            half_range = (range_max - range_min) / 2

            inside = (values >= range_min) & (values <= range_max)
            overshoot = np.where(values < range_min, range_min - values, values - range_max)

            deviation = np.where(
                inside,
                (np.abs(values - center) / half_range) * IN_RANGE_PENALTY_CAP,
                IN_RANGE_PENALTY_CAP + _scaled_distance(overshoot, half_stdev),
            )

    deviation = np.where(np.isfinite(values), deviation, np.inf)

    if deviation.ndim == 0:
        return float(deviation)
    return deviation


def is_narrowed(metric_filter: MetricFilter, stats: StatisticsSummary, key) -> bool:
    """True when the filter range differs from the metric's absolute bounds."""
    summary = stats[key]
    range_min, range_max = metric_filter.value_range
    return range_min != summary.min or range_max != summary.max


def active_metrics(config: FilterConfiguration, stats: StatisticsSummary) -> List[Tuple[MetricKey, MetricFilter]]:
    """
    Metrics that contribute to the score, in registry order.

    Args:
        config: Filter configuration
        stats: Dataset statistics

    Returns:
        List of (metric key, filter)
    """
    active = []

    for metric in METRICS:
        metric_filter = config.get(metric.key)
        if metric_filter is None or not metric_filter.enabled:
            continue
        if not is_narrowed(metric_filter, stats, metric.key):
            continue
        active.append((metric.key, metric_filter))

    return active


def score_values(
    values: Mapping[MetricKey, np.ndarray],
    config: FilterConfiguration,
    stats: StatisticsSummary,
    size: int,
) -> np.ndarray:
    """
    Score a batch of counties given their metric value arrays.

    Args:
        values: Metric key -> array of values (length size)
        config: Filter configuration
        stats: Dataset statistics
        size: Number of counties

    Returns:
        Array of scores (NO_FILTER_SCORE when nothing is active)
    """
    total_deviation = np.zeros(size, dtype=float)
    total_importance = 0

    for key, metric_filter in active_metrics(config, stats):
        importance = metric_filter.effective_importance
        range_min, range_max = metric_filter.value_range

        deviation = range_deviation(values[key], range_min, range_max, stats[key].half_stdev)

        total_deviation = total_deviation + deviation * importance
        total_importance += importance

    if total_importance == 0:
        return np.full(size, NO_FILTER_SCORE)

    return total_deviation / total_importance


def score_county(county: CountyRecord, config: FilterConfiguration, stats: StatisticsSummary) -> float:
    """
    Score one county.

    Args:
        county: County record
        config: Filter configuration
        stats: Dataset statistics

    Returns:
        Non-negative score, or NO_FILTER_SCORE (-1) when no filter is active
    """
    values = {key: np.array([county.metric_value(key)], dtype=float) for key in MetricKey}
    return float(score_values(values, config, stats, size=1)[0])


def score_array(counties: Sequence[CountyRecord], config: FilterConfiguration, stats: StatisticsSummary) -> np.ndarray:
    """Score every county in one vectorized pass (input order)."""
    values = {key: metric_values(counties, key) for key in MetricKey}
    return score_values(values, config, stats, size=len(counties))


def score_counties(counties: Sequence[CountyRecord], config: FilterConfiguration, stats: StatisticsSummary) -> pd.Series:
    """
    Score every county.

    Args:
        counties: County records
        config: Filter configuration
        stats: Dataset statistics

    Returns:
        Series of scores indexed by county id
    """
    scores = score_array(counties, config, stats)

    return pd.Series(scores, index=[c.id for c in counties], name="score")
