"""
County Compass - Filter Configuration
Per-metric filter state (enabled flag, working range, importance) passed
explicitly to every scoring call

Rules:
- Unset range bounds fall back to the metric's absolute bounds
- Overrides are passed through unchanged (no clamping to absolute bounds)
- Importance is clamped to 1-5 when parsed from request parameters
- Unset importance scores with the default importance
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from config.settings import IMPORTANCE_MAX, IMPORTANCE_MIN, get_settings
from src.processing.metric_registry import METRICS, MetricKey
from src.processing.statistics import StatisticsSummary
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

_FALSE_STRINGS = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class MetricFilter:
    """Filter state of one metric"""
    value_range: Tuple[float, float]
    enabled: bool = True
    importance: Optional[int] = None  # 1-5; None = default importance

    @property
    def effective_importance(self) -> int:
        return self.importance if self.importance is not None else settings.DEFAULT_IMPORTANCE


@dataclass(frozen=True)
class FilterConfiguration:
    """Filter state of every metric for one scoring call"""
    filters: Dict[MetricKey, MetricFilter] = field(default_factory=dict)

    def __getitem__(self, key) -> MetricFilter:
        return self.filters[MetricKey(key)]

    def get(self, key) -> Optional[MetricFilter]:
        return self.filters.get(MetricKey(key))

    def with_filter(self, key, **changes) -> "FilterConfiguration":
        """Return a copy with one metric's filter updated."""
        key = MetricKey(key)
        filters = dict(self.filters)
        filters[key] = replace(filters[key], **changes)
        return FilterConfiguration(filters=filters)

    def to_params(self) -> Dict[str, Any]:
        """Serialize to URL-style parameters."""
        params: Dict[str, Any] = {}

        for metric in METRICS:
            metric_filter = self.filters.get(metric.key)
            if metric_filter is None:
                continue

            params[metric.enabled_param] = metric_filter.enabled
            params[f"{metric.param_prefix}_min"] = metric_filter.value_range[0]
            params[f"{metric.param_prefix}_max"] = metric_filter.value_range[1]
            if metric_filter.importance is not None:
                params[metric.importance_param] = metric_filter.importance

        return params


def resolve_range(
    override: Optional[Mapping[str, Optional[float]]], absolute: Tuple[float, float]
) -> Tuple[float, float]:
    """
    Resolve the working [min, max] range of a metric.

    Args:
        override: Optional {"min": ..., "max": ...}; missing or None keys fall back
        absolute: Absolute (dataset) bounds

    Returns:
        (min, max) tuple
    """
    override = override or {}
    range_min = override.get("min")
    range_max = override.get("max")

    return (
        absolute[0] if range_min is None else range_min,
        absolute[1] if range_max is None else range_max,
    )


def default_filter_configuration(stats: StatisticsSummary) -> FilterConfiguration:
    """All metrics enabled at full range with default importance."""
    return FilterConfiguration(
        filters={
            metric.key: MetricFilter(
                value_range=stats[metric.key].absolute_range,
                enabled=True,
                importance=settings.DEFAULT_IMPORTANCE,
            )
            for metric in METRICS
        }
    )


def parse_flag(value: Any) -> bool:
    """Anything other than an explicit false enables a filter."""
    if value is False:
        return False
    if isinstance(value, str) and value.strip().lower() in _FALSE_STRINGS:
        return False
    return True


def parse_number(value: Any) -> Optional[float]:
    """Numeric parameter or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def clamp_importance(value: Any) -> int:
    """Clamp an importance parameter to 1-5, defaulting when not numeric."""
    number = parse_number(value)
    if number is None:
        return settings.DEFAULT_IMPORTANCE
    return int(min(IMPORTANCE_MAX, max(IMPORTANCE_MIN, round(number))))


def filter_config_from_params(params: Mapping[str, Any], stats: StatisticsSummary) -> FilterConfiguration:
    """
    Build a FilterConfiguration from URL-style parameters.

    Args:
        params: e.g. {"population": "true", "population_min": "10000", "age_importance": 5}
        stats: Dataset statistics (absolute bounds)

    Returns:
        FilterConfiguration covering every metric
    """
    filters = {}

    for metric in METRICS:
        override = {
            "min": parse_number(params.get(f"{metric.param_prefix}_min")),
            "max": parse_number(params.get(f"{metric.param_prefix}_max")),
        }

        filters[metric.key] = MetricFilter(
            value_range=resolve_range(override, stats[metric.key].absolute_range),
            enabled=parse_flag(params.get(metric.enabled_param, True)),
            importance=clamp_importance(params.get(metric.importance_param)),
        )

        if filters[metric.key].value_range[0] > filters[metric.key].value_range[1]:
            logger.warning(f"Filter range for {metric.key.value} has min above max")

    return FilterConfiguration(filters=filters)
