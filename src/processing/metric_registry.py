"""
County Compass - Metric Registry
Single source of truth for the five county metrics the explorer filters on

This registry defines:
- Canonical metric keys
- Flat record columns and URL parameter names
- Units and labels
- The 9-step map palette for each single-metric layer (low -> high)

NO metric should be scored or mapped without being registered here.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple


class MetricKey(str, Enum):
    """Canonical metric keys"""
    POPULATION = "population"
    MEDIAN_AGE = "median_age"
    TEMPERATURE = "temperature"
    HOME_VALUE = "home_value"
    MEDIAN_RENT = "median_rent"


@dataclass(frozen=True)
class MetricDefinition:
    """
    Definition of a single explorer metric
    """
    key: MetricKey
    label: str  # Human-readable name
    unit: str  # Human-readable unit
    column: str  # Column name in the flat county table
    layer: str  # Map layer name
    enabled_param: str  # URL flag toggling the filter
    param_prefix: str  # Prefix of <prefix>_min, <prefix>_max
    importance_param: str  # URL parameter carrying the 1-5 weight
    palette: Tuple[str, ...]  # 9 colors, low -> high value


METRICS: List[MetricDefinition] = [
    MetricDefinition(
        key=MetricKey.POPULATION,
        label="Population",
        unit="people",
        column="population",
        layer="population",
        enabled_param="population",
        param_prefix="population",
        importance_param="population_importance",
        # YlOrRd
        palette=(
            "#ffffcc", "#ffeda0", "#fed976", "#feb24c", "#fd8d3c",
            "#fc4e2a", "#e31a1c", "#bd0026", "#800026",
        ),
    ),
    MetricDefinition(
        key=MetricKey.MEDIAN_AGE,
        label="Median Age",
        unit="years",
        column="median_age",
        layer="age",
        enabled_param="age",
        param_prefix="age",
        importance_param="age_importance",
        # BuPu, young -> old
        palette=(
            "#f7fcfd", "#e0ecf4", "#bfd3e6", "#9ebcda", "#8c96c6",
            "#8c6bb1", "#88419d", "#810f7c", "#4d004b",
        ),
    ),
    MetricDefinition(
        key=MetricKey.TEMPERATURE,
        label="Temperature",
        unit="°F",
        column="avg_temp_f",
        layer="temperature",
        enabled_param="temperature",
        param_prefix="temperature",
        importance_param="temperature_importance",
        # RdBu reversed, cold -> hot
        palette=(
            "#2166ac", "#4393c3", "#74add1", "#abd9e9", "#ffffbf",
            "#fee090", "#fdae61", "#f46d43", "#d73027",
        ),
    ),
    MetricDefinition(
        key=MetricKey.HOME_VALUE,
        label="Home Value",
        unit="USD",
        column="median_home_value",
        layer="home_value",
        enabled_param="home_value",
        param_prefix="home_value",
        importance_param="home_value_importance",
        # Greens
        palette=(
            "#f7fcf5", "#e5f5e0", "#c7e9c0", "#a1d99b", "#74c476",
            "#41ab5d", "#238b45", "#006d2c", "#00441b",
        ),
    ),
    MetricDefinition(
        key=MetricKey.MEDIAN_RENT,
        label="Median Rent",
        unit="USD/month",
        column="median_rent",
        layer="median_rent",
        enabled_param="median_rent",
        param_prefix="rent",
        importance_param="median_rent_importance",
        # Oranges
        palette=(
            "#fff5eb", "#fee6ce", "#fdd0a2", "#fdae6b", "#fd8d3c",
            "#f16913", "#d94801", "#a63603", "#7f2704",
        ),
    ),
]

METRICS_BY_KEY: Dict[MetricKey, MetricDefinition] = {m.key: m for m in METRICS}

METRICS_BY_LAYER: Dict[str, MetricDefinition] = {m.layer: m for m in METRICS}

COMBINED_LAYER = "combined"

LAYERS: List[str] = [COMBINED_LAYER] + [m.layer for m in METRICS]


def get_metric(key) -> MetricDefinition:
    """
    Look up a metric by key, layer name or MetricKey.

    Raises:
        ValueError: If nothing matches
    """
    if isinstance(key, MetricKey):
        return METRICS_BY_KEY[key]

    if key in METRICS_BY_LAYER:
        return METRICS_BY_LAYER[key]

    try:
        return METRICS_BY_KEY[MetricKey(key)]
    except ValueError:
        raise ValueError(f"Unknown metric: {key}") from None


def get_metric_columns() -> List[str]:
    """Get the flat table column of every metric, in registry order."""
    return [m.column for m in METRICS]


def validate_registry():
    """
    Validate the registry for consistency.

    Raises:
        ValueError: If validation fails
    """
    keys = [m.key for m in METRICS]
    if len(keys) != len(set(keys)):
        raise ValueError("Duplicate metric keys found")

    if set(keys) != set(MetricKey):
        raise ValueError("Every MetricKey must be registered exactly once")

    for metric in METRICS:
        if len(metric.palette) != 9:
            raise ValueError(f"Metric {metric.key.value} palette must have 9 colors")

    params = [p for m in METRICS for p in (m.enabled_param, m.importance_param)]
    params += [f"{m.param_prefix}_{side}" for m in METRICS for side in ("min", "max")]
    if len(params) != len(set(params)):
        raise ValueError("URL parameter names collide")


if __name__ == "__main__":
    validate_registry()

    print("County Compass - Metric Registry")
    print("=" * 60)

    for metric in METRICS:
        print(f"\n{metric.label} ({metric.key.value})")
        print(f"  Unit: {metric.unit}")
        print(f"  Column: {metric.column}")
        print(f"  Layer: {metric.layer}")
        print(f"  Params: {metric.enabled_param}, {metric.param_prefix}_min, {metric.param_prefix}_max, {metric.importance_param}")
