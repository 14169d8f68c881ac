"""
County Compass - Bucket Classification
Converts scores and raw metric values into discrete map buckets

Combined view (deviation score -> 1..9):
- ≤0.5 → 1 (best match), ≤1 → 2, ≤1.5 → 3, ≤2 → 4, ≤2.5 → 5,
  ≤3 → 6, ≤3.5 → 7, ≤4 → 8, else → 9
- The no-filter sentinel is never classified; it maps to a neutral gray

Single-metric view (value -> 0..8):
- Bucket = number of quantile thresholds strictly below the value
"""

from typing import Dict, Optional, Sequence

import pandas as pd

from src.processing.filters import FilterConfiguration
from src.processing.metric_registry import COMBINED_LAYER, get_metric
from src.processing.scoring import NO_FILTER_SCORE, score_array
from src.processing.statistics import StatisticsSummary, metric_values
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)

SCORE_BUCKET_THRESHOLDS = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0, 3.5, 4.0)
WORST_SCORE_BUCKET = len(SCORE_BUCKET_THRESHOLDS) + 1

# Sequential blue -> white, bucket 1 (best) -> 9 (worst)
COMBINED_PALETTE: Dict[int, str] = {
    1: "#173B53",
    2: "#205274",
    3: "#3280B5",
    4: "#49B7C2",
    5: "#85CCBB",
    6: "#CAE9B5",
    7: "#FEFFCF",
    8: "#FEFFE0",
    9: "#ffffff",
}

NO_FILTER_COLOR = "#e5e7eb"


def classify_score(score: float) -> int:
    """
    Classify a deviation score into a combined-view bucket.

    Args:
        score: Non-negative deviation score (not the sentinel)

    Returns:
        Bucket 1 (best) to 9 (worst)
    """
    for bucket, threshold in enumerate(SCORE_BUCKET_THRESHOLDS, start=1):
        if score <= threshold:
            return bucket
    return WORST_SCORE_BUCKET


def classify_quantile(value: float, thresholds: Sequence[float]) -> int:
    """
    Classify a raw metric value into a quantile bucket.

    Args:
        value: Metric value
        thresholds: 8 non-decreasing quantile thresholds

    Returns:
        Bucket 0 (lowest values) to 8 (highest values)
    """
    return sum(1 for threshold in thresholds if value > threshold)


def score_color(score: float) -> str:
    """Reference color for a deviation score, gray for the sentinel."""
    if score < 0:
        return NO_FILTER_COLOR
    return COMBINED_PALETTE[classify_score(score)]


def value_color(value: float, layer: str, stats: StatisticsSummary) -> str:
    """Reference color for a raw value on a single-metric layer."""
    metric = get_metric(layer)
    bucket = classify_quantile(value, stats[metric.key].quantile_thresholds)
    return metric.palette[bucket]


def _score_bucket(score: float) -> Optional[int]:
    if score == NO_FILTER_SCORE:
        return None
    return classify_score(score)


def build_map_layer(
    counties: Sequence[CountyRecord],
    layer: str,
    stats: StatisticsSummary,
    config: Optional[FilterConfiguration] = None,
) -> pd.DataFrame:
    """
    Build choropleth data for one map layer.

    Args:
        counties: County records
        layer: 'combined' or a metric layer name / key
        stats: Dataset statistics
        config: Filter configuration (required for the combined layer)

    Returns:
        DataFrame with id, name, state, value, bucket, color
        (value is the score on the combined layer; bucket is None for unfiltered counties)
    """
    df = pd.DataFrame(
        {
            "id": [c.id for c in counties],
            "name": [c.name for c in counties],
            "state": [c.state for c in counties],
        }
    )

    if layer == COMBINED_LAYER:
        if config is None:
            raise ValueError("The combined layer needs a filter configuration")

        df["value"] = score_array(counties, config, stats)
        df["bucket"] = df["value"].map(_score_bucket).astype("Int64")
        df["color"] = df["value"].map(score_color)

    else:
        metric = get_metric(layer)
        thresholds = stats[metric.key].quantile_thresholds

        df["value"] = metric_values(counties, metric.key)
        df["bucket"] = df["value"].map(lambda v: classify_quantile(v, thresholds)).astype("Int64")
        df["color"] = df["bucket"].map(lambda b: metric.palette[int(b)])

    logger.debug(f"Built {layer} map layer for {len(df)} counties")

    return df
