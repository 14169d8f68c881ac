"""
County Compass - Cost of Living Composite
Blends rent and home value into a 0-100 affordability index (lower = cheaper)

Each input is placed on the dataset's min-max scale (0-100), then weighted
60% rent / 40% home value.
"""

import math

from src.processing.metric_registry import MetricKey
from src.processing.statistics import StatisticsSummary
from src.schemas.county import CountyRecord

RENT_WEIGHT = 0.6
HOME_VALUE_WEIGHT = 0.4

NEUTRAL_COST_OF_LIVING = 50


def cost_of_living(county: CountyRecord, stats: StatisticsSummary) -> int:
    """
    Cost-of-living index for a county.

    Args:
        county: County record
        stats: Dataset statistics

    Returns:
        Integer index, 0-100 for counties inside the dataset bounds;
        50 when either metric has no spread
    """
    rent = stats[MetricKey.MEDIAN_RENT]
    home = stats[MetricKey.HOME_VALUE]

    rent_range = rent.max - rent.min
    home_range = home.max - home.min

    if rent_range == 0 or home_range == 0:
        return NEUTRAL_COST_OF_LIVING

    rent_position = (county.metric_value(MetricKey.MEDIAN_RENT) - rent.min) / rent_range * 100
    home_position = (county.metric_value(MetricKey.HOME_VALUE) - home.min) / home_range * 100

    composite = rent_position * RENT_WEIGHT + home_position * HOME_VALUE_WEIGHT

    if not math.isfinite(composite):
        return NEUTRAL_COST_OF_LIVING

    # Half-up rounding
    return math.floor(composite + 0.5)
