"""
County Compass - Top Matches
Ranks counties by deviation score, best match first

Counties scoring the no-filter sentinel are never ranked. Exact score ties
keep their input (dataset) order.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from config.settings import get_settings
from src.processing.filters import FilterConfiguration
from src.processing.scoring import score_array
from src.processing.statistics import StatisticsSummary
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

# Score at which the displayed match percentage reaches 0%
MATCH_PERCENT_SCORE_SPAN = 4.0


def match_percent(score: float) -> int:
    """
    Display percentage for a deviation score: 100% at 0, 0% at 4 and beyond.

    Rounds half up.
    """
    if not math.isfinite(score):
        return 0
    return max(0, math.floor((1 - score / MATCH_PERCENT_SCORE_SPAN) * 100 + 0.5))


@dataclass(frozen=True)
class CountyMatch:
    """One ranked county"""
    county: CountyRecord
    score: float

    @property
    def match_percent(self) -> int:
        return match_percent(self.score)

    def to_dict(self) -> dict:
        return {
            "id": self.county.id,
            "name": self.county.name,
            "state": self.county.state,
            "score": self.score,
            "match_percent": self.match_percent,
        }


def top_matches(
    counties: Sequence[CountyRecord],
    config: FilterConfiguration,
    stats: StatisticsSummary,
    n: Optional[int] = None,
) -> List[CountyMatch]:
    """
    Rank counties by ascending deviation score.

    Args:
        counties: County records
        config: Filter configuration
        stats: Dataset statistics
        n: Number of matches (default: TOP_MATCHES_LIMIT)

    Returns:
        Up to n matches, best first; empty when no filter is active
    """
    if n is None:
        n = settings.TOP_MATCHES_LIMIT

    scores = score_array(counties, config, stats)

    # Drops the sentinel (and NaN, which fails the comparison)
    ranked = np.flatnonzero(scores >= 0)
    order = ranked[np.argsort(scores[ranked], kind="stable")][: max(n, 0)]

    return [CountyMatch(county=counties[i], score=float(scores[i])) for i in order]
