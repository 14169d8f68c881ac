"""
County Compass - County Lookup
Find, search and compare counties
"""

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from config.settings import get_settings
from src.processing.cost_of_living import cost_of_living
from src.processing.metric_registry import METRICS, get_metric_columns
from src.processing.statistics import StatisticsSummary
from src.schemas.county import CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def find_county(counties: Sequence[CountyRecord], county_id) -> Optional[CountyRecord]:
    """
    Find a county by identifier, comparing numerically ("01001" == 1001).

    Returns:
        The county or None
    """
    try:
        wanted = int(county_id)
    except (TypeError, ValueError):
        return None

    for county in counties:
        try:
            county_number = county.numeric_id
        except ValueError:
            logger.warning(f"County {county.id!r} has a non-numeric id, skipped in lookup")
            continue
        if county_number == wanted:
            return county
    return None


def search_counties(
    counties: Sequence[CountyRecord], query: str, limit: Optional[int] = None
) -> List[CountyRecord]:
    """
    Case-insensitive substring search on name, state or "name, state".

    Args:
        counties: County records
        query: Search text; blank returns nothing
        limit: Max results (default: SEARCH_RESULT_LIMIT)

    Returns:
        Matching counties in dataset order
    """
    if limit is None:
        limit = settings.SEARCH_RESULT_LIMIT

    q = (query or "").strip().lower()
    if not q:
        return []

    results = []
    for county in counties:
        name = county.name.lower()
        state = county.state.lower()
        if q in name or q in state or q in f"{name}, {state}":
            results.append(county)
            if len(results) >= limit:
                break

    return results


def compare_counties(
    counties: Sequence[CountyRecord], county_ids: Iterable, stats: StatisticsSummary
) -> pd.DataFrame:
    """
    Side-by-side table of the requested counties.

    Unknown ids are skipped; request order is kept.

    Returns:
        DataFrame with id, name, state, one column per metric and cost_of_living
    """
    rows = []

    for county_id in county_ids:
        county = find_county(counties, county_id)
        if county is None:
            continue

        row = {"id": county.id, "name": county.name, "state": county.state}
        for metric in METRICS:
            row[metric.column] = county.metric_value(metric.key)
        row["cost_of_living"] = cost_of_living(county, stats)
        rows.append(row)

    columns = ["id", "name", "state"] + get_metric_columns() + ["cost_of_living"]
    return pd.DataFrame(rows, columns=columns)
