"""
Pytest configuration and shared fixtures for County Compass tests.
"""

import json
from typing import List

import pytest

from src.processing.statistics import StatisticsSummary, summarize
from src.schemas.county import CountyRecord


def make_county(
    county_id: str,
    name: str,
    state: str,
    population: int,
    median_age: float,
    avg_temp_f: float,
    median_home_value: float,
    median_rent: float,
) -> CountyRecord:
    """Build a county record from its five metric values."""
    return CountyRecord.model_validate({
        "id": county_id,
        "name": name,
        "state": state,
        "population": population,
        "medianAge": median_age,
        "temperature": {"avgTempF": avg_temp_f},
        "housing": {"medianHomeValue": median_home_value},
        "rent": {"medianRent": median_rent},
    })


# Autauga, Los Angeles, Cook, Big Horn, Miami-Dade
SAMPLE_COUNTY_ROWS = [
    ("01001", "Autauga County", "Alabama", 58805, 38.6, 64.2, 159200, 922),
    ("06037", "Los Angeles County", "California", 10014009, 37.0, 64.6, 712700, 1702),
    ("17031", "Cook County", "Illinois", 5275541, 36.9, 50.7, 279300, 1264),
    ("30003", "Big Horn County", "Montana", 13124, 30.2, 45.3, 116600, 688),
    ("12086", "Miami-Dade County", "Florida", 2701767, 40.4, 76.5, 366300, 1487),
]


@pytest.fixture
def county_factory():
    """Factory building county records from metric values."""
    return make_county


@pytest.fixture
def sample_counties() -> List[CountyRecord]:
    """Five well-known counties with complete metrics."""
    return [make_county(*row) for row in SAMPLE_COUNTY_ROWS]


@pytest.fixture
def sample_stats(sample_counties) -> StatisticsSummary:
    """Statistics summary of the sample counties."""
    return summarize(sample_counties)


@pytest.fixture
def county_json_file(tmp_path, sample_counties):
    """Sample counties written as a JSON export."""
    path = tmp_path / "counties.json"
    path.write_text(json.dumps([c.model_dump(by_alias=True) for c in sample_counties]))
    return path
