"""
County Compass - County Dataset Loading
Reads the exported per-county dataset and holds it for the session

Sources:
- JSON: array of county objects (camelCase export shape)
- CSV: flat table, one row per county (see CountyRecord.to_row columns)

Counties that fail validation or lack a finite value for any scored metric
are dropped, like the inner join over the per-metric tables upstream.
"""

import hashlib
import json
import os
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import ValidationError

from config.settings import get_settings
from src.processing.statistics import StatisticsSummary, summarize
from src.schemas.county import FIPS_WIDTH, CountyRecord
from src.utils.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

SUPPORTED_EXTENSIONS = (".json", ".csv")


def _parse_records(raw_records: Iterable[Dict[str, Any]], from_rows: bool) -> Tuple[List[CountyRecord], int]:
    counties = []
    dropped = 0

    for raw in raw_records:
        if not isinstance(raw, dict):
            dropped += 1
            logger.warning(f"Skipping county record that is not an object: {raw!r:.80}")
            continue

        try:
            county = CountyRecord.from_row(raw) if from_rows else CountyRecord.model_validate(raw)
        except ValidationError as e:
            dropped += 1
            logger.warning(f"Skipping invalid county record {raw.get('id')}: {e.error_count()} errors")
            continue

        if not county.has_complete_metrics():
            dropped += 1
            logger.warning(f"Skipping county {county.id}: non-finite metric values")
            continue

        counties.append(county)

    return counties, dropped


def read_county_json(path: str) -> List[Dict[str, Any]]:
    """Read the raw JSON export (a list of county objects)."""
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, dict) and "counties" in payload:
        payload = payload["counties"]

    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of counties in {path}")

    return payload


def read_county_csv(path: str) -> List[Dict[str, Any]]:
    """Read the flat CSV export into row dicts."""
    df = pd.read_csv(path, dtype={"id": str, "name": str, "state": str, "winner": str})
    df["id"] = df["id"].str.strip().str.zfill(FIPS_WIDTH)

    return df.to_dict(orient="records")


def load_counties(path: str) -> List[CountyRecord]:
    """
    Load and validate county records.

    Args:
        path: JSON or CSV file

    Returns:
        Valid county records in file order

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the extension is not supported
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"County dataset not found: {path}")

    extension = os.path.splitext(path)[1].lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported county dataset format: {extension}")

    logger.info(f"Loading county dataset from {path}")

    if extension == ".json":
        counties, dropped = _parse_records(read_county_json(path), from_rows=False)
    else:
        counties, dropped = _parse_records(read_county_csv(path), from_rows=True)

    if dropped:
        logger.warning(f"Dropped {dropped} incomplete county records")

    logger.info(f"Loaded {len(counties)} counties")

    return counties


def counties_to_frame(counties: Sequence[CountyRecord]) -> pd.DataFrame:
    """Flatten county records into a DataFrame (one row per county)."""
    return pd.DataFrame([county.to_row() for county in counties])


def dataset_version(counties: Sequence[CountyRecord]) -> str:
    """
    SHA256 over the serialized records.

    Two datasets with the same records in the same order share a version.
    """
    sha256 = hashlib.sha256()

    for county in counties:
        sha256.update(county.model_dump_json().encode("utf-8"))
        sha256.update(b"\n")

    return sha256.hexdigest()


class CountyDataset:
    """
    Immutable county dataset with its statistics summary

    The summary is computed on first access and reused for the life of the
    dataset.
    """

    def __init__(self, counties: Sequence[CountyRecord], source: Optional[str] = None):
        self.counties: Tuple[CountyRecord, ...] = tuple(counties)
        self.source = source
        self.version = dataset_version(self.counties)
        self._statistics: Optional[StatisticsSummary] = None

    def __len__(self) -> int:
        return len(self.counties)

    @property
    def statistics(self) -> StatisticsSummary:
        if self._statistics is None:
            if not self.counties:
                raise ValueError("Cannot summarize an empty county dataset")
            self._statistics = summarize(self.counties)
            logger.info(f"Computed statistics for dataset {self.version[:12]} ({len(self.counties)} counties)")
        return self._statistics

    def to_frame(self) -> pd.DataFrame:
        return counties_to_frame(self.counties)

    @classmethod
    def from_file(cls, path: str) -> "CountyDataset":
        return cls(load_counties(path), source=path)


@lru_cache()
def get_dataset() -> CountyDataset:
    """
    Returns the cached dataset from COUNTY_DATA_PATH.
    Uses lru_cache to load and validate the file once per process.
    """
    return CountyDataset.from_file(settings.COUNTY_DATA_PATH)
