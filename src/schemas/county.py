"""
Pydantic schemas for county records

These schemas describe one county row as exported by the data pipeline.
Field aliases follow the camelCase names of the exported JSON; the snake_case
names are accepted as well. Records are immutable once loaded.
"""

import math
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.processing.metric_registry import MetricKey

# County FIPS codes: 2-digit state + 3-digit county
FIPS_WIDTH = 5


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TemperatureData(_Record):
    """Average annual temperature"""
    avg_temp_f: float = Field(..., alias="avgTempF", description="Average temperature in °F")
    is_estimated: bool = Field(False, alias="isEstimated")


class HousingData(_Record):
    """Median home value"""
    median_home_value: float = Field(..., alias="medianHomeValue", description="Median home value in USD")
    percent_national_median: Optional[float] = Field(None, alias="percentNationalMedian")
    is_estimated: bool = Field(False, alias="isEstimated")


class RentSizes(_Record):
    """HUD fair market rent by unit size"""
    efficiency: Optional[float] = None
    one_br: Optional[float] = Field(None, alias="oneBR")
    two_br: Optional[float] = Field(None, alias="twoBR")
    three_br: Optional[float] = Field(None, alias="threeBR")
    four_br: Optional[float] = Field(None, alias="fourBR")


class RentData(_Record):
    """Median rent with unit size breakdown"""
    median_rent: float = Field(..., alias="medianRent", description="Median monthly rent in USD")
    sizes: Optional[RentSizes] = None
    is_estimated: bool = Field(False, alias="isEstimated")


class VoteTotals(_Record):
    democrat: int = Field(0, ge=0)
    republican: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class VotePercentages(_Record):
    democrat: float = 0.0
    republican: float = 0.0


class VoteData(_Record):
    """Presidential election results"""
    totals: VoteTotals = Field(default_factory=VoteTotals)
    percentages: VotePercentages = Field(default_factory=VotePercentages)
    winner: Optional[str] = None
    is_estimated: bool = Field(False, alias="isEstimated")


class CountyRecord(_Record):
    """
    One county with the five explorer metrics

    The identifier is a FIPS code kept as a string; integer identifiers are
    zero-padded to five digits.
    """

    id: str = Field(..., description="County FIPS code")
    name: str
    state: str
    population: int = Field(..., ge=0)
    median_age: float = Field(..., alias="medianAge")
    temperature: TemperatureData
    housing: HousingData
    rent: RentData
    votes: Optional[VoteData] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Normalize FIPS codes to zero-padded digit strings ("1001", 1001 -> "01001")"""
        if isinstance(v, bool):
            raise ValueError("County id must be a string or integer")
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, int):
            v = str(v)
        if isinstance(v, str):
            v = v.strip()
            if not (v.isascii() and v.isdigit()):
                raise ValueError(f"County id must be numeric, got {v!r}")
            return v.zfill(FIPS_WIDTH)
        return v

    @property
    def numeric_id(self) -> int:
        return int(self.id)

    def metric_value(self, key) -> float:
        """Raw value of a registered metric."""
        key = MetricKey(key)

        if key == MetricKey.POPULATION:
            return float(self.population)
        if key == MetricKey.MEDIAN_AGE:
            return float(self.median_age)
        if key == MetricKey.TEMPERATURE:
            return float(self.temperature.avg_temp_f)
        if key == MetricKey.HOME_VALUE:
            return float(self.housing.median_home_value)
        return float(self.rent.median_rent)

    def has_complete_metrics(self) -> bool:
        """True when every scored metric is a finite number."""
        return all(math.isfinite(self.metric_value(key)) for key in MetricKey)

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a single-level dict (flat CSV column names)."""
        sizes = self.rent.sizes or RentSizes()
        votes = self.votes

        return {
            "id": self.id,
            "name": self.name,
            "state": self.state,
            "population": self.population,
            "median_age": self.median_age,
            "avg_temp_f": self.temperature.avg_temp_f,
            "temperature_estimated": self.temperature.is_estimated,
            "median_home_value": self.housing.median_home_value,
            "percent_national_median": self.housing.percent_national_median,
            "housing_estimated": self.housing.is_estimated,
            "median_rent": self.rent.median_rent,
            "rent_efficiency": sizes.efficiency,
            "rent_one_br": sizes.one_br,
            "rent_two_br": sizes.two_br,
            "rent_three_br": sizes.three_br,
            "rent_four_br": sizes.four_br,
            "rent_estimated": self.rent.is_estimated,
            "votes_democrat": votes.totals.democrat if votes else None,
            "votes_republican": votes.totals.republican if votes else None,
            "votes_total": votes.totals.total if votes else None,
            "pct_democrat": votes.percentages.democrat if votes else None,
            "pct_republican": votes.percentages.republican if votes else None,
            "winner": votes.winner if votes else None,
            "votes_estimated": votes.is_estimated if votes else None,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CountyRecord":
        """Build a record from a flat CSV row (inverse of to_row)."""

        def present(value) -> bool:
            if value is None:
                return False
            if isinstance(value, float) and math.isnan(value):
                return False
            return value != ""

        def opt(column):
            value = row.get(column)
            return value if present(value) else None

        size_values = {
            "efficiency": opt("rent_efficiency"),
            "oneBR": opt("rent_one_br"),
            "twoBR": opt("rent_two_br"),
            "threeBR": opt("rent_three_br"),
            "fourBR": opt("rent_four_br"),
        }
        sizes = size_values if any(v is not None for v in size_values.values()) else None

        votes = None
        if present(row.get("votes_total")):
            votes = {
                "totals": {
                    "democrat": opt("votes_democrat") or 0,
                    "republican": opt("votes_republican") or 0,
                    "total": row["votes_total"],
                },
                "percentages": {
                    "democrat": opt("pct_democrat") or 0.0,
                    "republican": opt("pct_republican") or 0.0,
                },
                "winner": opt("winner"),
                "isEstimated": opt("votes_estimated") or False,
            }

        return cls(
            id=row.get("id"),
            name=row.get("name"),
            state=row.get("state"),
            population=row.get("population"),
            medianAge=row.get("median_age"),
            temperature={
                "avgTempF": row.get("avg_temp_f"),
                "isEstimated": opt("temperature_estimated") or False,
            },
            housing={
                "medianHomeValue": row.get("median_home_value"),
                "percentNationalMedian": opt("percent_national_median"),
                "isEstimated": opt("housing_estimated") or False,
            },
            rent={
                "medianRent": row.get("median_rent"),
                "sizes": sizes,
                "isEstimated": opt("rent_estimated") or False,
            },
            votes=votes,
        )
