"""
County Compass - API Routes
Read-only endpoints for the county dataset, statistics, presets and map layers

Scoring and ranking run in the client against these payloads.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from config.settings import get_settings
from src.ingest.county_data import CountyDataset, get_dataset
from src.processing.classification import build_map_layer, classify_quantile, value_color
from src.processing.cost_of_living import cost_of_living
from src.processing.lookup import compare_counties, find_county, search_counties
from src.processing.metric_registry import COMBINED_LAYER, LAYERS, METRICS
from src.processing.presets import SMART_PRESETS, median_preset, metric_medians
from src.utils.logging import get_logger

router = APIRouter()
settings = get_settings()
logger = get_logger(__name__)


# Response models
class MetricBucket(BaseModel):
    """Raw value and quantile bucket of one metric"""

    metric: str
    label: str
    value: float
    bucket: int
    color: str


class CountyDetail(BaseModel):
    """Detailed information for a single county"""

    county: Dict[str, Any]
    cost_of_living: int
    metrics: List[MetricBucket]
    dataset_version: str


class MedianPresetResponse(BaseModel):
    """Typical-county preset"""

    medians: Dict[str, float]
    params: Dict[str, Any]


class MapLayerEntry(BaseModel):
    id: str
    name: str
    state: str
    value: float
    bucket: int
    color: str


def get_county_dataset() -> CountyDataset:
    """Dependency: the session dataset, 503 when it cannot be loaded."""
    try:
        dataset = get_dataset()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"County dataset unavailable: {e}")
        raise HTTPException(status_code=503, detail="County dataset unavailable")

    if len(dataset) == 0:
        logger.error("County dataset is empty")
        raise HTTPException(status_code=503, detail="County dataset is empty")

    return dataset


def _county_payload(county) -> Dict[str, Any]:
    return county.model_dump(by_alias=True)


@router.get("/counties")
async def list_counties(dataset: CountyDataset = Depends(get_county_dataset)):
    """
    List every county record

    Returns:
        List of county objects (camelCase export shape)
    """
    return [_county_payload(c) for c in dataset.counties]


@router.get("/counties/search")
async def search(
    q: str = Query("", description="Name or state fragment"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    dataset: CountyDataset = Depends(get_county_dataset),
):
    """
    Search counties by name or state

    Returns:
        Up to `limit` matches (default SEARCH_RESULT_LIMIT)
    """
    results = search_counties(dataset.counties, q, limit=limit)
    return [{"id": c.id, "name": c.name, "state": c.state} for c in results]


@router.get("/counties/{county_id}", response_model=CountyDetail)
async def get_county_detail(county_id: str, dataset: CountyDataset = Depends(get_county_dataset)):
    """
    Get detailed information for a specific county

    Args:
        county_id: FIPS code (e.g., '01001', or 1001)

    Returns:
        County record, cost of living and per-metric quantile buckets
    """
    county = find_county(dataset.counties, county_id)
    if county is None:
        raise HTTPException(status_code=404, detail=f"County {county_id} not found")

    stats = dataset.statistics

    metrics = []
    for metric in METRICS:
        value = county.metric_value(metric.key)
        metrics.append(
            MetricBucket(
                metric=metric.key.value,
                label=metric.label,
                value=value,
                bucket=classify_quantile(value, stats[metric.key].quantile_thresholds),
                color=value_color(value, metric.layer, stats),
            )
        )

    return CountyDetail(
        county=_county_payload(county),
        cost_of_living=cost_of_living(county, stats),
        metrics=metrics,
        dataset_version=dataset.version,
    )


@router.get("/statistics")
async def get_statistics(dataset: CountyDataset = Depends(get_county_dataset)):
    """
    Dataset statistics: min, max, half stdev and quantile thresholds per metric
    """
    payload = dataset.statistics.to_dict()
    payload["dataset_version"] = dataset.version
    return payload


@router.get("/presets")
async def list_presets():
    """Smart presets"""
    return [preset.to_dict() for preset in SMART_PRESETS.values()]


@router.get("/presets/median", response_model=MedianPresetResponse)
async def get_median_preset(dataset: CountyDataset = Depends(get_county_dataset)):
    """
    Typical-county preset: medians and the filter parameters bracketing them
    """
    config = median_preset(dataset.counties, dataset.statistics)
    medians = metric_medians(dataset.counties)

    return MedianPresetResponse(
        medians={key.value: value for key, value in medians.items()},
        params=config.to_params(),
    )


@router.get("/compare")
async def compare(
    ids: str = Query(..., description="Comma-separated county ids"),
    dataset: CountyDataset = Depends(get_county_dataset),
):
    """
    Compare counties side by side (unknown ids are skipped)
    """
    county_ids = [i for i in ids.split(",") if i.strip()]
    df = compare_counties(dataset.counties, county_ids, dataset.statistics)
    return df.to_dict(orient="records")


@router.get("/layers/{layer}", response_model=List[MapLayerEntry])
async def get_map_layer(layer: str, dataset: CountyDataset = Depends(get_county_dataset)):
    """
    Quantile buckets and colors for a single-metric map layer

    Args:
        layer: population, age, temperature, home_value or median_rent
    """
    if layer not in LAYERS:
        raise HTTPException(status_code=404, detail=f"Unknown layer: {layer}")
    if layer == COMBINED_LAYER:
        raise HTTPException(status_code=400, detail="The combined layer is scored client-side")

    df = build_map_layer(dataset.counties, layer, dataset.statistics)
    df["bucket"] = df["bucket"].astype(int)
    return df.to_dict(orient="records")
