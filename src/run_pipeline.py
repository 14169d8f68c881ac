"""
County Compass - Command Line Explorer

Loads the county dataset and reports the best-matching counties for a preset.

Stages:
1. Dataset load and validation
2. Statistics summary
3. Filter configuration (full range, median or smart preset)
4. Top matches
5. Scored CSV export (optional, --output)

Usage:
    python -m src.run_pipeline --data data/counties.json
    python -m src.run_pipeline --data data/counties.csv --preset median --top 5
    python -m src.run_pipeline --preset retirement_paradise
    python -m src.run_pipeline --preset family_friendly --output exports/scores.csv
"""

import argparse
import os
import sys
from datetime import datetime
from typing import List, Optional

from config.settings import get_settings
from src.ingest.county_data import CountyDataset
from src.processing.filters import FilterConfiguration, default_filter_configuration
from src.processing.presets import MEDIAN_PRESET, SMART_PRESETS, apply_preset, get_smart_preset, median_preset
from src.processing.ranking import CountyMatch, match_percent, top_matches
from src.processing.scoring import score_counties
from src.utils.logging import setup_logging

logger = setup_logging("pipeline")
settings = get_settings()


def build_configuration(dataset: CountyDataset, preset: Optional[str] = None) -> FilterConfiguration:
    """
    Filter configuration for a preset name.

    Args:
        dataset: Loaded county dataset
        preset: None (full range), "median" or a smart preset name

    Returns:
        FilterConfiguration covering every metric
    """
    stats = dataset.statistics

    if preset is None:
        return default_filter_configuration(stats)

    if preset == MEDIAN_PRESET:
        return median_preset(dataset.counties, stats)

    return apply_preset(default_filter_configuration(stats), get_smart_preset(preset))


def format_match(rank: int, match: CountyMatch) -> str:
    return (
        f"{rank:>2}. {match.county.name}, {match.county.state} "
        f"({match.county.id}) - {match.match_percent}% match (score {match.score:.3f})"
    )


def export_scores(dataset: CountyDataset, config: FilterConfiguration, output_path: str) -> int:
    """
    Write every county with its score to CSV, best match first.

    Counties are unscored (score -1, empty match_percent) when no filter is active.

    Args:
        dataset: Loaded county dataset
        config: Filter configuration
        output_path: Destination CSV

    Returns:
        Number of rows written
    """
    df = dataset.to_frame()
    scores = score_counties(dataset.counties, config, dataset.statistics)

    df["score"] = scores.to_numpy()
    df["match_percent"] = df["score"].map(lambda s: match_percent(s) if s >= 0 else None).astype("Int64")
    df = df.sort_values("score", kind="stable")

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    df.to_csv(output_path, index=False)
    logger.info(f"Wrote {len(df)} scored counties to {output_path}")

    return len(df)


def run_explorer(
    data_path: str,
    preset: Optional[str] = None,
    top: Optional[int] = None,
    output: Optional[str] = None,
) -> List[CountyMatch]:
    """
    Load the dataset and rank counties.

    Args:
        data_path: JSON or CSV county dataset
        preset: Optional preset name
        top: Number of matches (default: TOP_MATCHES_LIMIT)
        output: Optional CSV path for the full scored table

    Returns:
        Ranked matches, best first
    """
    logger.info("STAGE 1: DATASET LOAD")
    dataset = CountyDataset.from_file(data_path)

    if len(dataset) == 0:
        raise ValueError(f"No valid counties in {data_path}")

    logger.info("STAGE 2: STATISTICS")
    stats = dataset.statistics
    for key, summary in stats.metrics.items():
        logger.info(
            f"  {key.value}: min={summary.min:,.2f} max={summary.max:,.2f} "
            f"half_stdev={summary.half_stdev:,.2f}"
        )

    logger.info(f"STAGE 3: FILTERS (preset={preset or 'full range'})")
    config = build_configuration(dataset, preset)

    logger.info("STAGE 4: TOP MATCHES")
    matches = top_matches(dataset.counties, config, stats, n=top)

    if not matches:
        logger.warning("No active filters, nothing to rank")

    for rank, match in enumerate(matches, start=1):
        logger.info(format_match(rank, match))

    if output:
        logger.info("STAGE 5: EXPORT")
        export_scores(dataset, config, output)

    return matches


def main():
    """Command line entry point"""

    parser = argparse.ArgumentParser(
        description="County Compass - Find counties that match your preferences"
    )

    parser.add_argument(
        "--data",
        type=str,
        default=settings.COUNTY_DATA_PATH,
        help=f"County dataset, JSON or CSV (default: {settings.COUNTY_DATA_PATH})"
    )

    parser.add_argument(
        "--preset",
        type=str,
        choices=[MEDIAN_PRESET] + list(SMART_PRESETS),
        help="Filter preset (default: full range, every metric enabled)"
    )

    parser.add_argument(
        "--top",
        type=int,
        default=settings.TOP_MATCHES_LIMIT,
        help=f"Number of matches to report (default: {settings.TOP_MATCHES_LIMIT})"
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Write every county with its score to this CSV"
    )

    args = parser.parse_args()

    start_time = datetime.now()
    logger.info("=" * 60)
    logger.info("County Compass - Explorer Start")
    logger.info(f"Time: {start_time.isoformat()}")
    logger.info(f"Arguments: {vars(args)}")
    logger.info("=" * 60)

    try:
        run_explorer(args.data, preset=args.preset, top=args.top, output=args.output)

        duration = (datetime.now() - start_time).total_seconds()
        logger.info("=" * 60)
        logger.info("EXPLORER COMPLETE")
        logger.info(f"Duration: {duration:.1f} seconds")
        logger.info("=" * 60)

        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Explorer interrupted by user")
        sys.exit(130)

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Explorer failed: {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Explorer failed with unhandled exception: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
