"""
Request-scoped orchestration of one climatological query.

    validate -> connect -> land samples -> thresholds -> coastal check
             -> (coastal only) ocean samples -> influence -> report

Nothing here is shared between requests; every query builds its own sample
sets and derived values.
"""
import asyncio
import logging
import math
import time
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple

from config import CONDITIONS, EngineConfig
from analysis.coastline import is_coastal, nearest_coast
from analysis.doy import day_of_year, format_doy, is_leap_year
from analysis.errors import ClimateAnalysisError, EmptySampleSet, InvalidInput, UpstreamUnavailable
from analysis.ocean import apply_ocean_influence, calculate_ocean_influence, no_influence, summarize_ocean
from analysis.report import Analysis, build_response
from analysis.sampling import collect_samples
from analysis.thresholds import compute_base_conditions

logger = logging.getLogger("climate.engine")


class DataSource(Protocol):
    """Remote gridded data as the engine sees it."""

    def connect(self) -> None:
        """Authenticate; raise on failure."""

    def fetch_spatial_mean(self, lat: float, lon: float, start: date, end: date,
                           variables: Sequence[str]) -> Mapping[str, Optional[float]]:
        """Mean of each variable over [start, end] at the point; None where no valid pixel."""

    def fetch_ocean_mean(self, lat: float, lon: float, start: date, end: date,
                         variables: Sequence[str], buffer_km: float) -> Mapping[str, Optional[float]]:
        """Same as fetch_spatial_mean over a small buffer around the point."""


def _to_ymd(s: str) -> str:
    """'YYYY-MM-DD' or an ISO8601 timestamp -> 'YYYY-MM-DD'"""
    if not isinstance(s, str) or len(s) < 10:
        raise InvalidInput("date must be 'YYYY-MM-DD' or an ISO8601 string")
    return s[:10]


def parse_date(s: Optional[str]) -> date:
    if s is None or s == "":
        raise InvalidInput("Missing required field: date")
    try:
        return datetime.strptime(_to_ymd(s), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"Invalid date format: {s}. Expect 'YYYY-MM-DD' or ISO8601.")


def _coordinate(value: Any, name: str, bound: float) -> float:
    if value is None or value == "":
        raise InvalidInput(f"Missing required field: {name}")
    try:
        x = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{name} must be a number, got {value!r}")
    if not math.isfinite(x) or not -bound <= x <= bound:
        raise InvalidInput(f"{name} must be within [-{bound:g}, {bound:g}], got {value!r}")
    return x


def validate_query(lat: Any, lon: Any, date_str: Optional[str]) -> Tuple[float, float, date]:
    """Reject missing or malformed input before any fetching."""
    return _coordinate(lat, "lat", 90), _coordinate(lon, "lon", 180), parse_date(date_str)


async def _connect(source: DataSource) -> None:
    try:
        await asyncio.to_thread(source.connect)
    except ClimateAnalysisError:
        raise
    except Exception as exc:
        logger.error("❌ data source login failed: %s", exc)
        raise UpstreamUnavailable(f"Data source unavailable: {exc}") from exc


async def analyze_location(lat: Any, lon: Any, date_str: Optional[str], source: DataSource,
                           cfg: EngineConfig = EngineConfig(),
                           location_name: Optional[str] = None) -> Dict[str, Any]:
    lat, lon, query_date = validate_query(lat, lon, date_str)
    name = location_name or f"{lat:.4f}, {lon:.4f}"
    query_doy = day_of_year(query_date)
    query_leap = is_leap_year(query_date.year)
    started = time.monotonic()

    logger.info("🔍 %s (%.4f, %.4f): %s (DOY %d, ±%d days), years %d-%d",
                name, lat, lon, format_doy(query_doy, query_date.year), query_doy,
                cfg.window_days, cfg.land_start_year, cfg.land_end_year)

    await _connect(source)

    def land_fetch(start, end, variables):
        return source.fetch_spatial_mean(lat, lon, start, end, variables)

    land = await collect_samples(land_fetch, cfg.land_years, cfg.land_variables,
                                 query_doy, query_leap, cfg, label="MERRA-2")
    if land.all_failed:
        raise UpstreamUnavailable("Data source unavailable: every year's request failed")
    if land.is_empty("T2M"):
        raise EmptySampleSet("No data available for this location and date", variable="T2M")

    conditions = compute_base_conditions(land.as_mapping(), cfg)

    distance, nearest = nearest_coast(lat, lon)
    influence = no_influence(distance, cfg)
    ocean = ocean_samples = None
    if is_coastal(distance, cfg.coastal_max_km):
        logger.info("🌊 Coastal: %.1f km from %s, fetching ocean data %d-%d",
                    distance, nearest.name, cfg.ocean_years.start, cfg.ocean_years.stop - 1)

        def ocean_fetch(start, end, variables):
            return source.fetch_ocean_mean(lat, lon, start, end, variables, cfg.ocean_buffer_km)

        ocean_samples = await collect_samples(ocean_fetch, cfg.ocean_years, cfg.ocean_variables,
                                              query_doy, query_leap, cfg, label="ECCO")
        ocean = summarize_ocean(ocean_samples)
        if ocean.data_available:
            influence = calculate_ocean_influence(land.mean("T2M"), ocean, distance, cfg)
            logger.info("🌊 Influence score %.3f, factor %.3f (%s zone)",
                        influence.influence_score, influence.adjustment_factor, influence.zone)
        else:
            logger.warning("⚠️ No ocean samples near (%.4f, %.4f); land-only probabilities", lat, lon)
    else:
        logger.info("Inland: %.1f km from nearest coast (%s)", distance, nearest.name)

    adjusted = {c: apply_ocean_influence(conditions[c].probability, influence, c, cfg)
                for c in CONDITIONS}

    analysis = Analysis(
        lat=lat,
        lon=lon,
        query_date=query_date,
        day_of_year=query_doy,
        location_name=name,
        land=land,
        conditions=conditions,
        adjusted=adjusted,
        distance_km=distance,
        nearest=nearest,
        influence=influence,
        ocean=ocean,
        ocean_samples=ocean_samples,
        cfg=cfg,
    )
    logger.info("✅ Analysis for %s done in %.1fs", name, time.monotonic() - started)
    return build_response(analysis)
