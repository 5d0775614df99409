"""
Percentile-based thresholds (location adaptive).

Each condition takes a percentile of the location's own samples and combines
it with a fixed scientific floor/ceiling so that climates where the
percentile alone is meaningless (tropics, deserts) still get sane extremes.
"""
import math
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence

import numpy as np

from config import EngineConfig

SECONDS_PER_DAY = 86400


def percentile(values: Sequence[float], p: float) -> float:
    """Linear-interpolated percentile; 0.0 for an empty set."""
    if len(values) == 0:
        return 0.0
    ranked = np.sort(np.asarray(values, dtype=float))
    index = (p / 100.0) * (len(ranked) - 1)
    lower, upper = math.floor(index), math.ceil(index)
    if lower == upper:
        return float(ranked[lower])
    weight = index - lower
    return float(ranked[lower] * (1 - weight) + ranked[upper] * weight)


def safe_ratio(count: int, total: int) -> float:
    return count / total if total > 0 else 0.0


def wind_speeds(u: Sequence[float], v: Sequence[float]) -> list:
    """Per-index speed, truncated to the shorter component list."""
    n = min(len(u), len(v))
    return [math.sqrt(u[i] ** 2 + v[i] ** 2) for i in range(n)]


def precip_to_mm_per_day(values: Sequence[float]) -> list:
    """kg m-2 s-1 -> mm/day"""
    return [x * SECONDS_PER_DAY for x in values]


@dataclass(frozen=True)
class ConditionResult:
    condition: str
    percentile: float
    raw_threshold: float
    effective_threshold: float
    count: int
    total: int
    fallback: Optional[float] = None
    # uncomfortable only
    humidity_percentile: Optional[float] = None
    humidity_threshold: Optional[float] = None
    # wet only
    rainy_days: Optional[int] = None

    @property
    def probability(self) -> float:
        return safe_ratio(self.count, self.total)


def _count_at_least(values: Sequence[float], threshold: float) -> int:
    return int(np.count_nonzero(np.asarray(values, dtype=float) >= threshold))


def _count_at_most(values: Sequence[float], threshold: float) -> int:
    return int(np.count_nonzero(np.asarray(values, dtype=float) <= threshold))


def hot_condition(temps: Sequence[float], cfg: EngineConfig) -> ConditionResult:
    raw = percentile(temps, cfg.hot_percentile)
    effective = max(raw, cfg.hot_floor_k)
    return ConditionResult("hot", cfg.hot_percentile, raw, effective,
                           _count_at_least(temps, effective), len(temps), fallback=cfg.hot_floor_k)


def cold_condition(temps: Sequence[float], cfg: EngineConfig) -> ConditionResult:
    raw = percentile(temps, cfg.cold_percentile)
    effective = min(raw, cfg.cold_ceiling_k)
    return ConditionResult("cold", cfg.cold_percentile, raw, effective,
                           _count_at_most(temps, effective), len(temps), fallback=cfg.cold_ceiling_k)


def windy_condition(speeds: Sequence[float], cfg: EngineConfig) -> ConditionResult:
    raw = percentile(speeds, cfg.windy_percentile)
    effective = max(raw, cfg.windy_floor_ms)
    return ConditionResult("windy", cfg.windy_percentile, raw, effective,
                           _count_at_least(speeds, effective), len(speeds), fallback=cfg.windy_floor_ms)


def wet_condition(precip_mm: Sequence[float], cfg: EngineConfig) -> ConditionResult:
    """95th percentile of rainy days only; counted against every sample."""
    rainy = [p for p in precip_mm if p >= cfg.rainy_day_mm]
    if rainy:
        raw = percentile(rainy, cfg.wet_percentile)
        effective = max(raw, cfg.wet_floor_mm)
        fallback: Optional[float] = cfg.wet_floor_mm
    else:
        # dry climate: any measurable rain counts
        raw = effective = cfg.rainy_day_mm
        fallback = None
    return ConditionResult("wet", cfg.wet_percentile, raw, effective,
                           _count_at_least(precip_mm, effective), len(precip_mm),
                           fallback=fallback, rainy_days=len(rainy))


def uncomfortable_condition(temps: Sequence[float], humidity: Sequence[float],
                            cfg: EngineConfig) -> ConditionResult:
    """Temperature AND humidity above their own percentiles, paired by index."""
    temp_threshold = percentile(temps, cfg.uncomfortable_temp_percentile)
    humidity_threshold = percentile(humidity, cfg.uncomfortable_humidity_percentile)
    n = min(len(temps), len(humidity))
    t = np.asarray(temps[:n], dtype=float)
    q = np.asarray(humidity[:n], dtype=float)
    count = int(np.count_nonzero((t >= temp_threshold) & (q >= humidity_threshold)))
    return ConditionResult("uncomfortable", cfg.uncomfortable_temp_percentile,
                           temp_threshold, temp_threshold, count, n,
                           humidity_percentile=cfg.uncomfortable_humidity_percentile,
                           humidity_threshold=humidity_threshold)


def compute_base_conditions(samples: Mapping[str, Sequence[float]],
                            cfg: EngineConfig) -> Dict[str, ConditionResult]:
    """Base (pre-ocean) result for every condition from raw land samples."""
    temps = list(samples.get("T2M", []))
    speeds = wind_speeds(list(samples.get("U10M", [])), list(samples.get("V10M", [])))
    precip = precip_to_mm_per_day(samples.get("PRECTOT", []))
    humidity = list(samples.get("QV2M", []))
    return {
        "hot": hot_condition(temps, cfg),
        "cold": cold_condition(temps, cfg),
        "windy": windy_condition(speeds, cfg),
        "wet": wet_condition(precip, cfg),
        "uncomfortable": uncomfortable_condition(temps, humidity, cfg),
    }
