"""
Result assembly for the presentation layer.

Rounding policy (applied only here, never inside the engine):
    probabilities ................ 4 decimals
    temperatures (K and °C) ...... 2
    wind / current components .... 2
    specific humidity (kg/kg) .... 4
    precipitation (mm/day) ....... 2
    influence score / factors .... 3
    distances (km) ............... 1
"""
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from config import CONDITIONS, LAND_PRODUCTS, OCEAN_PRODUCTS, EngineConfig
from analysis.coastline import CoastPoint, is_coastal
from analysis.describe import (METHODS, format_ocean_data, ocean_description,
                               outlook_summary, threshold_text)
from analysis.ocean import KELVIN, OceanInfluence, OceanSummary, direction_label
from analysis.sampling import SampleSets
from analysis.thresholds import SECONDS_PER_DAY, ConditionResult


@dataclass
class Analysis:
    lat: float
    lon: float
    query_date: date
    day_of_year: int
    location_name: str
    land: SampleSets
    conditions: Dict[str, ConditionResult]
    adjusted: Dict[str, float]
    distance_km: float
    nearest: CoastPoint
    influence: OceanInfluence
    ocean: Optional[OceanSummary] = None
    ocean_samples: Optional[SampleSets] = None
    cfg: EngineConfig = field(default_factory=EngineConfig)


def _r(value: Optional[float], ndigits: int) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return round(float(value), ndigits)


# ========== feels-like indices ==========
def relative_humidity(temp_c: float, q_kgkg: float, p_hpa: float = 1013.25) -> float:
    """RH (0..1) from specific humidity at an assumed surface pressure."""
    e = q_kgkg * p_hpa / (0.622 + 0.378 * q_kgkg)
    es = 6.112 * math.exp(17.67 * temp_c / (temp_c + 243.5))
    return max(0.0, min(1.0, e / es))


def heat_index_c(temp_c: float, rh: float) -> float:
    """NWS heat index; rh in 0..1.

    Steadman's simple formula averaged with air temperature first; the
    Rothfusz regression only once that reaches 80 °F.
    """
    t = temp_c * 9 / 5 + 32
    r = rh * 100
    simple = 0.5 * (t + 61.0 + (t - 68.0) * 1.2 + r * 0.094)
    hi = (simple + t) / 2
    if hi < 80:
        return (hi - 32) * 5 / 9
    hi = (-42.379 + 2.04901523 * t + 10.14333127 * r
          - 0.22475541 * t * r - 0.00683783 * t * t
          - 0.05481717 * r * r + 0.00122874 * t * t * r
          + 0.00085282 * t * r * r - 0.00000199 * t * t * r * r)
    if r < 13 and 80 <= t <= 112:
        hi -= ((13 - r) / 4) * math.sqrt((17 - abs(t - 95)) / 17)
    elif r > 85 and 80 <= t <= 87:
        hi += ((r - 85) / 10) * ((87 - t) / 5)
    return (hi - 32) * 5 / 9


def wind_chill_c(temp_c: float, wind_ms: float) -> float:
    t = temp_c * 9 / 5 + 32
    v = wind_ms * 2.237
    if t > 50 or v < 3:
        return temp_c
    wc = 35.74 + 0.6215 * t - 35.75 * v ** 0.16 + 0.4275 * t * v ** 0.16
    return (wc - 32) * 5 / 9


def current_values(land: SampleSets) -> Dict[str, Optional[float]]:
    """Period averages over every weighted sample."""
    t2m = land.mean("T2M")
    u = land.mean("U10M")
    v = land.mean("V10M")
    q = land.mean("QV2M")
    prectot = land.mean("PRECTOT")
    wind = math.sqrt(u ** 2 + v ** 2) if u is not None and v is not None else None
    t_c = t2m - KELVIN if t2m is not None else None

    heat = chill = None
    if t_c is not None and q is not None:
        heat = heat_index_c(t_c, relative_humidity(t_c, q))
    if t_c is not None and wind is not None:
        chill = wind_chill_c(t_c, wind)

    return {
        "T2M": _r(t2m, 2),
        "T2M_celsius": _r(t_c, 2),
        "U10M": _r(u, 2),
        "V10M": _r(v, 2),
        "windSpeed": _r(wind, 2),
        "QV2M": _r(q, 4),
        "PRECTOT_mmPerDay": _r(prectot * SECONDS_PER_DAY if prectot is not None else None, 2),
        "heatIndexCelsius": _r(heat, 2),
        "windChillCelsius": _r(chill, 2),
    }


def threshold_details(result: ConditionResult) -> Dict[str, Any]:
    detail: Dict[str, Any] = {"percentile": result.percentile, "value": result.effective_threshold,
                              "method": METHODS[result.condition]}
    if result.condition in ("hot", "cold"):
        detail["celsius"] = _r(result.effective_threshold - KELVIN, 2)
    elif result.condition == "windy":
        detail["unit"] = "m/s"
    elif result.condition == "wet":
        detail["unit"] = "mm/day"
        detail["rainyDaysCount"] = result.rainy_days
    else:
        detail = {
            "tempPercentile": result.percentile,
            "humidityPercentile": result.humidity_percentile,
            "tempValue": result.effective_threshold,
            "tempCelsius": _r(result.effective_threshold - KELVIN, 2),
            "humidityValue": result.humidity_threshold,
            "method": METHODS[result.condition],
        }
    return detail


def _ocean_block(ocean: OceanSummary, samples: Optional[SampleSets]) -> Dict[str, Any]:
    return {
        "dataAvailable": True,
        "seaSurfaceTempCelsius": _r(ocean.sea_surface_temp, 2),
        "salinity": _r(ocean.salinity, 2),
        "currentU": _r(ocean.current_u, 3),
        "currentV": _r(ocean.current_v, 3),
        "currentSpeed": _r(ocean.current_speed, 3),
        "currentDirection": _r(ocean.current_direction, 1),
        "currentDirectionLabel": direction_label(ocean.current_direction),
        "weightedSamples": ocean.samples,
        "yearsUsed": list(samples.years_used) if samples else [],
        "yearsWithoutData": list(samples.years_empty) if samples else [],
        "formatted": format_ocean_data(ocean),
    }


def _influence_block(a: Analysis) -> Dict[str, Any]:
    inf = a.influence
    return {
        "isCoastal": True,
        "coastalDistance": _r(a.distance_km, 1),
        "zone": inf.zone,
        "nearestCoast": a.nearest.name,
        "tempDifference": _r(inf.temp_difference, 2),
        "currentSpeed": _r(inf.current_speed, 2),
        "distanceDecay": _r(inf.decay, 3),
        "influenceScore": _r(inf.influence_score, 3),
        "adjustmentFactor": _r(inf.adjustment_factor, 3),
        "description": ocean_description(inf, a.cfg),
    }


def build_response(a: Analysis) -> Dict[str, Any]:
    cfg = a.cfg
    base = {c: a.conditions[c].probability for c in CONDITIONS}
    adjusted = {c: a.adjusted.get(c, base[c]) for c in CONDITIONS}

    conditions = {}
    for c in CONDITIONS:
        result = a.conditions[c]
        conditions[c] = {
            "probability": _r(adjusted[c], 4),
            "baseProbability": _r(base[c], 4),
            "effectiveThreshold": threshold_text(result),
            "numericThreshold": result.effective_threshold,
            "count": result.count,
            "samples": result.total,
        }

    coastal: Dict[str, Any] = {
        "isCoastal": is_coastal(a.distance_km, cfg.coastal_max_km),
        "oceanApplied": a.influence.is_coastal,
        "coastalDistance": _r(a.distance_km, 1),
        "zone": a.influence.zone,
        "nearestCoast": a.nearest.name,
    }
    if not a.influence.is_coastal:
        coastal["description"] = ocean_description(a.influence, cfg)

    years_lost: List[int] = sorted(a.land.years_failed + a.land.years_skipped)
    metadata: Dict[str, Any] = {
        "datasets": {k: v[0] for k, v in LAND_PRODUCTS.items()},
        "yearsUsed": len(a.land.years_used),
        "weightedSamples": len(a.land.get("T2M")),
        "yearRange": f"{cfg.land_start_year}-{cfg.land_end_year}",
        "yearsLost": years_lost,
        "recentYearWeight": cfg.recent_year_weight,
        "units": {"T2M": "K", "U10M": "m/s", "V10M": "m/s", "PRECTOT": "mm/day", "QV2M": "kg/kg"},
        "thresholds": {c: conditions[c]["effectiveThreshold"] for c in CONDITIONS},
        "thresholdDetails": {c: threshold_details(a.conditions[c]) for c in CONDITIONS},
        "coastal": coastal,
    }

    response: Dict[str, Any] = {
        "success": True,
        "query": {
            "lat": a.lat,
            "lon": a.lon,
            "locationName": a.location_name,
            "date": a.query_date.isoformat(),
            "dayOfYear": a.day_of_year,
            "windowDays": cfg.window_days,
        },
        "conditions": conditions,
        "probabilities": {c: conditions[c]["probability"] for c in CONDITIONS},
        "baseProbabilities": {c: conditions[c]["baseProbability"] for c in CONDITIONS},
        "currentValues": current_values(a.land),
        "summary": outlook_summary(adjusted, a.query_date),
        "metadata": metadata,
    }
    if a.influence.is_coastal and a.ocean is not None and a.ocean.data_available:
        metadata["datasets"].update({k: v[0] for k, v in OCEAN_PRODUCTS.items()})
        response["ocean"] = _ocean_block(a.ocean, a.ocean_samples)
        response["oceanInfluence"] = _influence_block(a)
    return response
