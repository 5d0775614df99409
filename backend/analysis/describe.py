"""Human-readable text for thresholds, ocean influence and the overall outlook."""
from datetime import date
from typing import Dict, Mapping

from config import EngineConfig
from analysis.ocean import KELVIN, OceanInfluence, OceanSummary
from analysis.thresholds import ConditionResult

ZONE_LABELS = {
    "strong": "strong coastal zone",
    "intermediate": "intermediate zone",
    "inland": "inland",
}

ADVICE = {
    "hot": "Plan for heat – carry water, wear light clothing, and use sun protection.",
    "cold": "Dress warmly in layers and protect against wind chill.",
    "wet": "Bring rain gear and plan for possible flooding or delays.",
    "windy": "Secure loose objects and be cautious in exposed areas.",
    "uncomfortable": "Take precautions for extreme weather – stay hydrated or stay warm.",
}

METHODS = {
    "hot": "percentile-based with 30°C minimum",
    "cold": "percentile-based with 0°C maximum",
    "windy": "percentile-based with 10 m/s minimum",
    "wet": "percentile of rainy days (≥1mm) with 10mm fallback",
    "uncomfortable": "both temp AND humidity exceed their 90th percentiles",
}


def _pct(p: float) -> str:
    return f"{p:g}th"


def threshold_text(result: ConditionResult) -> str:
    c = result.condition
    if c == "hot":
        return f"T2M ≥ {result.effective_threshold - KELVIN:.1f}°C ({_pct(result.percentile)} percentile)"
    if c == "cold":
        return f"T2M ≤ {result.effective_threshold - KELVIN:.1f}°C ({_pct(result.percentile)} percentile)"
    if c == "windy":
        return f"Wind Speed ≥ {result.effective_threshold:.1f} m/s ({_pct(result.percentile)} percentile)"
    if c == "wet":
        return f"Precipitation ≥ {result.effective_threshold:.1f} mm/day ({_pct(result.percentile)} percentile)"
    return (f"Temp ≥ {result.effective_threshold - KELVIN:.1f}°C & "
            f"Humidity ≥ {(result.humidity_threshold or 0.0) * 1000:.1f} g/kg "
            f"({_pct(result.percentile)} percentiles)")


def dominant_driver(influence: OceanInfluence, cfg: EngineConfig = EngineConfig()) -> str:
    """'none' | 'temperature' | 'current'"""
    if not influence.is_coastal or abs(influence.influence_score) < cfg.minimal_influence:
        return "none"
    diff = influence.temp_difference or 0.0
    if influence.influence_score > 0:
        return "temperature" if diff > 2 else "current"
    return "temperature" if diff < -2 else "current"


def inland_description(distance: float, cfg: EngineConfig = EngineConfig()) -> str:
    if distance > cfg.coastal_max_km:
        return (f"Inland location ({distance:.0f}km from coast, beyond {cfg.coastal_max_km:.0f}km "
                f"threshold). Ocean influence negligible.")
    return "Ocean influence not applicable (data unavailable)"


def ocean_description(influence: OceanInfluence, cfg: EngineConfig = EngineConfig()) -> str:
    if not influence.is_coastal:
        return inland_description(influence.distance_km, cfg)

    where = f"{influence.distance_km:.0f}km from coast ({ZONE_LABELS[influence.zone]})"
    share = f"{influence.decay * 100:.0f}%"
    percent = round(abs(influence.adjustment_factor - 1.0) * 100)
    diff = influence.temp_difference or 0.0
    driver = dominant_driver(influence, cfg)

    if driver == "none":
        return f"Minimal ocean influence at {where}. Decay factor: {share}."
    if influence.influence_score > 0:
        if driver == "temperature":
            return (f"Land warmer than sea (+{diff:.1f}°C) at {where}. Ocean moderates extreme heat. "
                    f"+{percent}% adjustment ({share} influence).")
        return f"Onshore currents ({influence.current_speed or 0.0:.2f} m/s) at {where}. +{percent}% adjustment."
    if driver == "temperature":
        return (f"Sea warmer than land ({abs(diff):.1f}°C) at {where}. Ocean enhances warming. "
                f"{percent}% adjustment ({share} influence).")
    return f"Offshore currents at {where}. {percent}% adjustment."


def format_ocean_data(ocean: OceanSummary) -> Dict[str, str]:
    def fmt(value, pattern):
        return pattern.format(value) if value is not None else "N/A"

    direction = ocean.current_direction
    return {
        "sst": fmt(ocean.sea_surface_temp, "{:.1f}°C"),
        "salinity": fmt(ocean.salinity, "{:.1f} psu"),
        "currentSpeed": fmt(ocean.current_speed, "{:.2f} m/s"),
        "currentDirection": f"{round(direction)}°" if direction is not None else "N/A",
    }


def outlook_summary(probabilities: Mapping[str, float], on: date) -> str:
    """Two most likely conditions with advice for the top one."""
    ranked = sorted(probabilities.items(), key=lambda kv: kv[1], reverse=True)
    (top, p1), (second, p2) = ranked[0], ranked[1]
    return (f"On {on.strftime('%b')} {on.day} at this location, the highest likelihood is "
            f"{top.title()} ({p1 * 100:.0f}%), followed by {second.title()} ({p2 * 100:.0f}%). "
            f"{ADVICE.get(top, 'Monitor weather conditions closely.')}")
