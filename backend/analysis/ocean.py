"""
Ocean influence on land-condition probabilities (3-tier coastal model).

Distance zones:
  - <= 30 km : strong coastal zone, full influence
  - 30-50 km : intermediate zone, linear decay 100% -> 0%
  - > 50 km  : inland, ocean data is not fetched at all

The score mixes the land-sea temperature gradient (60%) with current strength
(40%, signed like the gradient) and becomes a multiplicative factor of at most
±15%. Condition physics: hot/uncomfortable take the factor as is, cold takes
its reflection around 1.0, wet only ever gets a boost, windy is untouched.
"""
import math
from dataclasses import dataclass
from typing import Optional

from config import EngineConfig
from analysis.coastline import coastal_zone, is_coastal
from analysis.sampling import SampleSets

KELVIN = 273.15
COMPASS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


@dataclass(frozen=True)
class OceanSummary:
    """Averages over every contributing year-copy of the ocean sample sets."""

    sea_surface_temp: Optional[float] = None   # °C
    salinity: Optional[float] = None           # psu
    current_u: Optional[float] = None          # m/s, eastward
    current_v: Optional[float] = None          # m/s, northward
    samples: int = 0

    @property
    def data_available(self) -> bool:
        return self.sea_surface_temp is not None

    @property
    def current_speed(self) -> Optional[float]:
        if self.current_u is None or self.current_v is None:
            return None
        return math.sqrt(self.current_u ** 2 + self.current_v ** 2)

    @property
    def current_direction(self) -> Optional[float]:
        """Degrees in [0, 360) from atan2(v, u)."""
        if self.current_u is None or self.current_v is None:
            return None
        return (math.degrees(math.atan2(self.current_v, self.current_u)) + 360) % 360


def summarize_ocean(samples: SampleSets) -> OceanSummary:
    return OceanSummary(
        sea_surface_temp=samples.mean("SST"),
        salinity=samples.mean("SALINITY"),
        current_u=samples.mean("CURRENT_U"),
        current_v=samples.mean("CURRENT_V"),
        samples=len(samples.get("SST")),
    )


def direction_label(degrees: Optional[float]) -> str:
    if degrees is None:
        return "N/A"
    return COMPASS[int(math.floor(degrees / 45 + 0.5)) % 8]


def distance_decay(distance: float, cfg: EngineConfig = EngineConfig()) -> float:
    if distance <= cfg.coastal_strong_km:
        return 1.0
    if distance <= cfg.coastal_max_km:
        span = cfg.coastal_max_km - cfg.coastal_strong_km
        return 1.0 - (distance - cfg.coastal_strong_km) / span
    return 0.0


@dataclass(frozen=True)
class OceanInfluence:
    is_coastal: bool
    distance_km: float
    zone: str
    temp_difference: Optional[float] = None    # land - sea, °C
    current_speed: Optional[float] = None
    normalized_temp_diff: float = 0.0
    normalized_current: float = 0.0
    base_score: float = 0.0                    # before distance decay
    decay: float = 0.0
    influence_score: float = 0.0
    adjustment_factor: float = 1.0


def no_influence(distance: float, cfg: EngineConfig = EngineConfig()) -> OceanInfluence:
    return OceanInfluence(
        is_coastal=False,
        distance_km=distance,
        zone=coastal_zone(distance, cfg.coastal_strong_km, cfg.coastal_max_km),
    )


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def influence_from_gradient(temp_diff: float, current_speed: Optional[float], distance: float,
                            cfg: EngineConfig = EngineConfig()) -> OceanInfluence:
    """Influence for a known land-sea difference (°C) at a coastal distance."""
    norm_temp = _clamp(temp_diff / cfg.max_temp_diff_c, -1.0, 1.0)
    norm_current = min(1.0, current_speed / cfg.reference_current_ms) if current_speed else 0.0
    sign = -1.0 if temp_diff < 0 else 1.0
    base = cfg.temp_weight * norm_temp + cfg.current_weight * norm_current * sign
    decay = distance_decay(distance, cfg)
    score = base * decay
    return OceanInfluence(
        is_coastal=True,
        distance_km=distance,
        zone=coastal_zone(distance, cfg.coastal_strong_km, cfg.coastal_max_km),
        temp_difference=temp_diff,
        current_speed=current_speed,
        normalized_temp_diff=norm_temp,
        normalized_current=norm_current,
        base_score=base,
        decay=decay,
        influence_score=score,
        adjustment_factor=1.0 + score * cfg.alpha,
    )


def calculate_ocean_influence(land_temp_k: Optional[float], ocean: OceanSummary, distance: float,
                              cfg: EngineConfig = EngineConfig()) -> OceanInfluence:
    if (not is_coastal(distance, cfg.coastal_max_km) or not ocean.data_available
            or land_temp_k is None):
        return no_influence(distance, cfg)
    temp_diff = (land_temp_k - KELVIN) - ocean.sea_surface_temp
    return influence_from_gradient(temp_diff, ocean.current_speed, distance, cfg)


def condition_factor(influence: OceanInfluence, condition: str,
                     cfg: EngineConfig = EngineConfig()) -> float:
    if not influence.is_coastal:
        return 1.0
    factor = influence.adjustment_factor
    if condition in ("hot", "uncomfortable"):
        return factor
    if condition == "cold":
        return 2.0 - factor
    if condition == "wet":
        return 1.0 + cfg.wet_boost_weight * abs(factor - 1.0)
    # windy
    return 1.0


def apply_ocean_influence(base_probability: float, influence: OceanInfluence, condition: str,
                          cfg: EngineConfig = EngineConfig()) -> float:
    """Adjusted probability, clamped to [0, 1]."""
    if not influence.is_coastal:
        return base_probability
    return _clamp(base_probability * condition_factor(influence, condition, cfg), 0.0, 1.0)
