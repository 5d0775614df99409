import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# === Variables ===
# MERRA-2 single level (SLV) + surface flux (FLX)
LAND_VARIABLES: Tuple[str, ...] = ("T2M", "U10M", "V10M", "QV2M", "PRECTOT")
# ECCO surface ocean state (°C, psu, m/s, m/s)
OCEAN_VARIABLES: Tuple[str, ...] = ("SST", "SALINITY", "CURRENT_U", "CURRENT_V")

CONDITIONS: Tuple[str, ...] = ("hot", "cold", "windy", "wet", "uncomfortable")


# -------- dataset profiles (short_name, version, {file variable: engine variable}) --------
LAND_PRODUCTS: Dict[str, Tuple[str, str, Dict[str, str]]] = {
    "slv": ("M2T1NXSLV", "5.12.4", {"T2M": "T2M", "U10M": "U10M", "V10M": "V10M", "QV2M": "QV2M"}),
    "flx": ("M2T1NXFLX", "5.12.4", {"PRECTOT": "PRECTOT"}),
}
OCEAN_PRODUCTS: Dict[str, Tuple[str, str, Dict[str, str]]] = {
    "temp_salinity": ("ECCO_L4_TEMP_SALINITY_05DEG_DAILY_V4R4", "V4r4", {"THETA": "SST", "SALT": "SALINITY"}),
    "velocity": ("ECCO_L4_OCEAN_VEL_05DEG_DAILY_V4R4", "V4r4", {"EVEL": "CURRENT_U", "NVEL": "CURRENT_V"}),
}
# last year with published granules; later windows are never searched
PRODUCT_LAST_YEAR: Dict[str, int] = {
    "ECCO_L4_TEMP_SALINITY_05DEG_DAILY_V4R4": 2017,
    "ECCO_L4_OCEAN_VEL_05DEG_DAILY_V4R4": 2017,
}


@dataclass(frozen=True)
class EngineConfig:
    """Every tunable of the climatological probability engine.

    Instances are immutable; use ``dataclasses.replace`` to derive variants.
    """

    # sampling
    window_days: int = 7
    land_start_year: int = 1980
    land_end_year: int = 2024
    ocean_start_year: int = 1992
    recent_year_threshold: int = 2022
    recent_year_weight: float = 1.5

    # percentile rules
    hot_percentile: float = 90
    cold_percentile: float = 10
    windy_percentile: float = 90
    wet_percentile: float = 95
    uncomfortable_temp_percentile: float = 90
    uncomfortable_humidity_percentile: float = 90

    # fallback bounds
    hot_floor_k: float = 303.0
    cold_ceiling_k: float = 273.0
    windy_floor_ms: float = 10.0
    wet_floor_mm: float = 10.0
    rainy_day_mm: float = 1.0

    # coastal zones (km)
    coastal_strong_km: float = 30.0
    coastal_max_km: float = 50.0

    # ocean influence
    max_temp_diff_c: float = 10.0
    reference_current_ms: float = 1.0
    temp_weight: float = 0.6
    current_weight: float = 0.4
    alpha: float = 0.15
    wet_boost_weight: float = 0.5
    minimal_influence: float = 0.05
    ocean_buffer_km: float = 10.0

    # fetching
    max_concurrent_fetches: int = 8
    fetch_deadline_seconds: Optional[float] = None

    land_variables: Tuple[str, ...] = field(default=LAND_VARIABLES)
    ocean_variables: Tuple[str, ...] = field(default=OCEAN_VARIABLES)

    @property
    def land_years(self) -> range:
        return range(self.land_start_year, self.land_end_year + 1)

    @property
    def ocean_years(self) -> range:
        start = max(self.ocean_start_year, self.land_start_year)
        return range(start, self.land_end_year + 1)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def load_config() -> EngineConfig:
    """Build the engine config, letting `.env` / environment override defaults."""
    base = EngineConfig()
    return EngineConfig(
        window_days=_env_int("CLIMATE_WINDOW_DAYS", base.window_days),
        land_start_year=_env_int("CLIMATE_START_YEAR", base.land_start_year),
        land_end_year=_env_int("CLIMATE_END_YEAR", base.land_end_year),
        max_concurrent_fetches=_env_int("CLIMATE_MAX_CONCURRENCY", base.max_concurrent_fetches),
        fetch_deadline_seconds=_env_float("CLIMATE_FETCH_DEADLINE", base.fetch_deadline_seconds),
    )


# === Service settings ===
DATA_DIR = os.getenv("CLIMATE_DATA_DIR", "./data")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "*").split(",")
