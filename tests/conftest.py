from dataclasses import replace
from datetime import date
from typing import Callable, Dict, Optional, Sequence

import pytest

from config import EngineConfig

LandValues = Callable[[date, date], Dict[str, Optional[float]]]

DEFAULT_LAND = {
    "T2M": 300.0,          # K
    "U10M": 3.0,
    "V10M": 4.0,           # 5 m/s
    "QV2M": 0.012,
    "PRECTOT": 2.0 / 86400,  # 2 mm/day
}

DEFAULT_OCEAN = {
    "SST": 22.0,           # °C, land is 26.85 °C
    "SALINITY": 35.0,
    "CURRENT_U": 0.1,
    "CURRENT_V": 0.0,
}


class FakeSource:
    """Deterministic in-memory data source; no network."""

    def __init__(self, land=None, ocean=None, fail_years=(), login_error: Exception = None):
        self.land = land if land is not None else DEFAULT_LAND
        self.ocean = ocean if ocean is not None else DEFAULT_OCEAN
        self.fail_years = set(fail_years)
        self.login_error = login_error
        self.connected = False
        self.land_calls = []
        self.ocean_calls = []

    def connect(self) -> None:
        if self.login_error is not None:
            raise self.login_error
        self.connected = True

    def _values(self, table, start, end, variables):
        if start.year in self.fail_years:
            raise RuntimeError(f"simulated outage for {start.year}")
        values = table(start, end) if callable(table) else table
        return {v: values.get(v) for v in variables}

    def fetch_spatial_mean(self, lat, lon, start, end, variables: Sequence[str]):
        self.land_calls.append((start, end))
        return self._values(self.land, start, end, variables)

    def fetch_ocean_mean(self, lat, lon, start, end, variables: Sequence[str], buffer_km):
        self.ocean_calls.append((start, end, buffer_km))
        return self._values(self.ocean, start, end, variables)


@pytest.fixture
def cfg():
    # 2018-2024: four regular years + three recent years counted twice = 10 samples
    return replace(EngineConfig(), land_start_year=2018, land_end_year=2024, ocean_start_year=2020)


@pytest.fixture
def source():
    return FakeSource()
