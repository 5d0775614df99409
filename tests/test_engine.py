import asyncio
from datetime import date

import pytest

from analysis.engine import analyze_location, validate_query
from analysis.errors import EmptySampleSet, InvalidInput, UpstreamUnavailable

from conftest import DEFAULT_LAND, FakeSource

DENVER = (39.7392, -104.9903)
SYDNEY = (-33.8688, 151.2093)


def warming_land(start, end):
    # 300 K in 2018 rising 1 K per year
    return dict(DEFAULT_LAND, T2M=300.0 + (start.year - 2018))


def run(*args, **kwargs):
    return asyncio.run(analyze_location(*args, **kwargs))


def test_inland_query(source, cfg):
    out = run(*DENVER, "2024-07-01", source, cfg)
    assert out["success"] is True
    assert out["query"]["dayOfYear"] == 183
    assert out["query"]["windowDays"] == 7
    assert out["query"]["locationName"] == "39.7392, -104.9903"
    assert "oceanInfluence" not in out
    assert "ocean" not in out
    assert source.ocean_calls == []
    assert out["metadata"]["yearsUsed"] == 7
    assert out["metadata"]["weightedSamples"] == 10
    assert out["metadata"]["coastal"]["isCoastal"] is False
    assert out["probabilities"] == out["baseProbabilities"]
    assert out["probabilities"]["hot"] == 0.0
    assert out["currentValues"]["windSpeed"] == 5.0
    assert out["currentValues"]["PRECTOT_mmPerDay"] == 2.0
    assert "Jul 1" in out["summary"]


def test_condition_blocks(source, cfg):
    out = run(*DENVER, "2024-07-01", source, cfg)
    for name in ("hot", "cold", "windy", "wet", "uncomfortable"):
        block = out["conditions"][name]
        assert 0.0 <= block["probability"] <= 1.0
        assert 0.0 <= block["baseProbability"] <= 1.0
        assert isinstance(block["effectiveThreshold"], str)
    assert out["conditions"]["hot"]["numericThreshold"] == 303.0
    assert out["conditions"]["windy"]["numericThreshold"] == 10.0
    assert out["metadata"]["thresholds"]["hot"].startswith("T2M ≥ 29.9°C")


def test_coastal_query_applies_ocean(cfg):
    source = FakeSource(land=warming_land)
    out = run(*SYDNEY, "2024-01-15", source, cfg, location_name="Sydney")
    assert out["query"]["locationName"] == "Sydney"

    influence = out["oceanInfluence"]
    assert influence["zone"] == "strong"
    assert influence["nearestCoast"] == "Sydney, Australia"
    assert influence["adjustmentFactor"] > 1.0
    assert out["ocean"]["seaSurfaceTempCelsius"] == 22.0

    assert out["baseProbabilities"]["hot"] == 0.2
    assert out["probabilities"]["hot"] > out["baseProbabilities"]["hot"]
    assert out["probabilities"]["windy"] == out["baseProbabilities"]["windy"]

    assert len(source.ocean_calls) == 5
    assert all(start.year >= 2020 and buffer == 10.0 for start, _, buffer in source.ocean_calls)


def test_coastal_without_ocean_data_degrades(cfg):
    source = FakeSource(ocean={})
    out = run(*SYDNEY, "2024-01-15", source, cfg)
    assert "oceanInfluence" not in out
    assert out["probabilities"] == out["baseProbabilities"]
    coastal = out["metadata"]["coastal"]
    assert coastal["isCoastal"] is True
    assert coastal["oceanApplied"] is False


def test_partial_failures_are_reported(cfg):
    out = run(*DENVER, "2024-07-01", FakeSource(fail_years={2019}), cfg)
    assert out["metadata"]["yearsLost"] == [2019]
    assert out["metadata"]["yearsUsed"] == 6


def test_leap_day_query_uses_feb_28(source, cfg):
    run(*DENVER, "2024-02-29", source, cfg)
    assert (date(2023, 2, 21), date(2023, 3, 7)) in source.land_calls
    assert (date(2024, 2, 22), date(2024, 3, 7)) in source.land_calls


def test_iso_timestamp_accepted(source, cfg):
    out = run(*DENVER, "2024-07-01T08:00:00Z", source, cfg)
    assert out["query"]["date"] == "2024-07-01"


@pytest.mark.parametrize("lat,lon,day", [
    (None, 0.0, "2024-07-01"),
    (91.0, 0.0, "2024-07-01"),
    (10.0, "abc", "2024-07-01"),
    (10.0, 10.0, None),
    (10.0, 10.0, "07/01/2024"),
    (10.0, 10.0, "2024-13-01"),
])
def test_invalid_input_rejected_before_fetching(lat, lon, day, source, cfg):
    with pytest.raises(InvalidInput):
        run(lat, lon, day, source, cfg)
    assert source.connected is False
    assert source.land_calls == []


def test_validate_query_parses():
    assert validate_query("12.5", -3, "2024-01-02") == (12.5, -3.0, date(2024, 1, 2))


def test_login_failure_is_upstream(cfg):
    with pytest.raises(UpstreamUnavailable):
        run(*DENVER, "2024-07-01", FakeSource(login_error=RuntimeError("401 Unauthorized")), cfg)


def test_every_year_failing_is_upstream(cfg):
    with pytest.raises(UpstreamUnavailable):
        run(*DENVER, "2024-07-01", FakeSource(fail_years=range(2018, 2025)), cfg)


def test_no_temperature_samples(cfg):
    with pytest.raises(EmptySampleSet):
        run(*DENVER, "2024-07-01", FakeSource(land={"T2M": None}), cfg)


def test_winter_feels_like_stays_near_air_temperature(cfg):
    source = FakeSource(land=dict(DEFAULT_LAND, T2M=253.15, QV2M=0.0006))
    out = run(*DENVER, "2024-01-15", source, cfg)
    current = out["currentValues"]
    assert current["T2M_celsius"] == pytest.approx(-20.0)
    assert current["heatIndexCelsius"] == pytest.approx(-20.0, abs=2.5)
    assert current["windChillCelsius"] < -20.0


def test_ocean_years_without_data_are_listed(cfg):
    def ocean_until_2022(start, end):
        return {} if start.year > 2022 else {"SST": 22.0, "CURRENT_U": 0.1, "CURRENT_V": 0.0}

    out = run(*SYDNEY, "2024-01-15", FakeSource(ocean=ocean_until_2022), cfg)
    assert out["ocean"]["yearsUsed"] == [2020, 2021, 2022]
    assert out["ocean"]["yearsWithoutData"] == [2023, 2024]
    assert out["ocean"]["weightedSamples"] == 4
