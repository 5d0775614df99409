import asyncio
import math
import threading
import time
from dataclasses import replace
from datetime import date

import pytest

from config import EngineConfig
from analysis.errors import FetchError
from analysis.sampling import (YearOutcome, collect_samples, fold_outcomes, recent_year_copies,
                               window_mean)

CFG = EngineConfig()


def test_recent_years_counted_twice():
    assert recent_year_copies(2021, CFG) == 1
    assert recent_year_copies(2022, CFG) == 2
    assert recent_year_copies(2024, CFG) == 2
    assert recent_year_copies(2023, replace(CFG, recent_year_weight=2.5)) == 3


def test_fold_outcomes_bookkeeping():
    outcomes = [
        YearOutcome(2022, values={"T2M": 301.0}),
        YearOutcome(2020, error=FetchError(2020, RuntimeError("boom"))),
        YearOutcome(2021, values={"T2M": 300.0}),
        YearOutcome(2019, values={"T2M": None}),
        YearOutcome(2018, values={"T2M": math.nan}),
    ]
    s = fold_outcomes(outcomes, ["T2M"], CFG)
    assert s.get("T2M") == [300.0, 301.0, 301.0]
    assert s.years_used == [2021, 2022]
    assert s.years_failed == [2020]
    assert s.years_empty == [2018, 2019]
    assert not s.all_failed


def test_fold_outcomes_variables_independent():
    outcomes = [YearOutcome(2000, values={"T2M": 290.0, "QV2M": None})]
    s = fold_outcomes(outcomes, ["T2M", "QV2M"], CFG)
    assert s.get("T2M") == [290.0]
    assert s.is_empty("QV2M")
    assert s.mean("QV2M") is None


def test_window_mean_weights_wrapped_ranges_by_days():
    def fetch(start, end, variables):
        return {"T2M": 10.0 if start.month == 1 else 20.0}

    result = window_mean(fetch, 2023, 2, False, 7, ["T2M"])
    assert result["T2M"] == pytest.approx((10.0 * 9 + 20.0 * 5) / 14)


def test_window_mean_missing_variable_is_none():
    result = window_mean(lambda s, e, v: {}, 2023, 180, False, 7, ["T2M"])
    assert result == {"T2M": None}


def test_collect_samples_isolates_failed_years():
    cfg = replace(CFG, land_start_year=2018, land_end_year=2024)

    def fetch(start, end, variables):
        if start.year == 2019:
            raise RuntimeError("HTTP 500")
        return {"T2M": 280.0 + start.year - 2018}

    s = asyncio.run(collect_samples(fetch, cfg.land_years, ["T2M"], 180, False, cfg))
    assert s.years_failed == [2019]
    assert s.years_used == [2018, 2020, 2021, 2022, 2023, 2024]
    # 3 regular years + 3 recent years counted twice
    assert len(s.get("T2M")) == 9


def test_collect_samples_all_failed():
    def fetch(start, end, variables):
        raise ConnectionError("unreachable")

    s = asyncio.run(collect_samples(fetch, range(2000, 2004), ["T2M"], 180, False, CFG))
    assert s.all_failed
    assert s.is_empty("T2M")


def test_collect_samples_no_years():
    s = asyncio.run(collect_samples(lambda *a: {}, [], ["SST"], 180, False, CFG))
    assert s.is_empty("SST")
    assert not s.all_failed


def test_deadline_keeps_finished_years():
    cfg = replace(CFG, fetch_deadline_seconds=0.5)
    threads = set()

    def fetch(start, end, variables):
        threads.add(threading.current_thread().name)
        if start.year == 2003:
            time.sleep(3.0)
        return {"T2M": 290.0}

    began = time.monotonic()
    s = asyncio.run(collect_samples(fetch, range(2000, 2004), ["T2M"], 180, False, cfg, label="test"))
    # asyncio.run would block on the default executor if the slow year ran there
    assert time.monotonic() - began < 2.0
    assert s.years_used == [2000, 2001, 2002]
    assert s.years_skipped == [2003]
    assert all(name.startswith("fetch-test") for name in threads)


def test_deadline_leaves_no_pending_tasks():
    cfg = replace(CFG, fetch_deadline_seconds=0.2, max_concurrent_fetches=1)

    def fetch(start, end, variables):
        time.sleep(0.5)
        return {"T2M": 290.0}

    async def scenario():
        s = await collect_samples(fetch, range(2000, 2004), ["T2M"], 180, False, cfg)
        others = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
        return s, others

    s, others = asyncio.run(scenario())
    assert others == []
    assert s.years_skipped == [2000, 2001, 2002, 2003]
    assert s.is_empty("T2M")
