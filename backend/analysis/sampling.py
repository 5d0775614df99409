"""
Multi-year sample collection around a day-of-year.

Every year in range is an independent unit of work: fetch the spatial mean of
each variable over that year's ±N-day window, then fold all outcomes into one
sample set per variable. Recent years are duplicated to approximate a 1.5x
weight. A year that fails or reports nothing simply contributes nothing.
"""
import asyncio
import functools
import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from config import EngineConfig
from analysis.doy import center_doy_for_year, window_ranges
from analysis.errors import FetchError

logger = logging.getLogger("climate.sampling")

# (start, end, variables) -> {variable: value or None}
WindowFetch = Callable[[date, date, Sequence[str]], Mapping[str, Optional[float]]]


@dataclass
class YearOutcome:
    year: int
    values: Optional[Dict[str, Optional[float]]] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.values is not None


@dataclass
class SampleSets:
    """One weighted multiset per variable, plus bookkeeping of what was lost."""

    values: Dict[str, List[float]] = field(default_factory=dict)
    years_used: List[int] = field(default_factory=list)
    years_empty: List[int] = field(default_factory=list)
    years_failed: List[int] = field(default_factory=list)
    years_skipped: List[int] = field(default_factory=list)

    def get(self, variable: str) -> List[float]:
        return self.values.get(variable, [])

    def is_empty(self, variable: str) -> bool:
        return len(self.get(variable)) == 0

    def mean(self, variable: str) -> Optional[float]:
        vals = self.get(variable)
        return sum(vals) / len(vals) if vals else None

    def as_mapping(self) -> Dict[str, List[float]]:
        return {k: list(v) for k, v in self.values.items()}

    @property
    def all_failed(self) -> bool:
        return bool(self.years_failed) and not (self.years_used or self.years_empty)


def recent_year_copies(year: int, cfg: EngineConfig) -> int:
    """1 copy before the recent-year threshold, round(1.5) = 2 copies after."""
    weight = cfg.recent_year_weight if year >= cfg.recent_year_threshold else 1.0
    # half-up, so a weight of 2.5 gives 3 like the reference behaviour
    return int(math.floor(weight + 0.5))


def fold_outcomes(outcomes: Iterable[YearOutcome], variables: Sequence[str],
                  cfg: EngineConfig) -> SampleSets:
    """Accumulate per-year outcomes (in year order) into sample sets."""
    samples = SampleSets(values={v: [] for v in variables})
    for outcome in sorted(outcomes, key=lambda o: o.year):
        if not outcome.ok:
            samples.years_failed.append(outcome.year)
            continue
        copies = recent_year_copies(outcome.year, cfg)
        contributed = False
        for var in variables:
            value = outcome.values.get(var)
            if value is None or not math.isfinite(value):
                continue
            samples.values[var].extend([float(value)] * copies)
            contributed = True
        if contributed:
            samples.years_used.append(outcome.year)
        else:
            samples.years_empty.append(outcome.year)
    return samples


def window_mean(fetch: WindowFetch, year: int, query_doy: int, query_is_leap: bool,
                half_width: int, variables: Sequence[str]) -> Dict[str, Optional[float]]:
    """Spatial mean of each variable over the year's wrapped window.

    A window that wraps over Jan 1 / Dec 31 is two date ranges of the same
    year; their means are combined weighted by day count.
    """
    center = center_doy_for_year(query_doy, query_is_leap, year)
    totals = {v: 0.0 for v in variables}
    days = {v: 0 for v in variables}
    for start, end in window_ranges(year, center, half_width):
        span = (end - start).days + 1
        result = fetch(start, end, variables) or {}
        for var in variables:
            value = result.get(var)
            if value is None or not math.isfinite(value):
                continue
            totals[var] += value * span
            days[var] += span
    return {v: (totals[v] / days[v] if days[v] else None) for v in variables}


async def collect_samples(fetch: WindowFetch, years: Iterable[int], variables: Sequence[str],
                          query_doy: int, query_is_leap: bool, cfg: EngineConfig,
                          label: str = "MERRA-2") -> SampleSets:
    """Fetch every year concurrently (bounded) and fold into sample sets.

    With `cfg.fetch_deadline_seconds` set, years still pending at the deadline
    are cancelled and recorded as skipped; whatever finished is kept. Blocking
    fetches run on a per-call pool so an overrun never occupies the loop's
    default executor.
    """
    years = list(years)
    workers = max(1, cfg.max_concurrent_fetches)
    semaphore = asyncio.Semaphore(workers)
    finished = 0
    started = time.monotonic()

    async def one(year: int) -> YearOutcome:
        nonlocal finished
        async with semaphore:
            try:
                values = await loop.run_in_executor(executor, functools.partial(
                    window_mean, fetch, year, query_doy, query_is_leap, cfg.window_days, variables))
                outcome = YearOutcome(year, values=values)
            except Exception as exc:
                logger.warning("⚠️ %s fetch failed for %d: %s", label, year, exc)
                outcome = YearOutcome(year, error=FetchError(year, exc))
        finished += 1
        if finished % 10 == 0:
            logger.info("   Progress: %d%% (%d/%d years)", finished * 100 // len(years), finished, len(years))
        return outcome

    if not years:
        return SampleSets(values={v: [] for v in variables})

    loop = asyncio.get_running_loop()
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"fetch-{label}")
    try:
        tasks = {asyncio.create_task(one(y)): y for y in years}
        done, pending = await asyncio.wait(tasks, timeout=cfg.fetch_deadline_seconds)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
    finally:
        # queued years are dropped; a fetch already running finishes on its own thread
        executor.shutdown(wait=False, cancel_futures=True)

    samples = fold_outcomes((t.result() for t in done), variables, cfg)
    samples.years_skipped = sorted(tasks[t] for t in pending)

    lost = len(samples.years_failed) + len(samples.years_skipped)
    first = variables[0]
    logger.info("✅ %s: %d years (%d weighted %s samples) in %.1fs",
                label, len(samples.years_used), len(samples.get(first)), first,
                time.monotonic() - started)
    if lost:
        logger.warning("⚠️ %s: %d years lost (%d failed, %d past deadline)",
                       label, lost, len(samples.years_failed), len(samples.years_skipped))
    return samples
