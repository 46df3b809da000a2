"""
Bulk extraction scheduler.

A single dispatcher coroutine admits URLs into ``asyncio`` tasks under four
limits: global concurrency, starts per rolling minute, per-domain
concurrency, and a minimum delay between starts to one domain. Admission
scans pending work in input order and starts the first URL whose domain is
ready, so a saturated domain never holds back other domains.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Set, Tuple

import structlog

from ogie.crawler.domains import registrable_domain
from ogie.crawler.rate_limiter import DomainThrottle, RollingWindowLimiter
from ogie.errors import ErrorCode, OgieError
from ogie.observability.metrics import METRICS
from ogie.protocols import (
    BulkItemResult,
    BulkOptions,
    BulkProgress,
    BulkResult,
    BulkStats,
    BulkTask,
    ExtractFailure,
    ExtractOptions,
    ExtractResult,
    TaskState,
)

logger = structlog.get_logger(__name__)

ExtractFn = Callable[[str, ExtractOptions], Awaitable[ExtractResult]]

RATE_WINDOW_SECONDS = 60.0


class BulkScheduler:
    """Runs one extraction per URL under global and per-domain limits.

    Results come back in input order. A failed URL never cancels the others;
    with ``continue_on_error=False`` the first failure stops admission and
    URLs that never started are reported as skipped.
    """

    def __init__(
        self,
        options: BulkOptions,
        extract_fn: ExtractFn,
        domain_fn: Callable[[str], str] = registrable_domain,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.options = options
        self.extract_fn = extract_fn
        self.domain_fn = domain_fn
        self._clock = clock
        self.rate_limiter = RollingWindowLimiter(options.requests_per_minute, RATE_WINDOW_SECONDS, clock)
        self.throttle = DomainThrottle(options.min_delay_per_domain / 1000.0, clock)

        self._wakeup = asyncio.Event()
        self._stopped = False
        self._domain_in_flight: Dict[str, int] = {}
        self._running: Set[asyncio.Task] = set()
        self._active = 0
        self._results: List[BulkItemResult] = []
        self._stats = BulkStats()
        self._completed = 0

    @property
    def in_flight(self) -> int:
        return self._active

    @property
    def stats(self) -> BulkStats:
        return self._stats

    def cancel(self) -> None:
        """Stop admitting new URLs. Extractions already started run to completion."""
        if not self._stopped:
            logger.info("Bulk run cancelled", in_flight=self._active)
        self._stopped = True
        self._wakeup.set()

    async def run(self, urls: Sequence[str]) -> BulkResult:
        """Extract every URL and return per-URL outcomes plus aggregate stats."""
        start_ts = self._clock()
        tasks = [BulkTask(index, url, self.domain_fn(url)) for index, url in enumerate(urls)]
        self._results = [BulkItemResult(url=url, result=None) for url in urls]
        self._stats = BulkStats(total=len(tasks))
        self._completed = 0

        logger.info(
            "Bulk run started",
            total=len(tasks),
            concurrency=self.options.concurrency,
            concurrency_per_domain=self.options.concurrency_per_domain,
            requests_per_minute=self.options.requests_per_minute,
        )

        pending: List[BulkTask] = list(tasks)
        try:
            await self._dispatch(pending)
            if self._running:
                await asyncio.gather(*self._running, return_exceptions=True)
        finally:
            for task in list(self._running):
                task.cancel()

        self._stats.skipped = sum(1 for task in tasks if task.state is TaskState.PENDING)
        self._stats.duration_ms = round((self._clock() - start_ts) * 1000, 3)
        logger.info(
            "Bulk run finished",
            total=self._stats.total,
            succeeded=self._stats.succeeded,
            failed=self._stats.failed,
            skipped=self._stats.skipped,
            duration_ms=self._stats.duration_ms,
        )
        return BulkResult(results=self._results, stats=self._stats)

    async def _dispatch(self, pending: List[BulkTask]) -> None:
        while pending and not self._stopped:
            # No await between clear() and the admission checks below
            self._wakeup.clear()
            now = self._clock()

            if self._active >= self.options.concurrency:
                await self._wait(None)
                continue

            rate_delay = self.rate_limiter.delay(now)
            if rate_delay > 0:
                logger.debug("Global rate limit reached, waiting", delay=round(rate_delay, 3))
                await self._wait(rate_delay)
                continue

            task, hint = self._next_admissible(pending, now)
            if task is None:
                await self._wait(hint)
                continue

            pending.remove(task)
            self._start(task, now)

    def _next_admissible(self, pending: List[BulkTask], now: float) -> Tuple[Optional[BulkTask], Optional[float]]:
        """First pending task whose domain has capacity, or the shortest spacing wait."""
        shortest: Optional[float] = None
        checked: Set[str] = set()
        for task in pending:
            if task.domain in checked:
                continue
            checked.add(task.domain)
            if self._domain_in_flight.get(task.domain, 0) >= self.options.concurrency_per_domain:
                continue
            delay = self.throttle.delay(task.domain, now)
            if delay <= 0:
                return task, None
            shortest = delay if shortest is None else min(shortest, delay)
        return None, shortest

    async def _wait(self, timeout: Optional[float]) -> None:
        if timeout is None and self._active == 0:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout)
        except asyncio.TimeoutError:
            pass

    def _start(self, task: BulkTask, now: float) -> None:
        task.state = TaskState.RUNNING
        self.rate_limiter.record(now)
        self.throttle.record_start(task.domain, now)
        self._domain_in_flight[task.domain] = self._domain_in_flight.get(task.domain, 0) + 1
        self._active += 1
        METRICS["bulk_in_flight"].inc()

        worker = asyncio.create_task(self._run_task(task))
        self._running.add(worker)
        worker.add_done_callback(self._running.discard)

    async def _run_task(self, task: BulkTask) -> None:
        start_ts = self._clock()
        try:
            result = await self.extract_fn(task.url, self.options.extract_options)
        except Exception as e:
            logger.error("Extraction raised unexpectedly", url=task.url, error=str(e))
            result = ExtractFailure(OgieError(str(e) or type(e).__name__, ErrorCode.FETCH_ERROR, task.url, e))
        finally:
            self._domain_in_flight[task.domain] -= 1
            self._active -= 1
            METRICS["bulk_in_flight"].dec()

        task.state = TaskState.DONE
        duration_ms = round((self._clock() - start_ts) * 1000, 3)
        self._results[task.index] = BulkItemResult(url=task.url, result=result, duration_ms=duration_ms)

        if result.success:
            self._stats.succeeded += 1
        else:
            self._stats.failed += 1
            logger.warning("Bulk item failed", url=task.url, code=result.error.code.value)
            if not self.options.continue_on_error and not self._stopped:
                logger.info("Stopping bulk run after first failure", url=task.url)
                self._stopped = True

        self._completed += 1
        self._wakeup.set()
        await self._report_progress(task.url)

    async def _report_progress(self, url: str) -> None:
        callback = self.options.on_progress
        if callback is None:
            return
        progress = BulkProgress(
            completed=self._completed,
            total=self._stats.total,
            succeeded=self._stats.succeeded,
            failed=self._stats.failed,
            url=url,
        )
        try:
            outcome = callback(progress)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.warning("Progress callback failed", url=url, error=str(e))
