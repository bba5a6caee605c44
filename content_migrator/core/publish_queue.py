"""Bounded queue of asynchronous publish jobs.

Starting a publish on the hub returns the location of a job that completes
later. The queue caps how many of those jobs may be outstanding at once and
polls them, oldest first, from a single worker task. Submitters that find
every slot taken wait in line and are let through in submission order as
jobs finish.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

from content_migrator.core.config import PublishQueueConfig
from content_migrator.exceptions import PublishError
from content_migrator.services.protocols import PublishService
from content_migrator.types import ContentRecord, PublishJob, PublishJobState
from content_migrator.utils.api import REMOTE_ERRORS
from content_migrator.utils.logging import log_with_context

RATE_LIMIT_WINDOW = 60.0


class PublishQueue:
    """Starts publishes and tracks their jobs until each one is terminal.

    Args:
        service: Service that starts publishes and reports job state.
        config: Slot, polling and rate limits.
        clock: Monotonic clock, replaceable in tests.
        sleep: Coroutine used for every delay, replaceable in tests.
    """

    def __init__(
        self,
        service: PublishService,
        config: PublishQueueConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        config = config or PublishQueueConfig()
        self.service = service
        self.max_in_flight = config.max_in_flight
        self.max_attempts = config.max_attempts
        self.attempt_delay = config.attempt_delay
        self.rate_limit_per_minute = config.rate_limit_per_minute
        self._clock = clock
        self._sleep = sleep

        self.completed_jobs: list[PublishJob] = []
        self.failed_jobs: list[PublishJob] = []

        # Slots held by started jobs and by submitters that are starting one.
        self._active = 0
        self._in_flight: deque[PublishJob] = deque()
        self._waiters: deque[asyncio.Future[None]] = deque()
        self._starts: deque[float] = deque()
        self._wakeup = asyncio.Event()
        self._worker: asyncio.Task[None] | None = None
        self._draining = False

    @property
    def in_flight(self) -> int:
        """Number of slots currently taken."""
        return self._active

    @property
    def waiting(self) -> int:
        return len(self._waiters)

    # -- Submission -----------------------------------------------------------

    async def submit(self, record: ContentRecord) -> PublishJob:
        """Start publishing ``record`` once a slot is free.

        A publish that cannot be started is added to ``failed_jobs`` with no
        location before the error is raised, so the two job lists account for
        every submission.

        Raises:
            PublishError: If the hub refused the publish or did not return a
                job location. The slot is released in both cases.
        """
        await self._acquire_slot()
        try:
            await self._rate_limit()
            location = await self.service.start_publish(record)
        except REMOTE_ERRORS as e:
            self._fail_start(record, f"not started: {e}")
            raise PublishError(f"Failed to start publish for {record.label}: {e}") from e

        if not location:
            self._fail_start(record, "not started: no job location returned")
            raise PublishError(
                f"Expected a publish job location for {record.label}, got none"
            )

        job = PublishJob(record=record, location=location)
        self._in_flight.append(job)
        self._wakeup.set()
        log_with_context(
            logging.DEBUG,
            f"Started publish for {record.label}",
            content_id=record.id,
            location=location,
        )
        return job

    async def drain(self) -> None:
        """Wait until every submitted job has reached a terminal state."""
        if self._active == 0 and not self._waiters:
            return

        self._draining = True
        try:
            worker = self._ensure_worker()
            await worker
        finally:
            self._draining = False

    # -- Slots ----------------------------------------------------------------

    async def _acquire_slot(self) -> None:
        if self._active < self.max_in_flight and not self._waiters:
            self._active += 1
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        self._ensure_worker()
        # The releasing side hands its slot straight to us.
        await waiter

    def _release_slot(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                self._wakeup.set()
                return
        self._active -= 1
        self._wakeup.set()

    def _fail_start(self, record: ContentRecord, error: str) -> None:
        self.failed_jobs.append(PublishJob(record=record, location="", error=error))
        self._release_slot()

    async def _rate_limit(self) -> None:
        if self.rate_limit_per_minute <= 0:
            return

        now = self._clock()
        while self._starts and now - self._starts[0] >= RATE_LIMIT_WINDOW:
            self._starts.popleft()

        if len(self._starts) >= self.rate_limit_per_minute:
            wait = RATE_LIMIT_WINDOW - (now - self._starts.popleft())
            if wait > 0:
                log_with_context(
                    logging.DEBUG, f"Publish rate limit reached, waiting {wait:.1f}s"
                )
                await self._sleep(wait)
            now = self._clock()

        self._starts.append(now)

    # -- Polling --------------------------------------------------------------

    def _ensure_worker(self) -> asyncio.Task[None]:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.ensure_future(self._run_worker())
        return self._worker

    def _has_work(self) -> bool:
        return bool(self._in_flight or self._waiters) or (
            self._draining and self._active > 0
        )

    async def _run_worker(self) -> None:
        while self._has_work():
            if not self._in_flight:
                # Slots are held by submitters still starting their publish.
                self._wakeup.clear()
                await self._wakeup.wait()
                continue

            job = self._in_flight.popleft()
            await self._wait_for_job(job)
            self._release_slot()

    async def _wait_for_job(self, job: PublishJob) -> None:
        for attempt in range(1, self.max_attempts + 1):
            job.attempts = attempt
            try:
                job.state = await self.service.get_publish_job(job.location)
            except Exception as e:
                log_with_context(
                    logging.WARNING,
                    f"Could not fetch publish job for {job.record.label}: {e}",
                    attempt=attempt,
                )
            else:
                if job.state is PublishJobState.COMPLETED:
                    self.completed_jobs.append(job)
                    return
                if job.state is PublishJobState.FAILED:
                    job.error = "publish job failed"
                    self.failed_jobs.append(job)
                    log_with_context(
                        logging.WARNING, f"Publish failed for {job.record.label}"
                    )
                    return

            if attempt < self.max_attempts:
                await self._sleep(self.attempt_delay)

        job.error = f"not finished after {self.max_attempts} attempts"
        self.failed_jobs.append(job)
        log_with_context(
            logging.WARNING,
            f"Gave up waiting for publish of {job.record.label}",
            attempts=self.max_attempts,
        )
