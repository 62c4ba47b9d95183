"""
Worker pool that drains a task queue whose tasks may enqueue more tasks.

Termination relies on a pending counter rather than on the queue being empty:
a task is registered when enqueued and retired only after any follow-ups it
produced have been registered, so the count reaches zero exactly once, after
the last task of the run.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable

from catalog.domain.catalog import DetailTask, PageTask, Product, ScrapeTask
from catalog.scraping.logging_utils import log_event
from catalog.scraping.types import SchedulerStats, TaskOutcome

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 3
DEFAULT_POLL_INTERVAL_SECONDS = 0.2

_STOP = object()
_RESULTS_DONE = object()


class PendingCounter:
    """
    Count of registered tasks that have not reached a terminal state.
    """

    def __init__(self) -> None:
        self._value = 0
        self._condition = threading.Condition(threading.Lock())

    @property
    def value(self) -> int:
        with self._condition:
            return self._value

    def register(self, count: int = 1) -> None:
        if count < 0:
            raise ValueError("count must be >= 0")
        with self._condition:
            self._value += count

    def retire(self) -> None:
        with self._condition:
            if self._value <= 0:
                raise RuntimeError("Pending counter retired below zero.")
            self._value -= 1
            if self._value == 0:
                self._condition.notify_all()

    def wait_for_zero(self, poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS) -> None:
        with self._condition:
            while self._value > 0:
                self._condition.wait(timeout=poll_interval)


def describe_task(task: ScrapeTask) -> dict[str, object]:
    if isinstance(task, PageTask):
        return {"task": "page", "category": task.category.name, "page": task.page_number}
    if isinstance(task, DetailTask):
        return {"task": "detail", "url": task.entry.url, "category": task.entry.category}
    return {"task": type(task).__name__}


class TaskScheduler:
    """
    Runs `handler` over seed tasks and every follow-up they produce.

    Products from each task are handed to `consume` on the thread that
    called `run`, which makes that thread the only writer of whatever
    `consume` updates.
    """

    def __init__(
        self,
        *,
        handler: Callable[[ScrapeTask], TaskOutcome],
        workers: int = DEFAULT_WORKERS,
        delay_seconds: float = 0.0,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._handler = handler
        self._workers = max(1, workers)
        self._delay_seconds = max(0.0, delay_seconds)
        self._poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep

        self._intake: queue.Queue[object] = queue.Queue()
        self._results: queue.Queue[object] = queue.Queue()
        self._pending = PendingCounter()
        self._stopping = threading.Event()
        self._stats_lock = threading.Lock()
        self._stats = SchedulerStats()

    def stop(self) -> None:
        """
        Stop taking on work: queued tasks are discarded and follow-ups are no
        longer registered. Tasks already being handled finish normally.
        """

        if not self._stopping.is_set():
            log_event(logger, logging.WARNING, "scheduler_stopping", pending=self._pending.value)
        self._stopping.set()

    def run(
        self,
        seed_tasks: Iterable[ScrapeTask],
        consume: Callable[[list[Product]], None],
    ) -> SchedulerStats:
        seeds = list(seed_tasks)
        self._pending.register(len(seeds))
        for task in seeds:
            self._intake.put(task)

        log_event(
            logger,
            logging.INFO,
            "scheduler_started",
            workers=self._workers,
            seed_tasks=len(seeds),
            delay_seconds=self._delay_seconds,
        )

        worker_threads = [
            threading.Thread(target=self._work, name=f"catalog-worker-{index + 1}", daemon=True)
            for index in range(self._workers)
        ]
        supervisor = threading.Thread(target=self._supervise, name="catalog-supervisor", daemon=True)
        closer = threading.Thread(
            target=self._close_results,
            args=(worker_threads,),
            name="catalog-results-closer",
            daemon=True,
        )
        for thread in worker_threads:
            thread.start()
        supervisor.start()
        closer.start()

        try:
            while True:
                item = self._results.get()
                if item is _RESULTS_DONE:
                    break
                consume(item)  # type: ignore[arg-type]
        except BaseException:
            self.stop()
            self._drain_results()
            raise
        finally:
            supervisor.join()
            closer.join()

        log_event(
            logger,
            logging.INFO,
            "scheduler_finished",
            completed=self._stats.completed,
            skipped=self._stats.skipped,
            discarded=self._stats.discarded,
        )
        return self._stats

    def _supervise(self) -> None:
        self._pending.wait_for_zero(self._poll_interval_seconds)
        for _ in range(self._workers):
            self._intake.put(_STOP)

    def _close_results(self, worker_threads: list[threading.Thread]) -> None:
        for thread in worker_threads:
            thread.join()
        self._results.put(_RESULTS_DONE)

    def _drain_results(self) -> None:
        while self._results.get() is not _RESULTS_DONE:
            continue

    def _work(self) -> None:
        while True:
            task = self._intake.get()
            if task is _STOP:
                return

            if self._stopping.is_set():
                with self._stats_lock:
                    self._stats.discarded += 1
                self._pending.retire()
                continue

            try:
                self._handle(task)  # type: ignore[arg-type]
            finally:
                self._pending.retire()
            if self._delay_seconds > 0:
                self._sleep(self._delay_seconds)

    def _handle(self, task: ScrapeTask) -> None:
        try:
            outcome = self._handler(task)
        except Exception as exc:
            message = f"{type(exc).__name__}: {exc}"
            with self._stats_lock:
                self._stats.skipped += 1
                self._stats.errors.append(message)
            log_event(
                logger,
                logging.WARNING,
                "task_skipped",
                error_type=type(exc).__name__,
                error=str(exc),
                **describe_task(task),
            )
            return

        # Follow-ups are registered before the parent retires.
        if outcome.follow_ups and not self._stopping.is_set():
            self._pending.register(len(outcome.follow_ups))
            for follow_up in outcome.follow_ups:
                self._intake.put(follow_up)
        if outcome.products:
            self._results.put(list(outcome.products))
        with self._stats_lock:
            self._stats.completed += 1
