"""
Asynchronous sampling and evaluation loops.

This module provides the SamplingOrchestrator that drives the pipeline:
a fast sampling loop fetches stats for every live container and feeds the
rolling windows, and a slower evaluation loop runs the threshold state
machines and publishes alert events to the notification throttle.
"""

import asyncio
import functools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..alerting.state_machine import GRACE_PERIOD_SECONDS, ThresholdStateMachine
from ..alerting.throttle import NotificationThrottle
from ..metrics.percent import cpu_percent, memory_percent
from ..metrics.rolling_window import RollingWindowAverager
from ..models.alerts import AlertEvent
from ..models.config import MonitorConfig
from ..models.entities import MetricKind, MonitoredEntity, RawStats
from ..runtime.base import AbstractContainerRuntime
from ..validation import DataUnavailable, ErrorSeverity, InsufficientData, handle_error
from .state_store import MetricSeries, StateStore

logger = logging.getLogger(__name__)


class SamplingOrchestrator:
    """
    Runs the sampling-to-alert pipeline on two fixed cadences.

    Fetches run in a ThreadPoolExecutor and are fanned out per cycle with
    asyncio.gather, so a cycle takes as long as its slowest fetch (bounded
    by the fetch timeout). All state mutation happens on the event loop
    under the entity's lock.

    Args:
        runtime: Source of live entities and their stats.
        config: Monitor configuration.
        notifier: Throttle that routes alert events to channels.
        executor: Thread pool for blocking runtime calls; one is created
            by `run()` when omitted.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        runtime: AbstractContainerRuntime,
        config: MonitorConfig,
        notifier: NotificationThrottle,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.runtime = runtime
        self.config = config
        self.notifier = notifier
        self.executor = executor
        self._owns_executor = executor is None
        self.clock = clock

        self.store = StateStore(config.compiled_exclude_pattern())
        self.averager = RollingWindowAverager(self.store)
        self.state_machines: Dict[MetricKind, ThresholdStateMachine] = {
            MetricKind.CPU: ThresholdStateMachine(
                MetricKind.CPU, config.cpu_threshold, config.interval_seconds, config.verbose
            ),
            MetricKind.MEMORY: ThresholdStateMachine(
                MetricKind.MEMORY, config.memory_threshold, config.interval_seconds, config.verbose
            ),
        }

        self.started_at: Optional[float] = None
        self.live_entity_ids: List[str] = []
        self._shutdown_event = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

        self.stats = {
            "sampling_cycles": 0,
            "evaluation_cycles": 0,
            "fetch_failures": 0,
            "events_emitted": 0,
        }

    # --- Lifecycle ---

    def mark_started(self) -> float:
        """Start the grace-period clock if it is not running yet."""
        if self.started_at is None:
            self.started_at = self.clock()
        return self.started_at

    def in_grace_period(self, now: Optional[float] = None) -> bool:
        """True during the first GRACE_PERIOD_SECONDS after start, for every entity."""
        started_at = self.mark_started()
        if now is None:
            now = self.clock()
        return now - started_at < GRACE_PERIOD_SECONDS

    def request_shutdown(self) -> None:
        """Ask `run()` to stop both loops; in-flight fetches are abandoned."""
        if not self._shutdown_event.is_set():
            logger.info("Shutdown requested for sampling orchestrator")
        self._shutdown_event.set()

    async def run(self) -> None:
        """Run both loops until `request_shutdown()` is called."""
        if self.executor is None:
            self.executor = ThreadPoolExecutor(
                max_workers=self.config.max_concurrent_fetches,
                thread_name_prefix="ContainerFetch",
            )
        self.mark_started()

        logger.info(
            f"Monitoring started: sampling every {self.config.sample_interval_seconds}s, "
            f"evaluating every {self.config.interval_seconds}s "
            f"(CPU >= {self.config.cpu_threshold}%, memory >= {self.config.memory_threshold}%, "
            f"grace period {GRACE_PERIOD_SECONDS:.0f}s)"
        )

        self._tasks = [
            asyncio.create_task(
                self._run_periodic(self.sample_cycle, self.config.sample_interval_seconds, "sampling"),
                name="sampling-loop",
            ),
            asyncio.create_task(
                self._run_periodic(self.evaluate_cycle, self.config.interval_seconds, "evaluation"),
                name="evaluation-loop",
            ),
        ]

        try:
            await self._shutdown_event.wait()
        finally:
            for task in self._tasks:
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks.clear()

            if self._owns_executor and self.executor is not None:
                self.executor.shutdown(wait=False, cancel_futures=True)
                self.executor = None
            logger.info(
                f"Sampling orchestrator stopped after {self.stats['sampling_cycles']} sampling "
                f"and {self.stats['evaluation_cycles']} evaluation cycles"
            )

    async def _run_periodic(
        self, cycle: Callable[[], Awaitable[Any]], interval: float, name: str
    ) -> None:
        while not self._shutdown_event.is_set():
            cycle_start = self.clock()
            try:
                await cycle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                handle_error(
                    error=e,
                    context=f"{name} cycle",
                    severity=ErrorSeverity.ERROR,
                    include_traceback=True,
                    reraise=False,
                    logger=logger,
                )

            elapsed = self.clock() - cycle_start
            delay = interval - elapsed
            if delay < 0:
                logger.warning(f"{name.capitalize()} cycle took {elapsed:.2f}s, longer than interval of {interval}s.")
                delay = 0

            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(fn, *args))

    # --- Sampling ---

    async def sample_cycle(self) -> int:
        """
        Fetch stats for every live, non-excluded entity and record them.

        Returns:
            Number of entities that contributed at least one sample.
        """
        self.stats["sampling_cycles"] += 1
        try:
            descriptions = await self._call(self.runtime.list_live_entities)
        except DataUnavailable as e:
            logger.warning(f"Could not list running containers: {e}")
            return 0

        entities = [self.store.observe(description) for description in descriptions]
        active = [entity for entity in entities if not entity.excluded]
        self.live_entity_ids = [entity.id for entity in active]
        if not active:
            logger.debug("No running containers to sample")
            return 0

        results = await asyncio.gather(
            *(self._sample_entity(entity) for entity in active), return_exceptions=True
        )

        sampled = 0
        for entity, result in zip(active, results):
            if isinstance(result, BaseException):
                self.stats["fetch_failures"] += 1
                handle_error(
                    error=result,
                    context=f"sampling container {entity.display_name}",
                    severity=ErrorSeverity.WARNING,
                    reraise=False,
                    logger=logger,
                )
            elif result:
                sampled += 1

        logger.debug(f"Sampled {sampled}/{len(active)} containers")
        return sampled

    async def _sample_entity(self, entity: MonitoredEntity) -> bool:
        # The fetch runs unlocked so a slow backend never holds up evaluation.
        timeout = self.config.fetch_timeout_seconds
        try:
            raw = await asyncio.wait_for(
                self._call(self.runtime.fetch_stats, entity.id), timeout=timeout
            )
        except DataUnavailable as e:
            self.stats["fetch_failures"] += 1
            logger.warning(f"Skipping container {entity.display_name} this cycle: {e}")
            return False
        except asyncio.TimeoutError:
            self.stats["fetch_failures"] += 1
            logger.warning(f"Stats fetch for container {entity.display_name} timed out after {timeout}s")
            return False

        async with self.store.lock_for(entity.id):
            return self._commit_sample(entity, raw, self.clock())

    def _commit_sample(self, entity: MonitoredEntity, raw: RawStats, now: float) -> bool:
        """
        Turn raw stats into percentages and store them. Caller holds the entity lock.

        Partial stats skip the whole entity for this cycle, leaving its
        series exactly as they were.
        """
        if raw.cpu is None or raw.memory is None:
            missing = "CPU" if raw.cpu is None else "memory"
            logger.warning(f"No {missing} stats for container {entity.display_name}; skipping it this cycle")
            return False

        cpu_series = self.store.series(entity.id, MetricKind.CPU)
        previous = cpu_series.previous_cpu
        cpu_value: Optional[float] = None
        if previous is not None:
            try:
                cpu_value = cpu_percent(raw.cpu, previous)
            except DataUnavailable as e:
                logger.warning(f"Skipping container {entity.display_name} this cycle: {e}")
                return False

        cpu_series.previous_cpu = raw.cpu
        if cpu_value is None:
            logger.debug(f"Primed CPU counters for container {entity.display_name}")
        else:
            self.averager.record(entity.id, MetricKind.CPU, now, cpu_value)
            cpu_series.update(cpu_value, now)

        self.store.series(entity.id, MetricKind.MEMORY).update(memory_percent(raw.memory), now)
        return True

    # --- Evaluation ---

    async def evaluate_cycle(self) -> List[AlertEvent]:
        """
        Run the state machines for every live entity and publish the results.

        Returns:
            The events produced this cycle (before throttling).
        """
        self.stats["evaluation_cycles"] += 1
        now = self.clock()
        in_grace = self.in_grace_period(now)

        events: List[AlertEvent] = []
        for entity_id in list(self.live_entity_ids):
            entity = self.store.entity(entity_id)
            if entity is None or entity.excluded:
                continue
            async with self.store.lock_for(entity_id):
                events.extend(self._evaluate_entity(entity, in_grace))

        for event in events:
            await self._call(self.notifier.publish, event)
        self.stats["events_emitted"] += len(events)
        return events

    def _evaluate_entity(self, entity: MonitoredEntity, in_grace: bool) -> List[AlertEvent]:
        events = []
        for metric, machine in self.state_machines.items():
            series = self.store.series(entity.id, metric)
            if not self._has_fresh_sample(series):
                logger.debug(f"No new {metric.value} sample for container {entity.display_name}; skipping")
                continue
            series.evaluated_at = series.updated_at
            try:
                value = self._current_value(entity.id, metric, series)
            except InsufficientData as e:
                handle_error(
                    error=e,
                    context=f"evaluating {metric.value} for container {entity.display_name}",
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
                continue

            event = machine.evaluate(entity, series, value, in_grace_period=in_grace)
            if event is not None:
                events.append(event)
        return events

    @staticmethod
    def _has_fresh_sample(series: MetricSeries) -> bool:
        """True if the series gained a sample since it was last evaluated."""
        if series.updated_at is None:
            return False
        return series.evaluated_at is None or series.updated_at > series.evaluated_at

    def _current_value(self, entity_id: str, metric: MetricKind, series: MetricSeries) -> float:
        """CPU is judged on its rolling average, memory on the latest sample."""
        if metric == MetricKind.CPU:
            return self.averager.average(entity_id, metric)
        if series.latest is None:
            raise InsufficientData(f"no {metric.value} sample recorded for {entity_id}")
        return series.latest
