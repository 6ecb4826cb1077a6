"""Deadline sweep worker.

Runs the loop engine's tick on a fixed interval so deadlines are applied
even for participants who never call in. Each sweep gets its own
correlation ID. A failed sweep is logged and retried on the next
interval; the worker only stops on stop() or a termination signal.

Environment Variables:
- FOUNDER_LOOP_ENVIRONMENT: Logging mode, "development" or "production"
  (default: development)
- FOUNDER_LOOP_TICK_INTERVAL_SECONDS: Sweep interval (see LoopConfig)
"""

from __future__ import annotations

import asyncio
import os
import signal

from dotenv import load_dotenv
from structlog import get_logger

from founder_loop.application.dtos.loop_state import TickSummaryDTO
from founder_loop.application.services.loop_engine_service import LoopEngineService
from founder_loop.bootstrap.logging import configure_structlog
from founder_loop.bootstrap.loop_engine import get_loop_engine
from founder_loop.infrastructure.observability.correlation import (
    generate_correlation_id,
    set_correlation_id,
)

logger = get_logger()


class DeadlineSweepWorker:
    """Periodically applies deadlines for every participant."""

    def __init__(self, engine: LoopEngineService, interval_seconds: float | None = None) -> None:
        """Initialize the worker.

        Args:
            engine: Loop engine to tick.
            interval_seconds: Seconds between sweeps. Defaults to the
                engine's configured tick interval.
        """
        self._engine = engine
        self._interval = (
            interval_seconds
            if interval_seconds is not None
            else engine.config.tick_interval_seconds
        )
        if self._interval <= 0:
            raise ValueError(f"interval_seconds must be positive, got {self._interval}")
        self._running = False
        self._stop_event = asyncio.Event()
        self._sweeps = 0
        self._failures = 0

    @property
    def running(self) -> bool:
        return self._running

    async def sweep_once(self) -> TickSummaryDTO | None:
        """Run a single sweep.

        Returns:
            The tick summary, or None if the sweep failed.
        """
        correlation_id = generate_correlation_id()
        set_correlation_id(correlation_id)
        log = logger.bind(correlation_id=correlation_id)
        try:
            summary = await self._engine.tick()
        except Exception as exc:
            self._failures += 1
            log.exception("deadline_sweep_failed", error_type=type(exc).__name__)
            return None
        self._sweeps += 1
        return summary

    async def run(self) -> None:
        """Run sweeps until stop() is called."""
        self._running = True
        self._stop_event.clear()
        logger.info("deadline_sweep_worker_started", interval_seconds=self._interval)
        try:
            while self._running:
                await self.sweep_once()
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
                except asyncio.TimeoutError:
                    continue
        finally:
            self._running = False
            logger.info(
                "deadline_sweep_worker_stopped",
                sweeps=self._sweeps,
                failures=self._failures,
            )

    def stop(self) -> None:
        """Signal the worker to stop after the current sweep."""
        logger.info("deadline_sweep_worker_stop_requested")
        self._running = False
        self._stop_event.set()

    def get_metrics(self) -> dict[str, object]:
        """Get worker metrics for monitoring."""
        return {
            "sweeps": self._sweeps,
            "failures": self._failures,
            "interval_seconds": self._interval,
            "running": self._running,
        }


async def _run_from_env() -> None:
    load_dotenv()
    configure_structlog(os.getenv("FOUNDER_LOOP_ENVIRONMENT", "development"))

    worker = DeadlineSweepWorker(get_loop_engine())

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, worker.stop)

    await worker.run()


def main() -> None:
    """Console entry point."""
    asyncio.run(_run_from_env())


if __name__ == "__main__":
    main()
