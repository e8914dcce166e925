"""Concurrent fan-out over screening sources.

Every slot races its adapter call against its own deadline. A slot that
times out or raises becomes an absent result tagged with the reason; the
run as a whole never raises and returns once every slot has resolved, so
the caller waits at most max(timeouts) plus scheduling overhead.

Timed-out calls are cancelled. An adapter that swallows the cancellation
may keep running in the background, but its late result is discarded.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

import structlog

from src.domains.scoring.models import Finding

from .config import ScreeningConfig, default_config
from .models import SourceResult, SourceStatus, Subject

logger = structlog.get_logger()

AdapterCall = Callable[[Subject], Awaitable[Finding]]


@dataclass(frozen=True)
class SourceSlot:
    name: str
    call: AdapterCall
    timeout_ms: int | None = None


def _consume_exception(task: asyncio.Task) -> None:
    # Retrieve late exceptions from abandoned tasks so they are not reported as unhandled
    if not task.cancelled():
        task.exception()


class FanOutExecutor:
    def __init__(self, config: ScreeningConfig | None = None) -> None:
        self._config = config or default_config

    @property
    def config(self) -> ScreeningConfig:
        return self._config

    async def run(
        self,
        subject: Subject,
        slots: Iterable[SourceSlot],
        allow_list: Iterable[str] | None = None,
    ) -> dict[str, SourceResult]:
        """Run every allowed slot concurrently. Never raises for adapter errors."""
        slots = list(slots)
        allowed = set(allow_list) if allow_list is not None else None

        results: dict[str, SourceResult] = {}
        runnable: list[SourceSlot] = []
        for slot in slots:
            if allowed is not None and slot.name not in allowed:
                results[slot.name] = SourceResult(
                    name=slot.name, status=SourceStatus.SKIPPED, error="not in allow-list"
                )
            else:
                runnable.append(slot)

        if allowed is not None:
            unknown = sorted(allowed - {s.name for s in slots})
            if unknown:
                logger.info("unknown_sources_requested", sources=unknown)

        # Bounded per run; created here so it binds to the running loop
        semaphore = asyncio.Semaphore(max(1, self._config.max_concurrency))
        outcomes = await asyncio.gather(
            *(self._run_slot(subject, slot, semaphore) for slot in runnable)
        )
        for outcome in outcomes:
            results[outcome.name] = outcome

        # Preserve slot order in the returned mapping
        return {slot.name: results[slot.name] for slot in slots}

    async def _guarded(
        self, slot: SourceSlot, subject: Subject, semaphore: asyncio.Semaphore
    ) -> Finding:
        async with semaphore:
            return await slot.call(subject)

    async def _run_slot(
        self, subject: Subject, slot: SourceSlot, semaphore: asyncio.Semaphore
    ) -> SourceResult:
        timeout_ms = self._config.default_timeout_ms if slot.timeout_ms is None else slot.timeout_ms
        started = time.perf_counter()
        task = asyncio.ensure_future(self._guarded(slot, subject, semaphore))

        try:
            done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            # The caller gave up on the whole run; take the adapter call down with it
            task.cancel()
            task.add_done_callback(_consume_exception)
            raise
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        if task not in done:
            task.cancel()
            task.add_done_callback(_consume_exception)
            logger.warning("source_timed_out", source=slot.name, timeout_ms=timeout_ms)
            return SourceResult(
                name=slot.name,
                status=SourceStatus.TIMEOUT,
                error=f"timed out after {timeout_ms} ms",
                duration_ms=elapsed_ms,
            )

        if task.cancelled():
            logger.warning("source_cancelled", source=slot.name)
            return SourceResult(
                name=slot.name,
                status=SourceStatus.FAILED,
                error="cancelled",
                duration_ms=elapsed_ms,
            )

        exc = task.exception()
        if exc is not None:
            logger.warning(
                "source_failed",
                source=slot.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return SourceResult(
                name=slot.name,
                status=SourceStatus.FAILED,
                error=f"{type(exc).__name__}: {exc}",
                duration_ms=elapsed_ms,
            )

        finding = task.result()
        if not isinstance(finding, Finding):
            logger.warning(
                "source_result_malformed",
                source=slot.name,
                result_type=type(finding).__name__,
            )
            return SourceResult(
                name=slot.name,
                status=SourceStatus.FAILED,
                error=f"malformed result of type {type(finding).__name__}",
                duration_ms=elapsed_ms,
            )

        return SourceResult(
            name=slot.name,
            status=SourceStatus.OK,
            finding=finding,
            duration_ms=elapsed_ms,
        )
