"""Per-request planning context.

Everything a single planning request accumulates (probes, candidate pool,
used-set, deadline, cancellation flag) lives here and is never shared across
requests. The upstream rate limiter is the only cross-request resource and is
reached through the HTTP client, not through this object.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from roadtrip.config.settings import EngineSettings, load_engine_settings
from roadtrip.domain.models import SearchProbe
from roadtrip.infrastructure.logging import StructuredLogger
from roadtrip.planner.scoring import CandidatePool
from roadtrip.shared.exceptions import PlanCancelledError, PlanTimeoutError


@dataclass
class PlanContext:
    settings: EngineSettings
    logger: StructuredLogger
    deadline: float
    cancel_event: threading.Event = field(default_factory=threading.Event)
    probes: list[SearchProbe] = field(default_factory=list)
    pool: CandidatePool = field(default_factory=CandidatePool)
    used: set[str] = field(default_factory=set)
    sleep: Optional[Callable[[float], None]] = None
    failed_calls: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def trace_id(self) -> str:
        return self.logger.trace_id

    def cancel(self) -> None:
        self.cancel_event.set()

    def checkpoint(self) -> None:
        """Called before every external call; stops work once cancelled or late."""
        if self.cancel_event.is_set():
            raise PlanCancelledError("planning request was cancelled")
        if time.monotonic() >= self.deadline:
            raise PlanTimeoutError(
                f"planning request exceeded {self.settings.plan_timeout_seconds:.0f}s deadline"
            )

    def pause(self, milliseconds: int) -> None:
        if milliseconds <= 0:
            return
        seconds = milliseconds / 1000
        if self.sleep is not None:
            self.sleep(seconds)
        else:
            self.cancel_event.wait(seconds)

    def record_failure(self) -> None:
        with self._lock:
            self.failed_calls += 1


def make_plan_context(
    settings: Optional[EngineSettings] = None,
    *,
    timeout_seconds: Optional[float] = None,
    trace_id: Optional[str] = None,
    logger: Optional[StructuredLogger] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> PlanContext:
    cfg = settings or load_engine_settings()
    budget = timeout_seconds if timeout_seconds is not None else cfg.plan_timeout_seconds
    return PlanContext(
        settings=cfg,
        logger=logger or StructuredLogger(trace_id=trace_id),
        deadline=time.monotonic() + budget,
        sleep=sleep,
    )
