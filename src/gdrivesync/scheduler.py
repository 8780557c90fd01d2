"""Run triggers: periodic interval and debounced local-change notifications."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from gdrivesync.errors import GDriveSyncError, InvalidStateError, SyncInProgressError
from gdrivesync.local.storage import ChangeEvent
from gdrivesync.manager import SyncManager

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], Any]


def _thread_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


class SyncScheduler:
    """
    Owns the periodic timer and the debounce timer of one SyncManager.

    - Every local change restarts a single-shot debounce timer, so a burst of
      changes results in one run after `debounce_sec` of quiet.
    - The periodic timer re-arms itself after every tick.
    - Both end up in `SyncManager.run()`; a tick that finds a run in
      progress is dropped.
    - `shutdown()` cancels both timers, stops watching the local store and
      closes the manager. A run already in flight finishes.
    """

    def __init__(
        self,
        manager: SyncManager,
        *,
        interval_sec: float,
        debounce_sec: float = 5.0,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self._manager = manager
        self.interval_sec = interval_sec
        self.debounce_sec = debounce_sec
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._closed = False
        self._started = False
        self._debounce_timer: Optional[Any] = None
        self._debounce_generation = 0
        self._periodic_timer: Optional[Any] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

        self.runs = 0

    @classmethod
    def from_manager(cls, manager: SyncManager, **kwargs: Any) -> "SyncScheduler":
        """Build a scheduler from the manager's sync settings."""
        sync_cfg = manager.config.sync
        return cls(
            manager,
            interval_sec=sync_cfg.sync_interval * 60,
            debounce_sec=sync_cfg.debounce_sec,
            **kwargs,
        )

    @property
    def is_closed(self) -> bool:
        return self._closed

    def start(self, *, watch_local: bool = True) -> None:
        with self._lock:
            if self._closed:
                raise InvalidStateError("Scheduler is shut down")
            if self._started:
                return
            self._started = True
            self._arm_periodic()

        if watch_local:
            unsubscribe = self._manager.storage.subscribe(self.notify_change)
            with self._lock:
                if self._closed:
                    unsubscribe()
                    return
                self._unsubscribe = unsubscribe

        logger.info(
            "auto sync started (interval=%ss, debounce=%ss, watching=%s)",
            self.interval_sec,
            self.debounce_sec,
            watch_local,
        )

    def notify_change(self, event: Optional[ChangeEvent] = None) -> None:
        """Restart the debounce timer."""
        with self._lock:
            if self._closed:
                return
            if self._debounce_timer is not None:
                self._debounce_timer.cancel()
            self._debounce_generation += 1
            generation = self._debounce_generation
            timer = self._timer_factory(self.debounce_sec, lambda: self._on_debounce(generation))
            self._debounce_timer = timer
            timer.start()

        if event is not None:
            logger.debug("local %s: %s", event.kind, event.path)

    def shutdown(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            for timer in (self._debounce_timer, self._periodic_timer):
                if timer is not None:
                    timer.cancel()
            self._debounce_timer = None
            self._periodic_timer = None
            unsubscribe, self._unsubscribe = self._unsubscribe, None

        if unsubscribe is not None:
            unsubscribe()
        self._manager.shutdown()
        logger.info("auto sync stopped")

    # ----------------------------
    # Internals
    # ----------------------------
    def _arm_periodic(self) -> None:
        if self.interval_sec <= 0:
            return
        timer = self._timer_factory(self.interval_sec, self._on_periodic)
        self._periodic_timer = timer
        timer.start()

    def _on_debounce(self, generation: int) -> None:
        with self._lock:
            if self._closed or generation != self._debounce_generation:
                return
            self._debounce_timer = None
        self._trigger("change")

    def _on_periodic(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._periodic_timer = None
        try:
            self._trigger("interval")
        finally:
            with self._lock:
                if not self._closed:
                    self._arm_periodic()

    def _trigger(self, reason: str) -> None:
        try:
            summary = self._manager.run()
        except SyncInProgressError:
            logger.info("sync already running; %s trigger dropped", reason)
        except InvalidStateError as exc:
            logger.info("%s trigger ignored: %s", reason, exc)
        except GDriveSyncError as exc:
            logger.error("%s-triggered sync failed: %s", reason, exc)
        except Exception:
            logger.exception("%s-triggered sync crashed", reason)
        else:
            self.runs += 1
            logger.info("%s-triggered sync: %s", reason, summary.status_message())
