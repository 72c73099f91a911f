"""Background scheduler that sweeps expired nonces out of a store."""

import threading
from collections.abc import Callable
from datetime import UTC, datetime

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from nonceguard.errors import StoreError
from nonceguard.services.alert_service import send_error_alert_sync
from nonceguard.stores.base import NonceStore

logger = structlog.get_logger()

SWEEP_JOB_ID = "nonce_expiry_sweep"


def report_sweep_failure(error: StoreError) -> None:
    """Log a failed sweep and forward it to the alert webhook."""
    cause = error.__cause__ or error
    logger.error("nonce_sweep_failed", error_type=type(cause).__name__, error=str(cause))
    send_error_alert_sync(type(cause).__name__, str(cause), context={"job": SWEEP_JOB_ID})


class ExpirySweeper:
    """
    Periodically deletes expired nonces from one store.

    The first sweep runs one interval after start(). stop() cancels pending
    sweeps without running a final one and is safe to call more than once.
    A stopped sweeper cannot be started again. APScheduler treats a zero
    interval as one second; any positive interval is used as given.
    """

    def __init__(
        self,
        store: NonceStore,
        interval_seconds: float,
        on_error: Callable[[StoreError], None] | None = None,
    ) -> None:
        self._store = store
        self._interval_seconds = interval_seconds
        self._on_error = on_error or report_sweep_failure
        self._scheduler = BackgroundScheduler()
        self._lock = threading.Lock()
        self._started = False
        self._stopped = False

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    def sweep(self) -> int:
        """Run a single pass. Store failures are reported, never raised."""
        try:
            deleted = self._store.delete_expired(datetime.now(UTC).replace(tzinfo=None))
        except StoreError as e:
            self._on_error(e)
            return 0

        if deleted:
            logger.info("nonce_sweep_completed", deleted=deleted)
        return deleted

    def start(self) -> None:
        with self._lock:
            if self._started or self._stopped:
                raise RuntimeError("Expiry sweeper cannot be restarted")
            self._scheduler.add_job(
                self.sweep,
                trigger=IntervalTrigger(seconds=self._interval_seconds),
                id=SWEEP_JOB_ID,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            self._scheduler.start()
            self._started = True
        logger.info("nonce_sweeper_started", interval_seconds=self._interval_seconds)

    def stop(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            if not self._started:
                return
            self._scheduler.shutdown(wait=False)
        logger.info("nonce_sweeper_stopped")
