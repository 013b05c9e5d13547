"""Fixed-interval polling of the diagnostic session."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable

from pycardash._cache import LatestReadingCache
from pycardash._constants import POLL_INTERVAL
from pycardash.models import DiagnosticReading, PollerState
from pycardash.sessions.diagnostic import DiagnosticSession
from pycardash.trip import TripAggregator

_logger = logging.getLogger(__name__)


class DiagnosticPoller:
    """Turn query/response exchanges into a continuous reading stream.

    Each tick checks the link, runs one full query round and publishes
    the composite reading to the cache, the trip aggregator and the
    ``on_reading`` callback.  The interval is measured from tick start;
    a tick that overruns it delays the next one, ticks never overlap.

    A lost link or a failed tick stops the poller and fires
    ``on_disconnect`` once. The poller does not reconnect; call
    :meth:`start` after a fresh connect.
    """

    def __init__(
        self,
        session: DiagnosticSession,
        *,
        interval: float = POLL_INTERVAL,
        cache: LatestReadingCache | None = None,
        trip: TripAggregator | None = None,
        on_reading: Callable[[DiagnosticReading], None] | None = None,
        on_disconnect: Callable[[], None] | None = None,
    ) -> None:
        self._session = session
        self._interval = interval
        self._cache = cache
        self._trip = trip
        self._on_reading = on_reading
        self._on_disconnect = on_disconnect
        self._task: asyncio.Task[None] | None = None
        self._state = PollerState.STOPPED

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == PollerState.RUNNING

    def start(self) -> None:
        """Start the polling loop; no-op when already running."""
        if self._task is not None and not self._task.done():
            return
        self._state = PollerState.RUNNING
        self._task = asyncio.create_task(self._run(), name="pycardash-obd-poller")
        _logger.debug("Poller started interval=%ss", self._interval)

    async def stop(self) -> None:
        """Cancel the loop and wait until it has exited. Safe to call repeatedly."""
        task = self._task
        self._task = None
        self._state = PollerState.STOPPED
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            _logger.debug("Poller stopped")

    async def poll_once(self) -> DiagnosticReading | None:
        """Run one tick body; ``None`` when the session is not connected.

        While the loop is running the reading still reaches the cache and
        the callback, but not the trip: trip distance is integrated once
        per loop tick.
        """
        return await self._poll(record_trip=not self.is_running)

    async def _poll(self, *, record_trip: bool) -> DiagnosticReading | None:
        if not self._session.is_connected:
            return None
        reading = await self._session.read_all()
        self._publish(reading, record_trip=record_trip)
        return reading

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                reading = await self._poll(record_trip=True)
            except Exception:
                _logger.warning("Polling tick failed; polling stopped", exc_info=True)
                break
            if reading is None:
                _logger.info("OBD link lost; polling stopped")
                break
            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self._interval - elapsed))

        self._state = PollerState.STOPPED
        self._task = None
        self._notify_disconnect()

    def _publish(self, reading: DiagnosticReading, *, record_trip: bool = True) -> None:
        if self._cache is not None:
            self._cache.update_reading(reading)
        if self._trip is not None and record_trip:
            self._trip.record(reading)
        if self._on_reading is not None:
            try:
                self._on_reading(reading)
            except Exception:
                _logger.warning("on_reading callback failed", exc_info=True)

    def _notify_disconnect(self) -> None:
        if self._on_disconnect is None:
            return
        try:
            self._on_disconnect()
        except Exception:
            _logger.warning("on_disconnect callback failed", exc_info=True)
