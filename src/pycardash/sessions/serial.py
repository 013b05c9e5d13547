"""Stream session for the line-oriented serial sensor feed."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable

from pycardash._constants import SAMPLE_QUEUE_SIZE
from pycardash._logfmt import preview_for_log
from pycardash._transport import StreamPort, StreamPortFactory
from pycardash.config import SerialOptions
from pycardash.exceptions import (
    CarDashNotConnectedError,
    CarDashTransportError,
    CarDashUnsupportedTransportError,
)
from pycardash.models import ConnectionState, SensorSample
from pycardash.protocol.framing import LineFramer
from pycardash.protocol.sample import parse_sample

_logger = logging.getLogger(__name__)

SampleCallback = Callable[[SensorSample], None]


class SerialSession:
    """Owns one serial connection and the read loop that feeds it.

    Usage::

        session = SerialSession(PySerialPortFactory())
        session.register_sample_callback(print)
        if await session.connect():
            ...
        await session.disconnect()

    Samples are delivered to registered callbacks and to every active
    :meth:`samples` iterator.  A read failure ends the connection; a new
    :meth:`connect` is required to resume.
    """

    def __init__(
        self,
        factory: StreamPortFactory | None,
        options: SerialOptions | None = None,
        *,
        queue_size: int = SAMPLE_QUEUE_SIZE,
    ) -> None:
        self._factory = factory
        self._options = options or SerialOptions()
        self._queue_size = queue_size
        self._framer = LineFramer()
        self._port: StreamPort | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._state = ConnectionState.DISCONNECTED
        self._callbacks: list[SampleCallback] = []
        self._queues: list[asyncio.Queue[SensorSample | None]] = []
        self.last_error: str | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED and self._port is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> bool:
        """Open the port and start reading.

        Returns ``False`` instead of raising when the port cannot be
        opened; the reason is kept in :attr:`last_error`.
        """
        if self.is_connected:
            return True
        # A previous run may have ended on a read failure.
        await self.disconnect()

        self._state = ConnectionState.CONNECTING
        try:
            if self._factory is None:
                raise CarDashUnsupportedTransportError("Serial transport is not available", transport="serial")
            port = await self._factory.open(self._options)
        except (CarDashTransportError, OSError) as exc:
            self._state = ConnectionState.DISCONNECTED
            self.last_error = str(exc)
            _logger.warning("Serial connect failed: %s", exc)
            return False

        self._port = port
        self._framer.reset()
        self.last_error = None
        self._state = ConnectionState.CONNECTED
        self._reader_task = asyncio.create_task(self._read_loop(port), name="pycardash-serial-reader")
        _logger.info("Serial session connected baudrate=%s", self._options.baudrate)
        return True

    async def disconnect(self) -> None:
        """Stop the read loop and release the port. Safe to call repeatedly."""
        task = self._reader_task
        if task is not None and not task.done():
            # A loop that already dropped the port is finishing its own
            # release; wait for it instead of interrupting the close.
            if self._port is not None:
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._reader_task = None

        port = self._port
        if port is not None:
            await self._release(port)
            _logger.info("Serial session disconnected")
        self._state = ConnectionState.DISCONNECTED

    async def _release(self, port: StreamPort) -> None:
        if self._port is port:
            self._port = None
        self._state = ConnectionState.DISCONNECTED
        # A partial record is never flushed as a line.
        self._framer.reset()
        self._end_subscribers()
        try:
            await port.close()
        except (CarDashTransportError, OSError):
            _logger.debug("Serial port close failed", exc_info=True)

    async def _read_loop(self, port: StreamPort) -> None:
        try:
            while True:
                chunk = await port.read()
                if not chunk:
                    _logger.info("Serial stream ended")
                    break
                _logger.debug("Serial chunk %s", preview_for_log(chunk))
                for line in self._framer.feed(chunk):
                    self._handle_line(line)
        except (CarDashTransportError, OSError) as exc:
            self.last_error = str(exc)
            _logger.warning("Serial read failed, session disconnected: %s", exc)
        try:
            await self._release(port)
        finally:
            if self._reader_task is asyncio.current_task():
                self._reader_task = None

    # ------------------------------------------------------------------
    # Sample delivery
    # ------------------------------------------------------------------

    def register_sample_callback(self, callback: SampleCallback) -> Callable[[], None]:
        """Call *callback* for every parsed sample; returns an unsubscribe function."""
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._callbacks.remove(callback)

        return _unsubscribe

    async def samples(self) -> AsyncIterator[SensorSample]:
        """Iterate samples until the current connection ends.

        Each iterator has its own bounded queue; when a slow consumer
        lets it fill up, the oldest queued sample is dropped.
        """
        queue: asyncio.Queue[SensorSample | None] = asyncio.Queue(maxsize=self._queue_size)
        self._queues.append(queue)
        try:
            while True:
                item = await queue.get()
                if item is None:
                    return
                yield item
        finally:
            with contextlib.suppress(ValueError):
                self._queues.remove(queue)

    def _handle_line(self, line: str) -> None:
        if not self._callbacks and not self._queues:
            return
        sample = parse_sample(line)
        if sample is None:
            return
        for callback in list(self._callbacks):
            try:
                callback(sample)
            except Exception:
                _logger.warning("Sample callback failed", exc_info=True)
        for queue in self._queues:
            _put_dropping_oldest(queue, sample)

    def _end_subscribers(self) -> None:
        for queue in self._queues:
            _put_dropping_oldest(queue, None)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send_command(self, command: str) -> None:
        """Write a newline-terminated text command to the sensor board."""
        port = self._port
        if port is None or not self.is_connected:
            raise CarDashNotConnectedError("Serial session is not connected", transport="serial")
        _logger.debug("Serial command %s", preview_for_log(command))
        await port.write(f"{command}\n".encode())


def _put_dropping_oldest(queue: asyncio.Queue[SensorSample | None], item: SensorSample | None) -> None:
    if queue.full():
        with contextlib.suppress(asyncio.QueueEmpty):
            queue.get_nowait()
    queue.put_nowait(item)
