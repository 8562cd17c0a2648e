"""
Connection Dispatcher

Owns the single controller connection and serializes every command/reply
exchange on it. Device handles never see the transport: they submit a
fully encoded command and await the reply correlated to it.

The protocol carries no sequence numbers, so correlation comes purely from
ordering: one loop task takes requests off a bounded FIFO queue and for
each one writes the command, reads exactly one reply frame and resolves
that request's future before touching the next. The queue bound is the
only backpressure; once it is full, submitters wait for a free slot.

Failure policy is fail-fast: a transport error fails the in-flight request,
stops the loop, fails everything still queued and closes the connection.
There is no retry or reconnect; build a new dispatcher to recover.

Author: ClearCore Client Development
Created: October 2026
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .transport import Transport
from ..core.exceptions import DispatcherClosedError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 10


@dataclass
class Request:
    """An encoded command plus the single-use channel its reply is delivered on"""
    buffer: bytes
    response: asyncio.Future


class ConnectionDispatcher:
    """
    Exclusive owner of the controller transport

    Usage::

        async with ConnectionDispatcher(TcpTransport(host, port)) as dispatcher:
            reply = await dispatcher.submit(command_bytes)
    """

    def __init__(self, transport: Transport, queue_size: int = DEFAULT_QUEUE_SIZE,
                 request_timeout: Optional[float] = None):
        if queue_size < 1:
            raise ValueError(f"queue_size must be positive, got {queue_size}")

        self.transport = transport
        self.queue_size = queue_size
        self.request_timeout = request_timeout

        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._task: Optional[asyncio.Task] = None
        self._closed = False

        self.stats: Dict[str, Any] = {
            'requests_submitted': 0,
            'requests_completed': 0,
            'requests_skipped': 0,
            'transport_errors': 0,
        }

    def __repr__(self):
        return f"ConnectionDispatcher({self.transport!r}, queue_size={self.queue_size})"

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        """Number of requests waiting in the queue"""
        return self._queue.qsize()

    async def start(self) -> None:
        """Open the transport and start the dispatch loop"""
        if self.running:
            return
        if self._closed:
            raise DispatcherClosedError("Dispatcher was stopped and cannot be restarted",
                                        module="communication")

        await self.transport.open()
        self._task = asyncio.create_task(self._run(), name="clearcore-dispatcher")
        logger.info(f"🚀 Dispatcher started on {self.transport!r}")

    async def stop(self) -> None:
        """Stop the dispatch loop, fail queued requests and close the transport"""
        self._closed = True

        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        self._fail_pending("Dispatcher stopped")
        await self.transport.close()
        logger.info("🛑 Dispatcher stopped")

    async def __aenter__(self) -> "ConnectionDispatcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()

    async def submit(self, buffer: bytes) -> bytes:
        """
        Submit an encoded command and wait for its reply

        Suspends while the queue is full, then until the reply arrives.

        Returns:
            The raw reply frame

        Raises:
            DispatcherClosedError: The dispatcher is not running, or stopped
                before the request was serviced
            TransportError: The connection failed while servicing this request
        """
        if self._closed or not self.running:
            raise DispatcherClosedError("Dispatcher is not running", module="communication")

        loop = asyncio.get_running_loop()
        request = Request(buffer=bytes(buffer), response=loop.create_future())

        logger.debug(f"Sending msg: {request.buffer!r}")
        await self._queue.put(request)
        self.stats['requests_submitted'] += 1

        # The loop may have died while we waited for a slot
        if self._closed and not request.response.done():
            request.response.set_exception(
                DispatcherClosedError("Dispatcher stopped before request was sent",
                                      module="communication"))

        return await request.response

    async def _run(self):
        """Dispatch loop: strictly one write/read pair at a time, FIFO"""
        logger.debug("Dispatch loop running")
        try:
            while True:
                request = await self._queue.get()

                # Caller gave up before its turn; never put it on the wire
                if request.response.done():
                    self.stats['requests_skipped'] += 1
                    logger.debug(f"Skipping abandoned request: {request.buffer!r}")
                    continue

                try:
                    reply = await self._exchange(request.buffer)
                except TransportError as e:
                    self.stats['transport_errors'] += 1
                    logger.error(f"❌ Transport failure on {request.buffer!r}: {e}")
                    if not request.response.done():
                        request.response.set_exception(e)
                    break
                except asyncio.CancelledError:
                    if not request.response.done():
                        request.response.set_exception(
                            DispatcherClosedError("Dispatcher stopped mid-request", module="communication"))
                    raise

                logger.debug(f"Received reply: {reply!r}")
                self.stats['requests_completed'] += 1
                # Reply to a request cancelled mid-flight is read and dropped
                if not request.response.done():
                    request.response.set_result(reply)

            self._closed = True
            self._fail_pending("Dispatcher stopped after transport failure")
            await self.transport.close()
        finally:
            self._closed = True
            self._fail_pending("Dispatcher loop exited")

    async def _exchange(self, buffer: bytes) -> bytes:
        try:
            if self.request_timeout is None:
                return await self._write_read(buffer)
            return await asyncio.wait_for(self._write_read(buffer), self.request_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"No reply within {self.request_timeout}s to {buffer!r}",
                                 module="communication") from e
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Unexpected transport error: {e}", module="communication") from e

    async def _write_read(self, buffer: bytes) -> bytes:
        await self.transport.write(buffer)
        return await self.transport.read_frame()

    def _fail_pending(self, reason: str):
        while True:
            try:
                request = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if not request.response.done():
                request.response.set_exception(DispatcherClosedError(reason, module="communication"))
