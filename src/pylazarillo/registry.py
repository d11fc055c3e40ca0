"""Connection registry: one navigation session and worker per client.

Owns:
- creating a session when a client connects and dropping it on disconnect
- routing inbound frames to the right session, in arrival order
- sending each session's replies back to its own connection only
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pylazarillo._constants import ERROR_EVENT, RESPONSE_EVENT
from pylazarillo.events import InboundEvent, parse_event
from pylazarillo.exceptions import InvalidPayloadError, LazarilloError
from pylazarillo.session import NavigationSession

_logger = logging.getLogger(__name__)

#: Sends ``(event name, payload)`` to one client.
Sender = Callable[[str, dict[str, Any]], Awaitable[None]]
SessionFactory = Callable[[str], NavigationSession]


@dataclass(frozen=True, slots=True)
class _Rejection:
    """A rejected frame, queued so its error reply keeps arrival order."""

    error: InvalidPayloadError


class SessionWorker:
    """Serializes the events of one session.

    A single task drains the queue, so at most one event per session is in
    flight; frames that arrive while an external call is pending wait in the
    queue. Closing the worker discards queued events but lets the event in
    flight finish, and its reply is dropped.
    """

    def __init__(self, session: NavigationSession, send: Sender) -> None:
        self._session = session
        self._send = send
        self._queue: asyncio.Queue[InboundEvent | _Rejection | None] = asyncio.Queue()
        self._closed = False
        self._task: asyncio.Task[None] | None = None

    @property
    def session(self) -> NavigationSession:
        return self._session

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    def start(self) -> asyncio.Task[None]:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"lazarillo-session-{self._session.session_id}")
        return self._task

    def submit(self, event: InboundEvent) -> None:
        if self._closed:
            _logger.debug("[%s] dropping %s on closed session", self._session.session_id, event.type)
            return
        self._queue.put_nowait(event)

    def reject(self, error: InvalidPayloadError) -> None:
        if self._closed:
            return
        self._queue.put_nowait(_Rejection(error))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        discarded = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._queue.task_done()
            discarded += 1
        if discarded:
            _logger.debug("[%s] discarded %d queued events", self._session.session_id, discarded)
        self._queue.put_nowait(None)

    async def wait_idle(self) -> None:
        """Wait until every submitted event has been processed."""
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                if isinstance(item, _Rejection):
                    await self._emit(ERROR_EVENT, {"error": str(item.error), "event": item.error.event})
                    continue
                response = await self._session.handle(item)
                if response is not None:
                    await self._emit(RESPONSE_EVENT, response.to_payload())
            except Exception:
                # One bad event must not take the whole session down.
                _logger.exception("[%s] failed to process event", self._session.session_id)
            finally:
                self._queue.task_done()

    async def _emit(self, event_name: str, payload: dict[str, Any]) -> None:
        if self._closed:
            _logger.debug("[%s] client gone, dropping %s", self._session.session_id, event_name)
            return
        try:
            await self._send(event_name, payload)
        except (ConnectionError, RuntimeError) as exc:
            _logger.debug("[%s] send failed: %s", self._session.session_id, exc)


class ConnectionRegistry:
    """Thread-safe map of connection id to :class:`SessionWorker`.

    This is the only structure shared between connections; sessions
    themselves never see each other.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._lock = threading.Lock()
        self._workers: dict[str, SessionWorker] = {}
        self._retiring: set[asyncio.Task[None]] = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._workers)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._workers

    def get(self, connection_id: str) -> SessionWorker | None:
        with self._lock:
            return self._workers.get(connection_id)

    def connect(self, connection_id: str, send: Sender) -> SessionWorker:
        """Create and start the session for a new connection."""
        worker = SessionWorker(self._session_factory(connection_id), send)
        with self._lock:
            if connection_id in self._workers:
                raise LazarilloError(f"Connection {connection_id!r} is already registered")
            self._workers[connection_id] = worker
        worker.start()
        _logger.info("Client connected: %s", connection_id)
        return worker

    def disconnect(self, connection_id: str) -> bool:
        """Destroy the session of a closed connection.

        Returns ``False`` if the connection was not registered.
        """
        with self._lock:
            worker = self._workers.pop(connection_id, None)
        if worker is None:
            return False
        worker.close()
        task = worker.task
        if task is not None and not task.done():
            # Keep a reference until the in-flight event (if any) completes.
            self._retiring.add(task)
            task.add_done_callback(self._retiring.discard)
        _logger.info("Client disconnected: %s", connection_id)
        return True

    def submit(self, connection_id: str, event_name: str, payload: Any = None) -> InboundEvent:
        """Validate a frame and queue it for its session.

        Raises
        ------
        InvalidPayloadError
            The frame is malformed. An ``error`` reply has been queued for the
            client and the session keeps running.
        LazarilloError
            The connection is not registered.
        """
        worker = self.get(connection_id)
        if worker is None:
            raise LazarilloError(f"Unknown connection {connection_id!r}")
        try:
            event = parse_event(event_name, payload)
        except InvalidPayloadError as exc:
            _logger.warning("[%s] rejected %s: %s", connection_id, event_name, exc)
            worker.reject(exc)
            raise
        worker.submit(event)
        return event

    def reject(self, connection_id: str, error: InvalidPayloadError) -> None:
        """Queue an ``error`` reply for a frame that could not even be decoded."""
        worker = self.get(connection_id)
        if worker is None:
            return
        _logger.warning("[%s] rejected frame: %s", connection_id, error)
        worker.reject(error)

    async def close(self) -> None:
        """Disconnect everyone and stop all session tasks."""
        with self._lock:
            connection_ids = list(self._workers)
        for connection_id in connection_ids:
            self.disconnect(connection_id)
        tasks = list(self._retiring)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
