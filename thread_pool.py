"""Fixed-size worker pool for accepted client connections."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

ClientAddress = tuple[Any, ...]
ConnectionJob = tuple[object, ClientAddress]
ConnectionHandler = Callable[[object, ClientAddress], None]


class ThreadPool:
    """Runs ``handler`` for each submitted connection on one of N threads.

    Submissions beyond ``queue_size`` waiting jobs are refused so the caller
    can shed load instead of blocking the accept loop.
    """

    def __init__(self, worker_count: int, queue_size: int, handler: ConnectionHandler) -> None:
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")

        self._handler = handler
        self._queue: queue.Queue[ConnectionJob | None] = queue.Queue(maxsize=queue_size)
        self._stop_event = threading.Event()
        self._threads: list[threading.Thread] = []
        self._worker_count = worker_count
        self._shutdown_lock = threading.Lock()
        self._shutdown_started = False

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @property
    def threads(self) -> tuple[threading.Thread, ...]:
        return tuple(self._threads)

    def start(self) -> None:
        for index in range(self._worker_count):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"file-worker-{index}",
                daemon=True,
            )
            self._threads.append(worker)
            worker.start()

    def submit(self, client_socket: object, address: ClientAddress) -> bool:
        if self._stop_event.is_set():
            return False
        try:
            self._queue.put_nowait((client_socket, address))
        except queue.Full:
            return False
        return True

    def shutdown(self, timeout: float = 1.0) -> None:
        with self._shutdown_lock:
            if self._shutdown_started:
                return
            self._shutdown_started = True

        self._stop_event.set()
        self._close_pending()
        for _ in self._threads:
            try:
                self._queue.put_nowait(None)
            except queue.Full:
                break

        for thread in self._threads:
            thread.join(timeout=timeout)
        self._close_pending()

    def _close_pending(self) -> None:
        """Close connections still waiting in the queue; they will never be served."""
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            try:
                if item is not None:
                    client_socket, address = item
                    close = getattr(client_socket, "close", None)
                    if close is not None:
                        close()
                    logger.debug("Closed unserved connection from %s", address[0])
            finally:
                self._queue.task_done()

    def _worker_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                item = self._queue.get(timeout=0.2)
            except queue.Empty:
                continue
            try:
                if item is None:
                    return
                client_socket, address = item
                self._handler(client_socket, address)
            except Exception:
                logger.exception("Unhandled error while serving connection")
            finally:
                self._queue.task_done()
