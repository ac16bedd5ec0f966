"""ZeroMQ publish transport."""

from __future__ import annotations

import atexit
import concurrent.futures
import logging
import os
import queue
import threading
from typing import Optional

import zmq

from ...protocol.codec import Payload
from ...protocol.routing import Metadata
from ..base import (
    Transport,
    TransportConnectionError,
    TransportError,
    TransportPortError,
    check_payload,
)
from .framing import to_pub_frames

logger = logging.getLogger(__name__)

minimum_port = 10139
maximum_port = 13679
zmq_context = zmq.Context()

_ADDRESS = os.environ.get("SIOEMIT_ZMQ_ADDRESS")


class Publisher(Transport):
    """PUB socket sender.

    With an *address* (for example ``tcp://proxy:5559``, the XSUB side of a
    forwarding proxy) the socket connects; otherwise it binds to *port*, or
    to the first free port in the default range. ZeroMQ sockets are not
    thread-safe: callers enqueue, and a single thread owns the PUB socket.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        port: Optional[int] = None,
        avoid: Optional[set] = None,
    ):
        self.address = address or _ADDRESS
        self.port = int(port) if port is not None else None
        self.avoid = avoid or set()

        self.socket = None
        self.thread: Optional[threading.Thread] = None
        self.shutdown = False

        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._sig_lock = threading.Lock()
        self._sig_rx = None
        self._sig_tx = None

    @property
    def is_open(self) -> bool:
        return self.thread is not None and not self.shutdown

    def _bind(self) -> None:
        if self.address is not None:
            self.socket.connect(self.address)
            return

        if self.port is None:
            for p in range(minimum_port, maximum_port):
                if p in self.avoid:
                    continue
                try:
                    self.socket.bind(f"tcp://*:{p}")
                    self.port = p
                    break
                except zmq.ZMQError:
                    continue
            if self.port is None:
                raise TransportPortError(
                    f"no ports available in range {minimum_port}:{maximum_port}"
                )
        else:
            try:
                self.socket.bind(f"tcp://*:{self.port}")
            except zmq.ZMQError as exc:
                raise TransportPortError(
                    f"port already in use: {self.port}"
                ) from exc

    def open(self) -> None:
        if self.is_open:
            return

        self.socket = zmq_context.socket(zmq.PUB)
        self.socket.setsockopt(zmq.LINGER, 0)

        try:
            self._bind()
        except zmq.ZMQError as exc:
            self.socket.close()
            raise TransportConnectionError(f"cannot connect to {self.address}: {exc}") from exc
        except TransportError:
            self.socket.close()
            raise

        internal = f"inproc://publish.Publisher:signal:{id(self)}"
        self._sig_rx = zmq_context.socket(zmq.PAIR)
        self._sig_rx.bind(internal)
        self._sig_tx = zmq_context.socket(zmq.PAIR)
        self._sig_tx.connect(internal)

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, daemon=True)
        self.thread.start()
        logger.debug("PUB socket ready on %s", self.address or self.port)

    def close(self) -> None:
        if self.thread is None:
            return

        self.shutdown = True
        with self._sig_lock:
            self._sig_tx.send(b"")
        self.thread.join()
        self.thread = None

        self._fail_pending()
        self._sig_tx.close()
        self._sig_rx.close()
        self.socket.close()

    def send(self, payload: Payload, metadata: Metadata) -> concurrent.futures.Future:
        check_payload(payload)

        if not self.is_open:
            raise TransportConnectionError("publisher is not open")

        future: concurrent.futures.Future = concurrent.futures.Future()
        self._queue.put((payload, metadata, future))
        with self._sig_lock:
            self._sig_tx.send(b"")
        return future

    def _send_one(self) -> None:
        self._sig_rx.recv(flags=zmq.NOBLOCK)

        try:
            payload, metadata, future = self._queue.get(block=False)
        except queue.Empty:
            # Wake-up from close().
            return

        if not future.set_running_or_notify_cancel():
            return

        try:
            self.socket.send_multipart(to_pub_frames(payload, metadata))
        except zmq.ZMQError as exc:
            error = TransportError(f"publish failed: {exc}")
            error.__cause__ = exc
            future.set_exception(error)
        except Exception as exc:
            # Reported on the future; the I/O thread keeps serving the queue.
            future.set_exception(exc)
        else:
            future.set_result(None)

    def _fail_pending(self) -> None:
        while True:
            try:
                _payload, _metadata, future = self._queue.get(block=False)
            except queue.Empty:
                break

            if future.set_running_or_notify_cancel():
                future.set_exception(TransportConnectionError("publisher closed"))

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self._sig_rx, zmq.POLLIN)
        while not self.shutdown:
            for active, _flag in poller.poll(10000):
                if active == self._sig_rx:
                    self._send_one()


def _cleanup() -> None:
    # Closes any sockets left open by publishers that were never closed.
    zmq_context.destroy(linger=0)


atexit.register(_cleanup)
