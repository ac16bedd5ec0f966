"""RabbitMQ publish transport.

Messages are published to a topic exchange. The subject, when the dialect
supplies one, is the routing key; property-routed messages go out with an
empty routing key and carry the namespace and origin as headers.
"""

from __future__ import annotations

import concurrent.futures
import logging
import os
import queue
import threading
from typing import Optional

import pika
import pika.exceptions

from ...protocol.codec import Payload
from ...protocol.routing import Metadata
from ..base import (
    Transport,
    TransportConnectionError,
    TransportError,
    TransportTimeout,
    check_payload,
)

logger = logging.getLogger(__name__)


_EXCHANGE = os.environ.get("SIOEMIT_AMQP_EXCHANGE", "socket.io")
_BROKER_HOST = os.environ.get("SIOEMIT_AMQP_HOST", "localhost")
_BROKER_PORT = int(os.environ.get("SIOEMIT_AMQP_PORT", "5672"))


def _broker_params(host: str, port: int) -> pika.ConnectionParameters:
    return pika.ConnectionParameters(
        host=host,
        port=port,
        heartbeat=600,
        blocked_connection_timeout=300,
    )


def routing_key(metadata: Metadata) -> str:
    return metadata.subject or ""


def properties(metadata: Metadata) -> pika.BasicProperties:
    return pika.BasicProperties(
        content_type=metadata.content_type,
        headers=metadata.application_properties(),
    )


def body(payload: Payload) -> bytes:
    if isinstance(payload, str):
        return payload.encode()
    return bytes(payload)


class Publisher(Transport):
    """Publisher backed by a RabbitMQ topic exchange.

    pika's BlockingConnection is not thread-safe, so the connection lives
    on a dedicated thread; :meth:`send` queues the message and asks that
    thread to drain the queue. Messages go out in submission order.
    """

    ready_timeout = 10

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        exchange: Optional[str] = None,
    ):
        self.host = host or _BROKER_HOST
        self.port = int(port) if port is not None else _BROKER_PORT
        self.exchange = exchange or _EXCHANGE

        self._queue: queue.Queue = queue.Queue()
        self._ready = threading.Event()
        self._connection = None
        self._channel = None
        self._error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None
        self.shutdown = False

    @property
    def is_open(self) -> bool:
        return self._ready.is_set() and self._error is None and not self.shutdown

    def open(self) -> None:
        if self.is_open:
            return

        self.shutdown = False
        self._error = None
        self._ready.clear()

        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout=self.ready_timeout):
            self.shutdown = True
            raise TransportTimeout(
                f"no connection to {self.host}:{self.port} in {self.ready_timeout} sec"
            )

        if self._error is not None:
            raise TransportConnectionError(
                f"cannot connect to {self.host}:{self.port}: {self._error}"
            ) from self._error

    def close(self) -> None:
        if self._thread is None:
            return

        self.shutdown = True
        connection = self._connection
        if connection is not None and connection.is_open:
            try:
                connection.add_callback_threadsafe(lambda: None)
            except pika.exceptions.AMQPError as exc:
                # The I/O loop still exits on its next one second tick.
                logger.debug("close wake-up failed: %s", exc)

        self._thread.join(timeout=self.ready_timeout)
        self._thread = None

    def send(self, payload: Payload, metadata: Metadata) -> concurrent.futures.Future:
        check_payload(payload)

        if not self.is_open:
            raise TransportConnectionError("publisher is not open")

        future: concurrent.futures.Future = concurrent.futures.Future()
        self._queue.put((payload, metadata, future))

        try:
            self._connection.add_callback_threadsafe(self._flush)
        except pika.exceptions.AMQPError as exc:
            # The connection thread is gone and will never drain the queue.
            self._error = exc
            self._fail_pending()
            raise TransportConnectionError(
                f"connection to {self.host}:{self.port} lost: {exc}"
            ) from exc

        return future

    def _run(self) -> None:
        try:
            self._connection = pika.BlockingConnection(
                _broker_params(self.host, self.port)
            )
            self._channel = self._connection.channel()
            self._channel.exchange_declare(
                exchange=self.exchange, exchange_type="topic", durable=False
            )
        except pika.exceptions.AMQPError as exc:
            self._error = exc
            self._ready.set()
            return

        self._ready.set()
        logger.debug("connected to %s:%d, exchange %s", self.host, self.port, self.exchange)

        try:
            while not self.shutdown:
                self._connection.process_data_events(time_limit=1)
        except pika.exceptions.AMQPError as exc:
            logger.error("connection to %s:%d lost: %s", self.host, self.port, exc)
            self._error = exc
        finally:
            self._fail_pending()
            if self._connection.is_open:
                self._connection.close()

    def _flush(self) -> None:
        """Drain all queued outgoing messages (called on the connection
        thread via add_callback_threadsafe)."""
        while True:
            try:
                payload, metadata, future = self._queue.get_nowait()
            except queue.Empty:
                break

            if not future.set_running_or_notify_cancel():
                continue

            try:
                self._channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key(metadata),
                    body=body(payload),
                    properties=properties(metadata),
                )
            except pika.exceptions.AMQPError as exc:
                error = TransportError(f"publish to {self.exchange} failed: {exc}")
                error.__cause__ = exc
                future.set_exception(error)
            except Exception as exc:
                # Reported on the future; later messages are still published.
                future.set_exception(exc)
            else:
                future.set_result(None)

    def _fail_pending(self) -> None:
        while True:
            try:
                _payload, _metadata, future = self._queue.get_nowait()
            except queue.Empty:
                break

            if future.set_running_or_notify_cancel():
                future.set_exception(TransportConnectionError("publisher closed"))

