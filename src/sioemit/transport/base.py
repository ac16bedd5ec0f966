"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`sioemit.protocol` so the protocol remains
transport-agnostic: a transport receives an already encoded payload and
its addressing metadata, and nothing else.
"""

from __future__ import annotations

import concurrent.futures
from abc import ABC, abstractmethod

from ..protocol.codec import Payload
from ..protocol.routing import Metadata


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """An operation against the broker did not complete in time."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class TransportPortError(TransportError):
    """No suitable port could be bound or connected."""


def check_payload(payload) -> None:
    """Raise TypeError unless *payload* is something a transport can put on
    the wire as is."""

    if not isinstance(payload, (bytes, bytearray, memoryview, str)):
        raise TypeError(
            "payload must be bytes or str, not " + type(payload).__name__
        )


class Transport(ABC):
    """Minimal contract for a wire-level sender."""

    @abstractmethod
    def open(self) -> None:
        """Establish the underlying connection/socket."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying connection/socket."""

    @abstractmethod
    def send(self, payload: Payload, metadata: Metadata) -> concurrent.futures.Future:
        """Submit *payload* for delivery and return immediately.

        The returned future resolves to None once the broker has accepted
        the message, or carries the exception if it did not. Problems
        detectable before submission are raised directly.
        """

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc_info):
        self.close()
