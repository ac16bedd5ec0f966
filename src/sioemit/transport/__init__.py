"""Transport layer implementations."""

import os

from .base import (
    Transport,
    TransportError,
    TransportTimeout,
    TransportConnectionError,
    TransportPortError,
)

_BACKEND = os.environ.get("SIOEMIT_TRANSPORT", "rabbitmq")


def publisher(backend=None, **kwargs) -> Transport:
    """Return an unopened publisher for *backend*, 'rabbitmq' or 'zmq'.

    The default comes from the SIOEMIT_TRANSPORT environment variable.
    Backend modules are imported on demand, so only the selected client
    library needs to be importable.
    """

    backend = backend or _BACKEND

    if backend == "rabbitmq":
        from .rabbitmq.publish import Publisher
    elif backend == "zmq":
        from .zmq.publish import Publisher
    else:
        raise ValueError(f"unknown SIOEMIT_TRANSPORT backend: {backend!r}")

    return Publisher(**kwargs)
