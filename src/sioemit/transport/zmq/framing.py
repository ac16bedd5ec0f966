"""ZMQ multipart framing for encoded payloads.

Publish (PUB/SUB)
    topic, metadata_json, payload

The topic is the dialect's subject, if any; subscribers filter on it by
prefix, and a property-routed message has an empty topic. A text payload
is sent as UTF-8 and flagged as such in the metadata so it comes back as
a str.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from ... import json
from ...protocol.codec import Payload
from ...protocol.routing import Metadata


def to_pub_frames(payload: Payload, metadata: Metadata) -> Tuple[bytes, bytes, bytes]:
    """Encode a payload and its metadata for PUB/SUB sockets."""

    topic = (metadata.subject or "").encode()

    header = metadata.to_dict()
    header["properties"] = metadata.application_properties()
    header["text"] = isinstance(payload, str)

    if isinstance(payload, str):
        payload = payload.encode()
    else:
        payload = bytes(payload)

    return (topic, json.dumps(header), payload)


def from_pub_frames(parts: Sequence[bytes]) -> Tuple[Payload, Metadata]:
    if len(parts) < 3:
        raise ValueError("invalid PUB message")

    header = json.loads(parts[1])
    metadata = Metadata.from_dict(header)

    payload: Payload = bytes(parts[2])
    if header.get("text"):
        payload = payload.decode()

    return payload, metadata
