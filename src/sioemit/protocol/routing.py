"""Placement of a protocol Message on the transport.

Two dialects are supported, and a deployment picks one:

subject
    The legacy layout. Broadcasts are encoded as ``[uid, packet, opts]``
    and addressed with a hierarchical subject,
    ``<key>#<nsp>#`` plus ``<room>#`` when exactly one room is targeted.
    Control messages are JSON text on ``<key>-request#<nsp>#``.

property
    The current layout. Every message is the full cluster record
    ``{uid, type, data, nsp}`` encoded by the parser; there is no subject,
    and the namespace and origin travel as application properties.

Only the framing differs between dialects; the Message itself does not.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from . import fields
from .codec import JsonParser, Parser, Payload
from .message import Broadcast, Message


class Metadata:
    """Addressing information handed to the transport alongside a payload."""

    def __init__(
        self,
        namespace: str,
        uid: Optional[str] = None,
        subject: Optional[str] = None,
        content_type: str = fields.CONTENT_TYPE,
    ):
        self.namespace = namespace
        self.uid = uid
        self.subject = subject
        self.content_type = content_type

    def __eq__(self, other):
        if isinstance(other, Metadata):
            return self.to_dict() == other.to_dict()
        return NotImplemented

    def __repr__(self):
        return f"Metadata({self.to_dict()!r})"

    def application_properties(self) -> Dict[str, str]:
        props = {"nsp": self.namespace}
        if self.uid is not None:
            props["uid"] = self.uid
        return props

    def to_dict(self) -> Dict[str, Any]:
        return {
            "namespace": self.namespace,
            "uid": self.uid,
            "subject": self.subject,
            "content_type": self.content_type,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Metadata":
        return cls(
            namespace=d["namespace"],
            uid=d.get("uid"),
            subject=d.get("subject"),
            content_type=d.get("content_type", fields.CONTENT_TYPE),
        )


class Envelope:
    """An encoded payload plus its :class:`Metadata`, ready to send."""

    def __init__(self, payload: Payload, metadata: Metadata):
        self.payload = payload
        self.metadata = metadata

    def __iter__(self) -> Iterator[Any]:
        return iter((self.payload, self.metadata))

    def __repr__(self):
        return f"Envelope({self.payload!r}, {self.metadata!r})"


_TEXT = JsonParser()


def broadcast_channel(key: str, nsp: str) -> str:
    return key + "#" + nsp + "#"


def request_channel(key: str, nsp: str) -> str:
    return key + "-request#" + nsp + "#"


def subject(message: Message, key: str = fields.DEFAULT_KEY) -> str:
    """Return the subject-dialect channel for *message*.

    A broadcast restricted to exactly one room gets that room appended so
    servers can filter coarsely; zero or several rooms leave the filtering
    to the decoded payload.
    """

    if isinstance(message, Broadcast):
        channel = broadcast_channel(key, message.nsp)
        rooms = message.criteria.rooms
        if len(rooms) == 1:
            channel += rooms[0] + "#"
        return channel

    return request_channel(key, message.nsp)


def legacy_record(message: Message) -> Any:
    """Return the subject-dialect record for *message*.

    Broadcasts are ``[uid, packet, opts]``. Control messages mirror the
    request layout of the older cluster servers, which carry no flags.
    """

    if isinstance(message, Broadcast):
        return [message.uid, message.packet(), message.criteria.to_dict()]

    record: Dict[str, Any] = {}

    if message.type == fields.SERVER_SIDE_EMIT:
        record["uid"] = message.uid
        record["type"] = fields.REQUEST_TYPES[message.type]
        record["data"] = list(message.data)
        return record

    record["type"] = fields.REQUEST_TYPES[message.type]
    record["opts"] = message.criteria.to_dict(flags=False)

    if message.type == fields.DISCONNECT_SOCKETS:
        record["close"] = message.close
    else:
        record["rooms"] = list(message.rooms)

    return record


def frame(
    message: Message,
    parser: Parser,
    dialect: str = fields.PROPERTY,
    key: str = fields.DEFAULT_KEY,
    text: Optional[Parser] = None,
) -> Envelope:
    """Encode *message* for *dialect* and return the :class:`Envelope`.

    *text* is the codec for subject-dialect control messages, which are
    JSON text regardless of *parser*.
    """

    if dialect == fields.PROPERTY:
        payload = parser.encode(message.cluster())
        metadata = Metadata(message.nsp, uid=message.uid)
        return Envelope(payload, metadata)

    if dialect == fields.SUBJECT:
        record = legacy_record(message)
        if isinstance(message, Broadcast):
            payload = parser.encode(record)
        else:
            if text is None:
                text = _TEXT
            payload = text.encode(record)
        metadata = Metadata(message.nsp, subject=subject(message, key))
        return Envelope(payload, metadata)

    raise ValueError(f"unknown dialect: {dialect!r}")
