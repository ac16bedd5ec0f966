from . import fields
from . import message
from . import codec
from . import routing

from .fields import RESERVED_EVENTS
from .message import (
    Broadcast,
    Criteria,
    DisconnectSockets,
    Flags,
    Message,
    ServerSideEmit,
    SocketsJoin,
    SocketsLeave,
)
from .codec import JsonParser, MsgpackParser, Parser
from .routing import Envelope, Metadata


"""
sioemit Protocol Layer
======================

This package defines what an emitter puts on the bus: the cluster
messages, their targeting criteria, the codecs that serialize them, and
the two dialects for addressing them.

The protocol layer MUST NOT depend on any transport implementation
(e.g. RabbitMQ, ZeroMQ, etc).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Emitter (emitter.py)
    Fluent, immutable targeting API
    - of() / to() / in_() / except_()
    - volatile / compress()
    - emit() / sockets_join() / sockets_leave()
    - disconnect_sockets() / server_side_emit()

    │
    ▼
Routing (routing.py)
    Dialect-specific framing
    - subject: channel string + legacy record
    - property: full cluster record + properties
    Produces Envelope(payload, Metadata)

    │
    ▼
Codec (codec.py)
    Record -> payload
    - MsgpackParser (default)
    - JsonParser
    - any object with encode()

    │
    ▼
Message Model (message.py)
    Immutable protocol data structures
    - Flags, Criteria
    - Broadcast, SocketsJoin, SocketsLeave
    - DisconnectSockets, ServerSideEmit

    │
    ▼
Field Vocabulary (fields.py)
    Wire constants shared with the cluster servers

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer
    Moves an Envelope to the broker
    - RabbitMQ
    - ZeroMQ
    - etc.

---------------------------------------------------------------------

Design Principles
-----------------

1. Transport Agnostic
   Protocol must operate identically regardless of backend.

2. Wire Fidelity
   Field names and type numbers are the compatibility surface with
   independently deployed servers; they live in fields.py only.

3. Layer Isolation
   Dependencies only flow downward:
       Emitter -> Protocol -> Transport
   Never upward.

4. Fail Before Sending
   Validation happens while a message is constructed, so an invalid
   call never produces a partial message.

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
