"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling. The
numeric values are shared with the cluster servers consuming the bus and
must not drift.
"""

# Origin tag carried by every message; no cluster server ever uses it.
UID = "emitter"

# Packet types (socket.io-parser).
EVENT = 2

# Cluster message types (socket.io-adapter), property-routed dialect.
BROADCAST = 3
SOCKETS_JOIN = 4
SOCKETS_LEAVE = 5
DISCONNECT_SOCKETS = 6
SERVER_SIDE_EMIT = 9

# Request types, subject-routed dialect.
REMOTE_JOIN = 2
REMOTE_LEAVE = 3
REMOTE_DISCONNECT = 4
REMOTE_SERVER_SIDE_EMIT = 6

REQUEST_TYPES = {
    SOCKETS_JOIN: REMOTE_JOIN,
    SOCKETS_LEAVE: REMOTE_LEAVE,
    DISCONNECT_SOCKETS: REMOTE_DISCONNECT,
    SERVER_SIDE_EMIT: REMOTE_SERVER_SIDE_EMIT,
}

# Dialects.
SUBJECT = "subject"
PROPERTY = "property"
DIALECTS = frozenset((SUBJECT, PROPERTY))

DEFAULT_KEY = "socket.io"
DEFAULT_NSP = "/"
CONTENT_TYPE = "application/octet-stream"

RESERVED_EVENTS = frozenset((
    "connect",
    "connect_error",
    "disconnect",
    "disconnecting",
    "newListener",
    "removeListener",
))
