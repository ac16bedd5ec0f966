""" Python implementation of a Socket.IO cluster emitter. An emitter sends
    events, room membership changes, and disconnect requests to a cluster
    of real-time servers sharing a message bus, without being a server
    itself.
"""

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import errors
from . import protocol
from . import transport

# Primary public-facing interfaces.

from .emitter import BroadcastOperator, Emitter, Options, emitter
from .errors import InvalidEvent, UnsupportedFeature
from .protocol.fields import RESERVED_EVENTS
from .transport import TransportError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
