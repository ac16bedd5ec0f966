""" A class representation of the cluster messages an emitter can produce,
    including subclasses for each specific operation, and the targeting
    criteria that travel with them.
"""

from . import fields
from ..errors import InvalidEvent, UnsupportedFeature


def as_rooms(room):
    """ Return *room* as a tuple of room names. A list, tuple, or set is a
        collection of rooms; any other value, including a string or bytes,
        is a single room.
    """

    if isinstance(room, (list, tuple, set, frozenset)):
        return tuple(room)

    return (room,)



class Flags:
    """ Optional delivery modifiers for a broadcast. A flag that was never
        set is None, which is distinct from an explicit False; only flags
        that were set appear in :func:`to_dict`.

        :ivar volatile: The message may be dropped if the recipient is not
                        ready to receive it.
        :ivar compress: Hint to compress the payload.
    """

    names = ('volatile', 'compress')

    def __init__(self, volatile=None, compress=None):
        self.volatile = volatile
        self.compress = compress


    def __eq__(self, other):
        if isinstance(other, Flags):
            return self.to_dict() == other.to_dict()
        return NotImplemented


    def __repr__(self):
        return 'Flags(%r)' % (self.to_dict(),)


    def replace(self, **changes):
        """ Return a new :class:`Flags` instance with the given *changes*
            applied; this instance is left untouched.
        """

        values = dict()
        for name in self.names:
            values[name] = getattr(self, name)

        values.update(changes)
        return Flags(**values)


    def to_dict(self):
        flags = dict()

        for name in self.names:
            value = getattr(self, name)
            if value is not None:
                flags[name] = value

        return flags


    @classmethod
    def from_dict(cls, flags):
        if not flags:
            return cls()
        return cls(flags.get('volatile'), flags.get('compress'))


# end of class Flags



class Criteria:
    """ The targeting state accumulated by a builder chain: the rooms a
        message is restricted to (empty means everywhere), the rooms that
        are excluded, and the delivery :class:`Flags`.

        A :class:`Criteria` instance is never modified after construction;
        :func:`to`, :func:`exclude`, and :func:`with_flags` return copies.
        Duplicate rooms collapse, insertion order is otherwise retained so
        that the wire representation is deterministic. A room may appear
        in both sets; the receiving side gives the exclusion precedence.
    """

    def __init__(self, rooms=(), except_rooms=(), flags=None):

        if flags is None:
            flags = Flags()

        self.rooms = tuple(dict.fromkeys(rooms))
        self.except_rooms = tuple(dict.fromkeys(except_rooms))
        self.flags = flags


    def __eq__(self, other):
        if isinstance(other, Criteria):
            return (set(self.rooms) == set(other.rooms) and
                    set(self.except_rooms) == set(other.except_rooms) and
                    self.flags == other.flags)
        return NotImplemented


    def __repr__(self):
        return 'Criteria(rooms=%r, except_rooms=%r, flags=%r)' % (
                self.rooms, self.except_rooms, self.flags)


    def to(self, room):
        rooms = self.rooms + as_rooms(room)
        return Criteria(rooms, self.except_rooms, self.flags)


    def exclude(self, room):
        except_rooms = self.except_rooms + as_rooms(room)
        return Criteria(self.rooms, except_rooms, self.flags)


    def with_flags(self, **changes):
        flags = self.flags.replace(**changes)
        return Criteria(self.rooms, self.except_rooms, flags)


    def to_dict(self, flags=True):
        """ Return the criteria in the 'opts' layout expected by the cluster
            servers. The legacy request channel does not carry flags, hence
            the option to leave them out.
        """

        opts = dict()
        opts['rooms'] = list(self.rooms)
        if flags:
            opts['flags'] = self.flags.to_dict()
        opts['except'] = list(self.except_rooms)

        return opts


    @classmethod
    def from_dict(cls, opts):
        rooms = opts.get('rooms', ())
        except_rooms = opts.get('except', ())
        flags = Flags.from_dict(opts.get('flags'))
        return cls(rooms, except_rooms, flags)


# end of class Criteria



class Message:
    """ The :class:`Message` is the logical unit handed to the transport:
        an operation *type* (one of the cluster message types in
        :mod:`fields`), the namespace *nsp* it applies to, and the *uid*
        identifying the sender. The *uid* is always the emitter origin tag
        unless a caller is reconstructing a message decoded off the wire.

        Subclasses supply :func:`body`, the operation-specific content.
        A message has no identity or mutable state beyond construction.
    """

    type = None

    def __init__(self, nsp, uid=fields.UID):
        self.nsp = nsp
        self.uid = uid


    def __eq__(self, other):
        if isinstance(other, Message):
            return self.cluster() == other.cluster()
        return NotImplemented


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, self.cluster())


    def body(self):
        raise NotImplementedError('subclasses must implement body()')


    def cluster(self):
        """ Return the complete record for this message, as understood by
            a cluster server: origin, type, operation-specific data, and
            the namespace.
        """

        record = dict()
        record['uid'] = self.uid
        record['type'] = self.type
        record['data'] = self.body()
        record['nsp'] = self.nsp

        return record


# end of class Message



class Broadcast(Message):
    """ An event to be delivered to the client sockets matching the
        *criteria*. The packet data is the event name followed by any
        positional arguments.
    """

    type = fields.BROADCAST

    def __init__(self, nsp, event, args=(), criteria=None, uid=fields.UID):

        if event in fields.RESERVED_EVENTS:
            raise InvalidEvent(event)

        if criteria is None:
            criteria = Criteria()

        Message.__init__(self, nsp, uid)
        self.event = event
        self.args = list(args)
        self.criteria = criteria


    @property
    def data(self):
        return [self.event] + self.args


    def packet(self):
        packet = dict()
        packet['type'] = fields.EVENT
        packet['data'] = self.data
        packet['nsp'] = self.nsp
        return packet


    def body(self):
        body = dict()
        body['packet'] = self.packet()
        body['opts'] = self.criteria.to_dict()
        return body


# end of class Broadcast



class SocketsJoin(Message):
    """ Make the sockets selected by the *criteria* join the target *rooms*.
        The criteria select which sockets; the rooms are where they go.
    """

    type = fields.SOCKETS_JOIN

    def __init__(self, nsp, rooms, criteria=None, uid=fields.UID):

        if criteria is None:
            criteria = Criteria()

        Message.__init__(self, nsp, uid)
        self.rooms = list(as_rooms(rooms))
        self.criteria = criteria


    def body(self):
        body = dict()
        body['opts'] = self.criteria.to_dict()
        body['rooms'] = list(self.rooms)
        return body


# end of class SocketsJoin



class SocketsLeave(SocketsJoin):
    """ Make the sockets selected by the *criteria* leave the target *rooms*.
    """

    type = fields.SOCKETS_LEAVE


# end of class SocketsLeave



class DisconnectSockets(Message):
    """ Disconnect the sockets selected by the *criteria*. If *close* is
        True the underlying connection is closed as well.
    """

    type = fields.DISCONNECT_SOCKETS

    def __init__(self, nsp, close=False, criteria=None, uid=fields.UID):

        if criteria is None:
            criteria = Criteria()

        Message.__init__(self, nsp, uid)
        self.close = bool(close)
        self.criteria = criteria


    def body(self):
        body = dict()
        body['opts'] = self.criteria.to_dict()
        body['close'] = self.close
        return body


# end of class DisconnectSockets



class ServerSideEmit(Message):
    """ Arbitrary positional arguments relayed to every server process in
        the cluster for the namespace; there is no room targeting. A
        trailing callable would be an acknowledgement callback, which
        cannot be honored across the bus.
    """

    type = fields.SERVER_SIDE_EMIT

    def __init__(self, nsp, args=(), uid=fields.UID):

        args = list(args)

        if args and callable(args[-1]):
            raise UnsupportedFeature('Acknowledgements are not supported')

        Message.__init__(self, nsp, uid)
        self.data = args


    def body(self):
        body = dict()
        body['packet'] = list(self.data)
        return body


# end of class ServerSideEmit



def from_cluster(record):
    """ Reconstruct a :class:`Message` from a decoded cluster record, the
        inverse of :func:`Message.cluster`. This is what a receiving server
        does with a property-routed payload; the emitter itself never needs
        it, but it makes the wire format verifiable.
    """

    type = record['type']
    data = record['data']
    nsp = record['nsp']
    uid = record.get('uid')

    if type == fields.BROADCAST:
        packet = data['packet']
        event = packet['data'][0]
        args = packet['data'][1:]
        criteria = Criteria.from_dict(data['opts'])
        return Broadcast(nsp, event, args, criteria, uid=uid)

    if type == fields.SOCKETS_JOIN:
        criteria = Criteria.from_dict(data['opts'])
        return SocketsJoin(nsp, data['rooms'], criteria, uid=uid)

    if type == fields.SOCKETS_LEAVE:
        criteria = Criteria.from_dict(data['opts'])
        return SocketsLeave(nsp, data['rooms'], criteria, uid=uid)

    if type == fields.DISCONNECT_SOCKETS:
        criteria = Criteria.from_dict(data['opts'])
        return DisconnectSockets(nsp, data['close'], criteria, uid=uid)

    if type == fields.SERVER_SIDE_EMIT:
        return ServerSideEmit(nsp, data['packet'], uid=uid)

    raise ValueError('unknown cluster message type: ' + repr(type))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
