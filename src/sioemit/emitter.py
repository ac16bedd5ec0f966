""" The :class:`Emitter` is the public face of sioemit: it is scoped to a
    namespace, accumulates targeting criteria through a chain of
    :class:`BroadcastOperator` instances, and hands one encoded message to
    the transport for each terminal call.

    Every refinement returns a new operator; nothing in a chain is ever
    modified in place, so an emitter or operator can be kept around and
    reused, or shared between threads.
"""

import logging

from .protocol import codec
from .protocol import fields
from .protocol import routing
from .protocol.message import (
    Broadcast,
    Criteria,
    DisconnectSockets,
    ServerSideEmit,
    SocketsJoin,
    SocketsLeave,
)

logger = logging.getLogger(__name__)


def normalize_namespace(nsp):
    """ Return *nsp* with a leading '/'. Empty or non-string values map to
        the root namespace.
    """

    if not isinstance(nsp, str) or nsp == '':
        return fields.DEFAULT_NSP

    if nsp[0] != '/':
        nsp = '/' + nsp

    return nsp



class Options:
    """ Configuration shared, unchanged, by an emitter and everything derived
        from it.

        :ivar key: Root of the subject-dialect channel names; may also be
                   given as *topic*.
        :ivar parser: The codec used to encode messages; None selects
                      :class:`sioemit.protocol.codec.MsgpackParser`.
        :ivar dialect: 'property' (the default) or 'subject'.
    """

    def __init__(self, key=fields.DEFAULT_KEY, parser=None, dialect=fields.PROPERTY, topic=None):

        if topic is not None:
            key = topic

        if dialect not in fields.DIALECTS:
            raise ValueError('unknown dialect: ' + repr(dialect))

        self.key = key
        self.parser = codec.resolve(parser)
        self.dialect = dialect


    def replace(self, **changes):
        values = dict(key=self.key, parser=self.parser, dialect=self.dialect)
        values.update(changes)
        return Options(**values)


# end of class Options



def _log_failure(future):

    if future.cancelled():
        return

    error = future.exception()
    if error is not None:
        logger.error("message dispatch failed: %s", error, exc_info=error)


def dispatch(transport, options, message):
    """ Encode *message* according to *options* and submit it to the
        *transport*. The transport's future is returned as-is; a failure is
        logged here and otherwise left for the caller to observe. Anything
        the transport raises synchronously propagates unmodified.
    """

    envelope = routing.frame(message, options.parser, options.dialect, options.key)
    metadata = envelope.metadata

    logger.debug("sending type %d message to %s (subject %s)",
                 message.type, metadata.namespace, metadata.subject)

    future = transport.send(envelope.payload, metadata)
    future.add_done_callback(_log_failure)
    return future



class Emitter:
    """ Send events and control messages to a cluster of servers over the
        supplied *transport*, which must implement
        :class:`sioemit.transport.base.Transport`. *options* is an
        :class:`Options` instance; individual options may also be given as
        keyword arguments, which take precedence.
    """

    def __init__(self, transport, options=None, nsp=fields.DEFAULT_NSP, **kwargs):

        if options is None:
            options = Options(**kwargs)
        elif kwargs:
            options = options.replace(**kwargs)

        self.transport = transport
        self.options = options
        self.nsp = normalize_namespace(nsp)


    def __repr__(self):
        return 'Emitter(nsp=%r, dialect=%r)' % (self.nsp, self.options.dialect)


    def of(self, nsp):
        """ Return a new emitter for the given namespace. Targeting never
            carries over to the new emitter.
        """

        return Emitter(self.transport, self.options, nsp)


    def _operator(self):
        return BroadcastOperator(self.transport, self.options, self.nsp)


    def emit(self, event, *args):
        """ Emit *event* to all clients in the namespace. Always returns
            True; see :func:`BroadcastOperator.emit`.
        """

        return self._operator().emit(event, *args)


    def to(self, room):
        return self._operator().to(room)


    def in_(self, room):
        return self._operator().in_(room)


    def except_(self, room):
        return self._operator().except_(room)


    @property
    def volatile(self):
        return self._operator().volatile


    def compress(self, compress):
        return self._operator().compress(compress)


    def sockets_join(self, rooms):
        return self._operator().sockets_join(rooms)


    def sockets_leave(self, rooms):
        return self._operator().sockets_leave(rooms)


    def disconnect_sockets(self, close=False):
        return self._operator().disconnect_sockets(close)


    def server_side_emit(self, *args):
        """ Relay *args* to every server in the cluster for this namespace.
            Acknowledgements are not supported: a trailing callable raises
            :class:`sioemit.errors.UnsupportedFeature` and nothing is sent.
        """

        message = ServerSideEmit(self.nsp, args)
        return dispatch(self.transport, self.options, message)


# end of class Emitter



class BroadcastOperator:
    """ Targeting state for a single chain of calls: the namespace, the
        :class:`sioemit.protocol.message.Criteria`, and the transport and
        options inherited from the originating :class:`Emitter`.
    """

    def __init__(self, transport, options, nsp=fields.DEFAULT_NSP, criteria=None):

        if criteria is None:
            criteria = Criteria()

        self.transport = transport
        self.options = options
        self.nsp = nsp
        self.criteria = criteria


    def __repr__(self):
        return 'BroadcastOperator(nsp=%r, %r)' % (self.nsp, self.criteria)


    def _derive(self, criteria):
        return BroadcastOperator(self.transport, self.options, self.nsp, criteria)


    @property
    def rooms(self):
        return frozenset(self.criteria.rooms)


    @property
    def except_rooms(self):
        return frozenset(self.criteria.except_rooms)


    @property
    def flags(self):
        return self.criteria.flags.to_dict()


    def to(self, room):
        """ Target a room, or an iterable of rooms, when emitting. Rooms
            accumulate across calls.
        """

        return self._derive(self.criteria.to(room))


    def in_(self, room):
        """ Alias of :func:`to`.
        """

        return self.to(room)


    def except_(self, room):
        """ Exclude a room, or an iterable of rooms, when emitting.
        """

        return self._derive(self.criteria.exclude(room))


    @property
    def volatile(self):
        """ The event data may be lost if a client is not ready to receive
            it.
        """

        return self._derive(self.criteria.with_flags(volatile=True))


    def compress(self, compress):
        """ Set the compress flag. An explicit False is transmitted, and is
            not the same as never setting the flag.
        """

        return self._derive(self.criteria.with_flags(compress=compress))


    def emit(self, event, *args):
        """ Broadcast *event* with *args* to the matching clients. Reserved
            lifecycle events raise :class:`sioemit.errors.InvalidEvent`
            before anything is encoded.

            The return value is always True; the send itself completes in
            the background and its outcome is not reported here. Callers
            that need to know whether the message reached the bus should
            use the transport directly.
        """

        message = Broadcast(self.nsp, event, args, self.criteria)
        dispatch(self.transport, self.options, message)
        return True


    def sockets_join(self, rooms):
        """ Make the matching socket instances join *rooms*. Returns the
            transport's future.
        """

        message = SocketsJoin(self.nsp, rooms, self.criteria)
        return dispatch(self.transport, self.options, message)


    def sockets_leave(self, rooms):
        """ Make the matching socket instances leave *rooms*.
        """

        message = SocketsLeave(self.nsp, rooms, self.criteria)
        return dispatch(self.transport, self.options, message)


    def disconnect_sockets(self, close=False):
        """ Make the matching socket instances disconnect; if *close* is True
            the underlying connection is closed too.
        """

        message = DisconnectSockets(self.nsp, close, self.criteria)
        return dispatch(self.transport, self.options, message)


# end of class BroadcastOperator



def emitter(transport, **options):
    """ Return a new :class:`Emitter` for the root namespace.
    """

    return Emitter(transport, **options)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
