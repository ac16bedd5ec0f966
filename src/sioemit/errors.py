""" Exceptions raised by the emitter itself. Transport failures have their
    own hierarchy in :mod:`sioemit.transport.base`.
"""


class EmitterError(Exception):
    """ Base class for errors detected before anything is handed to the
        transport.
    """


class InvalidEvent(EmitterError, ValueError):
    """ The event name is reserved for the connection lifecycle and cannot
        be emitted from outside a server.
    """

    def __init__(self, event):
        self.event = event
        EmitterError.__init__(self, '"%s" is a reserved event name' % (event,))


class UnsupportedFeature(EmitterError, NotImplementedError):
    """ The requested behavior cannot be carried over the bus; in particular,
        acknowledgements.
    """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
