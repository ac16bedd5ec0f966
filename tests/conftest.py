import concurrent.futures

import pytest

import sioemit
from sioemit.protocol.codec import JsonParser, MsgpackParser
from sioemit.transport import Transport


class Recorder(Transport):
    """ Stand-in for a broker connection: every send is recorded, and
        completes immediately, either successfully or with *error*.
    """

    def __init__(self, error=None):
        self.sent = list()
        self.error = error
        self.opened = False


    def open(self):
        self.opened = True


    def close(self):
        self.opened = False


    @property
    def is_open(self):
        return self.opened


    def send(self, payload, metadata):
        self.sent.append((payload, metadata))

        future = concurrent.futures.Future()
        if self.error is None:
            future.set_result(None)
        else:
            future.set_exception(self.error)

        return future


    def last(self):
        assert len(self.sent) > 0
        return self.sent[-1]


    def last_record(self):
        """ Decode the most recent payload the way a receiving server would.
        """

        payload, metadata = self.last()

        if isinstance(payload, str):
            return JsonParser().decode(payload)

        return MsgpackParser().decode(payload)


@pytest.fixture
def bus():
    return Recorder()


@pytest.fixture
def failing_bus():
    return Recorder(error=sioemit.TransportError('broker unavailable'))


@pytest.fixture
def io(bus):
    return sioemit.Emitter(bus)


@pytest.fixture
def legacy(bus):
    return sioemit.Emitter(bus, dialect='subject')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
