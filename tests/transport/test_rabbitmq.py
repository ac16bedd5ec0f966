import concurrent.futures

import pika.exceptions
import pytest

from sioemit.protocol.routing import Metadata
from sioemit.transport import TransportConnectionError, TransportError
from sioemit.transport.rabbitmq import publish


def test_routing_key():
    assert publish.routing_key(Metadata('/', subject='socket.io#/#room1#')) == 'socket.io#/#room1#'
    assert publish.routing_key(Metadata('/', uid='emitter')) == ''


def test_properties():

    properties = publish.properties(Metadata('/chat', uid='emitter'))
    assert properties.content_type == 'application/octet-stream'
    assert properties.headers == {'nsp': '/chat', 'uid': 'emitter'}


def test_body():
    assert publish.body(b'\x01') == b'\x01'
    assert publish.body('{"a":1}') == b'{"a":1}'
    assert publish.body(bytearray(b'xy')) == b'xy'


def test_configuration():

    publisher = publish.Publisher(host='broker.example', port='5673', exchange='events')
    assert publisher.host == 'broker.example'
    assert publisher.port == 5673
    assert publisher.exchange == 'events'
    assert not publisher.is_open


def test_send_requires_open():

    publisher = publish.Publisher()

    with pytest.raises(TransportConnectionError):
        publisher.send(b'', Metadata('/'))


class Channel:

    def __init__(self, error=None):
        self.error = error
        self.published = []

    def basic_publish(self, exchange, routing_key, body, properties):
        if self.error is not None:
            raise self.error
        self.published.append((exchange, routing_key, body))


class ClosedConnection:

    def add_callback_threadsafe(self, callback):
        raise pika.exceptions.ConnectionWrongStateError('connection is closed')


def queued(publisher, payload=b'x'):

    future = concurrent.futures.Future()
    publisher._queue.put((payload, Metadata('/'), future))
    return future


def test_send_rejects_non_bytes():

    publisher = publish.Publisher()

    with pytest.raises(TypeError):
        publisher.send({'not': 'bytes'}, Metadata('/'))

    assert publisher._queue.empty()


def test_flush_publish_error():

    publisher = publish.Publisher(exchange='events')
    publisher._channel = Channel(pika.exceptions.AMQPError('channel closed'))

    first = queued(publisher)
    second = queued(publisher)
    publisher._flush()

    for future in (first, second):
        error = future.exception(timeout=0)
        assert isinstance(error, TransportError)
        assert isinstance(error.__cause__, pika.exceptions.AMQPError)


def test_flush_survives_unexpected_error():

    publisher = publish.Publisher(exchange='events')
    publisher._channel = Channel()

    bad = queued(publisher, object())
    good = queued(publisher, b'ok')
    publisher._flush()

    assert isinstance(bad.exception(timeout=0), TypeError)
    assert good.result(timeout=0) is None
    assert publisher._channel.published == [('events', '', b'ok')]


def test_fail_pending():

    publisher = publish.Publisher()

    pending = queued(publisher)
    cancelled = queued(publisher)
    cancelled.cancel()

    publisher._fail_pending()

    assert isinstance(pending.exception(timeout=0), TransportConnectionError)
    assert cancelled.cancelled()
    assert publisher._queue.empty()


def test_send_after_connection_lost():

    publisher = publish.Publisher()
    publisher._connection = ClosedConnection()
    publisher._ready.set()
    assert publisher.is_open

    earlier = queued(publisher)

    with pytest.raises(TransportConnectionError):
        publisher.send(b'x', Metadata('/'))

    assert isinstance(earlier.exception(timeout=0), TransportConnectionError)
    assert publisher._queue.empty()
    assert not publisher.is_open

    with pytest.raises(TransportConnectionError):
        publisher.send(b'x', Metadata('/'))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
