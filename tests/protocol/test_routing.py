import pytest

from sioemit.protocol import codec
from sioemit.protocol import fields
from sioemit.protocol import message
from sioemit.protocol import routing


def test_channels():
    assert routing.broadcast_channel('socket.io', '/') == 'socket.io#/#'
    assert routing.request_channel('socket.io', '/custom') == 'socket.io-request#/custom#'


def test_subject_room_suffix():

    # Only a single targeted room is appended; none or several rooms fall
    # back to filtering on the decoded payload.

    none = message.Broadcast('/', 'e')
    one = message.Broadcast('/', 'e', criteria=message.Criteria(['room1']))
    two = message.Broadcast('/', 'e', criteria=message.Criteria(['room1', 'room2']))
    excluded = message.Broadcast('/', 'e', criteria=message.Criteria(except_rooms=['room1']))

    assert routing.subject(none) == 'socket.io#/#'
    assert routing.subject(one) == 'socket.io#/#room1#'
    assert routing.subject(two) == 'socket.io#/#'
    assert routing.subject(excluded) == 'socket.io#/#'
    assert routing.subject(one, key='myapp') == 'myapp#/#room1#'


def test_subject_requests():

    join = message.SocketsJoin('/custom', 'r1', message.Criteria(['room1']))
    relay = message.ServerSideEmit('/custom', ('hello',))

    assert routing.subject(join) == 'socket.io-request#/custom#'
    assert routing.subject(relay) == 'socket.io-request#/custom#'


def test_legacy_records():

    criteria = message.Criteria(['r2'], ['r3'], message.Flags(volatile=True))

    broadcast = message.Broadcast('/', 'e', (1,), criteria)
    assert routing.legacy_record(broadcast) == [
        'emitter',
        {'type': fields.EVENT, 'data': ['e', 1], 'nsp': '/'},
        {'rooms': ['r2'], 'flags': {'volatile': True}, 'except': ['r3']},
    ]

    join = message.SocketsJoin('/', 'r1', criteria)
    assert routing.legacy_record(join) == {
        'type': fields.REMOTE_JOIN,
        'opts': {'rooms': ['r2'], 'except': ['r3']},
        'rooms': ['r1'],
    }

    leave = message.SocketsLeave('/', 'r1', criteria)
    assert routing.legacy_record(leave)['type'] == fields.REMOTE_LEAVE

    disconnect = message.DisconnectSockets('/', True, criteria)
    assert routing.legacy_record(disconnect) == {
        'type': fields.REMOTE_DISCONNECT,
        'opts': {'rooms': ['r2'], 'except': ['r3']},
        'close': True,
    }

    relay = message.ServerSideEmit('/', ('hello', 'world'))
    assert routing.legacy_record(relay) == {
        'uid': 'emitter',
        'type': fields.REMOTE_SERVER_SIDE_EMIT,
        'data': ['hello', 'world'],
    }


def test_frame_property():

    parser = codec.MsgpackParser()
    broadcast = message.Broadcast('/chat', 'e')

    payload, metadata = routing.frame(broadcast, parser)

    assert parser.decode(payload) == broadcast.cluster()
    assert metadata == routing.Metadata('/chat', uid='emitter')
    assert metadata.subject is None


def test_frame_subject():

    parser = codec.MsgpackParser()

    broadcast = message.Broadcast('/', 'e', criteria=message.Criteria(['room1']))
    envelope = routing.frame(broadcast, parser, fields.SUBJECT)

    assert isinstance(envelope.payload, bytes)
    assert parser.decode(envelope.payload) == routing.legacy_record(broadcast)
    assert envelope.metadata.subject == 'socket.io#/#room1#'
    assert envelope.metadata.uid is None

    # Control messages are JSON text no matter which parser is in use.

    join = message.SocketsJoin('/', 'r1')
    envelope = routing.frame(join, parser, fields.SUBJECT, key='myapp')

    assert isinstance(envelope.payload, str)
    assert codec.JsonParser().decode(envelope.payload) == routing.legacy_record(join)
    assert envelope.metadata.subject == 'myapp-request#/#'


def test_frame_unknown_dialect():
    with pytest.raises(ValueError):
        routing.frame(message.Broadcast('/', 'e'), codec.MsgpackParser(), 'smoke-signal')


def test_metadata_dict():

    metadata = routing.Metadata('/x', uid='emitter', subject='socket.io#/x#')
    assert routing.Metadata.from_dict(metadata.to_dict()) == metadata
    assert metadata.application_properties() == {'nsp': '/x', 'uid': 'emitter'}
    assert routing.Metadata('/x').application_properties() == {'nsp': '/x'}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
