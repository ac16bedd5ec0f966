""" Send a handful of messages to a Socket.IO cluster listening on the
    bus: a broadcast, a room broadcast, a server-side event, and the
    room-management requests. The broker is picked up from the usual
    SIOEMIT_* environment variables.
"""

import argparse
import logging
import time

import sioemit
from sioemit import transport


def main():

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--backend', default=None, help="'rabbitmq' or 'zmq'")
    parser.add_argument('--dialect', default='property', help="'property' or 'subject'")
    parser.add_argument('--key', default='socket.io')
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s %(message)s')

    with transport.publisher(args.backend) as bus:

        io = sioemit.Emitter(bus, key=args.key, dialect=args.dialect)

        io.emit('broadcast event', 'hello from emitter')
        io.to('room1').emit('room event', {'from': 'emitter', 'room': 'room1'})
        io.server_side_emit('hello', 'Hello from emitter at %f' % (time.time()))

        pending = list()
        pending.append(io.sockets_join('room2'))
        pending.append(io.sockets_leave('room3'))
        pending.append(io.in_('room4').disconnect_sockets(False))

        # emit() does not report its outcome; the control messages do.

        for future in pending:
            future.result(timeout=5)

        logging.info('messages sent')


if __name__ == '__main__':
    main()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
