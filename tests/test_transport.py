import os
import pytest
import queue
import socket
import threading
import time

import tlmbus

from tlmbus.protocol import fields
from tlmbus.protocol.errors import SerializationError
from tlmbus.protocol.message import Envelope, decode
from tlmbus.transport import BindError, ConnectError


def test_bind(socket_dir):

    path = os.path.join(socket_dir, 'bound.sock')
    listener = tlmbus.transport.listen(path)

    assert os.path.exists(path)

    # The address is taken; a second listener cannot have it.

    with pytest.raises(BindError):
        tlmbus.transport.listen(path)

    listener.close()
    assert not os.path.exists(path)

    # Redundant calls should be a no-op.

    listener.close()


def test_bind_missing_directory(socket_dir):

    path = os.path.join(socket_dir, 'no', 'such', 'directory.sock')

    with pytest.raises(BindError):
        tlmbus.transport.listen(path)


def test_connect_error(socket_dir):

    path = os.path.join(socket_dir, 'nobody.sock')
    envelope = Envelope('/tmp/a.sock', fields.PING)

    with pytest.raises(ConnectError):
        tlmbus.transport.send(path, envelope)


def test_serialization_error(master):

    envelope = Envelope('/tmp/a.sock', 'something', object())

    with pytest.raises(SerializationError):
        tlmbus.transport.send(master.path, envelope)

    # Nothing should have been sent.

    with pytest.raises(queue.Empty):
        master.expect(timeout=0.1)


def test_send_and_receive(master):

    envelope = Envelope('/tmp/a.sock', fields.ACCOUNT_INFO, {'user_id': '3'})
    tlmbus.transport.send(master.path, envelope)

    received = master.expect()
    assert received == envelope


def test_accept_loop(socket_dir):
    """ Connections arriving one after another are each accepted and
        handled, and the loop keeps running between them.
    """

    path = os.path.join(socket_dir, 'loop.sock')
    listener = tlmbus.transport.listen(path)
    listener.poll_interval = 20

    received = queue.Queue()
    errors = queue.Queue()

    def handle(connection):
        received.put(decode(listener.receive(connection)))

    thread = threading.Thread(target=listener.accept_loop, args=(handle, errors.put))
    thread.daemon = True
    thread.start()

    for kind in ('first', 'second', 'third'):
        tlmbus.transport.send(path, Envelope('/tmp/a.sock', kind))
        envelope = received.get(timeout=2)
        assert envelope.type == kind
        assert envelope.path == '/tmp/a.sock'

    assert errors.empty()

    listener.close()
    thread.join(2)
    assert not thread.is_alive()


def test_concurrent_connections(socket_dir):
    """ A connection that has not been handled yet must not prevent the
        next connection from being accepted.
    """

    path = os.path.join(socket_dir, 'slow.sock')
    listener = tlmbus.transport.listen(path)
    listener.poll_interval = 20

    release = threading.Event()
    received = queue.Queue()

    def handle(connection):
        envelope = decode(listener.receive(connection))
        if envelope.type == 'slow':
            release.wait(2)
        received.put(envelope.type)

    thread = threading.Thread(target=listener.accept_loop, args=(handle,))
    thread.daemon = True
    thread.start()

    tlmbus.transport.send(path, Envelope('', 'slow'))
    tlmbus.transport.send(path, Envelope('', 'fast'))

    assert received.get(timeout=2) == 'fast'
    release.set()
    assert received.get(timeout=2) == 'slow'

    listener.close()
    thread.join(2)
    assert not thread.is_alive()


def test_truncation(socket_dir):

    path = os.path.join(socket_dir, 'small.sock')
    listener = tlmbus.transport.listen(path, buffer_size=32)
    listener.socket.settimeout(2)

    envelope = Envelope('/tmp/a.sock', 'something', 'x' * 100)

    client = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    client.connect(path)
    client.sendall(envelope.encode())

    connection, peer = listener.socket.accept()
    raw = listener.receive(connection)
    connection.close()
    client.close()

    assert len(raw) <= 32

    with pytest.raises(tlmbus.protocol.errors.MalformedEnvelopeError):
        decode(raw)

    listener.close()


def test_close_stops_loop(socket_dir):

    path = os.path.join(socket_dir, 'stop.sock')
    listener = tlmbus.transport.listen(path)
    listener.poll_interval = 20

    thread = threading.Thread(target=listener.accept_loop, args=(lambda connection: None,))
    thread.daemon = True
    thread.start()

    time.sleep(0.05)
    assert listener.running == True

    listener.close()
    thread.join(2)

    assert not thread.is_alive()
    assert listener.running == False
    assert not os.path.exists(path)

    # A loop started after close() returns immediately.

    listener.accept_loop(lambda connection: None)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
