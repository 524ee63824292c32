import os
import pytest
import queue
import shutil
import tempfile
import threading

import tlmbus


class Master:
    """ A stand-in for the master daemon: it listens on its own address and
        records every envelope it receives, in order of arrival.
    """

    def __init__(self, path):

        self.path = path
        self.listener = tlmbus.transport.listen(path)
        self.listener.poll_interval = 20
        self.received = queue.Queue()

        self.thread = threading.Thread(target=self.listener.accept_loop, args=(self._incoming,))
        self.thread.daemon = True
        self.thread.start()


    def _incoming(self, connection):
        raw = self.listener.receive(connection)
        envelope = tlmbus.protocol.message.decode(raw)
        self.received.put(envelope)


    def expect(self, timeout=2):
        """ Return the next envelope received, waiting up to *timeout*
            seconds for it to arrive.
        """

        return self.received.get(timeout=timeout)


    def close(self):
        self.listener.close()
        self.thread.join(2)


# end of class Master



@pytest.fixture
def socket_dir():

    # Unix socket addresses are limited to a bit over 100 characters, the
    # directories pytest hands out via tmp_path can be longer than that.

    directory = tempfile.mkdtemp(prefix='tlmbus')

    yield directory

    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def master(socket_dir):

    master = Master(os.path.join(socket_dir, 'master.sock'))

    yield master

    master.close()


@pytest.fixture
def client(socket_dir, master):
    """ A client with its listener bound but not yet running.
    """

    path = os.path.join(socket_dir, 'client.sock')
    client = tlmbus.Client(master=master.path, path=path)

    client.create_listener()
    client.listener.poll_interval = 20

    yield client

    client.close()


@pytest.fixture
def running(client):
    """ The same as the client fixture, with :func:`listen_to_events` active
        in a background thread.
    """

    thread = threading.Thread(target=client.listen_to_events)
    thread.daemon = True
    thread.start()

    yield client

    client.close()
    thread.join(2)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
