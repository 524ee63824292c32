""" Unix domain stream sockets, addressed by filesystem path. Every
    envelope travels on its own connection: the sender connects, writes
    one envelope, and closes; the receiver accepts, reads once, and
    closes. There are no persistent connections to keep healthy, and a
    peer that is down simply fails the :func:`send`.
"""

import logging
import os
import socket
import threading
import zmq

from ..protocol import message
from .base import BindError, ConnectError, WriteError

logger = logging.getLogger(__name__)

default_buffer_size = 4096


class Listener:
    """ Bind a stream socket at the filesystem *address* and accept inbound
        connections. Each message must fit in *buffer_size* bytes; the
        receiving side performs a single read per connection, and anything
        beyond that is lost.

        :class:`BindError` is raised if the address is already in use, or
        if the directory containing it does not exist or is not writable.
    """

    backlog = 64

    # Milliseconds between checks of the shutdown flag while waiting for
    # new connections.

    poll_interval = 1000

    def __init__(self, address, buffer_size=default_buffer_size):

        address = str(address)
        self.address = address
        self.buffer_size = int(buffer_size)

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)

        try:
            sock.bind(address)
        except OSError as e:
            sock.close()
            raise BindError("cannot bind %s: %s" % (address, e.strerror or e))

        sock.listen(self.backlog)

        self.socket = sock
        self.shutdown = False
        self.running = False
        self.lock = threading.Lock()


    def accept_loop(self, on_connection, on_error=None):
        """ Accept connections until :func:`close` is called. Each accepted
            connection is handed to *on_connection* in a new background
            thread, so that a slow handler never holds up the next accept;
            the connection is closed when *on_connection* returns. Failures
            to accept are passed to *on_error*, if provided, and the loop
            carries on.
        """

        self.lock.acquire()
        if self.shutdown == True:
            self.lock.release()
            return
        self.running = True
        self.lock.release()

        # The poller reports plain sockets by file descriptor, not by the
        # object that was registered.

        descriptor = self.socket.fileno()

        poller = zmq.Poller()
        poller.register(descriptor, zmq.POLLIN)

        try:
            while self.shutdown == False:
                sockets = poller.poll(self.poll_interval)
                for active, flag in sockets:
                    if active == descriptor:
                        self._accept(on_connection, on_error)
        finally:
            poller.unregister(descriptor)

            self.lock.acquire()
            self.running = False
            self.socket.close()
            self.lock.release()


    def _accept(self, on_connection, on_error):

        try:
            connection, peer = self.socket.accept()
        except OSError as e:
            if self.shutdown == True:
                return

            if on_error is None:
                logger.error("accept failed on %s: %s", self.address, e)
            else:
                on_error(e)
            return

        thread = threading.Thread(target=self._handle, args=(on_connection, connection))
        thread.daemon = True
        thread.start()


    def _handle(self, on_connection, connection):

        try:
            on_connection(connection)
        except Exception:
            # Nothing raised while handling a single connection is allowed
            # to escape this thread.
            logger.exception("unhandled error on connection to %s", self.address)
        finally:
            connection.close()


    def receive(self, connection):
        """ Perform the single bounded read for an accepted *connection*,
            returning the bytes received. Oversized messages are truncated
            here and will fail to decode.
        """

        return connection.recv(self.buffer_size)


    def close(self):
        """ Stop accepting connections and release the filesystem address.
            An active :func:`accept_loop` exits at its next poll interval;
            connections already being handled are not interrupted.
        """

        self.lock.acquire()
        already = self.shutdown
        self.shutdown = True

        if self.running == False:
            self.socket.close()

        self.lock.release()

        if already == True:
            return

        try:
            os.remove(self.address)
        except FileNotFoundError:
            pass


# end of class Listener



def listen(address, buffer_size=default_buffer_size):
    """ Factory function for a :class:`Listener` instance.
    """

    return Listener(address, buffer_size)



def send(address, envelope):
    """ Connect to *address*, write the encoded *envelope*, and disconnect.
        This is fire-and-forget: there is no retry, and no waiting for an
        acknowledgement, which if it comes at all arrives as a new envelope
        on the sender's own listening address.

        :class:`tlmbus.protocol.errors.SerializationError` is raised if the
        envelope cannot be encoded, :class:`ConnectError` if nothing is
        listening at *address*, and :class:`WriteError` if the write fails.
    """

    raw = message.encode(envelope)

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)

    try:
        try:
            sock.connect(address)
        except OSError as e:
            raise ConnectError("cannot connect to %r: %s" % (address, e.strerror or e))

        try:
            sock.sendall(raw)
        except OSError as e:
            raise WriteError("cannot write '%s' envelope to %r: %s" % (envelope.type, address, e.strerror or e))
    finally:
        sock.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
