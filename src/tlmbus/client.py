""" The :class:`Client` is the principal entry point: it owns the socket on
    which envelopes arrive, the table of handlers those envelopes are routed
    to, and the conversation with the master.

    A typical client::

        client = tlmbus.Client(master='/tmp/tracim_master.sock', path='/tmp/me.sock')
        client.register_handler('content.modified', on_modified)
        client.create_listener()
        client.register_to_master()

        try:
            client.listen_to_events()
        finally:
            client.close()
"""

import logging
import os
import threading

from . import handlers as defaulthandlers
from .config import Config
from .protocol import fields
from .protocol import message
from .protocol import payload
from .protocol.errors import ProtocolError, MalformedEnvelopeError
from .protocol.message import Envelope, Notification
from .transport import unix
from .transport.base import TransportError

# Client states. Transitions only happen through explicit method calls.

CREATED = 'created'
LISTENING = 'listening'
REGISTERED = 'registered'
RUNNING = 'running'
CLOSED = 'closed'


class Client:
    """ A client of the master. The *config* is a :class:`tlmbus.Config`
        instance; alternatively, the *master* and *path* addresses can be
        specified directly, and a default :class:`tlmbus.Config` will be
        built from them.

        Handlers are callables invoked as ``handler(client, envelope)``.
        Handlers for :data:`tlmbus.protocol.fields.PING`,
        :data:`tlmbus.protocol.fields.ACCOUNT_INFO` and
        :data:`tlmbus.protocol.fields.ERROR` are installed by default; see
        :mod:`tlmbus.handlers`.

        :ivar logger: The :class:`logging.Logger` used by the client and its
            default handlers. Replace it to redirect the client's output.
        :ivar state: One of CREATED, LISTENING, REGISTERED, RUNNING, CLOSED.
        :ivar user_id: The user id reported by the master, if any.
    """

    def __init__(self, config=None, master=None, path=None, logger=None):

        if config is None:
            config = Config(master, path)

        if logger is None:
            logger = logging.getLogger(__name__)

        self.config = config
        self.master = config.master
        self.path = config.path
        self.logger = logger

        self.listener = None
        self.state = CREATED
        self.user_id = None

        self._handlers = dict()
        self._handlers_lock = threading.Lock()

        for type, handler in defaulthandlers.defaults.items():
            self.register_handler(type, handler)


    def __repr__(self):
        return "<tlmbus.Client %s (%s)>" % (self.path, self.state)


    def create_listener(self):
        """ Bind the client's own address. This must succeed before anything
            can be received, including replies to our own messages; a
            :class:`tlmbus.transport.BindError` is propagated to the caller.
        """

        if self.listener is not None:
            raise RuntimeError('the listener for %s already exists' % (self.path))

        if self.state == CLOSED:
            raise RuntimeError('the client is closed')

        self.listener = unix.listen(self.path, self.config.buffer_size)
        self.state = LISTENING


    def register_to_master(self):
        """ Ask the master to add this client to its set of subscribers.
            Calling this again simply sends the request again; the master
            is responsible for recognizing duplicates.
        """

        self._subscription(fields.CLIENT_ADD)

        if self.state == LISTENING:
            self.state = REGISTERED


    def unregister_from_master(self):
        """ Ask the master to remove this client from its set of subscribers.
        """

        self._subscription(fields.CLIENT_DELETE)


    def _subscription(self, type):

        record = payload.ClientData(self.path, str(os.getpid()))
        self.send(Envelope(self.path, type, record))


    def register_handler(self, type, handler):
        """ Invoke *handler* for every inbound envelope of the given *type*,
            replacing any handler previously registered for that type.
            The reserved :data:`tlmbus.protocol.fields.GENERIC` type is
            invoked for every inbound envelope; for relay envelopes, the
            *type* can also be the event type of a relayed notification.
        """

        if callable(handler):
            pass
        else:
            raise TypeError('handler must be callable')

        type = str(type)

        self._handlers_lock.acquire()
        self._handlers[type] = handler
        self._handlers_lock.release()


    def handler(self, type):
        """ Return the handler registered for *type*, or None.
        """

        self._handlers_lock.acquire()
        try:
            handler = self._handlers[type]
        except KeyError:
            handler = None
        self._handlers_lock.release()

        return handler


    def listen_to_events(self):
        """ Accept and dispatch inbound envelopes until :func:`close` is
            called. This blocks the calling thread; each inbound envelope is
            dispatched in its own background thread, with no ordering
            guarantee between envelopes.
        """

        if self.listener is None:
            raise RuntimeError('create_listener() must be called before listen_to_events()')

        if self.state == CLOSED:
            return

        self.state = RUNNING
        self.listener.accept_loop(self._connection_incoming, self.report)


    def _connection_incoming(self, connection):
        """ All inbound connections are filtered through this method. It
            reads the one envelope carried by the connection, decodes it,
            and hands it to :func:`dispatch`. Failures are reported through
            the error channel and the envelope is dropped.
        """

        try:
            raw = self.listener.receive(connection)
        except OSError as e:
            self.report(e)
            return

        try:
            envelope = message.decode(raw)
        except MalformedEnvelopeError as e:
            self.report(e)
            return

        self.dispatch(envelope)


    def dispatch(self, envelope):
        """ Route a decoded *envelope* to the handlers registered for it:
            first the generic handler, then the handler for the envelope's
            own type, and then, for relay envelopes carrying a notification,
            the handler for the notification's event type. Every handler
            receives the outer envelope. Types with no registered handler
            are ignored.
        """

        # Grab the raw payload now, before any handler has the opportunity
        # to project it into something else.

        raw = envelope.data

        self._call(fields.GENERIC, envelope)
        self._call(envelope.type, envelope)

        if envelope.type != fields.RELAY:
            return

        if isinstance(raw, str) and raw != '':
            pass
        else:
            return

        try:
            notification = Notification.parse(raw)
        except MalformedEnvelopeError as e:
            self.report(e)
            return

        envelope.notification = notification

        if notification.event_type:
            self._call(notification.event_type, envelope)


    def _call(self, type, envelope):

        handler = self.handler(type)

        if handler is None:
            return

        try:
            handler(self, envelope)
        except Exception:
            self.logger.exception("%s: handler for '%s' failed", self.path, type)


    def report(self, error):
        """ Pass *error* to the handler registered for the reserved
            :data:`tlmbus.protocol.fields.ERROR` type, as an envelope with
            the payload ``{'error': text}``. If no such handler is
            registered the error is logged.
        """

        text = str(error)
        if text == '':
            text = type(error).__name__

        if self.handler(fields.ERROR) is None:
            self.logger.error("%s: %s", self.path, text)
            return

        envelope = Envelope('', fields.ERROR, dict(error=text))
        self._call(fields.ERROR, envelope)


    def send(self, envelope, address=None):
        """ Send *envelope* to *address*, which defaults to the master. If
            the envelope has no *path* it is stamped with our own address,
            so that the recipient knows where to reply.
        """

        if address is None:
            address = self.master

        if not envelope.path:
            envelope.path = self.path

        unix.send(address, envelope)


    def get_clients(self):
        """ Ask the master for the currently registered clients; the answer
            arrives as a :data:`tlmbus.protocol.fields.CLIENTS` envelope.
        """

        self.send(Envelope(self.path, fields.GET_CLIENTS))


    def get_account_info(self):
        """ Ask the master who we are; the answer arrives as a
            :data:`tlmbus.protocol.fields.ACCOUNT_INFO` envelope, and is
            cached in :attr:`user_id` by the default handler.
        """

        self.send(Envelope(self.path, fields.GET_ACCOUNT_INFO))


    def do_request(self, method, endpoint, body=b''):
        """ Ask the master to issue an HTTP request against the upstream API
            on our behalf. The *endpoint* is relative to the API root; the
            result arrives as a :data:`tlmbus.protocol.fields.REQUEST_RESULT`
            envelope.
        """

        record = payload.DoRequestData.build(method, endpoint, body)
        self.send(Envelope(self.path, fields.DO_REQUEST, record))


    def ping(self, address=None):
        """ Send a ping to *address*, which defaults to the master. A live
            peer answers with a pong envelope on our own address.
        """

        self.send(Envelope(self.path, fields.PING), address)


    def ack(self, acknowledged, address=None):
        """ Acknowledge receipt of an envelope of type *acknowledged*.
        """

        record = payload.AckData(acknowledged)
        self.send(Envelope(self.path, fields.ACK, record), address)


    def close(self):
        """ Unregister from the master, then release the listening address.
            A failure to unregister is reported but does not prevent the
            rest of the shutdown.
        """

        if self.state == CLOSED:
            return

        try:
            self.unregister_from_master()
        except (ProtocolError, TransportError) as e:
            self.report(e)

        if self.listener is not None:
            self.listener.close()

        self.state = CLOSED


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
