""" A class representation of a message exchanged with the master, and of
    the nested notification the master relays on behalf of the upstream
    system.

    On the wire an envelope is a single JSON object::

        {"path": "/tmp/client.sock", "type": "daemon_ping"}
        {"path": "/tmp/master.sock", "type": "daemon_account_info", "data": {"user_id": "12"}}

    There is no length prefix and no version byte; one connection carries
    exactly one envelope.
"""

import dataclasses
import datetime
import re
import typing

from .. import json
from . import payload as payloadmodule
from .errors import SerializationError, MalformedEnvelopeError

# Fractional seconds beyond microsecond precision.

_excess_digits = re.compile(r"(\.\d{6})\d+")


@dataclasses.dataclass
class Envelope:
    """ The :class:`Envelope` is the outer record for everything exchanged
        with the master. The *path* is the filesystem address of the sender,
        and doubles as the reply-to address; the *type* is a flat string tag
        drawn from :mod:`tlmbus.protocol.fields`, though unknown types are
        perfectly legal; the *data*, if any, is whatever the *type* calls
        for. After a call to :func:`tlmbus.protocol.payload.project` the
        *data* will be a typed record rather than a dictionary.

        :ivar notification: The parsed :class:`Notification` for relay
            envelopes, once the client has unwrapped it. This is never
            put on the wire.
    """

    path: str
    type: str
    data: typing.Any = None
    notification: typing.Any = dataclasses.field(default=None, compare=False, repr=False)

    def to_dict(self):
        """ Return the wire representation of this envelope as a dictionary.
            The *data* field is omitted entirely if it is None.
        """

        result = dict()
        result['path'] = self.path
        result['type'] = self.type

        if self.data is not None:
            result['data'] = payloadmodule.to_wire(self.data)

        return result


    def encode(self):
        """ Return the JSON encoding of this envelope as bytes.
        """

        return encode(self)


# end of class Envelope



@dataclasses.dataclass
class Notification:
    """ An event produced by the upstream system and relayed, serialized
        as a JSON string, in the *data* of a relay envelope. The
        *event_type* is a second-level routing key: the client invokes
        the handler registered for it, in addition to the handler for
        the relay type itself.
    """

    event_id: int = 0
    event_type: str = ''
    read: typing.Any = None
    created: typing.Optional[datetime.datetime] = None
    fields: typing.Any = None

    @classmethod
    def parse(cls, text):
        """ Parse the JSON *text* of a relayed notification. Missing fields
            keep their zero values; a field with the wrong JSON type, or
            text that is not a JSON object, raises
            :class:`MalformedEnvelopeError`.
        """

        try:
            decoded = json.loads(text)
        except json.DecodeError as e:
            raise MalformedEnvelopeError('notification is not valid JSON: ' + str(e))

        if isinstance(decoded, dict):
            pass
        else:
            raise MalformedEnvelopeError('notification is not a JSON object')

        notification = cls()

        try:
            event_id = decoded['event_id']
        except KeyError:
            pass
        else:
            if isinstance(event_id, bool) or not isinstance(event_id, int):
                raise MalformedEnvelopeError('notification event_id must be an integer, not ' + repr(event_id))
            notification.event_id = event_id

        try:
            event_type = decoded['event_type']
        except KeyError:
            pass
        else:
            if not isinstance(event_type, str):
                raise MalformedEnvelopeError('notification event_type must be a string, not ' + repr(event_type))
            notification.event_type = event_type

        try:
            created = decoded['created']
        except KeyError:
            pass
        else:
            if created is not None:
                notification.created = _parse_time(created)

        notification.read = decoded.get('read')
        notification.fields = decoded.get('fields')

        return notification


    def to_dict(self):

        created = self.created
        if created is not None:
            created = _format_time(created)

        result = dict()
        result['event_id'] = self.event_id
        result['event_type'] = self.event_type
        result['read'] = payloadmodule.to_wire(self.read)
        result['created'] = created
        result['fields'] = payloadmodule.to_wire(self.fields)
        return result


    def encode(self):
        """ Return the notification as JSON text, suitable for use as the
            *data* of a relay envelope.
        """

        try:
            encoded = json.dumps(self.to_dict())
        except json.EncodeError as e:
            raise SerializationError('cannot encode notification: ' + str(e))

        return encoded.decode()


# end of class Notification



def encode(envelope):
    """ Encode the supplied :class:`Envelope` as JSON bytes. Any value that
        cannot be represented raises :class:`SerializationError`.
    """

    try:
        encoded = json.dumps(envelope.to_dict())
    except json.EncodeError as e:
        raise SerializationError("cannot encode '%s' envelope: %s" % (envelope.type, e))

    return encoded



def decode(raw):
    """ Decode *raw* bytes into an :class:`Envelope`. The bytes must be a
        JSON object with a string *type*; anything else raises
        :class:`MalformedEnvelopeError`. An unrecognized *type* is not an
        error, it simply won't match any handler.
    """

    if raw is None or len(raw) == 0:
        raise MalformedEnvelopeError('empty message')

    try:
        decoded = json.loads(raw)
    except json.DecodeError as e:
        raise MalformedEnvelopeError('message is not valid JSON: ' + str(e))

    if isinstance(decoded, dict):
        pass
    else:
        raise MalformedEnvelopeError('message is not a JSON object')

    try:
        type = decoded['type']
    except KeyError:
        raise MalformedEnvelopeError("message is missing the mandatory 'type' field")

    if not isinstance(type, str):
        raise MalformedEnvelopeError("message 'type' must be a string, not " + repr(type))

    path = decoded.get('path')

    if path is None:
        path = ''
    elif not isinstance(path, str):
        raise MalformedEnvelopeError("message 'path' must be a string, not " + repr(path))

    data = decoded.get('data')

    return Envelope(path, type, data)



def _parse_time(value):
    """ Timestamps arrive as RFC 3339 strings, possibly with nanosecond
        precision and a trailing 'Z'. The nanoseconds are truncated to
        microseconds.
    """

    if not isinstance(value, str):
        raise MalformedEnvelopeError('notification created must be a string, not ' + repr(value))

    value = _excess_digits.sub(r"\1", value)

    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError:
        raise MalformedEnvelopeError('notification created is not a valid timestamp: ' + repr(value))

    # A date alone, or a time without an offset, is not RFC 3339.

    if parsed.tzinfo is None:
        raise MalformedEnvelopeError('notification created has no time zone offset: ' + repr(value))

    return parsed



def _format_time(value):

    formatted = value.isoformat()

    if formatted.endswith('+00:00'):
        formatted = formatted[:-6] + 'Z'

    return formatted


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
