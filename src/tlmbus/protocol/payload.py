""" Typed records for envelope payloads, and the projection of an opaque
    decoded payload onto those records.

    Projection is deliberately lenient. Many payloads carry only a subset
    of the fields a record declares, depending on context; a partial
    record is an acceptable outcome, and fields whose value has the wrong
    type are skipped rather than rejected. :func:`parse` applies the
    record appropriate for an envelope's own type, which is the usual
    entry point for handlers.
"""

import base64
import dataclasses
import math
import types
import typing

from . import fields
from .errors import ProjectionError, SerializationError


def wire(name, default='', **kwargs):
    """ Shorthand for a dataclass field whose name on the wire differs from
        the Python attribute name.
    """

    metadata = dict(wire=name)

    if 'default_factory' in kwargs:
        return dataclasses.field(metadata=metadata, **kwargs)

    return dataclasses.field(default=default, metadata=metadata, **kwargs)



@dataclasses.dataclass
class ClientData:
    """ Identifies a registered client: the *path* of its listening socket,
        and its process id as a decimal string.
    """

    path: str = ''
    pid: str = ''


@dataclasses.dataclass
class DoRequestData:
    """ A request the master should perform against the upstream HTTP API
        on behalf of the client. The *body* is base64 text, which is how
        the master encodes raw bytes; see :meth:`build`.
    """

    method: str = wire('Method')
    endpoint: str = wire('Endpoint')
    body: str = wire('Body')

    @classmethod
    def build(cls, method, endpoint, body=b''):
        if isinstance(body, str):
            body = body.encode()

        body = base64.b64encode(body).decode()
        return cls(method, endpoint, body)


@dataclasses.dataclass
class RequestResultData:
    """ The outcome of a :class:`DoRequestData` request, as relayed by the
        master. :meth:`content` returns the raw response body.
    """

    request: DoRequestData = wire('Request', default_factory=DoRequestData)
    status_code: int = wire('StatusCode', 0)
    status: str = wire('Status')
    data: str = wire('data')

    def content(self):
        if self.data:
            return base64.b64decode(self.data)
        return b''


@dataclasses.dataclass
class AccountInfoData:
    user_id: str = ''


@dataclasses.dataclass
class AckData:
    type: typing.Any = wire('Type', None)


@dataclasses.dataclass
class ErrorData:
    error: str = ''


# Record applied by parse() for each reserved type. Types missing here
# either carry no payload at all (ping, pong, get-clients, and so on) or
# are not reserved, in which case the payload is left as-is.

shapes = dict()
shapes[fields.CLIENT_ADD] = ClientData
shapes[fields.CLIENT_DELETE] = ClientData
shapes[fields.CLIENT_ADDED] = ClientData
shapes[fields.CLIENT_DELETED] = ClientData
shapes[fields.DO_REQUEST] = DoRequestData
shapes[fields.REQUEST_RESULT] = RequestResultData
shapes[fields.ACCOUNT_INFO] = AccountInfoData
shapes[fields.ACK] = AckData
shapes[fields.ERROR] = ErrorData

# Types whose payload is an ordered sequence of records.

sequences = dict()
sequences[fields.CLIENTS] = ClientData



def project(envelope, record):
    """ Copy matching fields from the opaque payload of *envelope* onto
        *record*, which must be a mutable dataclass instance. A field is
        set when the payload has its wire name as a key and the value's
        runtime type matches the declared type of the field; any other
        field keeps its current value. Upon completion the envelope's
        payload is replaced by *record*.

        :class:`ProjectionError` is raised if *record* is not a mutable
        dataclass instance, or if the payload is absent or is not a
        dictionary.
    """

    _check_record(record)

    source = envelope.data

    if source is None:
        raise ProjectionError("'%s' envelope has no payload" % (envelope.type))

    if isinstance(source, dict):
        pass
    else:
        raise ProjectionError("'%s' payload is a %s, not a mapping" % (envelope.type, type(source).__name__))

    _populate(record, source)
    envelope.data = record



def project_list(envelope, record_class):
    """ Project each element of a list payload onto a new instance of
        *record_class*. The envelope's payload is replaced with the list
        of records.
    """

    source = envelope.data

    if isinstance(source, list):
        pass
    else:
        raise ProjectionError("'%s' payload is not a list" % (envelope.type))

    records = list()

    for element in source:
        if isinstance(element, dict):
            pass
        else:
            raise ProjectionError("'%s' payload contains a non-mapping element: %r" % (envelope.type, element))

        record = record_class()
        _check_record(record)
        _populate(record, element)
        records.append(record)

    envelope.data = records



def parse(envelope):
    """ Project the payload of *envelope* according to its own type, using
        the :data:`shapes` and :data:`sequences` tables. Envelopes of other
        types, or whose payload was already projected, are left alone. The
        resulting payload is returned for convenience.
    """

    data = envelope.data

    if data is None or dataclasses.is_dataclass(data):
        return data

    try:
        record_class = shapes[envelope.type]
    except KeyError:
        pass
    else:
        project(envelope, record_class())
        return envelope.data

    try:
        record_class = sequences[envelope.type]
    except KeyError:
        pass
    else:
        project_list(envelope, record_class)

    return envelope.data



def to_wire(value):
    """ Return a JSON-ready representation of *value*, translating any
        records (at any depth) into dictionaries keyed by wire name.
        Non-finite floats raise :class:`SerializationError`.
    """

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        result = dict()
        for field in dataclasses.fields(value):
            name = field.metadata.get('wire', field.name)
            result[name] = to_wire(getattr(value, field.name))
        return result

    if isinstance(value, (list, tuple)):
        return [to_wire(element) for element in value]

    if isinstance(value, dict):
        return {key: to_wire(element) for key, element in value.items()}

    # JSON has no representation for NaN or the infinities, and the
    # backends would quietly write them as null.

    if isinstance(value, float) and not math.isfinite(value):
        raise SerializationError("cannot encode non-finite number: %r" % (value))

    return value



def _check_record(record):

    if isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise ProjectionError('projection target must be a dataclass instance, not ' + repr(record))

    if record.__dataclass_params__.frozen:
        raise ProjectionError('projection target is frozen: ' + type(record).__name__)



def _populate(record, source):

    try:
        hints = typing.get_type_hints(type(record))
    except NameError:
        # Unresolvable forward references. Fall back to whatever the
        # dataclass recorded, which may be a string; strings are treated
        # as typing.Any by _matches().
        hints = dict()

    for field in dataclasses.fields(record):
        name = field.metadata.get('wire', field.name)

        try:
            value = source[name]
        except KeyError:
            continue

        declared = hints.get(field.name, field.type)

        if dataclasses.is_dataclass(declared) and isinstance(declared, type):
            if isinstance(value, dict):
                nested = getattr(record, field.name)
                if not isinstance(nested, declared):
                    nested = declared()
                _populate(nested, value)
                setattr(record, field.name, nested)
            continue

        if _matches(value, declared):
            setattr(record, field.name, value)



def _matches(value, declared):
    """ Return True if *value* satisfies the *declared* type annotation.
    """

    if declared is typing.Any or declared is object or isinstance(declared, str):
        return True

    origin = typing.get_origin(declared)

    if origin is typing.Union or origin is types.UnionType:
        for argument in typing.get_args(declared):
            if argument is type(None):
                if value is None:
                    return True
            elif _matches(value, argument):
                return True
        return False

    if origin is not None:
        declared = origin

    # JSON has no separate boolean type for numbers, but Python does:
    # True is an int. Don't let a boolean sneak into a numeric field.

    if isinstance(value, bool) and declared is not bool:
        return False

    if declared is float:
        return isinstance(value, (int, float))

    try:
        return isinstance(value, declared)
    except TypeError:
        return False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
