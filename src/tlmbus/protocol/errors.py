"""Protocol-layer exceptions.

None of these are fatal to a running client; they describe a single
envelope that could not be produced or understood.
"""


class ProtocolError(Exception):
    """Base class for all protocol-layer errors."""


class SerializationError(ProtocolError):
    """An envelope contains a value that cannot be represented on the wire."""


class MalformedEnvelopeError(ProtocolError):
    """Received bytes are not a well-formed envelope or notification."""


class ProjectionError(ProtocolError):
    """A payload could not be projected onto the requested record."""
