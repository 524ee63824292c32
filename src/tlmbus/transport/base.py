"""Transport-layer exceptions.

These describe failures moving bytes between processes; failures to
produce or understand those bytes live in :mod:`tlmbus.protocol.errors`.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base class for all transport-layer errors."""


class BindError(TransportError):
    """The listening address is already in use or cannot be created."""


class ConnectError(TransportError):
    """The peer address is unreachable."""


class WriteError(TransportError):
    """An envelope could not be written in full to the peer."""
