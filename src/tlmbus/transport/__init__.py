"""Transport layer: Unix domain stream sockets, one envelope per connection."""

from .base import (
    TransportError,
    BindError,
    ConnectError,
    WriteError,
)

from . import unix
from .unix import listen, send, Listener
