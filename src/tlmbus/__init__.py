""" Python client for the master daemon's local event bus. A client binds
    its own Unix socket, registers with the master, and dispatches the
    envelopes it receives, including notifications relayed from the
    upstream system, to registered handlers.
"""

# Utility components.

from . import json

# Submodules used by multiple other components.

from . import protocol
from . import transport
from . import config

# Primary public-facing interfaces.

from . import handlers
from . import client

from .client import Client
from .config import Config
from .protocol import fields
from .protocol.message import Envelope, Notification

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
