from . import errors
from . import fields
from . import payload
from . import message

from .message import Envelope, Notification


"""
tlmbus Protocol Layer
=====================

This package defines the envelope exchanged with the master, the
notification the master relays inside it, and the typed records that
envelope payloads are projected onto.

The protocol layer MUST NOT depend on the transport implementation.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Client (client.py)
    Handler table and dispatch
    - register_handler()
    - listen_to_events()
    - dispatch()

    │
    ▼
Payload Projector (payload.py)
    Opaque payload -> typed record
    - project()
    - parse()

    │
    ▼
Envelope Codec (message.py)
    Envelope <-> JSON bytes
    - encode()
    - decode()
    - Notification.parse()

    │
    ▼
Type Vocabulary (fields.py)
    Canonical envelope type strings

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Transport Layer (tlmbus.transport)
    Moves bytes, one envelope per connection
    - listen()
    - send()

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
