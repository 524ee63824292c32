""" Handlers installed on every new :class:`tlmbus.Client`. Any of them
    can be replaced by registering a different handler for the same type.
"""

from .protocol import fields
from .protocol import payload
from .protocol.errors import ProtocolError
from .protocol.message import Envelope
from .transport.base import TransportError


def ping(client, envelope):
    """ Answer a ping with a pong, addressed to whoever sent the ping.
    """

    pong = Envelope(client.path, fields.PONG)

    try:
        client.send(pong, envelope.path)
    except (ProtocolError, TransportError) as e:
        client.report(e)



def account_info(client, envelope):
    """ Cache the user id carried by an account info envelope. Only the
        master is trusted to say who we are; the same envelope from any
        other sender is ignored.
    """

    if envelope.path != client.master:
        return

    if isinstance(envelope.data, payload.AccountInfoData):
        record = envelope.data
    else:
        record = payload.AccountInfoData()

        try:
            payload.project(envelope, record)
        except ProtocolError as e:
            client.report(e)
            return

    client.user_id = record.user_id
    client.logger.debug("account info from master: user id %r", record.user_id)



def error(client, envelope):
    """ Log errors reported through the error channel.
    """

    if isinstance(envelope.data, payload.ErrorData):
        record = envelope.data
    else:
        record = payload.ErrorData()

        try:
            payload.project(envelope, record)
        except ProtocolError:
            client.logger.error("%s: %r", client.path, envelope.data)
            return

    client.logger.error("%s: %s", client.path, record.error)



defaults = dict()
defaults[fields.PING] = ping
defaults[fields.ACCOUNT_INFO] = account_info
defaults[fields.ERROR] = error


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
