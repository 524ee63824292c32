""" Configuration for a :class:`tlmbus.Client`: where the master listens,
    where the client itself should listen, and how large a single inbound
    message may be.
"""

import os
import tempfile

from .transport import unix

default_master = '/tmp/tracim_master.sock'


class Config:
    """ The *master* is the filesystem address of the master's socket; the
        *path* is the filesystem address the client binds for its own
        inbound messages. If the *path* is not specified a per-process
        address in the temporary directory is used.
    """

    def __init__(self, master=None, path=None, buffer_size=None):

        if master is None:
            master = default_master

        if path is None:
            path = default_path()

        if buffer_size is None:
            buffer_size = unix.default_buffer_size

        buffer_size = int(buffer_size)

        if buffer_size <= 0:
            raise ValueError('the buffer size must be positive')

        self.master = str(master)
        self.path = str(path)
        self.buffer_size = buffer_size


    def __repr__(self):
        return "Config(master=%r, path=%r, buffer_size=%d)" % (self.master, self.path, self.buffer_size)


# end of class Config



def default_path():
    """ Return the default client address for this process.
    """

    name = "tlmbus_client_%d.sock" % (os.getpid())
    return os.path.join(tempfile.gettempdir(), name)



def from_environment():
    """ Build a :class:`Config` from the TLMBUS_MASTER_SOCKET,
        TLMBUS_CLIENT_SOCKET, and TLMBUS_BUFFER_SIZE environment variables.
        Any that are not set take their default values.
    """

    try:
        master = os.environ['TLMBUS_MASTER_SOCKET']
    except KeyError:
        master = None

    try:
        path = os.environ['TLMBUS_CLIENT_SOCKET']
    except KeyError:
        path = None

    try:
        buffer_size = os.environ['TLMBUS_BUFFER_SIZE']
    except KeyError:
        buffer_size = None

    return Config(master, path, buffer_size)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
