""" Exception classes raised by the mcjsonapi client. Every exception raised
    by this package derives from :class:`JsonApiError`.
"""


class JsonApiError(Exception):
    """ Base class for all mcjsonapi errors. """


class TransportError(JsonApiError):
    """ Base class for all transport-layer errors. """


class TransportConnectionError(TransportError, ConnectionError):
    """ The TCP connection to the server could not be established. """


class ConnectionClosed(TransportError):
    """ The read loop terminated while a call was still waiting for its
        response.
    """


class NotConnectedError(JsonApiError):
    """ An operation was attempted before :func:`mcjsonapi.Client.connect`
        succeeded, or after the connection was torn down.
    """


class ProtocolError(JsonApiError):
    """ A response line from the server could not be decoded. This is fatal
        to the read loop that encountered it.
    """


class CallTimeout(JsonApiError, TimeoutError):
    """ No response arrived for a call within its timeout. """


class RemoteError(JsonApiError):
    """ The server answered a call with ``result: "error"``. The *source*
        attribute is the method name echoed back by the server, if any.
    """

    def __init__(self, message, source=None):
        JsonApiError.__init__(self, message)
        self.source = source


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
