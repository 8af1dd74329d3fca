""" The :class:`Client` is the primary entry point for interacting with a
    JSONAPI server: it owns the connection, issues calls and subscriptions,
    and runs the background read loop that routes everything the server
    sends back.
"""

import atexit
import logging
import threading
import weakref

from . import config
from . import errors
from .protocol import key as keys
from .protocol import message
from .protocol import request
from .protocol import subscribe
from .protocol import transport as transports

logger = logging.getLogger(__name__)

IDLE = 'idle'
RUNNING = 'running'
STOPPED = 'stopped'

# Stands in for "use the client's default timeout", since None already
# means "wait indefinitely".

_default = object()


class Client:
    """ A persistent connection to the JSONAPI server at *host* and *port*.
        The *port* is the nominal JSONAPI port; the stream connection is
        made one port above it. The *username*, *password*, and *salt* are
        used to derive the authentication key for each request that does
        not supply its own.

        Calls block until the server responds. The default *timeout*, in
        seconds, applies to every call that does not specify one; None
        means wait indefinitely.

        :ivar state: One of :data:`IDLE`, :data:`RUNNING`, or :data:`STOPPED`.
        :ivar error: The exception that terminated the read loop, if any.
    """

    def __init__(self, host, port, username=None, password=None, salt='', timeout=None):

        self.host = host
        self.port = int(port)
        self.username = username
        self.password = password
        self.salt = salt
        self.timeout = timeout

        self.state = IDLE
        self.error = None
        self.thread = None
        self.transport = None

        self.router = request.Router()
        self.registry = subscribe.Registry()
        self.dispatcher = subscribe.Dispatcher()

        _clients.add(self)


    def __enter__(self):
        self.connect()
        return self


    def __exit__(self, *exception):
        self.disconnect()


    def __repr__(self):
        return '<%s %s:%d %s>' % (self.__class__.__name__, self.host, self.port, self.state)


    @classmethod
    def from_config(cls, profile='default'):
        """ Create a :class:`Client` using the settings from the named
            configuration *profile*; see :mod:`mcjsonapi.config`.
        """

        settings = config.get(profile)

        return cls(settings['host'], settings['port'],
                   settings['username'], settings['password'],
                   settings['salt'], settings['timeout'])


    @property
    def connected(self):
        """ True while the connection is established and the read loop is
            running.
        """

        return self.state == RUNNING


    def connect(self, host=None, port=None):
        """ Connect to the server, optionally replacing the *host* and *port*
            this client was created with, and start the background read loop.
            A :class:`mcjsonapi.errors.TransportConnectionError` is raised if
            the connection cannot be established.
        """

        if self.state == RUNNING and host is None and port is None:
            return

        self.disconnect()

        if host is not None:
            self.host = host
        if port is not None:
            self.port = int(port)

        transport = transports.LineTransport(self.host, self.port)
        transport.open()

        # Correlation tags and subscriptions do not survive a reconnect;
        # everything starts fresh with the new connection.

        router = request.Router()

        self.transport = transport
        self.router = router
        self.registry.clear()
        self.error = None
        self.state = RUNNING

        name = 'mcjsonapi-reader-%s:%d' % (self.host, self.port)
        self.thread = threading.Thread(target=self.run, args=(transport, router), name=name)
        self.thread.daemon = True
        self.thread.start()

        logger.info("connected to %s:%d", *transport.address)


    def disconnect(self):
        """ Close the connection and wait for the read loop to exit. Any
            calls still waiting for a response are released with a
            :class:`mcjsonapi.errors.ConnectionClosed` exception.
        """

        transport = self.transport

        if transport is None:
            return

        self.transport = None
        self.state = STOPPED

        # Fail the router before closing, so that a call whose write is cut
        # short by the close sees the same failure as calls already waiting.

        self.router.fail(errors.ConnectionClosed('disconnected from %s:%d' % transport.address))
        transport.close()

        # A callback running on the read loop's thread is allowed to
        # disconnect; it cannot wait for its own thread to exit.

        if self.thread is not None and self.thread is not threading.current_thread():
            self.thread.join()


    def join(self, timeout=None):
        """ Block until the read loop exits, or until *timeout* seconds have
            elapsed. Return True if the read loop is no longer running.
        """

        thread = self.thread

        if thread is None:
            return True

        thread.join(timeout)
        return not thread.is_alive()


    def make_key(self, method):
        """ Generate the authentication key for *method* using this client's
            credentials.
        """

        return keys.make_key(method, self.username, self.password, self.salt)


    def call(self, method, *args, key=None, timeout=_default):
        """ Call *method* on the server with the remaining positional *args*,
            and return the result. If *key* is None one will be generated
            from this client's credentials.

            If the server reports an error, the error message is returned
            the same way a successful result would be. Use :func:`request`
            to tell the two apart.

            The *timeout*, in seconds, defaults to the client's timeout; an
            explicit None waits indefinitely.
        """

        response = self.request(method, *args, key=key, timeout=timeout)
        return response.value


    def request(self, method, *args, key=None, timeout=_default):
        """ Call *method* the same way as :func:`call`, but return the
            complete :class:`mcjsonapi.protocol.message.Response`; its
            :func:`unwrap` method returns the result, or raises a
            :class:`mcjsonapi.errors.RemoteError` if the server reported
            an error.
        """

        self._check_connected()

        if key is None:
            key = self.make_key(method)

        if len(args) == 0:
            args = None
        else:
            args = list(args)

        call = message.Call(method, args, key)
        return self._send(call, timeout)


    def call_multiple(self, methods, args=None, key=None, timeout=_default):
        """ Call several *methods* with a single request. The *args*, if
            provided, are a sequence of argument lists aligned with *methods*
            by index. The results are returned as a dictionary keyed by
            method name; if the same method is called more than once, the
            last result wins.

            A :class:`mcjsonapi.errors.RemoteError` is raised if the server
            rejects the request as a whole, for example because of a bad key.
        """

        self._check_connected()

        methods = list(methods)

        if key is None:
            key = self.make_key(message.methods_json(methods))

        call = message.MultiCall(methods, args, key)
        response = self._send(call, timeout)

        if response.error:
            raise errors.RemoteError(response.value, response.source)

        return response.results()


    def subscribe(self, source, key=None, send_previous=False):
        """ Subscribe to the stream *source*, such as 'console', 'chat', or
            'connections'. Stream data is delivered to the callbacks
            registered via :func:`register`. If *send_previous* is True the
            server sends up to :data:`mcjsonapi.protocol.message.PREVIOUS_LIMIT`
            previous items first, indistinguishable from live ones.

            The correlation tag for the subscription is returned.
        """

        transport = self._check_connected()

        if key is None:
            key = self.make_key(source)

        subscription = message.Subscribe(source, key, send_previous)

        # Register before writing; the first push can arrive immediately.

        self.registry.add(subscription.tag, source)
        transport.writeline(str(subscription))

        logger.debug("subscribed to %r with tag %d", source, subscription.tag)
        return subscription.tag


    def register(self, callback):
        """ Register a *callback* to be invoked with an
            :class:`mcjsonapi.protocol.message.Event` for every item of
            subscribed stream data. See
            :func:`mcjsonapi.protocol.subscribe.Dispatcher.register`.
        """

        self.dispatcher.register(callback)


    def unregister(self, callback):
        self.dispatcher.unregister(callback)


    def run(self, transport, router):
        """ The read loop. Read and route one line at a time until the
            connection closes, a line cannot be decoded, or a stream callback
            raises an exception; any of these ends the loop, and releases any
            calls still waiting on *router*.
        """

        failure = None

        try:
            while True:
                line = transport.readline()

                if line is None:
                    failure = errors.ConnectionClosed('connection to %s:%d closed' % transport.address)
                    break

                try:
                    response = message.Response.decode(line)
                except errors.ProtocolError as e:
                    failure = e
                    break

                self._incoming(response, router)

        except errors.NotConnectedError as e:
            # Closed locally before the first read.
            failure = errors.ConnectionClosed(str(e))

        except Exception as e:
            if transport.is_open:
                logger.exception("read loop for %s:%d failed", *transport.address)
                failure = errors.ConnectionClosed('read loop failed: %s' % (e))
                failure.__cause__ = e
            else:
                failure = errors.ConnectionClosed('connection to %s:%d closed' % transport.address)

        if isinstance(failure, errors.ProtocolError):
            logger.error("read loop for %s:%d stopped: %s", transport.address[0], transport.address[1], failure)
        else:
            logger.debug("read loop for %s:%d stopped: %s", transport.address[0], transport.address[1], failure)

        router.fail(failure)

        # A disconnect() or a reconnect may already have moved on from this
        # read loop; only update the state if this is still the current one.

        if self.router is router:
            self.error = failure
            self.state = STOPPED


    def _incoming(self, response, router=None):
        """ Route one decoded *response*: to the call waiting for it, else
            to the stream callbacks if it belongs to a subscription. Anything
            else is dropped.
        """

        if router is None:
            router = self.router

        if router.deliver(response):
            return

        tag = response.tag

        if tag is not None and tag in self.registry:
            event = message.Event.from_response(response)

            if event.source is None:
                event.source = self.registry.source(tag)

            self.dispatcher.propagate(event)
            return

        # This is normal, for example when a call's caller already gave up
        # waiting.

        logger.debug("dropping response with unrecognized tag %r", tag)


    def _check_connected(self):

        transport = self.transport

        if transport is None:
            raise errors.NotConnectedError('connection to server was never established; use connect()')

        if self.state != RUNNING:
            raise errors.NotConnectedError('connection to %s:%d is no longer active' % transport.address)

        return transport


    def _send(self, call, timeout):
        """ Write *call* and block until its response arrives.
        """

        if timeout is _default:
            timeout = self.timeout

        transport = self._check_connected()
        router = self.router
        pending = router.expect(call)

        try:
            transport.writeline(str(call))
        except (errors.TransportError, errors.NotConnectedError) as e:
            router.forget(pending)

            if router.failure is not None:
                raise router.failure from e
            raise

        try:
            return pending.wait(timeout)
        except errors.CallTimeout:
            router.forget(pending)
            raise


# end of class Client



_clients = weakref.WeakSet()

def shutdown():
    """ Disconnect every :class:`Client` that is still connected.
    """

    for client in list(_clients):
        client.disconnect()


atexit.register(shutdown)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
