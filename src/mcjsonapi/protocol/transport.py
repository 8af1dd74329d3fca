""" The line-oriented TCP stream used to talk to a JSONAPI server.
"""

import logging
import socket
import threading

from .. import errors

logger = logging.getLogger(__name__)


class LineTransport:
    """ Maintain a single TCP connection and expose it as a stream of text
        lines. The stream listens one port above the nominal JSONAPI port:
        connecting to *port* actually opens ``port + 1``.

        Writes are flushed immediately and serialized with a lock, so
        multiple threads may issue requests without their lines getting
        interleaved on the wire. Reads are expected to happen from a single
        thread, the client's read loop.
    """

    encoding = 'utf-8'
    connect_timeout = 10

    def __init__(self, host, port):

        self.host = host
        self.port = int(port)

        self.socket = None
        self.reader = None
        self.writer = None
        self.write_lock = threading.Lock()


    @property
    def address(self):
        return (self.host, self.port + 1)


    @property
    def is_open(self):
        return self.socket is not None


    def open(self):
        """ Establish the TCP connection. Raise a
            :class:`mcjsonapi.errors.TransportConnectionError` if the
            socket cannot be established.
        """

        if self.socket is not None:
            return

        address = self.address
        logger.debug("connecting to %s:%d", *address)

        try:
            connection = socket.create_connection(address, self.connect_timeout)
        except OSError as e:
            raise errors.TransportConnectionError("cannot connect to %s:%d: %s" % (address[0], address[1], e)) from e

        # The connect timeout should not apply to reads; the read loop
        # blocks until the server has something to say.

        connection.settimeout(None)

        self.socket = connection
        self.reader = connection.makefile('rb')
        self.writer = connection.makefile('w', encoding=self.encoding, newline='\n')


    def close(self):
        """ Shut down and close the connection. Any blocked :func:`readline`
            call will return; a :func:`writeline` in progress is allowed to
            finish first. Calling this method more than once is harmless.
        """

        self.write_lock.acquire()

        try:
            connection = self.socket
            self.socket = None
        finally:
            self.write_lock.release()

        if connection is None:
            return

        try:
            connection.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already disconnected by the other end.
            pass

        for stream in (self.writer, self.reader):
            try:
                stream.close()
            except OSError:
                pass

        connection.close()
        logger.debug("closed connection to %s:%d", *self.address)


    def readline(self):
        """ Return the next line from the server as bytes, with the line
            terminator removed. Decoding is left to the caller, so that a
            line with invalid UTF-8 can be reported as such. None is returned
            once the connection has been closed by either side.
        """

        reader = self.reader

        if self.socket is None or reader is None:
            raise errors.NotConnectedError('transport is not open')

        try:
            line = reader.readline()
        except (OSError, ValueError):
            # A ValueError is raised by a file object that was closed
            # locally while blocked in readline().
            if self.socket is None:
                return None
            raise

        if line == b'':
            return None

        return line.rstrip(b'\r\n')


    def writeline(self, text):
        """ Write *text* followed by a newline, and flush it to the server.
        """

        self.write_lock.acquire()

        try:
            if self.socket is None:
                raise errors.NotConnectedError('transport is not open')

            try:
                self.writer.write(text + '\n')
                self.writer.flush()
            except OSError as e:
                raise errors.TransportError("write to %s:%d failed: %s" % (self.address[0], self.address[1], e)) from e
        finally:
            self.write_lock.release()


# end of class LineTransport


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
