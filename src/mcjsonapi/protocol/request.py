""" Classes implemented here tie responses read from the server back to the
    synchronous calls that are waiting for them.
"""

import logging
import threading

from .. import errors

logger = logging.getLogger(__name__)


class PendingCall:
    """ Client-side helper that blocks a caller until the response for one
        :class:`mcjsonapi.protocol.message.Request` arrives, or until the
        read loop that would deliver it terminates.

        :ivar response: The :class:`mcjsonapi.protocol.message.Response`, once
            it has arrived.
        :ivar failure: The exception that ended the wait, if the read loop
            terminated before a response arrived.
    """

    def __init__(self, request):

        self.request = request
        self.response = None
        self.failure = None
        self.rep_event = threading.Event()


    @property
    def tag(self):
        return self.request.tag


    def _complete(self, response):
        """ Locally store the response and signal any callers blocking via
            :func:`wait` to proceed.
        """

        self.response = response
        self.rep_event.set()


    def _fail(self, failure):
        """ Release any callers blocking via :func:`wait`; they will receive
            the *failure* exception.
        """

        self.failure = failure
        self.rep_event.set()


    def poll(self):
        """ Return True if the call is complete, otherwise return False.
        """

        return self.rep_event.is_set()


    def wait(self, timeout=None):
        """ Block until the response arrives and return it. If the *timeout*
            (in seconds) expires first a
            :class:`mcjsonapi.errors.CallTimeout` is raised; a *timeout* of
            None blocks indefinitely. If the read loop terminated before the
            response arrived, the exception that terminated it is raised.
        """

        completed = self.rep_event.wait(timeout)

        if completed == False:
            raise errors.CallTimeout("no response to %s in %.2f sec" % (self.request.path, timeout))

        if self.response is None:
            raise self.failure

        return self.response


# end of class PendingCall



class Router:
    """ Track the :class:`PendingCall` instances awaiting a response, keyed
        by correlation tag. The caller's thread adds entries via
        :func:`expect`; the read loop resolves them via :func:`deliver`.
    """

    def __init__(self):

        self.pending = dict()
        self.lock = threading.Lock()
        self.failure = None


    def __len__(self):
        return len(self.pending)


    def expect(self, request):
        """ Register a waiter for the response to *request* and return the
            :class:`PendingCall`. This must happen before the request is
            written, otherwise a quick response could arrive unclaimed.
        """

        pending = PendingCall(request)

        self.lock.acquire()

        try:
            if self.failure is not None:
                raise self.failure

            if pending.tag in self.pending:
                raise ValueError('correlation tag already in use: ' + str(pending.tag))

            self.pending[pending.tag] = pending
        finally:
            self.lock.release()

        return pending


    def forget(self, pending):
        """ Stop waiting for the response to *pending*, typically because
            the caller gave up on it.
        """

        self.lock.acquire()

        try:
            if self.pending.get(pending.tag) is pending:
                del self.pending[pending.tag]
        finally:
            self.lock.release()


    def deliver(self, response):
        """ Hand *response* to the call waiting on its tag. Return True if
            there was such a call, otherwise False.
        """

        tag = response.tag

        if tag is None:
            return False

        self.lock.acquire()

        try:
            pending = self.pending.pop(tag)
        except KeyError:
            return False
        finally:
            self.lock.release()

        pending._complete(response)
        return True


    def fail(self, failure):
        """ Release every outstanding call with the *failure* exception, and
            refuse any new calls with that same exception.
        """

        self.lock.acquire()

        try:
            self.failure = failure
            pending = list(self.pending.values())
            self.pending.clear()
        finally:
            self.lock.release()

        if pending:
            logger.debug("releasing %d pending call(s): %s", len(pending), failure)

        for call in pending:
            call._fail(failure)


# end of class Router


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
