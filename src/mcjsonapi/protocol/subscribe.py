""" Classes implemented here handle the stream subscription side of the
    client: remembering which correlation tags belong to a subscription,
    and handing stream pushes to registered observers.
"""

import threading


class Registry:
    """ The set of subscriptions issued over one connection, mapping each
        subscription's correlation tag to its stream source. A push whose
        tag is not in the registry is not for us, and is dropped.
    """

    def __init__(self):

        self.sources = dict()
        self.lock = threading.Lock()


    def __contains__(self, tag):
        return tag in self.sources


    def __len__(self):
        return len(self.sources)


    def add(self, tag, source):
        """ Record that *tag* identifies the subscription to *source*.
        """

        self.lock.acquire()
        self.sources[tag] = source
        self.lock.release()


    def clear(self):
        self.lock.acquire()
        self.sources.clear()
        self.lock.release()


    def source(self, tag):
        """ Return the source subscribed with *tag*, or None if there is no
            such subscription.
        """

        return self.sources.get(tag)


    def tags(self, source=None):
        """ Return the subscription tags, optionally limited to those for a
            specific *source*.
        """

        self.lock.acquire()
        items = list(self.sources.items())
        self.lock.release()

        if source is None:
            return [tag for tag,subscribed in items]
        else:
            return [tag for tag,subscribed in items if subscribed == source]


# end of class Registry



class Dispatcher:
    """ Maintain an ordered list of observers, and invoke them for every
        stream push routed here by the read loop.
    """

    def __init__(self):

        self.callbacks = list()
        self.lock = threading.Lock()


    def __len__(self):
        return len(self.callbacks)


    def register(self, callback):
        """ Register a *callback* to be invoked with every
            :class:`mcjsonapi.protocol.message.Event`. Callbacks are invoked
            in the order they were registered, one at a time, on the read
            loop's thread. Any callbacks registered in this fashion should be
            as lightweight as possible: until a callback returns, no further
            responses are read from the server, including responses to
            pending calls. A callback that raises an exception ends the read
            loop.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        self.lock.acquire()
        self.callbacks.append(callback)
        self.lock.release()


    def unregister(self, callback):
        """ Remove a previously registered *callback*. Removing a callback
            that is not registered does nothing.
        """

        self.lock.acquire()

        try:
            self.callbacks.remove(callback)
        except ValueError:
            pass
        finally:
            self.lock.release()


    def propagate(self, event):
        """ Invoke all registered callbacks with *event*. There is no
            isolation between callbacks: an exception raised by one of them
            propagates immediately, and the callbacks after it are not
            invoked for this event.
        """

        # Iterate over a copy, so that a callback can unregister itself.

        self.lock.acquire()
        callbacks = tuple(self.callbacks)
        self.lock.release()

        for callback in callbacks:
            callback(event)


# end of class Dispatcher


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
