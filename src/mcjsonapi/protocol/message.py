""" A class representation of JSONAPI messages: the request lines written to
    the server, and the response envelopes read back from it.
"""

import itertools
import threading
import time
import urllib.parse

from .. import errors
from .. import json


PREVIOUS_LIMIT = 50
""" The maximum number of historical items a server replays for a stream
    subscription made with ``show_previous`` set.
"""

SUCCESS = 'success'
ERROR = 'error'


class Request:
    """ The :class:`Request` is the base class for all lines sent to the
        server. Every request is assigned a locally unique correlation *tag*
        upon construction; the server echoes the tag in any response it
        generates, which is how the read loop ties a response back to the
        request that caused it.

        Subclasses define the *path* and implement :func:`_query`, which
        returns the ordered query parameters preceding the tag, including
        the key wherever that request type places it.

        :ivar tag: The correlation tag for this request.
        :ivar key: The authentication key sent with this request.
    """

    path = None

    def __init__(self, key, tag=None):

        if tag is None:
            tag = _tag_next()

        self.key = key
        self.tag = tag
        self.line = None


    def __str__(self):
        self._finalize()
        return self.line


    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, str(self))


    def _finalize(self):
        """ Assemble the request line, caching the result for subsequent
            calls.
        """

        if self.line is None:
            query = list(self._query())
            query.append(('tag', str(self.tag)))

            query = ['%s=%s' % (name, value) for name,value in query]
            self.line = self.path + '?' + '&'.join(query)


    def _query(self):
        raise NotImplementedError('subclasses must implement _query()')


# end of class Request



class Call(Request):
    """ Invoke a single *method* on the server. The *args* are serialized
        as JSON; None is sent as the JSON literal ``null``.
    """

    path = '/api/call'

    def __init__(self, method, args, key, tag=None):

        Request.__init__(self, key, tag)
        self.method = method
        self.args = args


    def _query(self):
        method = escape(self.method)
        args = escape(json.dumps_text(self.args))

        return (('method', method), ('args', args), ('key', self.key))


# end of class Call



class MultiCall(Request):
    """ Invoke several *methods* with a single request. The *args* are a
        sequence of argument lists, aligned with *methods* by index; None is
        sent as the JSON literal ``null``. The
        method list is itself sent as a JSON array; see :func:`methods_json`
        for the exact text, which is also what the authentication key for a
        multiple call is derived from.
    """

    path = '/api/call-multiple'

    def __init__(self, methods, args, key, tag=None):

        Request.__init__(self, key, tag)
        self.methods = list(methods)

        if args is not None:
            args = [list(arguments) for arguments in args]

        if args is not None and len(args) != len(self.methods):
            raise ValueError("%d argument lists provided for %d methods" % (len(args), len(self.methods)))

        self.args = args


    def _query(self):
        methods = escape(methods_json(self.methods))
        args = escape(json.dumps_text(self.args))

        return (('method', methods), ('args', args), ('key', self.key))


# end of class MultiCall



class Subscribe(Request):
    """ Subscribe to the stream *source*, for example 'console', 'chat', or
        'connections'. If *show_previous* is True the server will replay up
        to :data:`PREVIOUS_LIMIT` historical items before streaming live ones.
    """

    path = '/api/subscribe'

    def __init__(self, source, key, show_previous=False, tag=None):

        Request.__init__(self, key, tag)
        self.source = source
        self.show_previous = bool(show_previous)


    def _query(self):

        # Rendered as 'True' or 'False'; the server parses the flag
        # case-insensitively.

        query = list()
        query.append(('source', escape(self.source)))
        query.append(('key', self.key))
        query.append(('show_previous', str(self.show_previous)))

        return query


# end of class Subscribe



class Response:
    """ One decoded response line from the server, the call envelope:
        ``{"result": ..., "success"|"error": ..., "source": ..., "tag": ...}``.
        The envelope is a tagged result: *error* is True when the
        server reported an error, and *value* is the content of the
        ``success`` or ``error`` field accordingly.

        A multiple call is answered with a bare JSON array of per-method
        envelopes; in that case the :class:`Response` wraps the whole array
        as a successful value, and its tag is taken from the first element
        that carries one.

        :ivar raw: The decoded JSON exactly as received.
    """

    def __init__(self, raw):

        self.raw = raw

        if isinstance(raw, dict):
            self.error = raw.get('result') == ERROR
            self.source = raw.get('source')
            self.tag = _tag_of(raw)

            if self.error:
                self.value = raw.get(ERROR)
            else:
                self.value = raw.get(SUCCESS)

        elif isinstance(raw, list):
            self.error = False
            self.source = None
            self.tag = None
            self.value = raw

            for element in raw:
                if isinstance(element, dict):
                    tag = _tag_of(element)
                    if tag is not None:
                        self.tag = tag
                        break
        else:
            raise errors.ProtocolError('response is not a JSON object: ' + repr(raw))


    def __repr__(self):
        result = ERROR if self.error else SUCCESS
        return 'Response(%s, source=%r, tag=%r, value=%r)' % (result, self.source, self.tag, self.value)


    @classmethod
    def decode(cls, line):
        """ Parse one response *line*, either bytes as read from the wire or
            text, and return a :class:`Response`. Raise
            :class:`mcjsonapi.errors.ProtocolError` if the line is empty, is
            not valid UTF-8, or is not valid JSON.
        """

        try:
            line = line.decode('utf-8')
        except AttributeError:
            # Already text.
            pass
        except UnicodeDecodeError as e:
            raise errors.ProtocolError('response line is not valid UTF-8: %r' % (line,)) from e

        line = line.strip()

        if line == '':
            raise errors.ProtocolError('empty response line')

        try:
            raw = json.loads(line)
        except (json.DecodeError, ValueError) as e:
            raise errors.ProtocolError('undecodable response line: %r (%s)' % (line, e)) from e

        return cls(raw)


    def results(self):
        """ Interpret the value as the answer to a multiple call, and return
            a dictionary mapping each element's ``source`` to its value. Later
            elements overwrite earlier ones sharing the same source.
        """

        elements = self.value

        if elements is None:
            elements = ()
        elif isinstance(elements, dict):
            elements = (elements,)

        results = dict()

        for element in elements:
            if isinstance(element, dict):
                pass
            else:
                raise errors.ProtocolError('unexpected multiple call result: ' + repr(element))

            source = element.get('source')

            if element.get('result') == ERROR:
                results[source] = element.get(ERROR)
            else:
                results[source] = element.get(SUCCESS)

        return results


    def unwrap(self):
        """ Return the value if the call succeeded, otherwise raise a
            :class:`mcjsonapi.errors.RemoteError` carrying the error message.
        """

        if self.error:
            raise errors.RemoteError(self.value, self.source)

        return self.value


# end of class Response



class Event:
    """ A stream push for a subscribed source, as handed to any registered
        observers.

        :ivar error: True if the server flagged this push as an error.
        :ivar source: The stream source name, such as 'console'.
        :ivar payload: The decoded data for this push; for an error, the
            error message.
        :ivar tag: The correlation tag of the originating subscription.
    """

    def __init__(self, error, source, payload, tag=None):

        self.error = error
        self.source = source
        self.payload = payload
        self.tag = tag


    def __repr__(self):
        return 'Event(error=%r, source=%r, payload=%r)' % (self.error, self.source, self.payload)


    @classmethod
    def from_response(cls, response):
        return cls(response.error, response.source, response.value, response.tag)


# end of class Event



def escape(text):
    """ Percent-encode *text* for inclusion in a request line, leaving only
        the RFC 3986 unreserved characters as-is.
    """

    return urllib.parse.quote(str(text), safe='')


def methods_json(methods):
    """ Return the JSON array text for a list of method names, as sent with
        (and signed for) a multiple call.
    """

    return json.dumps_text(list(methods))


def _tag_of(envelope):

    tag = envelope.get('tag')

    if tag is None or isinstance(tag, bool):
        return None

    try:
        return int(tag)
    except (TypeError, ValueError):
        return None


# Correlation tags only need to be unique per connection, but they read as
# timestamps on the server side. The counter is seeded with the current time
# in 100 nanosecond ticks, and from there on strictly increases, even if
# many requests are issued within the same clock tick.

_tag_max = 0x7FFFFFFFFFFFFFFF
_tag_lock = threading.Lock()
_tag_ticker = itertools.count(time.time_ns() // 100)


def _tag_next():
    """ Return the next correlation tag for subroutines to use when
        constructing a request.
    """

    global _tag_ticker
    _tag_lock.acquire()
    tag = next(_tag_ticker)

    if tag > _tag_max:
        # Wrapping around keeps the tag a signed 64-bit value, which is
        # all the server will accept.
        _tag_ticker = itertools.count(1)
        tag = next(_tag_ticker)

    _tag_lock.release()

    return tag


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
