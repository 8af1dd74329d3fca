''' Wrapper module to select the most performant available library to handle
    the equivalent of :func:`json.loads` and :func:`json.dumps`.
'''

# msgspec is an optional extra; orjson is always installed alongside this
# package, and is used whenever msgspec is not available.

msgspec = None

try:
    import msgspec
except ImportError:
    pass

import orjson


# Both msgspec.json.Encoder.encode() and orjson.dumps() return bytes, and
# emit compact JSON with no whitespace between separators. The request
# encoder relies on that compact form, since the authentication key for a
# multiple call is derived from the serialized method list.

if msgspec is not None:
    encoder = msgspec.json.Encoder()
    decoder = msgspec.json.Decoder()
    dumps = encoder.encode
    loads = decoder.decode
    DecodeError = msgspec.DecodeError
else:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = orjson.JSONDecodeError


def dumps_text(value):
    """ Return the JSON encoding of *value* as a string rather than bytes.
    """

    return dumps(value).decode()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
