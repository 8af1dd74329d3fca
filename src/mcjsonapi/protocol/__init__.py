""" The JSONAPI wire protocol: key derivation, request lines, response
    envelopes, the line transport, and the routing of responses to waiting
    calls and stream observers.
"""

from . import key
from . import message
from . import request
from . import subscribe
from . import transport

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
