""" Python client for the JSONAPI plugin of a Minecraft server. This includes
    authenticated method calls, multiple calls in a single request, and
    subscriptions to server-side streams such as the console and chat.
"""

# Utility components.

from . import json
from . import errors
from . import config

# Submodules used by multiple other components.

from . import protocol

# Primary public-facing interfaces.

from .client import Client
from .client import IDLE, RUNNING, STOPPED
from .protocol.key import make_key
from .protocol.message import Event, Response, PREVIOUS_LIMIT

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
