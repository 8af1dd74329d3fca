""" A minimal interactive console for a JSONAPI server: stream data from a
    subscribed source is printed as it arrives, and every line typed on
    standard input is sent to the server as a console command.
"""

import argparse
import logging
import sys

from . import config
from . import errors
from .client import Client

logger = logging.getLogger(__name__)


def arguments(argv=None):

    parser = argparse.ArgumentParser(prog='mcjsonapi-console', description=__doc__)

    parser.add_argument('--profile', default='default',
                        help='configuration profile to load (default: %(default)s)')
    parser.add_argument('--host', help='server hostname, overriding the profile')
    parser.add_argument('--port', type=int, help='JSONAPI port, overriding the profile')
    parser.add_argument('--username', help='JSONAPI username, overriding the profile')
    parser.add_argument('--password', help='JSONAPI password, overriding the profile')
    parser.add_argument('--salt', help='JSONAPI salt, overriding the profile')
    parser.add_argument('--source', default='console',
                        help='stream source to subscribe to (default: %(default)s)')
    parser.add_argument('--previous', action='store_true',
                        help='replay recent stream items before live ones')
    parser.add_argument('--method', default='runConsoleCommand',
                        help='method invoked for each input line (default: %(default)s)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='enable debug logging')

    return parser.parse_args(argv)


def build_client(parsed):
    """ Create a :class:`mcjsonapi.Client` from the configuration profile
        named in *parsed*, with any settings given on the command line taking
        precedence.
    """

    settings = config.get(parsed.profile)

    host = settings['host'] if parsed.host is None else parsed.host
    port = settings['port'] if parsed.port is None else parsed.port
    username = settings['username'] if parsed.username is None else parsed.username
    password = settings['password'] if parsed.password is None else parsed.password
    salt = settings['salt'] if parsed.salt is None else parsed.salt

    return Client(host, port, username, password, salt, settings['timeout'])


def printer(output):
    """ Return a stream callback that writes each item to *output*. Console
        items carry the text in their 'line' field; anything else is written
        as-is.
    """

    def callback(event):

        payload = event.payload

        if isinstance(payload, dict) and 'line' in payload:
            text = str(payload['line'])
        else:
            text = str(payload)

        if event.error:
            text = 'error from %s: %s' % (event.source, text)

        if text.endswith('\n'):
            pass
        else:
            text += '\n'

        output.write(text)
        output.flush()

    return callback


def run(client, source, method, previous=False, input=sys.stdin, output=sys.stdout):
    """ Subscribe *client* to *source*, then send every line read from
        *input* through *method* until end of file. Return a process exit
        code.
    """

    client.register(printer(output))
    client.subscribe(source, send_previous=previous)

    for line in input:
        line = line.rstrip('\r\n')

        if line == '':
            continue

        try:
            response = client.request(method, line)
        except errors.JsonApiError as e:
            logger.error("%s failed: %s", method, e)
            return 1

        if response.error:
            logger.warning("%s: %s", method, response.value)

    return 0


def main(argv=None):

    parsed = arguments(argv)

    if parsed.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    client = build_client(parsed)

    try:
        client.connect()
    except errors.TransportConnectionError as e:
        logger.error("%s", e)
        return 2

    try:
        return run(client, parsed.source, parsed.method, parsed.previous)
    except KeyboardInterrupt:
        return 0
    finally:
        client.disconnect()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
