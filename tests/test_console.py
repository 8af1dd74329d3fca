import io

import fakeserver
import mcjsonapi
from mcjsonapi import console
from mcjsonapi.protocol import message


def test_printer():

    output = io.StringIO()
    callback = console.printer(output)

    callback(message.Event(False, 'console', {'line': 'Server started\n'}))
    callback(message.Event(False, 'chat', 'plain text'))
    callback(message.Event(True, 'console', 'denied'))

    lines = output.getvalue().splitlines()

    assert lines == ['Server started', 'plain text', 'error from console: denied']


def test_arguments():

    parsed = console.arguments(['--host', 'mc.example.com', '--port', '25565', '--previous'])

    assert parsed.host == 'mc.example.com'
    assert parsed.port == 25565
    assert parsed.previous == True
    assert parsed.source == 'console'
    assert parsed.method == 'runConsoleCommand'
    assert parsed.profile == 'default'


def test_build_client(config_home):

    parsed = console.arguments(['--host', 'cli.example.com', '--username', 'ops'])
    client = console.build_client(parsed)

    assert client.host == 'cli.example.com'
    assert client.port == 20059
    assert client.username == 'ops'


def test_run(server):

    commands = list()
    subscriptions = list()

    def handler(server, request):
        if request.path == '/api/subscribe':
            subscriptions.append(request)
            server.push(request.tag, 'console', {'line': 'welcome'})
        else:
            commands.append(request.args)
            server.reply(request, True)

    server.handler = handler

    client = mcjsonapi.Client('127.0.0.1', server.port, timeout=5)
    client.connect()

    input = io.StringIO('say hello\n\nlist\n')
    output = io.StringIO()

    result = console.run(client, 'console', 'runConsoleCommand', True, input, output)

    assert result == 0
    assert commands == [['say hello'], ['list']]
    assert subscriptions[0].show_previous == 'True'

    # The welcome line was pushed before any command was answered, and the
    # read loop handles lines in order.

    assert output.getvalue() == 'welcome\n'

    client.disconnect()


def test_main_connect_failure(config_home):

    port = fakeserver.unused_port()
    assert console.main(['--host', '127.0.0.1', '--port', str(port - 1)]) == 2


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
