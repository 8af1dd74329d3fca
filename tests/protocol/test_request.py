import threading
import time

import pytest

import mcjsonapi
from mcjsonapi.protocol import message
from mcjsonapi.protocol import request


def envelope(tag, value, source='test', result='success'):

    envelope = dict()
    envelope['result'] = result
    envelope[result] = value
    envelope['source'] = source
    envelope['tag'] = tag

    return mcjsonapi.json.dumps_text(envelope)


def test_routing():
    """ One line for a waiting call, one for a subscription, and one for
        neither: each must land in exactly the right place.
    """

    client = mcjsonapi.Client('localhost', 20059)

    call = message.Call('getPlayers', None, 'key')
    pending = client.router.expect(call)
    tag = call.tag

    client.registry.add(tag + 1, 'console')

    events = list()
    client.register(events.append)

    lines = list()
    lines.append(envelope(tag - 1, 'stray'))
    lines.append(envelope(tag, ['Notch', 'jeb_'], source='getPlayers'))
    lines.append(envelope(tag + 1, {'line': 'Server started'}, source='console'))

    for line in lines:
        client._incoming(message.Response.decode(line))

    assert pending.poll() == True
    assert pending.wait(0).value == ['Notch', 'jeb_']
    assert len(client.router) == 0

    assert len(events) == 1
    assert events[0].source == 'console'
    assert events[0].payload == {'line': 'Server started'}
    assert events[0].error == False


def test_error_envelope_is_data():

    client = mcjsonapi.Client('localhost', 20059)

    call = message.Call('nope', None, 'key')
    pending = client.router.expect(call)

    line = '{"result":"error","error":"bad method","tag":%d}' % (call.tag)
    client._incoming(message.Response.decode(line))

    response = pending.wait(0)
    assert response.value == 'bad method'
    assert response.error == True


def test_unrecognized_tag_dropped():

    client = mcjsonapi.Client('localhost', 20059)
    client.registry.add(100, 'chat')

    events = list()
    client.register(events.append)

    client._incoming(message.Response.decode(envelope(99, 'nobody')))
    client._incoming(message.Response.decode('{"result":"success","success":1}'))
    assert events == []

    # Processing continues normally afterwards.

    client._incoming(message.Response.decode(envelope(100, 'hello', source='chat')))
    assert len(events) == 1


def test_event_source_from_registry():

    client = mcjsonapi.Client('localhost', 20059)
    client.registry.add(7, 'connections')

    events = list()
    client.register(events.append)

    client._incoming(message.Response.decode('{"result":"success","success":"joined","tag":7}'))

    assert events[0].source == 'connections'


def test_wait_across_threads():

    router = request.Router()
    call = message.Call('slow', None, 'key')
    pending = router.expect(call)

    response = message.Response({'result': 'success', 'success': 'done', 'tag': call.tag})

    def deliver():
        time.sleep(0.05)
        router.deliver(response)

    thread = threading.Thread(target=deliver)
    thread.start()

    assert pending.wait(5) is response
    thread.join()


def test_wait_timeout():

    router = request.Router()
    pending = router.expect(message.Call('slow', None, 'key'))

    with pytest.raises(mcjsonapi.errors.CallTimeout):
        pending.wait(0.01)

    assert pending.poll() == False

    router.forget(pending)
    assert len(router) == 0


def test_fail_releases_waiters():

    router = request.Router()
    first = router.expect(message.Call('a', None, 'key'))
    second = router.expect(message.Call('b', None, 'key'))

    router.fail(mcjsonapi.errors.ConnectionClosed('gone'))

    for pending in (first, second):
        with pytest.raises(mcjsonapi.errors.ConnectionClosed):
            pending.wait(0)

    assert len(router) == 0

    with pytest.raises(mcjsonapi.errors.ConnectionClosed):
        router.expect(message.Call('c', None, 'key'))


def test_duplicate_tag():

    router = request.Router()
    router.expect(message.Call('a', None, 'key', tag=5))

    with pytest.raises(ValueError):
        router.expect(message.Call('b', None, 'key', tag=5))


def test_deliver_once():

    router = request.Router()
    call = message.Call('a', None, 'key')
    router.expect(call)

    response = message.Response({'result': 'success', 'success': 1, 'tag': call.tag})

    assert router.deliver(response) == True
    assert router.deliver(response) == False


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
