import pytest

from mcjsonapi.protocol import message
from mcjsonapi.protocol import subscribe


def test_registry():

    registry = subscribe.Registry()
    assert len(registry) == 0
    assert 1 not in registry

    registry.add(1, 'console')
    registry.add(2, 'chat')
    registry.add(3, 'console')

    assert 1 in registry
    assert 4 not in registry
    assert registry.source(2) == 'chat'
    assert registry.source(4) is None

    assert sorted(registry.tags()) == [1, 2, 3]
    assert sorted(registry.tags('console')) == [1, 3]

    registry.clear()
    assert len(registry) == 0


def test_dispatch_order():

    dispatcher = subscribe.Dispatcher()
    calls = list()

    dispatcher.register(lambda event: calls.append(('first', event.payload)))
    dispatcher.register(lambda event: calls.append(('second', event.payload)))
    dispatcher.register(lambda event: calls.append(('third', event.payload)))

    dispatcher.propagate(message.Event(False, 'console', 'one'))
    dispatcher.propagate(message.Event(False, 'console', 'two'))

    expected = list()
    for payload in ('one', 'two'):
        for name in ('first', 'second', 'third'):
            expected.append((name, payload))

    assert calls == expected


def test_unregister():

    dispatcher = subscribe.Dispatcher()
    calls = list()

    def callback(event):
        calls.append(event)

    dispatcher.register(callback)
    dispatcher.unregister(callback)
    dispatcher.unregister(callback)

    dispatcher.propagate(message.Event(False, 'chat', 'hi'))
    assert calls == []
    assert len(dispatcher) == 0


def test_unregister_during_dispatch():

    dispatcher = subscribe.Dispatcher()
    calls = list()

    def once(event):
        calls.append('once')
        dispatcher.unregister(once)

    def always(event):
        calls.append('always')

    dispatcher.register(once)
    dispatcher.register(always)

    dispatcher.propagate(message.Event(False, 'chat', 'a'))
    dispatcher.propagate(message.Event(False, 'chat', 'b'))

    assert calls == ['once', 'always', 'always']


def test_failing_callback():

    dispatcher = subscribe.Dispatcher()
    calls = list()

    def broken(event):
        raise RuntimeError('callback bug')

    dispatcher.register(calls.append)
    dispatcher.register(broken)
    dispatcher.register(calls.append)

    # The exception reaches the caller, and the callbacks after the broken
    # one are skipped.

    with pytest.raises(RuntimeError):
        dispatcher.propagate(message.Event(False, 'console', 'x'))

    assert len(calls) == 1


def test_not_callable():

    dispatcher = subscribe.Dispatcher()

    with pytest.raises(TypeError):
        dispatcher.register('not a function')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
