import threading
import time

import pytest

from monitor import Interrupted, Monitor


class Counter(Monitor):
    def __init__(self):
        super().__init__()
        self.value = 0
        self.inside = 0
        self.overlap = False
        self.changed = self.condition()

    @Monitor.mutex
    def bump(self):
        self.inside += 1
        if self.inside > 1:
            self.overlap = True
        value = self.value
        time.sleep(0)
        self.value = value + 1
        self.inside -= 1
        self.changed.notify_all()

    @Monitor.mutex
    def wait_for(self, target, interrupted=None):
        '''Wait until value reaches target.'''
        self.wait_until(self.changed, lambda: self.value >= target, interrupted)
        return self.value


def test_mutex_excludes_other_threads():
    counter = Counter()

    def work():
        for _ in range(200):
            counter.bump()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert counter.value == 800
    assert not counter.overlap


def test_mutex_keeps_name_and_doc():
    assert Counter.wait_for.__name__ == 'wait_for'
    assert Counter.wait_for.__doc__ == 'Wait until value reaches target.'
    assert Counter.bump._mutex


def test_wait_until_returns_once_ready():
    counter = Counter()
    result = []
    t = threading.Thread(target=lambda: result.append(counter.wait_for(3)))
    t.start()
    for _ in range(3):
        counter.bump()
    t.join(5)

    assert not t.is_alive()
    assert result == [3]


def test_wait_until_requires_the_lock():
    counter = Counter()
    with pytest.raises(RuntimeError):
        counter.wait_until(counter.changed, lambda: True)


def test_interrupt_wakes_waiter_with_interrupted():
    counter = Counter()
    stop = threading.Event()
    raised = []

    def wait():
        try:
            counter.wait_for(1, interrupted=stop)
        except Interrupted:
            raised.append(True)

    t = threading.Thread(target=wait)
    t.start()
    t.join(0.1)
    assert t.is_alive()

    stop.set()
    counter.interrupt()
    t.join(5)

    assert not t.is_alive()
    assert raised == [True]
    assert counter.value == 0


def test_interrupt_does_not_disturb_other_waiters():
    counter = Counter()
    results = []
    t = threading.Thread(target=lambda: results.append(counter.wait_for(1)))
    t.start()
    counter.interrupt()
    t.join(0.1)
    assert t.is_alive()

    counter.bump()
    t.join(5)
    assert results == [1]
