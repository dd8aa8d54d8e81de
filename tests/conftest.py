import threading

import pytest

from bounded_buffer import BoundedBuffer
from participants import Consumer, Producer
from predicates import get_predicate

JOIN_TIMEOUT = 10.0


class Recorder:
    '''A thread-safe stand-in for stdout that keeps every line.'''
    def __init__(self):
        self.lines = []
        self._lock = threading.Lock()
        self.on_line = None

    def write(self, text):
        with self._lock:
            for line in text.splitlines():
                self.lines.append(line)
                if self.on_line is not None:
                    self.on_line(line)


class Run:
    def __init__(self, buffer_, producer, consumers, out):
        self.buffer = buffer_
        self.producer = producer
        self.consumers = consumers
        self.out = out

    @property
    def participants(self):
        return [self.producer] + self.consumers

    def start(self):
        for p in self.participants:
            p.start()
        return self

    def join(self, timeout=JOIN_TIMEOUT):
        for p in self.participants:
            p.join(timeout)
        return not any(p.is_alive() for p in self.participants)

    def consumer(self, label):
        return next(c for c in self.consumers if c.label == label)

    def accepted(self):
        return sorted(n for c in self.consumers for n in c.accepted)


@pytest.fixture
def make_run():
    '''Build a producer and consumers around a fresh buffer; delays default to 0.'''
    def make(source, consumers, capacity=10, producer_delay=0, consumer_delay=0):
        out = Recorder()
        buffer_ = BoundedBuffer(capacity)
        producer = Producer(buffer_, source, delay=producer_delay, out=out)
        workers = [Consumer(buffer_, label, get_predicate(name), delay=consumer_delay, out=out)
                   for label, name in consumers]
        return Run(buffer_, producer, workers, out)
    return make


@pytest.fixture
def run_to_end(make_run):
    '''Run to completion, failing the test if anything hangs.'''
    def run(source, consumers, **kwargs):
        r = make_run(source, consumers, **kwargs).start()
        assert r.join(), "participants did not terminate"
        return r
    return run
