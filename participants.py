import logging
import math
import sys
from threading import Event, Thread

from bounded_buffer import END
from monitor import Interrupted
from number_source import InputError

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

__all__ = ["Producer", "Consumer"]


class Participant(Thread):
    '''
    A thread working on a shared buffer.

    interrupt() asks the thread to stop: a thread blocked in the buffer
    raises Interrupted out of its wait, and a thread pacing itself stops
    sleeping. Either way it finishes through its normal exit path.
    '''
    def __init__(self, name, buffer_, delay=0, out=None):
        super().__init__(name=name)
        if not math.isfinite(delay) or delay < 0:
            raise ValueError("delay must be finite and not negative, got {}".format(delay))
        self.buffer = buffer_
        self.delay = delay
        self.out = out
        self._interrupted = Event()

    def interrupt(self):
        self._interrupted.set()
        self.buffer.interrupt()

    @property
    def interrupted(self):
        return self._interrupted.is_set()

    def pause(self):
        '''Sleep for the pacing delay; true if interrupted meanwhile.'''
        if self.delay:
            return self._interrupted.wait(self.delay)
        return self._interrupted.is_set()

    def say(self, line):
        out = self.out if self.out is not None else sys.stdout
        out.write(line + '\n')


class Producer(Participant):
    '''
    Deposit every integer of source into the buffer, then mark the
    buffer terminal.

    source is any iterable of ints, typically a NumberFile. Problems
    with the source are logged and kept in self.error; the buffer is
    marked terminal whatever happens so no consumer is left waiting.
    '''
    def __init__(self, buffer_, source, delay=0.1, out=None):
        super().__init__('producer', buffer_, delay, out)
        self.source = source
        self.produced = 0
        self.error = None

    def run(self):
        try:
            for n in self.source:
                self.buffer.deposit(n, interrupted=self._interrupted)
                self.produced += 1
                self.say('Producer deposited {}'.format(n))
                if self.pause():
                    log.info("producer interrupted after %d item(s)" % self.produced)
                    break
        except Interrupted:
            log.info("producer interrupted while waiting for room")
        except InputError as e:
            log.error("producer stopped: %s" % e)
            self.error = e
        finally:
            self.buffer.mark_terminal()
            self.say('Producer finished.')


class Consumer(Participant):
    '''
    Withdraw items, keeping those predicate accepts and putting the rest
    back at the tail of the buffer for the other consumers.

    The tally (total, count and the accepted items) belongs to this
    consumer alone. The thread ends when the buffer is terminal and
    empty, or when interrupted, and reports its tally once either way.
    '''
    def __init__(self, buffer_, label, predicate, delay=0.3, out=None):
        super().__init__('consumer-{}'.format(label), buffer_, delay, out)
        self.label = label
        self.predicate = predicate
        self.total = 0
        self.count = 0
        self.accepted = []
        self.returned = 0

    def run(self):
        try:
            while not self.interrupted:
                data = self.buffer.withdraw(hold=True, interrupted=self._interrupted)
                if data is END:
                    break
                try:
                    wanted = self.predicate(data)
                except Exception:
                    self.buffer.redeposit(data)
                    raise
                if not wanted:
                    self.buffer.redeposit(data)
                    self.returned += 1
                    continue

                self.buffer.release()
                self.total += data
                self.count += 1
                self.accepted.append(data)
                self.say('Consumer {} accepted {}, running sum {}'.format(
                    self.label, data, self.total))
                self.pause()
            else:
                log.info("consumer %s interrupted" % self.label)
        except Interrupted:
            log.info("consumer %s interrupted while waiting for an item" % self.label)
        finally:
            log.debug("consumer %s put back %d item(s)" % (self.label, self.returned))
            self.say('Consumer {} terminated. sum={} count={}'.format(
                self.label, self.total, self.count))
