import logging

from monitor import Monitor

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

__all__ = ["BoundedBuffer", "END"]


class _End:
    '''The end-of-stream marker returned by a drained terminal buffer.'''
    def __repr__(self):
        return 'END'


END = _End()


class BoundedBuffer(Monitor):
    '''
    A fixed-capacity FIFO shared by one producer and many consumers.

    deposit() blocks while every slot is in use and withdraw() blocks
    while the buffer is empty. Once mark_terminal() has been called a
    withdraw() on an empty buffer returns END instead of blocking, so
    every consumer learns that the producer is done as soon as the
    buffer drains.

    A consumer that may want to put an item back calls
    withdraw(hold=True). The slot the item occupied then stays reserved
    for that consumer until it either hands the item back with
    redeposit() or gives the slot up with release(). A held slot is
    never handed to a depositor, so a returning item always finds room
    and consumers cannot all end up blocked on a full buffer.

    Deposits are accepted after mark_terminal(); consumers must be able
    to return items they do not want for as long as they run.
    '''
    def __init__(self, size):
        super().__init__()
        if size < 1:
            raise ValueError("buffer capacity must be at least 1, got {}".format(size))
        self._buffer = [None] * size
        self._head = 0  # write position
        self._tail = 0  # read position
        self._count = 0
        self._held = 0
        self._size = size
        self._terminal = False
        self._peak = 0
        self._not_full = self.condition()
        self._not_empty = self.condition()

    @Monitor.mutex
    def deposit(self, data, interrupted=None):
        '''Append data at the tail, waiting for a free slot.'''
        self.wait_until(self._not_full, self._has_room, interrupted)
        self._put(data)

    @Monitor.mutex
    def redeposit(self, data):
        '''Return data to the tail through the slot held since withdraw().'''
        if not self._held:
            raise RuntimeError("redeposit() without a held slot")
        self._held -= 1
        self._put(data)

    @Monitor.mutex
    def withdraw(self, hold=False, interrupted=None):
        '''
        Remove and return the oldest item, or END once the buffer is
        terminal and empty.

        With hold=True the freed slot stays reserved for the caller, who
        must follow up with exactly one redeposit() or release().
        '''
        self.wait_until(self._not_empty, self._has_item_or_terminal, interrupted)
        if self._count == 0:
            return END

        data = self._buffer[self._tail]
        self._buffer[self._tail] = None
        self._tail = (self._tail + 1) % self._size
        self._count -= 1
        if hold:
            self._held += 1
        else:
            self._not_full.notify()
        return data

    @Monitor.mutex
    def release(self):
        '''Give up a slot held since withdraw(hold=True).'''
        if not self._held:
            raise RuntimeError("release() without a held slot")
        self._held -= 1
        self._not_full.notify()

    @Monitor.mutex
    def mark_terminal(self):
        '''Declare that no further original items will arrive.'''
        if not self._terminal:
            log.debug("buffer marked terminal with %d item(s) left" % self._count)
        self._terminal = True
        self._not_empty.notify_all()

    def _put(self, data):
        self._buffer[self._head] = data
        self._head = (self._head + 1) % self._size
        self._count += 1
        self._peak = max(self._peak, self._count + self._held)
        self._not_empty.notify()

    def _has_room(self):
        return self._count + self._held < self._size

    def _has_item_or_terminal(self):
        return self._count > 0 or self._terminal

    @property
    def capacity(self):
        return self._size

    @property
    @Monitor.mutex
    def count(self):
        return self._count

    @property
    @Monitor.mutex
    def held(self):
        return self._held

    @property
    @Monitor.mutex
    def terminal(self):
        return self._terminal

    @property
    @Monitor.mutex
    def peak(self):
        '''The highest number of occupied or held slots seen so far.'''
        return self._peak

    @Monitor.mutex
    def snapshot(self):
        '''The items currently in the buffer, oldest first.'''
        return [self._buffer[(self._tail + i) % self._size] for i in range(self._count)]
