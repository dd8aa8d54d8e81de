from threading import Condition, RLock


class Interrupted(Exception):
    '''
    Raised out of Monitor.wait_until() when the waiting thread has been
    asked to stop.
    '''


class Monitor:
    '''
    Provide high-level mutual exclusion and synchronization.

    Use @Monitor.mutex to designate a method requiring mutual exclusion
    and use condition() to create condition variables that share the
    monitor lock.

    Only one thread of execution may be inside any of the mutex methods
    at any given time. A mutex method that cannot proceed calls
    wait_until() with one of the monitor conditions; this releases the
    monitor while the thread sleeps and re-acquires it before the
    readiness test is evaluated again. The test is re-evaluated after
    every wakeup, so spurious and stolen wakeups are harmless.

    Waiting threads can be interrupted. A waiter that passes an Event to
    wait_until() will raise Interrupted once that Event is set and the
    monitor has been woken up with interrupt().
    '''
    def __init__(self):
        self._lock = RLock()
        self._conditions = []

    def condition(self):
        '''
        Create a condition variable bound to the monitor lock.

        Conditions created here are all woken up by interrupt().
        '''
        condition = Condition(self._lock)
        self._conditions.append(condition)
        return condition

    @staticmethod
    def mutex(func):
        '''
        A decorator that wraps a method in the monitor lock in order to
        provide mutual exclusion to that method.

        The lock is re-entrant, so a mutex method may call other mutex
        methods of the same monitor.
        '''
        def wrap(self, *args, **kwargs):
            with self._lock:
                return func(self, *args, **kwargs)

        wrap.__name__ = func.__name__
        wrap.__doc__ = func.__doc__
        wrap._mutex = True
        return wrap

    def wait_until(self, condition, ready, interrupted=None):
        '''
        Sleep on condition until ready() returns true.

        Must be called from inside a mutex method.

        If interrupted is set while the thread is waiting, the wakeup
        that reached this thread is passed on to the next waiter and
        Interrupted is raised. Nothing about the monitor state has been
        changed by the caller at that point.
        '''
        if not self._lock._is_owned():
            raise RuntimeError("cannot wait on un-acquired monitor")
        while not ready():
            if interrupted is not None and interrupted.is_set():
                condition.notify()
                raise Interrupted()
            condition.wait()

    def interrupt(self):
        '''
        Wake up every thread waiting on any condition of this monitor so
        that each one re-checks whether it should keep waiting.
        '''
        with self._lock:
            for condition in self._conditions:
                condition.notify_all()
