'''
Run one producer and several filtering consumers over a bounded buffer.

The producer reads integers from a text file, one per line, and
deposits them in the buffer. Each consumer keeps the integers its
predicate accepts and puts the others back for the rest of the
consumers. When the input is exhausted every consumer reports the sum
and count of what it accepted.

Items that no consumer accepts are never removed, so the consumers can
only finish if their predicates together accept every input integer.
Add an 'any' consumer to catch what the others leave behind.
'''

import argparse
import logging
import math
import sys

from bounded_buffer import BoundedBuffer
from number_source import NumberFile
from participants import Consumer, Producer
from predicates import PREDICATES, covers_all, get_predicate

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

__all__ = ["Config", "parse_consumer", "parse_args", "build", "run", "main"]

DEFAULT_CONSUMERS = (('Even', 'even'), ('Odd', 'odd'), ('Prime', 'prime'))

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_INTERRUPTED = 130


class Config:
    '''
    Settings for one run.

    Delays are in seconds. consumers is an ordered sequence of
    (label, predicate name) pairs.
    '''
    def __init__(self, input_path, capacity=10, producer_delay=0.1,
                 consumer_delay=0.3, consumers=DEFAULT_CONSUMERS):
        if capacity < 1:
            raise ValueError("capacity must be positive, got {}".format(capacity))
        for delay in (producer_delay, consumer_delay):
            if not math.isfinite(delay) or delay < 0:
                raise ValueError("delays must be finite and not negative, got {}".format(delay))
        consumers = tuple(tuple(c) for c in consumers)
        if not consumers:
            raise ValueError("at least one consumer is required")
        labels = [label for label, _ in consumers]
        if len(set(labels)) != len(labels):
            raise ValueError("consumer labels must be unique: {}".format(', '.join(labels)))
        for _, name in consumers:
            get_predicate(name)

        self.input_path = input_path
        self.capacity = capacity
        self.producer_delay = producer_delay
        self.consumer_delay = consumer_delay
        self.consumers = consumers

    def __repr__(self):
        return ('Config(input_path={!r}, capacity={}, producer_delay={}, '
                'consumer_delay={}, consumers={!r})').format(
                    self.input_path, self.capacity, self.producer_delay,
                    self.consumer_delay, self.consumers)


def parse_consumer(text):
    '''Parse "LABEL:PREDICATE" (or just "PREDICATE") into a pair.'''
    label, sep, name = text.rpartition(':')
    if not sep:
        label = name.capitalize()
    if not label or name not in PREDICATES:
        raise argparse.ArgumentTypeError(
            "expected LABEL:PREDICATE with PREDICATE one of {}, got {!r}".format(
                ', '.join(sorted(PREDICATES)), text))
    return label, name


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("must be a positive integer, got {!r}".format(text)) from None
    if value < 1:
        raise argparse.ArgumentTypeError("must be a positive integer, got {}".format(text))
    return value


def _milliseconds(text):
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError("must be a number of milliseconds, got {!r}".format(text)) from None
    if not math.isfinite(value) or value < 0:
        raise argparse.ArgumentTypeError("must be finite and not negative, got {}".format(text))
    return value / 1000.0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='prodcons',
        description="Filter integers from a file through a bounded buffer.")
    parser.add_argument("input_path", metavar='INPUT',
                        help="text file with one integer per line")
    parser.add_argument("-c", "--capacity", type=_positive_int, default=10,
                        help="buffer capacity (default: %(default)s)")
    parser.add_argument("-p", "--producer-delay", type=_milliseconds, default=0.1,
                        metavar='MS', help="pause after each deposit (default: 100)")
    parser.add_argument("-d", "--consumer-delay", type=_milliseconds, default=0.3,
                        metavar='MS', help="pause after each accept (default: 300)")
    parser.add_argument("--consumer", dest="consumers", action="append",
                        type=parse_consumer, metavar='LABEL:PREDICATE',
                        help="add a consumer; may be repeated "
                             "(default: Even:even Odd:odd Prime:prime)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="enable verbose information")
    parser.add_argument("-vv", "--debug", action="store_true",
                        help="enable debug information")
    args = parser.parse_args(argv)

    try:
        config = Config(args.input_path, capacity=args.capacity,
                        producer_delay=args.producer_delay,
                        consumer_delay=args.consumer_delay,
                        consumers=args.consumers or DEFAULT_CONSUMERS)
    except ValueError as e:
        parser.error(str(e))

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    return config, level


def build(config, source=None, out=None):
    '''
    Create the buffer, the producer and the consumers for config.

    source defaults to the file named by config.input_path.
    '''
    if source is None:
        source = NumberFile(config.input_path)
    buffer_ = BoundedBuffer(config.capacity)
    producer = Producer(buffer_, source, delay=config.producer_delay, out=out)
    consumers = [Consumer(buffer_, label, get_predicate(name),
                          delay=config.consumer_delay, out=out)
                 for label, name in config.consumers]
    return buffer_, producer, consumers


def run(config, source=None, out=None, poll=0.1):
    '''
    Run the producer and the consumers to completion.

    Returns the process exit code. A KeyboardInterrupt interrupts every
    participant and waits for them to wind down.
    '''
    names = [name for _, name in config.consumers]
    if not covers_all(names):
        log.warning("consumers (%s) may not accept every integer; "
                    "unaccepted items keep the run from finishing" % ', '.join(names))

    buffer_, producer, consumers = build(config, source, out)
    participants = [producer] + consumers
    log.info("starting %d consumer(s) on a buffer of %d" % (len(consumers), config.capacity))
    for p in participants:
        p.start()

    interrupted = False
    try:
        for p in participants:
            while p.is_alive():
                p.join(poll)
    except KeyboardInterrupt:
        log.warning("interrupted, stopping all participants")
        interrupted = True
        for p in participants:
            p.interrupt()
        for p in participants:
            p.join()

    if interrupted:
        return EXIT_INTERRUPTED
    if producer.error is not None:
        return EXIT_INPUT
    log.info("all participants finished")
    return EXIT_OK


def main(argv=None):
    config, level = parse_args(argv)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
