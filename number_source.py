import logging

log = logging.getLogger(__name__)
log.addHandler(logging.NullHandler())

__all__ = ["InputError", "InputOpenError", "InputParseError", "InputReadError",
           "RESERVED", "parse_line", "parse_numbers", "NumberFile", "write_numbers"]

# kept out of the data so it can never be mistaken for an end marker
RESERVED = -1


class InputError(Exception):
    '''Base class for problems with the integer source.'''


class InputOpenError(InputError):
    '''The source could not be opened.'''


class InputParseError(InputError):
    '''A line of the source does not hold a usable integer.'''
    def __init__(self, lineno, line, reason):
        super().__init__("line {}: {} ({!r})".format(lineno, reason, line))
        self.lineno = lineno
        self.line = line


class InputReadError(InputError):
    '''Reading failed part way through the source.'''


def parse_line(line, lineno=0):
    '''
    Turn one line of input into an int.

    Returns None for a blank line. Raises InputParseError for anything
    that is not an integer, and for the reserved value.
    '''
    text = line.strip()
    if not text:
        return None
    try:
        n = int(text)
    except ValueError:
        raise InputParseError(lineno, text, "not an integer") from None
    if n == RESERVED:
        raise InputParseError(lineno, text, "{} is reserved".format(RESERVED))
    return n


def parse_numbers(lines):
    '''
    Yield the integers found in lines, one per line.

    Malformed lines are logged and skipped; they never stop the stream.
    '''
    for lineno, line in enumerate(lines, 1):
        try:
            n = parse_line(line, lineno)
        except InputParseError as e:
            log.warning("skipping malformed input: %s" % e)
            continue
        if n is None:
            log.warning("skipping blank line %d" % lineno)
            continue
        yield n


class NumberFile:
    '''
    An integer source backed by a text file, one integer per line.

    The file is opened when iteration starts and closed when it ends.
    An open failure raises InputOpenError, a failure while reading
    raises InputReadError.
    '''
    def __init__(self, path, encoding='utf-8'):
        self.path = path
        self.encoding = encoding

    def __iter__(self):
        try:
            f = open(self.path, encoding=self.encoding)
        except OSError as e:
            raise InputOpenError("cannot open {}: {}".format(self.path, e)) from e

        with f:
            lines = _checked_lines(f, self.path)
            yield from parse_numbers(lines)

    def __repr__(self):
        return 'NumberFile({!r})'.format(self.path)


def _checked_lines(f, path):
    while True:
        try:
            line = f.readline()
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadError("error reading {}: {}".format(path, e)) from e
        if not line:
            return
        yield line


def write_numbers(path, numbers):
    '''Write numbers to path, one per line.'''
    with open(path, 'w', encoding='utf-8') as f:
        for n in numbers:
            f.write('{}\n'.format(n))
