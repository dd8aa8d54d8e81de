'''
Even, odd and prime consumers sharing one bounded buffer.

Creates numbers.txt holding 1 to 50 if it does not exist yet, then runs
the producer and the three consumers over it. Any extra arguments are
passed on to the prodcons command line.
'''

import logging
import os
import sys
sys.path.append("..")  # So that prodcons can be imported

from number_source import write_numbers
import prodcons


FILENAME = 'numbers.txt'


if __name__ == "__main__":
    if not os.path.exists(FILENAME):
        write_numbers(FILENAME, range(1, 51))
        print('Created test input {}'.format(FILENAME))

    config, level = prodcons.parse_args(sys.argv[1:] + [FILENAME])
    logging.basicConfig(level=level)
    code = prodcons.run(config)
    print('Program finished')
    sys.exit(code)
