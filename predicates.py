'''
Acceptance predicates for consumers.

A predicate is a plain function from an int to a bool. It must be pure
and total: the same item always gets the same answer and no item makes
it raise. Predicates may overlap (2 is both even and prime); whichever
consumer withdraws such an item first claims it.
'''


def is_even(n):
    return n % 2 == 0


def is_odd(n):
    return n % 2 != 0


def is_prime(n):
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def accepts_any(n):
    return True


PREDICATES = {
    'even': is_even,
    'odd': is_odd,
    'prime': is_prime,
    'any': accepts_any,
}


def get_predicate(name):
    '''Look up a predicate by name, raising ValueError for unknown names.'''
    try:
        return PREDICATES[name]
    except KeyError:
        raise ValueError("unknown predicate '{}' (choose from {})".format(
            name, ', '.join(sorted(PREDICATES)))) from None


def covers_all(names):
    '''
    Tell whether the named predicates together accept every integer.

    Items no consumer accepts are put back forever and keep every
    consumer alive, so a consumer set that is not total can hang.
    '''
    names = set(names)
    return 'any' in names or {'even', 'odd'} <= names
