import re

WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_plate(plate: str) -> str:
    """Strip all whitespace and upper-case a plate so that 'ab 123' and
    'AB123' compare equal.
    """
    if not plate:
        return ''

    return WHITESPACE_PATTERN.sub('', plate).upper()
