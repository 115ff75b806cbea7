"""
String parsing and formatting routines.
"""


import ast
import logging
import re


from .exceptions import verify_type
from .plugins import config_loader


__author__ = 'Aaron Hosford'
__all__ = [
    'parse_bool',
    'parse_int',
    'parse_log_level',
    'parse_version',
    'format_version',
    'to_list_of_strings',
    'is_hex_string',
]


@config_loader('bool')
def parse_bool(string, default=NotImplemented):
    """
    Convert a string to a bool. If the string is empty, the default is returned. If the string is
    not empty and is not a value that can be clearly interpreted as a Boolean value, an exception is
    raised.

    :param string: The string to be parsed as a bool.
    :param default: The value to be returned if the string is empty.
    :return: The parsed bool value.
    """
    verify_type(string, str, non_empty=(default is NotImplemented))

    upper = string.strip().upper()
    if upper in ('Y', 'YES', 'T', 'TRUE', 'ON', '1'):
        return True
    elif upper in ('N', 'NO', 'F', 'FALSE', 'OFF', '0'):
        return False
    elif not upper and default is not NotImplemented:
        return default
    else:
        raise ValueError("Unrecognized Boolean string: %r" % string)


@config_loader('int')
def parse_int(string, default=NotImplemented):
    """
    Convert a string to an integer value. If the string is empty, the default is returned. If the
    string is not empty and is not a value that can be clearly interpreted as an integer value, an
    exception is raised.

    :param string: The string to be parsed as an integer.
    :param default: The value to be returned if the string is empty.
    :return: The parsed integer value.
    """
    verify_type(string, str, non_empty=(default is NotImplemented))

    if not string.strip() and default is not NotImplemented:
        return default

    # ast.literal_eval() lets us use things like '1234 + 5678', and not just straight digits.
    result = ast.literal_eval(string.strip())
    if not isinstance(result, int) or isinstance(result, bool):
        raise ValueError("Could not interpret string as integer: %r" % string)

    return result


@config_loader('log_level')
def parse_log_level(string):
    """
    Parse a log level, e.g. INFO, WARNING, etc.

    :param string: An integer or the name of a log level.
    :return: The integer value of the log level.
    """
    string = string.strip()
    if string.isdigit():
        level = int(string)
    else:
        level = getattr(logging, string.upper())
        verify_type(level, int)
    return level


@config_loader('version')
def parse_version(string):
    """
    Parse a dotted product version string, e.g. '10.8.5', into a tuple of integers. Components are
    compared numerically, so (10, 10) sorts after (10, 9).

    :param string: The version string.
    :return: A tuple of integers.
    """
    verify_type(string, str, non_empty=True)
    pieces = string.strip().split('.')
    if not all(piece.isdigit() for piece in pieces):
        raise ValueError("Could not interpret string as a version: %r" % string)
    return tuple(int(piece) for piece in pieces)


def format_version(version):
    """
    Format a version tuple as a dotted string.

    :param version: A tuple of integers.
    :return: The dotted version string.
    """
    return '.'.join(str(piece) for piece in version)


@config_loader('list')
def to_list_of_strings(items, normalizer=None):
    """
    Convert a parameter value, which may be None, a delimited string, or a sequence of non-delimited
    strings, into a list of non-empty, non-delimited strings.

    :param items: The set of items, in whatever form they may take.
    :param normalizer: A function which normalizes the items.
    :return: The separated, normalized items, in a list.
    """
    if not items:
        return []
    if isinstance(items, str):
        # Split by commas and/or semicolons
        items = re.split(',|;', items)
    else:
        items = [str(item) for item in items]

    if normalizer:
        items = [normalizer(item) for item in items if item.strip()]

    return [item.strip() for item in items if item.strip()]


def is_hex_string(string, byte_count, upper=False):
    """
    Determine whether a string is the hexadecimal encoding of exactly byte_count bytes.

    :param string: The string to check.
    :param byte_count: The number of bytes the string must encode.
    :param upper: Whether the hex digits must be upper case rather than lower case.
    :return: Whether the string qualifies.
    """
    if not isinstance(string, str):
        return False
    digits = 'A-F0-9' if upper else 'a-f0-9'
    return re.fullmatch('[%s]{%d}' % (digits, byte_count * 2), string) is not None
