"""
dslocal.uuids
=============

Creation and checking of generated unique identifiers (GUIDs), e.g.
897A6343-628F-4964-80F1-C86D0FFA3F91.
"""


import re
import uuid


__author__ = 'Aaron Hosford'
__all__ = [
    'UUID_PATTERN',
    'new_uuid',
    'match_uuid',
    'is_valid_uuid',
]


UUID_PATTERN = '[A-F0-9]{8}-(?:[A-F0-9]{4}-){3}[A-F0-9]{12}'

_UUID_REGEX = re.compile(UUID_PATTERN)


def new_uuid():
    """
    Create a new random UUID string in the form used by directory records: 36 characters, upper
    case, hyphenated.

    :return: The new UUID string.
    """
    return str(uuid.uuid4()).upper()


def match_uuid(string):
    """
    Find the first UUID contained anywhere in a string.

    :param string: The string to search.
    :return: The matched UUID string, or None if there is none.
    """
    match = _UUID_REGEX.search(string)
    return match.group(0) if match else None


def is_valid_uuid(string):
    """
    Determine whether the entire string is a UUID.

    :param string: The string to check.
    :return: Whether the string is a well formed UUID.
    """
    return isinstance(string, str) and _UUID_REGEX.fullmatch(string) is not None
