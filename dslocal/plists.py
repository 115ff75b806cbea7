"""
dslocal.plists
==============

Property list reading and writing, for record files and for the property lists embedded in a
record's ShadowHashData attribute.
"""


import logging
import os
import plistlib


from .exceptions import RecordIOError, verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'BINARY',
    'XML',
    'load_plist',
    'loads_plist',
    'save_plist',
    'dumps_plist',
]


log = logging.getLogger(__name__)


BINARY = plistlib.FMT_BINARY
XML = plistlib.FMT_XML


def load_plist(path):
    """
    Load a property list file.

    :param path: The path to the file.
    :return: The parsed contents, or None if the file does not exist.
    """
    verify_type(path, str, non_empty=True)
    if not os.path.isfile(path):
        return None
    try:
        with open(path, 'rb') as plist_file:
            result = plistlib.load(plist_file)
    except (OSError, plistlib.InvalidFileException, ValueError) as exc:
        raise RecordIOError("Could not read property list %s: %s" % (path, exc)) from exc
    log.debug("Loaded property list %s.", path)
    return result


def loads_plist(data):
    """
    Parse a property list from bytes, in either format.

    :param data: The serialized property list.
    :return: The parsed contents.
    """
    if isinstance(data, str):
        data = data.encode('latin-1')
    verify_type(data, (bytes, bytearray))
    return plistlib.loads(bytes(data))


def save_plist(path, value, fmt=BINARY):
    """
    Write a property list file, replacing any existing file.

    :param path: The path to the file.
    :param value: The value to write; usually a dictionary.
    :param fmt: BINARY or XML.
    :return: True once the file has been written.
    """
    verify_type(path, str, non_empty=True)
    assert fmt in (BINARY, XML)
    try:
        with open(path, 'wb') as plist_file:
            plistlib.dump(value, plist_file, fmt=fmt, sort_keys=False)
    except (OSError, TypeError, OverflowError) as exc:
        raise RecordIOError("Could not write property list %s: %s" % (path, exc)) from exc
    log.debug("Saved property list %s.", path)
    return True


def dumps_plist(value, fmt=BINARY):
    """
    Serialize a value as a property list.

    :param value: The value to serialize.
    :param fmt: BINARY or XML.
    :return: The serialized bytes.
    """
    assert fmt in (BINARY, XML)
    return plistlib.dumps(value, fmt=fmt, sort_keys=False)
