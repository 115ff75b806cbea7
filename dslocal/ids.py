"""
dslocal.ids
===========

Numeric identifier (UID/GID) allocation.

Allocation works from a snapshot of the identifiers in use when the caller collected them. Nothing
is locked, so two processes allocating for new records of the same kind at the same time can be
handed the same number. Callers that need stronger guarantees must serialize access to the node.
"""


import logging


from .utility import flatten


__author__ = 'Aaron Hosford'
__all__ = [
    'MIN_UID',
    'MIN_GID',
    'next_id',
]


log = logging.getLogger(__name__)


MIN_UID = 501
MIN_GID = 501


def next_id(floor, used_ids):
    """
    Find the next free identifier at or above the floor.

    The used identifiers are sorted and deduplicated, then scanned from the smallest value that is
    at least the floor. The scan stops at the first value whose successor is not also in use, and
    returns that successor. If nothing at or above the floor is in use, the floor itself is
    returned.

    Note that free values between the floor and the smallest used value above it are never
    considered: next_id(501, [503, 505]) is 504, not 501. Existing record sets were numbered this
    way, so the behavior is kept as is.

    :param floor: The minimum acceptable identifier.
    :param used_ids: An arbitrarily nested collection of integer-like values.
    :return: The allocated identifier, as an int.
    """
    floor = int(floor)
    ids = sorted({int(value) for value in flatten(used_ids) if _is_integral(value)})
    for index, value in enumerate(ids):
        if value < floor:
            continue
        if index + 1 < len(ids) and ids[index + 1] == value + 1:
            continue
        log.debug("Allocated id %s (floor %s, %s ids in use).", value + 1, floor, len(ids))
        return value + 1
    log.debug("Allocated floor id %s (%s ids in use).", floor, len(ids))
    return floor


def _is_integral(value):
    # Blank or non-numeric attribute values cannot collide with an allocated id.
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, str) and value.strip().lstrip('-').isdigit()
