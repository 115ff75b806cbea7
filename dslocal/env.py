"""
dslocal.env
===========

Facts about the running platform. These only select default attribute values and the preferred
password scheme; nothing else in the package depends on them.
"""


import logging
import platform
import re
import subprocess
import uuid


from .strings import parse_version
from .utility import once


__author__ = 'Aaron Hosford'
__all__ = [
    'get_product_version',
    'get_primary_mac_address',
]


log = logging.getLogger(__name__)


PRIMARY_INTERFACE = 'en0'

_ETHER_REGEX = re.compile(r'ether\s+((?:[0-9a-f]{2}:){5}[0-9a-f]{2})', re.IGNORECASE)


@once
def get_product_version():
    """
    Get the Mac OS X product version of the running system, e.g. (10, 8, 5). On other platforms,
    None is returned.

    :return: A tuple of integers, or None.
    """
    release = platform.mac_ver()[0]
    if not release:
        log.debug("Not running on Mac OS X; no product version available.")
        return None
    return parse_version(release)


def get_primary_mac_address(interface=PRIMARY_INTERFACE):
    """
    Get the hardware address of the primary ethernet interface, e.g. 'aa:bb:cc:dd:ee:ff'. When
    the interface cannot be queried, the address reported by the uuid module is used instead.

    :param interface: The name of the interface to query.
    :return: The hardware address, as a lower case, colon separated string.
    """
    try:
        output = subprocess.run(
            ['/sbin/ifconfig', interface],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            universal_newlines=True,
            check=True,
        ).stdout
    except (OSError, subprocess.CalledProcessError) as exc:
        log.debug("Could not query interface %s: %s", interface, exc)
        output = ''

    match = _ETHER_REGEX.search(output)
    if match:
        return match.group(1).lower()

    node = uuid.getnode()
    return ':'.join('%02x' % ((node >> shift) & 0xff) for shift in range(40, -1, -8))
