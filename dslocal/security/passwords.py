"""
dslocal.security.passwords
==========================

Creation of password hashes from plain text passwords.
"""


import logging


from ..exceptions import verify_type
from ..store import DEFAULT_PBKDF2_ITERATIONS, DSLocalStore
from . import hashing
from .shadowhash import SaltedSHA1, SaltedSHA512, SaltedSHA512PBKDF2


__author__ = 'Aaron Hosford'
__all__ = [
    'EMBEDDED_HASH_VERSION',
    'PBKDF2_VERSION',
    'salted_sha1',
    'salted_sha512',
    'salted_sha512_pbkdf2',
    'get_preferred_scheme',
    'from_plaintext',
]


log = logging.getLogger(__name__)


# The first Mac OS X versions to keep hashes in the user record, and to use PBKDF2.
EMBEDDED_HASH_VERSION = (10, 7)
PBKDF2_VERSION = (10, 8)


def salted_sha1(password, salt=None):
    """
    Hash a password as a legacy salted SHA1 hash.

    :param password: The plain text password.
    :param salt: The 4 byte salt. Random by default.
    :return: A SaltedSHA1 instance.
    """
    verify_type(password, str)
    if salt is None:
        salt = hashing.new_salt(SaltedSHA1.SALT_SIZE)
    assert len(salt) == SaltedSHA1.SALT_SIZE
    return SaltedSHA1(hashing.salted_digest('sha1', password, salt).hex().upper())


def salted_sha512(password, salt=None):
    """
    Hash a password as a salted SHA512 hash.

    :param password: The plain text password.
    :param salt: The 4 byte salt. Random by default.
    :return: A SaltedSHA512 instance.
    """
    verify_type(password, str)
    if salt is None:
        salt = hashing.new_salt(SaltedSHA512.SALT_SIZE)
    assert len(salt) == SaltedSHA512.SALT_SIZE
    return SaltedSHA512(hashing.salted_digest('sha512', password, salt).hex())


def salted_sha512_pbkdf2(password, salt=None, iterations=DEFAULT_PBKDF2_ITERATIONS):
    """
    Hash a password as a salted SHA512 PBKDF2 hash.

    :param password: The plain text password.
    :param salt: The 32 byte salt. Random by default.
    :param iterations: The PBKDF2 iteration count.
    :return: A SaltedSHA512PBKDF2 instance.
    """
    verify_type(password, str)
    verify_type(iterations, int)
    if iterations < 1:
        raise ValueError("PBKDF2 requires at least one iteration.")
    if salt is None:
        salt = hashing.new_salt(SaltedSHA512PBKDF2.SALT_SIZE)
    assert len(salt) == SaltedSHA512PBKDF2.SALT_SIZE
    entropy = hashing.pbkdf2_sha512(password, salt, iterations, SaltedSHA512PBKDF2.ENTROPY_SIZE)
    return SaltedSHA512PBKDF2({
        'entropy': entropy.hex(),
        'salt': bytes(salt).hex(),
        'iterations': iterations,
    })


def get_preferred_scheme(product_version=None):
    """
    Get the hash scheme used by a Mac OS X version. PBKDF2 is used from 10.8 on, salted SHA512 on
    10.7, and the legacy salted SHA1 file before that. An unknown version gets PBKDF2.

    :param product_version: The version, as a tuple of integers, or None.
    :return: The ShadowHash subclass.
    """
    verify_type(product_version, tuple, allow_none=True)
    if product_version is None or product_version >= PBKDF2_VERSION:
        return SaltedSHA512PBKDF2
    if product_version >= EMBEDDED_HASH_VERSION:
        return SaltedSHA512
    return SaltedSHA1


def from_plaintext(password, store=None):
    """
    Hash a password with the scheme preferred by the store's platform.

    :param password: The plain text password.
    :param store: The DSLocalStore supplying the product version and iteration count. Defaults to
        the configured store.
    :return: A ShadowHash instance.
    """
    verify_type(password, str)
    if store is None:
        store = DSLocalStore.default()

    scheme = get_preferred_scheme(store.product_version)
    log.debug("Hashing password with %s.", scheme.LABEL)
    if scheme is SaltedSHA512PBKDF2:
        return salted_sha512_pbkdf2(password, iterations=store.pbkdf2_iterations)
    if scheme is SaltedSHA512:
        return salted_sha512(password)
    return salted_sha1(password)
