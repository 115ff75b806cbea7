"""
dslocal.security.hashing
========================

Standardized hashing routines for password hashes.
"""


import hashlib
import hmac
import os


# For documentation on the cryptography library, or to download it, visit:
#   https://cryptography.io/en/latest/
# To install with pip:
#   pip install cryptography
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


__author__ = 'Aaron Hosford'
__all__ = [
    'to_bytes',
    'new_salt',
    'salted_digest',
    'pbkdf2_sha512',
    'same_bytes',
]


def to_bytes(data):
    """
    Ensure that a character sequence is represented as a bytes object. If it's already a bytes
    object, no change is made. If it's a string object, it's encoded as a UTF-8 string. Otherwise,
    it is treated as a sequence of character ordinal values.

    :param data: The data to be converted to bytes.
    :return: The data, converted to a bytes instance.
    """

    if isinstance(data, str):
        return data.encode()
    else:
        return bytes(data)


def new_salt(size):
    """
    Generate a random salt.

    :param size: The number of bytes.
    :return: The salt bytes.
    """
    assert isinstance(size, int) and size > 0
    return os.urandom(size)


def salted_digest(algorithm, password, salt):
    """
    Compute a salted digest: the salt followed by the digest of the salt and password together.

    :param algorithm: A hashlib algorithm name, e.g. 'sha1' or 'sha512'.
    :param password: The plain text password.
    :param salt: The salt bytes.
    :return: The salt and digest bytes, concatenated.
    """
    salt = to_bytes(salt)
    return salt + hashlib.new(algorithm, salt + to_bytes(password)).digest()


def pbkdf2_sha512(password, salt, iterations, length):
    """
    Derive a key from a password with PBKDF2, using HMAC-SHA512 as the pseudo-random function.

    :param password: The plain text password.
    :param salt: The salt bytes.
    :param iterations: The iteration count.
    :param length: The number of bytes to derive.
    :return: The derived key bytes.
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA512(),
        length=length,
        salt=to_bytes(salt),
        iterations=iterations,
    )
    return kdf.derive(to_bytes(password))


def same_bytes(first, second):
    """
    Compare two byte strings in constant time.

    :param first: The first byte string.
    :param second: The second byte string.
    :return: Whether they are equal.
    """
    return hmac.compare_digest(to_bytes(first), to_bytes(second))
