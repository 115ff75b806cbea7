"""
Password hash storage.

A user's password is never stored in plain text. Each generation of Mac OS X stores a salted hash
of it instead:

    * Through 10.6, a salted SHA1 hash lives in a file of its own under /var/db/shadow/hash, named
      after the user's generated UID.
    * 10.7 moved the hash into the user record itself, as a salted SHA512 hash inside the
      ShadowHashData attribute.
    * From 10.8 on, ShadowHashData holds a PBKDF2 hash instead: the derived entropy, the salt and
      the iteration count.

The schemes are implemented in dslocal.security.shadowhash, and the creation of new hashes from
plain text passwords in dslocal.security.passwords.
"""


from . import hashing, shadowhash, passwords


__author__ = 'Aaron Hosford'
__all__ = [
    'hashing',
    'passwords',
    'shadowhash',
]
