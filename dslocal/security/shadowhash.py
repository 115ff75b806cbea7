"""
dslocal.security.shadowhash
===========================

The three generations of stored password hash:

  * SaltedSHA1: Mac OS X 10.6 and earlier. The hash is kept in a file of its own in the shadow
    hash store, named by the user's generated UID.
  * SaltedSHA512: Mac OS X 10.7. The hash is kept in the user record's ShadowHashData attribute.
  * SaltedSHA512PBKDF2: Mac OS X 10.8 and later. The PBKDF2 entropy, salt and iteration count are
    kept in the user record's ShadowHashData attribute.

ShadowHashData holds a single binary property list, which maps each scheme label to that scheme's
hash material.
"""


import logging
import os

from xml.parsers.expat import ExpatError


from ..abc.shadowhash import ShadowHash
from ..exceptions import FormatError, RecordIOError
from ..plists import dumps_plist, loads_plist
from ..plugins import SHADOWHASH_SCHEMES, shadowhash_scheme
from ..strings import is_hex_string
from ..utility import first
from . import hashing


__author__ = 'Aaron Hosford'
__all__ = [
    'SHADOWHASHDATA',
    'SaltedSHA1',
    'SaltedSHA512',
    'SaltedSHA512PBKDF2',
    'read_shadowhashdata',
    'read_shadowhash',
]


log = logging.getLogger(__name__)


# The user record attribute embedded hashes are stored in.
SHADOWHASHDATA = 'ShadowHashData'


def read_shadowhashdata(values):
    """
    Parse the property list stored in a ShadowHashData attribute.

    :param values: The attribute's value list.
    :return: A dictionary mapping scheme labels to hash material.
    """
    data = first(values, None)
    if data is None:
        raise FormatError("ShadowHashData is empty.")
    try:
        result = loads_plist(data)
    except (ValueError, TypeError, ExpatError) as exc:
        raise FormatError("ShadowHashData is not a property list: %s" % exc) from exc
    if not isinstance(result, dict):
        raise FormatError("ShadowHashData does not contain a dictionary.")
    return result


def _to_hex(value):
    if isinstance(value, str):
        value = value.encode('latin-1')
    if not isinstance(value, (bytes, bytearray)):
        raise FormatError("Expected binary hash data, got %s." % type(value).__name__)
    return bytes(value).hex()


@shadowhash_scheme('SALTED-SHA1')
class SaltedSHA1(ShadowHash):
    """
    A legacy salted SHA1 hash: a 4 byte salt followed by the 20 byte SHA1 digest of the salt and
    password, as 48 upper case hex digits. It is stored at a fixed offset of a fixed size file in
    the shadow hash store.
    """

    LABEL = 'SALTED-SHA1'
    STORED_EXTERNALLY = True

    HASH_SIZE = 24
    SALT_SIZE = 4
    FILE_SIZE = 1240
    FILE_OFFSET = 168
    FILE_FILL = b'0'

    @classmethod
    def read_from_file(cls, path):
        """
        Read the hash field of a shadow hash file.

        :param path: The path to the file.
        :return: The hex digits at the hash offset, or None if the file is too short to hold them.
        """
        try:
            with open(path, 'rb') as hash_file:
                content = hash_file.read()
        except OSError as exc:
            raise RecordIOError("Could not read shadow hash file %s: %s" % (path, exc)) from exc
        end = cls.FILE_OFFSET + cls.HASH_SIZE * 2
        if len(content) < end:
            return None
        return content[cls.FILE_OFFSET:end].decode('ascii', errors='replace')

    @classmethod
    def from_file(cls, path):
        """
        Load a hash from a shadow hash file.

        :param path: The path to the file.
        :return: A SaltedSHA1 instance, or None if the file is missing or too short.
        """
        if not os.path.isfile(path):
            return None
        digits = cls.read_from_file(path)
        if digits is None:
            return None
        return cls(digits)

    @classmethod
    def from_store(cls, store, generateduid):
        """
        Load the hash belonging to a user from the shadow hash store.

        :param store: The DSLocalStore.
        :param generateduid: The user's generated UID.
        :return: A SaltedSHA1 instance, or None if there is no hash file.
        """
        return cls.from_file(store.shadowhash_path(generateduid))

    @classmethod
    def validate(cls, raw):
        if not is_hex_string(raw, cls.HASH_SIZE, upper=True):
            raise FormatError("Invalid: arg must be hexadecimal string (%s bytes)" % cls.HASH_SIZE)
        return raw

    def to_storable(self):
        return self._material.encode('ascii')

    def to_comparable(self):
        return self._material

    def matches(self, password):
        raw = bytes.fromhex(self._material)
        salt = raw[:self.SALT_SIZE]
        return hashing.same_bytes(hashing.salted_digest('sha1', password, salt), raw)

    @staticmethod
    def _path_for(owner):
        generateduid = first(owner.get('generateduid') or (), None)
        if not generateduid:
            raise FormatError("The user record has no generated UID.")
        return owner.store.shadowhash_path(generateduid)

    def attach(self, owner):
        # The record keeps no copy of a file based hash.
        self.verify_owner(owner)
        owner.delete(SHADOWHASHDATA)

    def persist(self, owner):
        """
        Write the hash into the owner's shadow hash file. An existing file keeps everything outside
        the hash field, cut to the full file size if it is longer; a new or short one is filled out
        to the full file size.

        :param owner: The user record.
        :return: True if the file was written and has the expected size.
        """
        self.verify_owner(owner)
        path = self._path_for(owner)
        try:
            content = b''
            if os.path.isfile(path):
                with open(path, 'rb') as hash_file:
                    content = hash_file.read()
            if len(content) < self.FILE_SIZE:
                content = self.FILE_FILL * self.FILE_SIZE
            content = bytearray(content[:self.FILE_SIZE])
            end = self.FILE_OFFSET + self.HASH_SIZE * 2
            content[self.FILE_OFFSET:end] = self.to_storable()
            with open(path, 'wb') as hash_file:
                hash_file.write(content)
            size = os.path.getsize(path)
        except OSError as exc:
            raise RecordIOError("Could not write shadow hash file %s: %s" % (path, exc)) from exc
        if size != self.FILE_SIZE:
            raise RecordIOError("Shadow hash file %s has unexpected size %s." % (path, size))
        log.info("Wrote shadow hash file %s.", path)
        return True

    def remove(self, owner):
        """
        Remove the owner's shadow hash file, if it exists.

        :param owner: The user record.
        :return: True once the file is gone.
        """
        self.verify_owner(owner)
        path = self._path_for(owner)
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as exc:
                raise RecordIOError("Could not remove shadow hash file %s: %s" %
                                    (path, exc)) from exc
            log.info("Removed shadow hash file %s.", path)
        return not os.path.exists(path)

    def is_current(self, owner):
        """
        Determine whether the owner's shadow hash file exists and holds this hash.

        :param owner: The user record.
        :return: Whether the file is current.
        """
        self.verify_owner(owner)
        try:
            on_disk = self.from_file(self._path_for(owner))
        except FormatError:
            return False
        return on_disk is not None and on_disk.to_comparable() == self.to_comparable()


class _EmbeddedShadowHash(ShadowHash):
    """Common behavior for hashes kept in the user record's ShadowHashData attribute."""

    def attach(self, owner):
        self.verify_owner(owner)
        owner.set(SHADOWHASHDATA, [self.to_storable()])

    def persist(self, owner):
        # The record write that follows stores the hash.
        self.attach(owner)
        return True

    def remove(self, owner):
        # Removing the record file removes the hash with it.
        self.verify_owner(owner)
        return True


@shadowhash_scheme('SALTED-SHA512')
class SaltedSHA512(_EmbeddedShadowHash):
    """
    A salted SHA512 hash: a 4 byte salt followed by the 64 byte SHA512 digest of the salt and
    password, as 136 lower case hex digits.
    """

    LABEL = 'SALTED-SHA512'

    HASH_SIZE = 68
    SALT_SIZE = 4

    @classmethod
    def from_shadowhashdata(cls, data):
        """
        Construct an instance from parsed ShadowHashData.

        :param data: The dictionary stored in ShadowHashData.
        :return: A SaltedSHA512 instance.
        """
        if cls.LABEL not in data:
            raise FormatError("ShadowHashData has no %s entry." % cls.LABEL)
        return cls(_to_hex(data[cls.LABEL]))

    @classmethod
    def validate(cls, raw):
        if not is_hex_string(raw, cls.HASH_SIZE):
            raise FormatError("Invalid: arg must be hexadecimal string (%s bytes)" % cls.HASH_SIZE)
        return raw

    def to_storable(self):
        return dumps_plist({self.LABEL: bytes.fromhex(self._material)})

    def to_comparable(self):
        return self._material

    def matches(self, password):
        raw = bytes.fromhex(self._material)
        salt = raw[:self.SALT_SIZE]
        return hashing.same_bytes(hashing.salted_digest('sha512', password, salt), raw)


@shadowhash_scheme('SALTED-SHA512-PBKDF2')
class SaltedSHA512PBKDF2(_EmbeddedShadowHash):
    """
    A PBKDF2 hash using HMAC-SHA512: 128 bytes of derived entropy, a 32 byte salt, and the
    iteration count. The material is a dictionary with the keys 'entropy', 'salt' and 'iterations';
    a sequence in that order is accepted too.
    """

    LABEL = 'SALTED-SHA512-PBKDF2'

    ENTROPY_SIZE = 128
    SALT_SIZE = 32
    REQUIRED_KEYS = ('entropy', 'salt', 'iterations')

    @classmethod
    def from_shadowhashdata(cls, data):
        """
        Construct an instance from parsed ShadowHashData.

        :param data: The dictionary stored in ShadowHashData.
        :return: A SaltedSHA512PBKDF2 instance.
        """
        fields = data.get(cls.LABEL)
        if not isinstance(fields, dict):
            raise FormatError("ShadowHashData has no %s entry." % cls.LABEL)
        material = {}
        for key, value in fields.items():
            if key == 'iterations':
                try:
                    material[key] = int(value)
                except (TypeError, ValueError) as exc:
                    raise FormatError("Invalid: iterations must be an integer") from exc
            else:
                material[key] = _to_hex(value)
        return cls(material)

    @classmethod
    def validate(cls, raw):
        if isinstance(raw, (list, tuple)):
            if len(raw) != len(cls.REQUIRED_KEYS):
                raise FormatError("Invalid: args must contain, %s" % ', '.join(cls.REQUIRED_KEYS))
            material = dict(zip(cls.REQUIRED_KEYS, raw))
        elif isinstance(raw, dict):
            material = {str(key): value for key, value in raw.items()}
        else:
            raise FormatError("Invalid: args must be a dictionary or a sequence")

        if set(material) != set(cls.REQUIRED_KEYS):
            raise FormatError("Invalid: args must contain, %s" % ', '.join(cls.REQUIRED_KEYS))
        if not is_hex_string(material['entropy'], cls.ENTROPY_SIZE):
            raise FormatError("Invalid: entropy must be hexadecimal string (%s bytes)" %
                              cls.ENTROPY_SIZE)
        if not is_hex_string(material['salt'], cls.SALT_SIZE):
            raise FormatError("Invalid: salt must be hexadecimal string (%s bytes)" %
                              cls.SALT_SIZE)
        iterations = material['iterations']
        if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations < 0:
            raise FormatError("Invalid: iterations must be a non-negative integer")

        return {key: material[key] for key in cls.REQUIRED_KEYS}

    @property
    def entropy(self):
        return self._material['entropy']

    @property
    def salt(self):
        return self._material['salt']

    @property
    def iterations(self):
        return self._material['iterations']

    def to_storable(self):
        fields = {
            'entropy': bytes.fromhex(self.entropy),
            'iterations': self.iterations,
            'salt': bytes.fromhex(self.salt),
        }
        return dumps_plist({self.LABEL: fields})

    def to_comparable(self):
        return dict(self._material)

    def matches(self, password):
        if self.iterations < 1:
            return False
        derived = hashing.pbkdf2_sha512(password, bytes.fromhex(self.salt), self.iterations,
                                        self.ENTROPY_SIZE)
        return hashing.same_bytes(derived, bytes.fromhex(self.entropy))


def read_shadowhash(record):
    """
    Read the password hash belonging to a user record. Embedded ShadowHashData takes precedence:
    a SALTED-SHA512 entry selects SaltedSHA512, and anything else is read as SaltedSHA512PBKDF2.
    Without ShadowHashData, the legacy shadow hash file named by the record's generated UID is
    used, if there is one.

    :param record: The user record.
    :return: A ShadowHash instance, or None if the user has no password hash.
    """
    values = record.get(SHADOWHASHDATA)
    if values:
        data = read_shadowhashdata(values)
        if SaltedSHA512.LABEL in data:
            scheme = SHADOWHASH_SCHEMES[SaltedSHA512.LABEL]
        else:
            scheme = SHADOWHASH_SCHEMES[SaltedSHA512PBKDF2.LABEL]
        return scheme.from_shadowhashdata(data)

    generateduid = first(record.get('generateduid') or (), None)
    if generateduid:
        scheme = SHADOWHASH_SCHEMES[SaltedSHA1.LABEL]
        return scheme.from_store(record.store, generateduid)
    return None
