"""
dslocal.abc.shadowhash
======================

Interface definition for stored password hashes.
"""


from abc import ABCMeta, abstractmethod


from ..exceptions import UnsupportedTargetError


__author__ = 'Aaron Hosford'
__all__ = [
    "ShadowHash",
]


class ShadowHash(metaclass=ABCMeta):
    """
    The ShadowHash class is an abstract base class for the password hash schemes a user record can
    carry. A ShadowHash holds validated hash material only. It never reads or writes anything when
    it is constructed; the owning user record decides when the hash is attached, persisted and
    removed, and passes itself in as the owner.
    """

    # The key the hash material is stored under.
    LABEL = None

    # Whether the hash lives in a file of its own rather than in the user record.
    STORED_EXTERNALLY = False

    def __init__(self, raw):
        self._material = self.validate(raw)

    @classmethod
    @abstractmethod
    def validate(cls, raw):
        """
        Check that raw hash material has the required shape, and return it in canonical form.

        :param raw: The raw hash material.
        :return: The validated material.
        :raises FormatError: If the material has the wrong length, character set, or sign.
        """
        raise NotImplementedError()

    @abstractmethod
    def to_storable(self):
        """Return the hash in the form it is written to storage."""
        raise NotImplementedError()

    @abstractmethod
    def to_comparable(self):
        """Return a plain value that compares equal for equal hashes."""
        raise NotImplementedError()

    @abstractmethod
    def matches(self, password):
        """
        Determine whether a plain text password hashes to this value.

        :param password: The plain text password.
        :return: Whether the password matches.
        """
        raise NotImplementedError()

    @abstractmethod
    def attach(self, owner):
        """
        Bind the hash to its owning user record in memory.

        :param owner: The user record.
        """
        raise NotImplementedError()

    @abstractmethod
    def persist(self, owner):
        """
        Write the hash wherever it is kept, ahead of the owning record being written.

        :param owner: The user record.
        :return: True on success.
        """
        raise NotImplementedError()

    @abstractmethod
    def remove(self, owner):
        """
        Remove any storage kept for the hash outside the owning record, ahead of the owning record
        being removed.

        :param owner: The user record.
        :return: True once nothing remains.
        """
        raise NotImplementedError()

    def is_current(self, owner):
        """
        Determine whether the stored copy of the hash, if it is stored outside the owning record,
        matches this one. Hashes stored inside the record are compared along with the rest of the
        record's attributes, so they are always current here.

        :param owner: The user record.
        :return: Whether the stored hash is current.
        """
        return True

    @property
    def label(self):
        """The key the hash material is stored under."""
        return self.LABEL

    @property
    def password(self):
        """The hash material, as a plain value."""
        return self.to_comparable()

    @staticmethod
    def verify_owner(owner):
        """
        Make sure the owner is a record that can carry a password.

        :param owner: The prospective owner.
        :raises UnsupportedTargetError: If the owner cannot carry a password.
        """
        kind = getattr(owner, 'kind', None)
        if not getattr(kind, 'holds_passwords', False):
            raise UnsupportedTargetError(UnsupportedTargetError.MESSAGE)

    def __eq__(self, other):
        if not isinstance(other, ShadowHash):
            return NotImplemented
        return type(self) is type(other) and self.to_comparable() == other.to_comparable()

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((type(self).__name__, repr(sorted(self._comparable_items()))))

    def _comparable_items(self):
        comparable = self.to_comparable()
        if isinstance(comparable, dict):
            return comparable.items()
        return [(self.LABEL, comparable)]

    def __repr__(self):
        # The hash material is hidden on purpose, to prevent accidentally displaying it.
        return type(self).__name__ + "('********')"
