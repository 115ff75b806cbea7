"""
dslocal.records
===============

Local directory records: users, groups, computers, and computer groups.

A record is built from whatever attributes the caller provides. If a record of the same name
already exists on disk, the caller's attributes are laid over the existing ones; otherwise they are
laid over defaults for the record's kind. The resulting composite can then be written (create()),
compared with the file on disk (exists()), or removed (destroy()).

Every attribute holds a list of values, as the directory record schema requires, even when only
one value is meaningful. Values are strings, except for binary attributes such as
ShadowHashData, which hold bytes.

Nothing here is locked. Two processes creating records of the same kind in the same node at the
same time may be handed the same uid or gid, and concurrent writes to one record file leave
whichever write came last.
"""


import logging
import os
import re


from . import env
from .exceptions import MembershipError, RecordIOError, ValidationError, verify_type
from .ids import MIN_GID, MIN_UID, next_id
from .nodes import DSLocalNode
from .plists import BINARY, load_plist, save_plist
from .security.passwords import from_plaintext
from .security.shadowhash import SHADOWHASHDATA, SaltedSHA1, read_shadowhash
from .abc.shadowhash import ShadowHash
from .store import DSLocalStore
from .utility import first
from .uuids import new_uuid


__author__ = 'Aaron Hosford'
__all__ = [
    'NAME_PATTERN',
    'RecordKind',
    'USER',
    'GROUP',
    'COMPUTER',
    'COMPUTERGROUP',
    'normalize',
    'Record',
    'User',
    'Group',
    'Computer',
    'ComputerGroup',
]


log = logging.getLogger(__name__)


NAME_PATTERN = '^[a-z0-9][a-z0-9_-]*$'
NAME_ERROR = "Name attribute only supports lowercase letters, hyphens, and underscores."

_NAME_REGEX = re.compile(NAME_PATTERN)

# Attributes whose values are binary data rather than strings.
BINARY_ATTRIBUTES = frozenset([SHADOWHASHDATA])


def _user_defaults(record, data):
    name = first(data['name'])
    defaults = {
        'realname': [name],
        'uid': None,
        'home': ['/Users/' + name],
        'shell': ['/bin/bash'],
        'gid': ['20'],
        'passwd': ['********'],
        'comment': [''],
    }
    if 'uid' in data:
        del defaults['uid']
    else:
        defaults['uid'] = [str(record.allocate_id())]
    return defaults


def _group_defaults(record, data):
    defaults = {
        'realname': [first(data['name']).capitalize()],
        'gid': None,
        'passwd': ['*'],
        'groupmembers': [],
        'users': [],
    }
    if 'gid' in data:
        del defaults['gid']
    else:
        defaults['gid'] = [str(record.allocate_id())]
    return defaults


def _computer_defaults(record, data):
    defaults = {'realname': list(data['name'])}
    if 'en_address' not in data:
        defaults['en_address'] = [env.get_primary_mac_address()]
    return defaults


class RecordKind:
    """
    A RecordKind describes one type of record: where its files live, which numeric id it carries,
    and how its missing attributes are filled in.
    """

    def __init__(self, name, plural, defaults, id_attribute=None, id_floor=None,
                 holds_passwords=False):
        verify_type(name, str, non_empty=True)
        verify_type(plural, str, non_empty=True)
        assert callable(defaults)
        assert (id_attribute is None) == (id_floor is None)

        self.name = name
        self.plural = plural
        self.defaults = defaults
        self.id_attribute = id_attribute
        self.id_floor = id_floor
        self.holds_passwords = holds_passwords

    def __repr__(self):
        return 'RecordKind(%r)' % self.name


USER = RecordKind('user', 'users', _user_defaults, 'uid', MIN_UID, holds_passwords=True)
GROUP = RecordKind('group', 'groups', _group_defaults, 'gid', MIN_GID)
COMPUTER = RecordKind('computer', 'computers', _computer_defaults)
COMPUTERGROUP = RecordKind('computergroup', 'computergroups', _group_defaults, 'gid', MIN_GID)


def _to_values(value):
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        return [value]
    if isinstance(value, bytearray):
        return [bytes(value)]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [item if isinstance(item, bytes) else str(item) for item in value]
    return [str(value)]


def normalize(attributes):
    """
    Normalize record attributes: keys become strings, and every value becomes a list of strings
    (or of bytes, for binary data). A lone string is taken to be the record name.

    :param attributes: A mapping of attributes, or a name.
    :return: A new dictionary of normalized attributes.
    """
    if isinstance(attributes, str):
        attributes = {'name': attributes}
    if attributes is None:
        attributes = {}
    if not hasattr(attributes, 'items'):
        raise ValidationError("Record attributes must be a mapping or a name, not %s." %
                              type(attributes).__name__)
    return {str(key): _to_values(value) for key, value in attributes.items()}


def validate_name(values):
    """
    Check a normalized name attribute.

    :param values: The name attribute's value list.
    :return: The name.
    """
    name = first(values or (), None)
    if not isinstance(name, str) or not _NAME_REGEX.match(name):
        raise ValidationError(NAME_ERROR)
    return name


class RecordAttribute:
    """
    A typed accessor for one record attribute. Reading returns a copy of the value list, or None
    if the attribute is absent; assigning replaces the value list.
    """

    def __init__(self, key, read_only=False, doc=None):
        self.key = key
        self.read_only = read_only
        self.__doc__ = doc or "The %s attribute." % key

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.get(self.key)

    def __set__(self, instance, value):
        if self.read_only:
            raise AttributeError("The %s attribute cannot be changed." % self.key)
        instance.set(self.key, value)

    def __delete__(self, instance):
        instance.delete(self.key)


class Record:
    """
    The shared record engine. Use one of the kind-specific classes (User, Group, Computer,
    ComputerGroup) rather than instantiating this class directly.
    """

    KIND = None

    name = RecordAttribute('name', read_only=True)
    generateduid = RecordAttribute('generateduid')
    realname = RecordAttribute('realname')

    @classmethod
    def from_file(cls, path, store=None):
        """
        Load a record from an existing record file.

        :param path: The path to the record file.
        :param store: The DSLocalStore. Defaults to the configured store.
        :return: A record of this class, or None if the file is missing, unreadable, or nameless.
        """
        verify_type(path, str, non_empty=True)
        try:
            data = load_plist(path)
        except RecordIOError as exc:
            log.warning("Could not load record: %s", exc)
            return None
        if not isinstance(data, dict) or not data.get('name'):
            return None
        return cls(first(data['name']), store=store, file=path, real=data)

    @classmethod
    def all(cls, store=None, node=None):
        """
        Load every record of this class's kind in a node.

        :param store: The DSLocalStore. Defaults to the configured store.
        :param node: The node name. Defaults to the store's node.
        :return: A list of records.
        """
        if store is None:
            store = DSLocalStore.default()
        records = []
        for path, data in DSLocalNode(node, store).iter_plists(cls.KIND.plural):
            if data.get('name'):
                records.append(cls(first(data['name']), store=store, node=node, file=path,
                                   real=data))
        return records

    def __init__(self, kind, attributes=None, *, store=None, node=None, file=None, real=None):
        verify_type(kind, RecordKind)
        if store is None:
            store = DSLocalStore.default()
        verify_type(store, DSLocalStore)
        verify_type(node, str, non_empty=True, allow_none=True)
        verify_type(file, str, non_empty=True, allow_none=True)
        verify_type(real, dict, allow_none=True)

        data = normalize(attributes)

        # Node and file may also arrive as ordinary attributes.
        if node is None and 'node' in data:
            node = first(data.pop('node'), None)
        data.pop('node', None)
        if file is None and 'file' in data:
            file = first(data.pop('file'), None)
        data.pop('file', None)

        self._kind = kind
        self._store = store
        self._name = validate_name(data.get('name'))
        self._node = node or store.node
        self._file = file or store.record_path(kind.plural, self._name, self._node)
        self._data = data
        self._real = real
        self._record = self._synthesize(data)

    def _synthesize(self, data):
        if self._real is None:
            self._real = load_plist(self._file)
        if self._real is not None:
            log.debug("Merging %s %s with %s.", self._kind.name, self._name, self._file)
            composite = {key: list(values) if isinstance(values, list) else values
                         for key, values in self._real.items()}
            composite.update(data)
            if not composite.get('generateduid'):
                composite['generateduid'] = [new_uuid()]
        else:
            composite = self._defaults(data)
        return composite

    def _defaults(self, data):
        defaults = {'generateduid': [new_uuid()]}
        defaults.update(self._kind.defaults(self, data))
        defaults.update(data)
        return defaults

    def allocate_id(self):
        """
        Allocate the next free numeric id for this record's kind, from the ids used by the other
        records of the same kind in the same node.

        :return: The allocated id, as an int.
        """
        if self._kind.id_attribute is None:
            raise ValidationError("%s records have no numeric id." % self._kind.name)
        used = [data.get(self._kind.id_attribute) or []
                for _, data in DSLocalNode(self._node, self._store).iter_plists(self._kind.plural)]
        return next_id(self._kind.id_floor, used)

    @property
    def kind(self):
        """The RecordKind of the record."""
        return self._kind

    @property
    def store(self):
        """The DSLocalStore the record belongs to."""
        return self._store

    @property
    def node(self):
        """The name of the node the record belongs to."""
        return self._node

    @property
    def file(self):
        """The path of the record file."""
        return self._file

    @property
    def attributes(self):
        """A copy of the composite record's attributes."""
        return {key: list(values) if isinstance(values, list) else values
                for key, values in self._record.items()}

    @property
    def on_disk(self):
        """The attributes of the record file, as of the last time it was read, or None."""
        return self._real

    def keys(self):
        """The names of the record's attributes."""
        return list(self._record)

    def has(self, key):
        """Whether the record has the attribute."""
        return str(key) in self._record

    def get(self, key, default=None):
        """
        Get a copy of an attribute's value list.

        :param key: The attribute name.
        :param default: The value returned if the attribute is absent.
        :return: The value list, or the default.
        """
        key = str(key)
        if key not in self._record:
            return default
        values = self._record[key]
        return list(values) if isinstance(values, list) else values

    def set(self, key, value):
        """
        Replace an attribute's values. The name of a record cannot be changed.

        :param key: The attribute name.
        :param value: The new value or values.
        """
        key = str(key)
        values = _to_values(value)
        if key == 'name':
            if values != [self._name]:
                raise ValidationError("The name of a record cannot be changed.")
            return
        self._record[key] = values

    def delete(self, key):
        """
        Remove an attribute. The name of a record cannot be removed.

        :param key: The attribute name.
        :return: The removed value list, or None if the attribute was absent.
        """
        key = str(key)
        if key == 'name':
            raise ValidationError("The name of a record cannot be removed.")
        return self._record.pop(key, None)

    def exists(self):
        """
        Determine whether the record file exists and holds exactly this record's attributes. The
        file is read again on every call.

        :return: Whether the record is in place.
        """
        self._real = load_plist(self._file)
        return self._real is not None and self._record == self._real

    def _storable(self):
        out = {}
        for key, values in self._record.items():
            if key in BINARY_ATTRIBUTES and isinstance(values, list):
                values = [value if isinstance(value, bytes) else str(value).encode('latin-1')
                          for value in values]
            out[key] = values
        return out

    def create(self, file=None):
        """
        Write the record to disk, replacing any existing file.

        :param file: An alternate path to write to.
        :return: True once the file has been written.
        """
        path = file or self._file
        result = save_plist(path, self._storable(), BINARY)
        log.info("Created %s record %s at %s.", self._kind.name, self._name, path)
        return result

    def destroy(self, file=None):
        """
        Remove the record file. Removing a record that is not on disk succeeds.

        :param file: An alternate path to remove.
        :return: True once the file is gone.
        """
        path = file or self._file
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as exc:
                raise RecordIOError("Could not remove record %s: %s" % (path, exc)) from exc
            log.info("Destroyed %s record %s at %s.", self._kind.name, self._name, path)
        return not os.path.exists(path)

    def diff(self, other):
        """
        Compare two records attribute by attribute. Of limited value except for debugging.

        :param other: The other record.
        :return: A dictionary mapping each differing attribute to a (mine, theirs) pair. Where both
            values are dictionaries, the pair is replaced by a dictionary of their differing keys.
        """
        verify_type(other, Record)
        mine = self._record
        theirs = other._record
        result = {}
        for key in list(mine) + [key for key in theirs if key not in mine]:
            this, that = mine.get(key), theirs.get(key)
            if this == that:
                continue
            if isinstance(this, dict) and isinstance(that, dict):
                result[key] = {
                    sub_key: (this.get(sub_key), that.get(sub_key))
                    for sub_key in list(this) + [k for k in that if k not in this]
                    if this.get(sub_key) != that.get(sub_key)
                }
            else:
                result[key] = (this, that)
        return result

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return self._kind is other._kind and self._record == other._record

    def __ne__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return not self == other

    __hash__ = None

    def __repr__(self):
        return '%s(%r, node=%r)' % (type(self).__name__, self._name, self._node)


class User(Record):
    """
    A local user account. A user may carry one password hash. If one is given, as a ShadowHash or
    as a plain text password to be hashed with the platform's preferred scheme, it replaces any
    hash the user already has; otherwise the existing hash, if any, is read.
    """

    KIND = USER

    uid = RecordAttribute('uid')
    gid = RecordAttribute('gid')
    home = RecordAttribute('home')
    shell = RecordAttribute('shell')
    passwd = RecordAttribute('passwd')
    comment = RecordAttribute('comment')

    def __init__(self, attributes=None, *, password=None, store=None, node=None, file=None,
                 real=None, **kwargs):
        attributes = normalize(attributes)
        attributes.update(normalize(kwargs))
        super().__init__(self.KIND, attributes, store=store, node=node, file=file, real=real)
        self._password = None
        if password is not None:
            self.password = password
        else:
            self._password = read_shadowhash(self)

    @property
    def password(self):
        """The user's password hash (a ShadowHash instance), or None."""
        return self._password

    @password.setter
    def password(self, password):
        if isinstance(password, str):
            password = from_plaintext(password, self._store)
        if password is not None and not isinstance(password, ShadowHash):
            raise ValidationError("Argument was not a ShadowHash object.")
        self._password = password
        if password is not None:
            password.attach(self)

    @property
    def is_legacy(self):
        """Whether the user's password hash is a legacy salted SHA1 hash."""
        return isinstance(self._password, SaltedSHA1)

    def exists(self):
        """
        Determine whether the user is in place. A password hash kept outside the record file must
        be in place too.

        :return: Whether the user record, and its password hash, are on disk.
        """
        if self._password is not None and not self._password.is_current(self):
            return False
        return super().exists()

    def create(self, file=None):
        """
        Write the user to disk. The password hash is written first; if that fails, the record
        file is left alone.

        :param file: An alternate path to write the record to.
        :return: True once everything has been written.
        """
        if self._password is not None and not self._password.persist(self):
            return False
        return super().create(file)

    def destroy(self, file=None):
        """
        Remove the user from disk. A password hash kept outside the record is removed first; if
        that fails, the record file is left alone.

        :param file: An alternate path to remove.
        :return: True once everything is gone.
        """
        if self._password is not None and not self._password.remove(self):
            return False
        return super().destroy(file)


class Computer(Record):
    """A computer record."""

    KIND = COMPUTER

    en_address = RecordAttribute('en_address')

    def __init__(self, attributes=None, *, store=None, node=None, file=None, real=None,
                 **kwargs):
        attributes = normalize(attributes)
        attributes.update(normalize(kwargs))
        super().__init__(self.KIND, attributes, store=store, node=node, file=file, real=real)


class Group(Record):
    """
    A group. Users are members by name, in the users attribute; nested groups are members by
    generated UID, in the groupmembers attribute. Members must already exist on disk to be added.
    """

    KIND = GROUP
    MEMBER_CLASS = User

    gid = RecordAttribute('gid')
    passwd = RecordAttribute('passwd')
    users = RecordAttribute('users')
    groupmembers = RecordAttribute('groupmembers')

    def __init__(self, attributes=None, *, store=None, node=None, file=None, real=None,
                 **kwargs):
        attributes = normalize(attributes)
        attributes.update(normalize(kwargs))
        super().__init__(self.KIND, attributes, store=store, node=node, file=file, real=real)

    def _members(self, key, update=True):
        values = self._record.get(key)
        if not isinstance(values, list):
            values = _to_values(values)
            if update:
                self._record[key] = values
        return values

    def _discard_member(self, key, value):
        values = self._members(key, update=False)
        if value not in values:
            return None
        self._record[key] = [other for other in values if other != value]
        return value

    def _load_member(self, cls, name):
        # Read from the member's file. No record is built, so no id is allocated.
        if not isinstance(name, str) or not _NAME_REGEX.match(name):
            return None
        path = self._store.record_path(cls.KIND.plural, name, self._node)
        if not os.path.isfile(path):
            return None
        return load_plist(path)

    def _member_uid(self, name):
        data = self._load_member(type(self), name)
        if data is None:
            return None
        return first(data.get('generateduid') or (), None)

    def has_user(self, member):
        """
        Determine whether a user is a member.

        :param member: The user's name.
        :return: Whether the user is listed.
        """
        return member in self._members('users', update=False)

    def add_user(self, member):
        """
        Add a user to the group. The user must exist in the group's node.

        :param member: The user's name.
        :return: The updated list of users.
        """
        if self._load_member(self.MEMBER_CLASS, member) is None:
            raise MembershipError("No %s named %r exists." % (self.MEMBER_CLASS.KIND.name, member))
        users = self._members('users')
        if member not in users:
            users.append(member)
        return list(users)

    def remove_user(self, member):
        """
        Remove a user from the group. A group without the user is left untouched.

        :param member: The user's name.
        :return: The name, or None if the user was not a member.
        """
        return self._discard_member('users', member)

    def has_groupmember(self, member):
        """
        Determine whether a group is a nested member.

        :param member: The member group's name.
        :return: Whether the group exists and its generated UID is listed.
        """
        generateduid = self._member_uid(member)
        return generateduid is not None and generateduid in self._members('groupmembers',
                                                                          update=False)

    def add_groupmember(self, member):
        """
        Add a nested group, by generated UID. The group must exist in this group's node, with a
        generated UID in its file.

        :param member: The member group's name.
        :return: The updated list of group member UIDs.
        """
        if self._load_member(type(self), member) is None:
            raise MembershipError("No %s named %r exists." % (self._kind.name, member))
        generateduid = self._member_uid(member)
        if generateduid is None:
            raise MembershipError("The %s %r has no generated UID." % (self._kind.name, member))
        groupmembers = self._members('groupmembers')
        if generateduid not in groupmembers:
            groupmembers.append(generateduid)
        return list(groupmembers)

    def remove_groupmember(self, member):
        """
        Remove a nested group.

        :param member: The member group's name.
        :return: The removed generated UID, or None if the group does not exist or was not a member.
        """
        generateduid = self._member_uid(member)
        if generateduid is None:
            return None
        return self._discard_member('groupmembers', generateduid)


class ComputerGroup(Group):
    """A group of computers. Members are computers rather than users."""

    KIND = COMPUTERGROUP
    MEMBER_CLASS = Computer
