"""
dslocal.store
=============

Locations of the local directory record store and the legacy password hash store.
"""


import os


from .abc.configurations import Configurable
from .configurations import ConfigManager, get_dslocal_config_manager
from .env import get_product_version
from .exceptions import InvalidConfigurationError, verify_type
from .plugins import config_loader


__author__ = 'Aaron Hosford'
__all__ = [
    'DEFAULT_ROOT',
    'DEFAULT_SHADOWHASH_STORE',
    'DEFAULT_NODE',
    'DEFAULT_PBKDF2_ITERATIONS',
    'DSLocalStore',
]


DEFAULT_ROOT = '/private/var/db/dslocal/nodes'
DEFAULT_SHADOWHASH_STORE = '/private/var/db/shadow/hash'
DEFAULT_NODE = 'Default'
DEFAULT_PBKDF2_ITERATIONS = 30000

STORE_SECTION = 'Store'


@config_loader
class DSLocalStore(Configurable):
    """
    A DSLocalStore tells records and passwords where they live on disk, and which platform they
    are being written for. Records and password objects are always handed one explicitly; the
    package-wide default comes from the [Store] section of dslocal.ini.
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        """
        Load a new instance from a config option on behalf of a config loader. The value is the
        record store root.

        :param manager: A dslocal.configurations.ConfigManager instance.
        :param value: The string value of the option.
        :return: An instance of this type.
        """
        verify_type(manager, ConfigManager)
        verify_type(value, str, non_empty=True)
        return cls(*args, root=value, **kwargs)

    @classmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        """
        Load a new instance from a config section on behalf of a config loader.

        :param manager: A dslocal.configurations.ConfigManager instance.
        :param section: The name of the section being loaded.
        :return: An instance of this type.
        """
        verify_type(manager, ConfigManager)
        assert isinstance(manager, ConfigManager)
        verify_type(section, str, non_empty=True)

        root = manager.load_option(section, 'Root', str, DEFAULT_ROOT)
        shadowhash_store = manager.load_option(section, 'Shadow Hash Store', str,
                                               DEFAULT_SHADOWHASH_STORE)
        node = manager.load_option(section, 'Node', str, DEFAULT_NODE)
        product_version = manager.load_option(section, 'Product Version', 'version', None)
        iterations = manager.load_option(section, 'PBKDF2 Iterations', 'int',
                                         DEFAULT_PBKDF2_ITERATIONS)
        if iterations < 1:
            raise InvalidConfigurationError("PBKDF2 Iterations must be positive in section %s." %
                                            section)

        return cls(
            *args,
            root=root,
            shadowhash_store=shadowhash_store,
            node=node,
            product_version=product_version,
            pbkdf2_iterations=iterations,
            **kwargs
        )

    @classmethod
    def default(cls, manager=None):
        """
        Load the store described by the [Store] section of the dslocal configuration. If there is
        no such section, the standard system locations are used.

        :param manager: The ConfigManager to load from. Defaults to the dslocal config manager.
        :return: A DSLocalStore instance.
        """
        if manager is None:
            manager = get_dslocal_config_manager()
        verify_type(manager, ConfigManager)
        if not manager.has_section(STORE_SECTION):
            return cls()
        return manager.load_section(STORE_SECTION, cls)

    def __init__(self, root=DEFAULT_ROOT, shadowhash_store=DEFAULT_SHADOWHASH_STORE,
                 node=DEFAULT_NODE, product_version=None,
                 pbkdf2_iterations=DEFAULT_PBKDF2_ITERATIONS):
        verify_type(root, str, non_empty=True)
        verify_type(shadowhash_store, str, non_empty=True)
        verify_type(node, str, non_empty=True)
        verify_type(product_version, tuple, allow_none=True)
        verify_type(pbkdf2_iterations, int)
        if pbkdf2_iterations < 1:
            raise ValueError(pbkdf2_iterations)

        self._root = os.path.abspath(os.path.expanduser(root))
        self._shadowhash_store = os.path.abspath(os.path.expanduser(shadowhash_store))
        self._node = node
        self._product_version = product_version
        self._pbkdf2_iterations = pbkdf2_iterations

    def __repr__(self):
        return '%s(%r, %r, %r)' % (type(self).__name__, self._root, self._shadowhash_store,
                                   self._node)

    def __eq__(self, other):
        if not isinstance(other, DSLocalStore):
            return NotImplemented
        return (self._root, self._shadowhash_store, self._node, self._product_version,
                self._pbkdf2_iterations) == (other._root, other._shadowhash_store, other._node,
                                             other._product_version, other._pbkdf2_iterations)

    def __hash__(self):
        return hash((self._root, self._shadowhash_store, self._node))

    @property
    def root(self):
        """The directory containing the node directories."""
        return self._root

    @property
    def shadowhash_store(self):
        """The directory containing legacy password hash files."""
        return self._shadowhash_store

    @property
    def node(self):
        """The name of the node records belong to when none is specified."""
        return self._node

    @property
    def product_version(self):
        """
        The Mac OS X version records are written for, as a tuple of integers. If none was
        configured, the version of the running system is used; None means it is unknown.
        """
        if self._product_version is not None:
            return self._product_version
        return get_product_version()

    @property
    def pbkdf2_iterations(self):
        """The number of PBKDF2 iterations used when hashing new passwords."""
        return self._pbkdf2_iterations

    def node_path(self, node=None):
        """The directory holding the named node's records."""
        return os.path.join(self._root, node or self._node)

    def record_dir(self, record_type, node=None):
        """
        The directory holding records of a type.

        :param record_type: The plural record type directory name, e.g. 'users'.
        :param node: The node name. Defaults to the store's node.
        :return: The directory path.
        """
        verify_type(record_type, str, non_empty=True)
        return os.path.join(self.node_path(node), record_type)

    def record_path(self, record_type, name, node=None):
        """
        The file path of a record.

        :param record_type: The plural record type directory name, e.g. 'users'.
        :param name: The record name.
        :param node: The node name. Defaults to the store's node.
        :return: The file path.
        """
        verify_type(name, str, non_empty=True)
        return os.path.join(self.record_dir(record_type, node), name + '.plist')

    def shadowhash_path(self, generateduid):
        """
        The file path of a legacy password hash file.

        :param generateduid: The generated UID of the owning user.
        :return: The file path.
        """
        verify_type(generateduid, str, non_empty=True)
        return os.path.join(self._shadowhash_store, generateduid)
