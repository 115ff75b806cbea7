"""
dslocal.plugins
===============

Named registries for config loaders and password hash schemes. Other distributions can add to
either one through entry points:

  * 'dslocal.config_loader': Configurable subclasses, or functions taking one string.
  * 'dslocal.shadowhash_scheme': ShadowHash subclasses, named by their ShadowHashData label.
"""


import warnings

from collections.abc import Mapping
from importlib import metadata


from .exceptions import InvalidPluginError, PluginExistsError, PluginNotFoundError, verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'PluginGroup',
    'CONFIG_LOADERS',
    'SHADOWHASH_SCHEMES',
    'load_plugins',
    'config_loader',
    'shadowhash_scheme',
]


class PluginGroup(Mapping):
    """
    A read-mostly mapping from case-insensitive names to plugins. Names keep the spelling they were
    first registered with. If a value type is given, only instances of it can be registered.
    """

    def __init__(self, name, value_type=None):
        verify_type(name, str, non_empty=True)
        verify_type(value_type, type, allow_none=True)

        self._name = name
        self._value_type = value_type
        self._entries = {}  # lower-cased name -> (registered name, plugin)

    @property
    def name(self):
        """The entry point group the plugins are loaded from."""
        return self._name

    def load(self, warn=True):
        """
        Register every plugin installed under this group's entry point name.

        :param warn: Whether a plugin that fails to load produces a warning. Otherwise it is
            skipped silently.
        """
        for entry_point in metadata.entry_points(group=self._name):
            try:
                self.register(entry_point.name, entry_point.load())
            except Exception as exc:
                if warn:
                    warnings.warn("Could not load %s plugin %s: %s" %
                                  (self._name, entry_point.name, exc))

    def register(self, name, value):
        """
        Add a plugin. Registering the same plugin under the same name again is allowed.

        :param name: The name of the plugin.
        :param value: The plugin.
        """
        verify_type(name, str, non_empty=True)
        key = name.lower()
        if key in self._entries and self._entries[key][1] is not value:
            raise PluginExistsError("A different %s plugin is already named %s." %
                                    (self._name, name))
        if self._value_type is not None and not isinstance(value, self._value_type):
            raise InvalidPluginError("%s plugin %s is not a %s." %
                                     (self._name, name, self._value_type.__name__))
        self._entries.setdefault(key, (name, value))

    def plugin(self, name=None):
        """
        Decorator form of register(). Used bare, the decorated object's __name__ is the plugin
        name; called with a string, that string is.
        """
        if name is None or isinstance(name, str):
            def decorator(value):
                self.register(name or value.__name__, value)
                return value
            return decorator
        self.register(name.__name__, name)
        return name

    def __getitem__(self, name):
        if isinstance(name, str) and name.lower() in self._entries:
            return self._entries[name.lower()][1]
        raise PluginNotFoundError(name)

    def __contains__(self, name):
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self):
        return iter([registered for registered, _ in self._entries.values()])

    def __len__(self):
        return len(self._entries)


CONFIG_LOADERS = PluginGroup('dslocal.config_loader')
SHADOWHASH_SCHEMES = PluginGroup('dslocal.shadowhash_scheme', type)

config_loader = CONFIG_LOADERS.plugin
shadowhash_scheme = SHADOWHASH_SCHEMES.plugin


def load_plugins(warn=True):
    """Register the config loaders and hash schemes installed by other distributions."""
    CONFIG_LOADERS.load(warn)
    SHADOWHASH_SCHEMES.load(warn)
