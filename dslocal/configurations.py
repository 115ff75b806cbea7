"""
dslocal.configurations
======================

Reading dslocal.ini, and building objects from its sections and options.

An option is turned into an object by a loader: a plain function taking the option's string, a
Configurable subclass, or the name under which either was registered with @config_loader. A whole
section is turned into an object the same way, except that a Configurable loads it with
load_config_section(), and a section can name its own loader in a Type option.
"""


import configparser
import os
import threading


from .exceptions import ConfigParameterNotFoundError, ConfigSectionNotFoundError, verify_type
from .plugins import CONFIG_LOADERS


__author__ = 'Aaron Hosford'
__all__ = [
    'CONFIG_EXTENSIONS',
    'get_default_config_search_dirs',
    'iter_config_search_paths',
    'load_config',
    'ConfigManager',
    'get_dslocal_config_manager',
]


CONFIG_EXTENSIONS = ('.ini', '.cfg', '.conf')

_dslocal_config_manager = None
_GLOBALS_LOCK = threading.RLock()


def _new_parser():
    # Format strings in logging sections contain % directives.
    return configparser.ConfigParser(interpolation=None)


def get_default_config_search_dirs(file_name_base='dslocal'):
    """
    List the directories searched for a config file, most important first. The directories are
    not checked for existence.

    :param file_name_base: The config file name, minus the extension. <NAME>_CONFIG in the
        environment adds a directory to the search.
    :return: A list of directory paths.
    """
    candidates = [
        '.',
        os.environ.get(file_name_base.upper() + '_CONFIG'),
        os.environ.get('DSLOCAL_CONFIG'),
        '~',
        '~/.config/dslocal',
        '/etc/dslocal',
        os.path.dirname(os.path.abspath(__file__)),
    ]
    return [candidate for candidate in candidates if candidate]


def iter_config_search_paths(file_name_base, dirs=None, extensions=CONFIG_EXTENSIONS):
    """
    Iterate over the config files that exist in the search directories, most important first.
    Each file is reported once, even if its directory is listed more than once.

    :param file_name_base: The config file name, minus the extension.
    :param dirs: The directories to search. Defaults to get_default_config_search_dirs().
    :param extensions: The file name extensions to try, in order.
    :return: An iterator over file paths.
    """
    if dirs is None:
        dirs = get_default_config_search_dirs(file_name_base)
    seen = set()
    for directory in dirs:
        directory = os.path.normpath(os.path.abspath(os.path.expandvars(
            os.path.expanduser(directory))))
        for extension in extensions:
            path = os.path.join(directory, file_name_base + extension)
            if path not in seen and os.path.isfile(path):
                seen.add(path)
                yield path


def load_config(file_name_base, dirs=None, error=False):
    """
    Read every config file found by iter_config_search_paths() into one parser. Where files set
    the same option, the more important file wins.

    :param file_name_base: The config file name, minus the extension.
    :param dirs: The directories to search. Defaults to get_default_config_search_dirs().
    :param error: Whether a malformed file raises configparser.Error rather than being skipped.
    :return: A configparser.ConfigParser.
    """
    config = _new_parser()
    for path in reversed(list(iter_config_search_paths(file_name_base, dirs))):
        try:
            config.read(path)
        except configparser.Error:
            if error:
                raise
    return config


class ConfigManager:
    """
    Builds objects from a parsed configuration. Each option or section is built once per loader;
    later requests get the same object back.

    :param config: A configparser.ConfigParser, a dictionary of sections, the path of a config
        file, or a config file name base to search for.
    :param loaders: The registry loader names are looked up in. Defaults to CONFIG_LOADERS.
    """

    def __init__(self, config, loaders=None):
        if isinstance(config, dict):
            content, config = config, _new_parser()
            config.read_dict(content)
        elif isinstance(config, str):
            if os.path.isfile(config):
                path, config = config, _new_parser()
                config.read(path)
            else:
                config = load_config(config)
        verify_type(config, configparser.ConfigParser)

        self._config = config
        self._loaders = CONFIG_LOADERS if loaders is None else loaders
        self._built = {}
        self._lock = threading.RLock()

    def has_section(self, section):
        """Whether the section exists."""
        verify_type(section, str, non_empty=True)
        return self._config.has_section(section)

    def has_option(self, section, option):
        """Whether the option exists in the section."""
        verify_type(section, str, non_empty=True)
        verify_type(option, str, non_empty=True)
        return self._config.has_option(section, option)

    def get_option(self, section, option, default=NotImplemented):
        """
        Get the string value of an option.

        :param section: The section name.
        :param option: The option name.
        :param default: Returned if the option is missing. If not given, a missing section raises
            ConfigSectionNotFoundError and a missing option ConfigParameterNotFoundError.
        :return: The option's value.
        """
        if self.has_option(section, option):
            return self._config.get(section, option)
        if default is not NotImplemented:
            return default
        if not self.has_section(section):
            raise ConfigSectionNotFoundError(section)
        raise ConfigParameterNotFoundError(option)

    def get_loader(self, loader):
        """
        Resolve a loader: names are looked up in the registry, and None means str.

        :param loader: A loader name, callable, or Configurable subclass, or None.
        :return: The callable or Configurable subclass.
        """
        if loader is None:
            return str
        if isinstance(loader, str):
            return self._loaders[loader]
        return loader

    def _build(self, key, build):
        with self._lock:
            if key not in self._built:
                self._built[key] = build()
            return self._built[key]

    def load_option(self, section, option, loader=None, default=NotImplemented):
        """
        Build an object from the value of an option.

        :param section: The section name.
        :param option: The option name.
        :param loader: The loader for the value. Defaults to str.
        :param default: Returned, unbuilt, if the option is missing.
        :return: The built object, or the default.
        """
        if default is not NotImplemented and not self.has_option(section, option):
            return default
        value = self.get_option(section, option)
        loader = self.get_loader(loader)
        if hasattr(loader, 'load_config_value'):
            return self._build((section, option, loader),
                               lambda: loader.load_config_value(self, value))
        return self._build((section, option, loader), lambda: loader(value))

    def load_section(self, section, loader=None, default=NotImplemented):
        """
        Build an object from a whole section. Without a loader, the section's Type option names
        one; without either, the section's options are returned as a dictionary.

        :param section: The section name.
        :param loader: The loader for the section.
        :param default: Returned if the section is missing.
        :return: The built object, or the default.
        """
        if not self.has_section(section):
            if default is NotImplemented:
                raise ConfigSectionNotFoundError(section)
            return default
        if loader is None:
            loader = self.get_option(section, 'Type', dict)
        loader = self.get_loader(loader)
        if hasattr(loader, 'load_config_section'):
            return self._build((section, None, loader),
                               lambda: loader.load_config_section(self, section))
        return self._build((section, None, loader),
                           lambda: loader(dict(self._config.items(section))))


def get_dslocal_config_manager(refresh=False):
    """
    Get the ConfigManager for the dslocal.ini files found on this system.

    :param refresh: Whether to read the files again rather than reuse the previous manager.
    :return: A ConfigManager.
    """
    global _dslocal_config_manager
    with _GLOBALS_LOCK:
        if refresh or _dslocal_config_manager is None:
            _dslocal_config_manager = ConfigManager(load_config('dslocal'))
        return _dslocal_config_manager
