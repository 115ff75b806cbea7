"""
dslocal.logging
===============

Log output for dslocal is directed from dslocal.ini. The Loggers option of the [Logging] section
lists logger sections; each logger section names a logger and lists handler sections; each handler
section has a Type naming one of the handler classes below:

    [Logging]
    Loggers = DSLocal Logger

    [DSLocal Logger]
    Name = dslocal
    Level = WARNING
    Handlers = DSLocal Console

    [DSLocal Console]
    Type = LogStreamHandler
    Stream = stderr
    Format = %(asctime)s %(name)s %(levelname)s: %(message)s
"""


import logging
import os
import sys

from abc import abstractmethod


from .abc.configurations import Configurable
from .configurations import ConfigManager, get_dslocal_config_manager
from .exceptions import OperationNotSupportedError, verify_type
from .plugins import config_loader


__author__ = 'Aaron Hosford'
__all__ = [
    'LOGGING_SECTION',
    'DEFAULT_FORMAT',
    'LogHandler',
    'LogFileHandler',
    'LogStreamHandler',
    'configure_logger',
    'configure_logging',
]


LOGGING_SECTION = 'Logging'
DEFAULT_FORMAT = '%(asctime)s %(name)s %(levelname)s: %(message)s'


class LogHandler(Configurable):
    """
    A log handler built from a config section. Besides the options particular to the handler
    type, every handler section may set Format, Date Format, and Level.
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        raise OperationNotSupportedError("Log handlers are configured by section.")

    @classmethod
    @abstractmethod
    def get_handler_arguments(cls, manager, section):
        """
        Read the constructor arguments particular to this handler type.

        :param manager: A ConfigManager instance.
        :param section: The name of the handler's section.
        :return: A dictionary of keyword arguments.
        """
        raise NotImplementedError()

    @classmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        verify_type(manager, ConfigManager)
        verify_type(section, str, non_empty=True)

        kwargs.update(cls.get_handler_arguments(manager, section))
        handler = cls(*args, **kwargs)
        handler.setFormatter(logging.Formatter(
            manager.load_option(section, 'Format', default=DEFAULT_FORMAT),
            manager.load_option(section, 'Date Format', default=None)
        ))
        handler.setLevel(manager.load_option(section, 'Level', 'log_level', logging.NOTSET))
        return handler


@config_loader
class LogFileHandler(LogHandler, logging.FileHandler):
    """Appends log records to the file named by the section's Path."""

    @classmethod
    def get_handler_arguments(cls, manager, section):
        return {
            'filename': os.path.abspath(os.path.expanduser(manager.get_option(section, 'Path'))),
            'mode': manager.load_option(section, 'Mode', default='a'),
            'encoding': manager.load_option(section, 'Encoding', default=None),
            'delay': manager.load_option(section, 'Delay', 'bool', False),
        }


@config_loader
class LogStreamHandler(LogHandler, logging.StreamHandler):
    """Writes log records to stderr, or to stdout if the section's Stream says so."""

    STREAMS = ('stderr', 'stdout')

    @classmethod
    def get_handler_arguments(cls, manager, section):
        return {'stream_name': manager.load_option(section, 'Stream', default='stderr')}

    def __init__(self, stream_name='stderr'):
        stream_name = stream_name.strip().lower()
        if stream_name not in self.STREAMS:
            raise ValueError("Unknown stream: %s" % stream_name)
        # Looked up at construction so that a replaced sys.stderr is honored.
        super().__init__(getattr(sys, stream_name))


def configure_logger(manager, section):
    """
    Apply a logger section: set the named logger's level and attach its handlers. Handlers already
    attached are not attached again, so a section can be applied more than once.

    :param manager: A ConfigManager instance.
    :param section: The name of the logger section.
    :return: The configured logging.Logger.
    """
    verify_type(manager, ConfigManager)
    verify_type(section, str, non_empty=True)

    name = manager.get_option(section, 'Name')
    handlers = []
    for handler_section in manager.load_option(section, 'Handlers', 'list', []):
        handler = manager.load_section(handler_section)
        verify_type(handler, LogHandler)
        handlers.append(handler)

    if name == 'root':
        logger = logging.root
    else:
        logger = logging.getLogger(name)
        logger.propagate = manager.load_option(section, 'Propagate', 'bool', True)
    logger.setLevel(manager.load_option(section, 'Level', 'log_level', logging.NOTSET))

    for handler in handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    return logger


def configure_logging(manager=None):
    """
    Apply every logger section listed by the Loggers option of [Logging]. Nothing is done if the
    option is absent.

    :param manager: The ConfigManager to read. Defaults to the dslocal config manager.
    :return: A list of the configured loggers.
    """
    if manager is None:
        manager = get_dslocal_config_manager()
    verify_type(manager, ConfigManager)

    sections = manager.load_option(LOGGING_SECTION, 'Loggers', 'list', [])
    return [configure_logger(manager, section) for section in sections]
