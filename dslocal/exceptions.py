"""
dslocal.exceptions
==================

Exception definitions for dslocal.
"""


__author__ = 'Aaron Hosford'
__all__ = [
    'DSLocalException',
    'ConfigurationError',
    'InvalidConfigurationError',
    'ConfigSectionNotFoundError',
    'ConfigParameterNotFoundError',
    'ValidationError',
    'FormatError',
    'MembershipError',
    'UnsupportedTargetError',
    'RecordIOError',
    'PluginError',
    'PluginExistsError',
    'InvalidPluginError',
    'PluginNotFoundError',
    'TooFewItemsError',
    'OperationNotSupportedError',
    'verify_type',
]


class DSLocalException(Exception):
    """Base class for all exceptions defined by dslocal."""


class ConfigurationError(DSLocalException):
    """Error in configuration."""


class InvalidConfigurationError(ConfigurationError):
    """The configuration is invalid."""


class ConfigSectionNotFoundError(KeyError, ConfigurationError):
    """The config section could not be found."""


class ConfigParameterNotFoundError(KeyError, ConfigurationError):
    """The config parameter could not be found."""


class ValidationError(ValueError, DSLocalException):
    """A record attribute or argument is malformed."""


class FormatError(ValidationError):
    """Credential material does not have the required length or character set."""


class MembershipError(LookupError, DSLocalException):
    """The referenced member record does not exist."""


class UnsupportedTargetError(TypeError, DSLocalException):
    """Credential data cannot be stored on or removed from this kind of record."""

    MESSAGE = 'Unsupported object: cannot store ShadowHashData'


class RecordIOError(OSError, DSLocalException):
    """A record or credential file could not be written or removed."""


class PluginError(DSLocalException):
    """Plugin-related error."""


class PluginExistsError(KeyError, PluginError):
    """The plugin already exists."""


class InvalidPluginError(ValueError, PluginError):
    """The plugin is invalid."""


class PluginNotFoundError(KeyError, PluginError):
    """The plugin does not exist or could not be found."""


class TooFewItemsError(ValueError, DSLocalException):
    """The sequence contained fewer items than required."""


class OperationNotSupportedError(NotImplementedError, DSLocalException):
    """The requested operation is not available for this object."""


def verify_type(obj, typ, *, non_empty=False, allow_none=False):
    """
    Verify that the object has the given type. If not, raise an appropriate exception.

    :param obj: The object to check.
    :param typ: The expected type (or a tuple of types).
    :param non_empty: If True, require the object to evaluate as True in a boolean context. (Default
        False)
    :param allow_none: If True, allow the object to be None. (Default False)
    """
    if allow_none and obj is None:
        return
    if not isinstance(obj, typ):
        raise TypeError(type(obj), typ)
    if non_empty and not obj:
        raise ValueError(obj)

