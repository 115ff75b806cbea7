"""
Utility functions. This module is the "miscellaneous bin", providing a home for simple functions and
classes that don't really belong anywhere else.
"""


from .exceptions import TooFewItemsError


__author__ = 'Aaron Hosford'
__all__ = [
    'first',
    'flatten',
    'once',
]


def first(items, default=NotImplemented):
    """
    Return the first item from a sequence. If the item sequence does not contain at least one value,
    return the default, or raise an exception if no default was provided.

    :param items: The iterable sequence of items.
    :param default: The value returned for an empty sequence.
    :return: The first item in the sequence.
    """
    for item in items:
        return item
    if default is NotImplemented:
        raise TooFewItemsError("No items found in sequence.")
    return default


def flatten(items):
    """
    Iterate over the leaves of an arbitrarily nested collection. Strings and bytes are leaves, not
    collections.

    :param items: The nested collection.
    :return: An iterator over the non-collection values, depth first.
    """
    if isinstance(items, (str, bytes)):
        yield items
        return
    try:
        iterator = iter(items)
    except TypeError:
        yield items
        return
    for item in iterator:
        yield from flatten(item)


# noinspection PyPep8Naming
class once:  # Lower-case naming is standard for decorators.
    """
    Function decorator to make a function callable exactly once. Once a function has successfully
    returned without an exception, subsequent calls just return the same return value as the first
    call.

    :param function: The function to be wrapped.
    :return: The wrapped function.
    """

    def __init__(self, function):
        self._function = function
        self._called = False
        self._return_value = None
        self.__doc__ = function.__doc__
        self.__name__ = function.__name__

    def __call__(self, *args, **kwargs):
        if self._called:
            return self._return_value
        self._return_value = self._function(*args, **kwargs)
        self._called = True
        return self._return_value

    def reset(self):
        """Forget the cached return value, so the next call invokes the function again."""
        self._called = False
        self._return_value = None
