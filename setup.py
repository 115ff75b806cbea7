"""
setup.py
========

Setup script for dslocal package.
"""

import ast
import os

from setuptools import setup


PACKAGE_NAME = 'dslocal'


def get_info(package_name):
    """
    Read the package information from the dunder assignments in the package's __init__.py, without
    importing the package.

    :param package_name: The name of the package.
    :return: A dictionary of keyword arguments for setup().
    """
    path = os.path.join(package_name, '__init__.py')
    with open(path, encoding='utf-8') as init_file:
        tree = ast.parse(init_file.read(), path)

    values = {'__doc__': ast.get_docstring(tree)}
    for node in tree.body:
        if not isinstance(node, ast.Assign) or len(node.targets) != 1:
            continue
        target = node.targets[0]
        if not isinstance(target, ast.Name):
            continue
        if target.id == '__long_description__' and isinstance(node.value, ast.Name):
            values[target.id] = values.get(node.value.id)
        elif target.id.startswith('__') and target.id.endswith('__'):
            values[target.id] = ast.literal_eval(node.value)

    return {
        'name': package_name,
        'version': values['__version__'],
        'author': values['__author__'],
        'author_email': values.get('__author_email__'),
        'description': values.get('__description__'),
        'long_description': values.get('__long_description__'),
        'license': values.get('__license__'),
        'install_requires': values.get('__install_requires__', []),
        'extras_require': values.get('__extras_require__', {}),
        'packages': values.get('__packages__', [package_name]),
        'package_data': values.get('__package_data__', {}),
        'python_requires': '>=3.10',
    }


cwd = os.getcwd()
if os.path.dirname(__file__):
    os.chdir(os.path.dirname(__file__))
try:
    setup(**get_info(PACKAGE_NAME))
finally:
    os.chdir(cwd)
