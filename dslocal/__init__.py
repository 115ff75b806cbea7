"""
Management of local directory service records on Mac OS X: users, groups, computers, and computer
groups, stored as property list files, along with the password hashes of local users.
"""


from . import abc, security
from . import configurations, exceptions, ids, logging, nodes, plists, plugins, records, store
from . import strings, utility, uuids


__version__ = '0.9.0'

__author__ = 'Aaron Hosford'
__author_email__ = 'hosford42@gmail.com'
__description__ = 'dslocal: Local Directory Service Records for Mac OS X'
__long_description__ = __doc__
__license__ = 'MIT (https://opensource.org/licenses/MIT)'
__install_requires__ = [
    # 3rd-party
    'cryptography',
]
__extras_require__ = {
    'test': ['pytest'],
}
__packages__ = [
    'dslocal',
    'dslocal.abc',
    'dslocal.security',
    'test_dslocal',
]
__package_data__ = {
    'dslocal': ['dslocal.ini'],
}


plugins.load_plugins()
