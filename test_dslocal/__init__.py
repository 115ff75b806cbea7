"""
Tests for the dslocal package.
"""

import os
import shutil
import tempfile

from dslocal.nodes import DSLocalNode
from dslocal.store import DSLocalStore


__author__ = 'Aaron Hosford'


def make_sandbox_store(product_version=(10, 8), pbkdf2_iterations=1000):
    """
    Create a record store under a fresh temporary directory, with its default node and shadow hash
    store in place.

    :return: A (directory, store) pair. The caller removes the directory with remove_sandbox().
    """
    directory = tempfile.mkdtemp(prefix='dslocal_test_')
    store = DSLocalStore(
        root=os.path.join(directory, 'nodes'),
        shadowhash_store=os.path.join(directory, 'shadow', 'hash'),
        product_version=product_version,
        pbkdf2_iterations=pbkdf2_iterations,
    )
    os.makedirs(store.shadowhash_store)
    DSLocalNode(store=store).create()
    return directory, store


def remove_sandbox(directory):
    shutil.rmtree(directory, ignore_errors=True)
