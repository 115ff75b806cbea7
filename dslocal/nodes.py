"""
dslocal.nodes
=============

Local directory nodes: the directory trees records are stored in.
"""


import glob
import logging
import os
import shutil
import stat


from .exceptions import RecordIOError, verify_type
from .plists import load_plist
from .store import DSLocalStore


__author__ = 'Aaron Hosford'
__all__ = [
    'DSLocalNode',
]


log = logging.getLogger(__name__)


class DSLocalNode:
    """
    A DSLocalNode is one named partition of the local record store: a directory holding one child
    directory per record type.
    """

    CHILD_DIRS = (
        'aliases',
        'computer_lists',
        'computergroups',
        'computers',
        'config',
        'groups',
        'networks',
        'users',
    )
    DIR_MODE = 0o700

    def __init__(self, name=None, store=None):
        if store is None:
            store = DSLocalStore.default()
        verify_type(store, DSLocalStore)
        verify_type(name, str, non_empty=True, allow_none=True)

        self._store = store
        self._name = name or store.node

    def __repr__(self):
        return '%s(%r)' % (type(self).__name__, self._name)

    @property
    def name(self):
        """The name of the node."""
        return self._name

    @property
    def label(self):
        """The directory service path of the node, e.g. /Local/Default."""
        return '/Local/' + self._name

    @property
    def store(self):
        """The DSLocalStore the node belongs to."""
        return self._store

    @property
    def root(self):
        """The node's directory."""
        return self._store.node_path(self._name)

    def exists(self):
        """
        Determine whether the node's directory structure is complete: the node directory and every
        child directory exist, and none is accessible to anyone but the owner.

        :return: Whether the structure is valid.
        """
        for path in [self.root] + [os.path.join(self.root, child) for child in self.CHILD_DIRS]:
            if not os.path.isdir(path):
                return False
            if stat.S_IMODE(os.stat(path).st_mode) != self.DIR_MODE:
                log.debug("Directory %s does not have mode %o.", path, self.DIR_MODE)
                return False
        return True

    def create(self):
        """
        Create the node's directory structure. Existing directories are kept, but their modes are
        reset.

        :return: True once the structure exists.
        """
        try:
            for path in [self.root] + [os.path.join(self.root, child)
                                       for child in self.CHILD_DIRS]:
                os.makedirs(path, exist_ok=True)
                os.chmod(path, self.DIR_MODE)
        except OSError as exc:
            raise RecordIOError("Could not create node %s: %s" % (self.root, exc)) from exc
        log.info("Created node %s.", self.root)
        return self.exists()

    def destroy(self):
        """
        Remove the node's directory structure, including every record in it.

        :return: True once the node directory is gone.
        """
        if os.path.exists(self.root):
            try:
                shutil.rmtree(self.root)
            except OSError as exc:
                raise RecordIOError("Could not remove node %s: %s" % (self.root, exc)) from exc
            log.info("Removed node %s.", self.root)
        return not os.path.exists(self.root)

    def record_paths(self, record_type):
        """
        List the record files of a type in this node.

        :param record_type: The plural record type directory name, e.g. 'users'.
        :return: A sorted list of file paths.
        """
        directory = self._store.record_dir(record_type, self._name)
        return sorted(glob.glob(os.path.join(glob.escape(directory), '*.plist')))

    def iter_plists(self, record_type):
        """
        Iterate over the parsed record files of a type in this node. Files that cannot be parsed
        are skipped.

        :param record_type: The plural record type directory name, e.g. 'users'.
        :return: An iterator over (path, contents) pairs.
        """
        for path in self.record_paths(record_type):
            try:
                data = load_plist(path)
            except RecordIOError as exc:
                log.warning("Skipping unreadable record file: %s", exc)
                continue
            if isinstance(data, dict):
                yield path, data
