import os
import shutil
import stat
import tempfile
import unittest

from dslocal.exceptions import RecordIOError
from dslocal.nodes import DSLocalNode
from dslocal.plists import BINARY, XML, dumps_plist, load_plist, loads_plist, save_plist
from dslocal.store import DSLocalStore


class TestNode(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp(prefix='dslocal_test_')
        self.store = DSLocalStore(root=os.path.join(self.directory, 'nodes'),
                                  shadowhash_store=os.path.join(self.directory, 'hash'))

    def tearDown(self):
        shutil.rmtree(self.directory, ignore_errors=True)

    def testLifecycle(self):
        node = DSLocalNode('Testing', self.store)
        self.assertEqual(node.label, '/Local/Testing')
        self.assertFalse(node.exists())
        self.assertTrue(node.create())
        self.assertTrue(node.exists())
        for child in DSLocalNode.CHILD_DIRS:
            path = os.path.join(node.root, child)
            self.assertTrue(os.path.isdir(path))
            self.assertEqual(stat.S_IMODE(os.stat(path).st_mode), 0o700)
        self.assertTrue(node.create())
        self.assertTrue(node.destroy())
        self.assertFalse(os.path.exists(node.root))
        self.assertTrue(node.destroy())

    def testLooseModes(self):
        node = DSLocalNode(store=self.store)
        self.assertEqual(node.name, self.store.node)
        node.create()
        os.chmod(os.path.join(node.root, 'users'), 0o755)
        self.assertFalse(node.exists())
        self.assertTrue(node.create())

    def testMissingChild(self):
        node = DSLocalNode(store=self.store)
        node.create()
        os.rmdir(os.path.join(node.root, 'networks'))
        self.assertFalse(node.exists())

    def testIterPlists(self):
        node = DSLocalNode(store=self.store)
        node.create()
        users = self.store.record_dir('users')
        save_plist(os.path.join(users, 'b.plist'), {'name': ['b']})
        save_plist(os.path.join(users, 'a.plist'), {'name': ['a']}, XML)
        with open(os.path.join(users, 'c.plist'), 'wb') as broken:
            broken.write(b'garbage')
        with open(os.path.join(users, 'notes.txt'), 'w') as notes:
            notes.write('ignored')
        self.assertEqual(
            [data for _, data in node.iter_plists('users')],
            [{'name': ['a']}, {'name': ['b']}]
        )
        self.assertEqual(len(node.record_paths('users')), 3)


class TestPlists(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.mkdtemp(prefix='dslocal_test_')

    def tearDown(self):
        shutil.rmtree(self.directory, ignore_errors=True)

    def testMissing(self):
        self.assertIsNone(load_plist(os.path.join(self.directory, 'missing.plist')))

    def testInvalid(self):
        path = os.path.join(self.directory, 'bad.plist')
        with open(path, 'wb') as bad:
            bad.write(b'garbage')
        with self.assertRaises(RecordIOError):
            load_plist(path)

    def testFormats(self):
        value = {'name': ['x'], 'data': [b'\x00\xff']}
        for fmt in (BINARY, XML):
            path = os.path.join(self.directory, 'value.plist')
            self.assertTrue(save_plist(path, value, fmt))
            self.assertEqual(load_plist(path), value)
        self.assertTrue(dumps_plist(value).startswith(b'bplist00'))
        self.assertEqual(loads_plist(dumps_plist(value, XML)), value)

    def testUnwritable(self):
        with self.assertRaises(RecordIOError):
            save_plist(os.path.join(self.directory, 'missing', 'value.plist'), {})
        with self.assertRaises(RecordIOError):
            save_plist(os.path.join(self.directory, 'value.plist'), {'bad': None})


if __name__ == '__main__':
    unittest.main()
