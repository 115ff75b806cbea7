import os
import unittest

from dslocal.exceptions import MembershipError, RecordIOError, ValidationError
from dslocal.nodes import DSLocalNode
from dslocal.plists import XML, load_plist, save_plist
from dslocal.records import (
    COMPUTER,
    GROUP,
    USER,
    Computer,
    ComputerGroup,
    Group,
    Record,
    User,
    normalize,
)
from dslocal.security.shadowhash import SHADOWHASHDATA, SaltedSHA1, SaltedSHA512PBKDF2
from dslocal.uuids import is_valid_uuid
from test_dslocal import make_sandbox_store, remove_sandbox


class SandboxTestCase(unittest.TestCase):

    product_version = (10, 8)

    def setUp(self):
        self.directory, self.store = make_sandbox_store(self.product_version)

    def tearDown(self):
        remove_sandbox(self.directory)


class TestNormalize(unittest.TestCase):

    def testValues(self):
        self.assertEqual(
            normalize({'name': 'bender', 'uid': 501, 'users': ('a', 'b'), 'comment': None,
                       SHADOWHASHDATA: b'\x00\x01'}),
            {'name': ['bender'], 'uid': ['501'], 'users': ['a', 'b'], 'comment': [],
             SHADOWHASHDATA: [b'\x00\x01']}
        )

    def testName(self):
        self.assertEqual(normalize('bender'), {'name': ['bender']})

    def testNotAMapping(self):
        with self.assertRaises(ValidationError):
            normalize(42)


class TestNames(SandboxTestCase):

    def testInvalidNames(self):
        for name in ('Bender', '-bender', '_bender', 'ben der', '', 'bender!'):
            with self.assertRaises(ValidationError):
                User(name, store=self.store)

    def testMissingName(self):
        with self.assertRaises(ValidationError):
            User({'uid': '501'}, store=self.store)

    def testValidNames(self):
        for name in ('bender', '0day', 'a-b_c'):
            self.assertEqual(User(name, store=self.store).name, [name])

    def testRenameRejected(self):
        user = User('bender', store=self.store)
        user.set('name', 'bender')
        with self.assertRaises(ValidationError):
            user.set('name', 'fry')
        with self.assertRaises(ValidationError):
            user.delete('name')
        with self.assertRaises(AttributeError):
            user.name = ['fry']


class TestUserDefaults(SandboxTestCase):

    def testNewUser(self):
        user = User('bender', store=self.store)
        self.assertIs(user.kind, USER)
        self.assertEqual(user.uid, ['501'])
        self.assertEqual(user.gid, ['20'])
        self.assertEqual(user.home, ['/Users/bender'])
        self.assertEqual(user.shell, ['/bin/bash'])
        self.assertEqual(user.realname, ['bender'])
        self.assertEqual(user.passwd, ['********'])
        self.assertEqual(user.comment, [''])
        self.assertTrue(is_valid_uuid(user.generateduid[0]))
        self.assertIsNone(user.password)
        self.assertFalse(user.exists())

    def testCallerValuesWin(self):
        user = User('bender', uid=600, shell='/bin/zsh', generateduid='ABC', store=self.store)
        self.assertEqual(user.uid, ['600'])
        self.assertEqual(user.shell, ['/bin/zsh'])
        self.assertEqual(user.generateduid, ['ABC'])

    def testAllocation(self):
        User('first', uid='501', store=self.store).create()
        User('second', uid='502', store=self.store).create()
        self.assertEqual(User('third', store=self.store).uid, ['503'])

    def testAllocationQuirk(self):
        User('first', uid='503', store=self.store).create()
        User('second', uid='505', store=self.store).create()
        self.assertEqual(User('third', store=self.store).uid, ['504'])

    def testAllocationPerNode(self):
        User('first', uid='501', store=self.store).create()
        other = DSLocalNode('Other', self.store)
        self.assertTrue(other.create())
        self.assertEqual(User('second', node='Other', store=self.store).uid, ['501'])

    def testUnreadableSiblingSkipped(self):
        User('first', uid='501', store=self.store).create()
        with open(self.store.record_path('users', 'broken'), 'wb') as broken:
            broken.write(b'garbage')
        self.assertEqual(User('second', store=self.store).uid, ['502'])


class TestOtherDefaults(SandboxTestCase):

    def testGroup(self):
        group = Group('admins', store=self.store)
        self.assertIs(group.kind, GROUP)
        self.assertEqual(group.gid, ['501'])
        self.assertEqual(group.realname, ['Admins'])
        self.assertEqual(group.passwd, ['*'])
        self.assertEqual(group.users, [])
        self.assertEqual(group.groupmembers, [])

    def testGroupAllocation(self):
        Group('first', gid='501', store=self.store).create()
        self.assertEqual(Group('second', store=self.store).gid, ['502'])
        self.assertEqual(ComputerGroup('third', store=self.store).gid, ['501'])

    def testComputer(self):
        computer = Computer('kiosk', en_address='aa:bb:cc:dd:ee:ff', store=self.store)
        self.assertIs(computer.kind, COMPUTER)
        self.assertEqual(computer.realname, ['kiosk'])
        self.assertEqual(computer.en_address, ['aa:bb:cc:dd:ee:ff'])
        self.assertFalse(computer.has('uid'))
        self.assertFalse(computer.has('gid'))

    def testComputerAddress(self):
        computer = Computer('kiosk', store=self.store)
        self.assertRegex(computer.en_address[0], '^([0-9a-f]{2}:){5}[0-9a-f]{2}$')


class TestMerge(SandboxTestCase):

    def testOverlay(self):
        path = self.store.record_path('users', 'bender')
        save_plist(path, {
            'name': ['bender'],
            'uid': ['777'],
            'generateduid': ['OLD'],
            'hobby': ['bending'],
        }, XML)
        user = User('bender', shell='/bin/zsh', store=self.store)
        self.assertEqual(user.uid, ['777'])
        self.assertEqual(user.generateduid, ['OLD'])
        self.assertEqual(user.get('hobby'), ['bending'])
        self.assertEqual(user.shell, ['/bin/zsh'])
        self.assertFalse(user.has('home'))

    def testGroupExists(self):
        Group('foo', gid='501', store=self.store).create()
        self.assertFalse(Group({'name': 'foo', 'gid': '503'}, store=self.store).exists())
        self.assertTrue(Group({'name': 'foo', 'gid': '501'}, store=self.store).exists())

    def testExistsRereads(self):
        group = Group('foo', store=self.store)
        self.assertTrue(group.create())
        self.assertTrue(group.exists())
        os.remove(group.file)
        self.assertFalse(group.exists())

    def testAttributeChanges(self):
        group = Group('foo', store=self.store)
        group.create()
        group.set('comment', 'changed')
        self.assertFalse(group.exists())
        group.create()
        self.assertTrue(group.exists())


    def testMissingGeneratedUID(self):
        save_plist(self.store.record_path('groups', 'foo'), {'name': ['foo'], 'gid': ['501']}, XML)
        foo = Group('foo', store=self.store)
        self.assertTrue(is_valid_uuid(foo.generateduid[0]))
        self.assertEqual(foo.gid, ['501'])
        self.assertFalse(foo.exists())

        crew = Group('crew', store=self.store)
        with self.assertRaises(MembershipError):
            crew.add_groupmember('foo')
        self.assertFalse(crew.has_groupmember('foo'))
        self.assertIsNone(crew.remove_groupmember('foo'))

        self.assertTrue(foo.create())
        self.assertTrue(foo.exists())
        self.assertEqual(crew.add_groupmember('foo'), foo.generateduid)
        self.assertTrue(crew.has_groupmember('foo'))


class TestCreateDestroy(SandboxTestCase):

    def testRoundTrip(self):
        group = Group('foo', store=self.store)
        self.assertTrue(group.create())
        self.assertEqual(load_plist(group.file), group.attributes)
        loaded = Group.from_file(group.file, self.store)
        self.assertEqual(loaded, group)
        self.assertEqual(loaded.diff(group), {})

    def testCreateTwice(self):
        group = Group('foo', store=self.store)
        self.assertTrue(group.create())
        written = load_plist(group.file)
        self.assertTrue(group.create())
        self.assertEqual(load_plist(group.file), written)
        self.assertEqual(load_plist(group.file), group.attributes)
        self.assertEqual(Group('foo', store=self.store), group)

        user = User('bender', password='secret', store=self.store)
        self.assertTrue(user.create())
        written = load_plist(user.file)
        self.assertTrue(user.create())
        self.assertEqual(load_plist(user.file), written)
        self.assertTrue(user.exists())

    def testDestroyIdempotent(self):
        group = Group('foo', store=self.store)
        group.create()
        self.assertTrue(group.destroy())
        self.assertFalse(os.path.exists(group.file))
        self.assertTrue(group.destroy())

    def testAlternatePath(self):
        group = Group('foo', store=self.store)
        path = os.path.join(self.directory, 'elsewhere.plist')
        self.assertTrue(group.create(path))
        self.assertTrue(os.path.isfile(path))
        self.assertFalse(os.path.exists(group.file))
        self.assertTrue(group.destroy(path))
        self.assertFalse(os.path.exists(path))

    def testMissingNode(self):
        group = Group('foo', node='Missing', store=self.store)
        with self.assertRaises(RecordIOError):
            group.create()

    def testFromFile(self):
        self.assertIsNone(Group.from_file(os.path.join(self.directory, 'missing.plist'),
                                          self.store))
        bad = os.path.join(self.directory, 'bad.plist')
        with open(bad, 'wb') as bad_file:
            bad_file.write(b'garbage')
        self.assertIsNone(Group.from_file(bad, self.store))

    def testAll(self):
        Group('foo', store=self.store).create()
        Group('bar', store=self.store).create()
        self.assertEqual([group.name for group in Group.all(self.store)], [['bar'], ['foo']])
        self.assertEqual(User.all(self.store), [])

    def testDiff(self):
        first = Group('foo', store=self.store)
        second = Group('foo', gid='600', comment='x', store=self.store)
        differences = first.diff(second)
        self.assertEqual(differences['gid'], (['501'], ['600']))
        self.assertEqual(differences['comment'], (None, ['x']))
        self.assertIn('generateduid', differences)
        self.assertNotIn('name', differences)
        self.assertNotEqual(first, second)

    def testBaseRecordRequiresKind(self):
        with self.assertRaises(TypeError):
            Record('foo', {'name': 'foo'}, store=self.store)


class TestMembership(SandboxTestCase):

    def testAddUser(self):
        User('bender', store=self.store).create()
        group = Group('crew', store=self.store)
        self.assertEqual(group.add_user('bender'), ['bender'])
        self.assertEqual(group.add_user('bender'), ['bender'])
        self.assertTrue(group.has_user('bender'))
        self.assertEqual(group.users, ['bender'])

    def testAddMissingUser(self):
        group = Group('crew', store=self.store)
        with self.assertRaises(MembershipError):
            group.add_user('nobody')
        with self.assertRaises(LookupError):
            group.add_user('nobody')
        self.assertEqual(group.users, [])

    def testRemoveUser(self):
        User('bender', store=self.store).create()
        group = Group('crew', store=self.store)
        group.add_user('bender')
        self.assertEqual(group.remove_user('bender'), 'bender')
        self.assertIsNone(group.remove_user('bender'))
        self.assertFalse(group.has_user('bender'))

    def testRemoveFromGroupWithoutMembers(self):
        save_plist(self.store.record_path('groups', 'crew'), {
            'name': ['crew'],
            'gid': ['501'],
            'generateduid': ['A2E5C3B4-1D2F-4C6B-9E8A-0B1C2D3E4F50'],
        }, XML)
        group = Group('crew', store=self.store)
        self.assertTrue(group.exists())
        self.assertIsNone(group.remove_user('nobody'))
        self.assertIsNone(group.remove_groupmember('nobody'))
        self.assertFalse(group.has('users'))
        self.assertFalse(group.has('groupmembers'))
        self.assertTrue(group.exists())

    def testInvalidMemberNames(self):
        group = Group('crew', store=self.store)
        with self.assertRaises(MembershipError):
            group.add_user('Bad Name')
        with self.assertRaises(MembershipError):
            group.add_groupmember('Bad Name')
        self.assertFalse(group.has_user('Bad Name'))
        self.assertFalse(group.has_groupmember('Bad Name'))
        self.assertIsNone(group.remove_groupmember('Bad Name'))
        self.assertEqual(User.all(self.store), [])

    def testAddGroupMember(self):
        foo = Group('foo', store=self.store)
        foo.create()
        group = Group('crew', store=self.store)
        self.assertEqual(group.add_groupmember('foo'), foo.generateduid)
        self.assertNotIn('foo', group.groupmembers)
        self.assertTrue(group.has_groupmember('foo'))
        group.add_groupmember('foo')
        self.assertEqual(group.groupmembers, foo.generateduid)

    def testAddMissingGroupMember(self):
        group = Group('crew', store=self.store)
        with self.assertRaises(MembershipError):
            group.add_groupmember('doesnotexist')
        self.assertEqual(group.groupmembers, [])
        self.assertFalse(group.has_groupmember('doesnotexist'))

    def testRemoveGroupMember(self):
        foo = Group('foo', store=self.store)
        foo.create()
        group = Group('crew', store=self.store)
        group.add_groupmember('foo')
        self.assertEqual(group.remove_groupmember('foo'), foo.generateduid[0])
        self.assertIsNone(group.remove_groupmember('foo'))
        self.assertIsNone(group.remove_groupmember('doesnotexist'))
        self.assertEqual(group.groupmembers, [])

    def testComputerGroup(self):
        Computer('kiosk', en_address='aa:bb:cc:dd:ee:ff', store=self.store).create()
        User('bender', store=self.store).create()
        group = ComputerGroup('lab', store=self.store)
        self.assertEqual(group.add_user('kiosk'), ['kiosk'])
        with self.assertRaises(MembershipError):
            group.add_user('bender')

    def testMembershipPersists(self):
        User('bender', store=self.store).create()
        group = Group('crew', store=self.store)
        group.add_user('bender')
        group.create()
        self.assertEqual(Group('crew', store=self.store).users, ['bender'])


class TestEmbeddedPasswords(SandboxTestCase):

    def testPlaintext(self):
        user = User('bender', password='bite my shiny metal', store=self.store)
        self.assertIsInstance(user.password, SaltedSHA512PBKDF2)
        self.assertEqual(user.password.iterations, self.store.pbkdf2_iterations)
        self.assertTrue(user.password.matches('bite my shiny metal'))
        self.assertFalse(user.is_legacy)
        self.assertIsInstance(user.get(SHADOWHASHDATA)[0], bytes)

    def testPersisted(self):
        user = User('bender', password='secret', store=self.store)
        self.assertTrue(user.create())
        self.assertTrue(user.exists())

        loaded = User('bender', store=self.store)
        self.assertEqual(loaded.password, user.password)
        self.assertTrue(loaded.password.matches('secret'))
        self.assertTrue(loaded.exists())

        loaded.password = 'changed'
        self.assertFalse(loaded.exists())
        loaded.create()
        self.assertTrue(User('bender', store=self.store).password.matches('changed'))

        self.assertTrue(loaded.destroy())
        self.assertFalse(os.path.exists(loaded.file))

    def testInvalidPassword(self):
        with self.assertRaises(ValidationError):
            User('bender', password=12345, store=self.store)


class TestSHA512Passwords(SandboxTestCase):

    product_version = (10, 7, 5)

    def testPlaintext(self):
        user = User('bender', password='secret', store=self.store)
        user.create()
        loaded = User('bender', store=self.store)
        self.assertEqual(loaded.password.label, 'SALTED-SHA512')
        self.assertTrue(loaded.password.matches('secret'))
        self.assertTrue(loaded.exists())


class TestLegacyPasswords(SandboxTestCase):

    product_version = (10, 6, 8)

    def testLifecycle(self):
        user = User('bender', password='secret', store=self.store)
        self.assertTrue(user.is_legacy)
        self.assertIsInstance(user.password, SaltedSHA1)
        self.assertFalse(user.has(SHADOWHASHDATA))

        hash_path = self.store.shadowhash_path(user.generateduid[0])
        self.assertTrue(user.create())
        self.assertEqual(os.path.getsize(hash_path), 1240)
        with open(hash_path, 'rb') as hash_file:
            self.assertEqual(hash_file.read()[168:216], user.password.password.encode('ascii'))
        self.assertTrue(user.exists())

        loaded = User('bender', store=self.store)
        self.assertEqual(loaded.password, user.password)
        self.assertTrue(loaded.password.matches('secret'))

        os.remove(hash_path)
        self.assertFalse(user.exists())
        self.assertEqual(load_plist(user.file), user.attributes)

        user.create()
        self.assertTrue(user.destroy())
        self.assertFalse(os.path.exists(hash_path))
        self.assertFalse(os.path.exists(user.file))
        self.assertTrue(user.destroy())

    def testCredentialWriteFailureLeavesRecord(self):
        user = User('bender', password='secret', store=self.store)
        os.rmdir(self.store.shadowhash_store)
        with self.assertRaises(RecordIOError):
            user.create()
        self.assertFalse(os.path.exists(user.file))


if __name__ == '__main__':
    unittest.main()
