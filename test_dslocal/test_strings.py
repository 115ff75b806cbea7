import logging
import unittest

from dslocal import strings, uuids, utility
from dslocal.exceptions import TooFewItemsError


class TestStrings(unittest.TestCase):

    def testParseBool(self):
        self.assertTrue(strings.parse_bool('yes'))
        self.assertFalse(strings.parse_bool(' off '))
        self.assertEqual(strings.parse_bool('', None), None)
        with self.assertRaises(ValueError):
            strings.parse_bool('maybe')

    def testParseInt(self):
        self.assertEqual(strings.parse_int('30000'), 30000)
        self.assertEqual(strings.parse_int('', 7), 7)
        with self.assertRaises(ValueError):
            strings.parse_int('1.5')

    def testParseLogLevel(self):
        self.assertEqual(strings.parse_log_level('warning'), logging.WARNING)
        self.assertEqual(strings.parse_log_level('15'), 15)

    def testParseVersion(self):
        self.assertEqual(strings.parse_version('10.8.5'), (10, 8, 5))
        self.assertGreater(strings.parse_version('10.10'), strings.parse_version('10.9'))
        self.assertEqual(strings.format_version((10, 7)), '10.7')
        with self.assertRaises(ValueError):
            strings.parse_version('10.x')

    def testListOfStrings(self):
        self.assertEqual(strings.to_list_of_strings('a, b;c,,'), ['a', 'b', 'c'])
        self.assertEqual(strings.to_list_of_strings(None), [])

    def testIsHexString(self):
        self.assertTrue(strings.is_hex_string('00ff', 2))
        self.assertFalse(strings.is_hex_string('00FF', 2))
        self.assertTrue(strings.is_hex_string('00FF', 2, upper=True))
        self.assertFalse(strings.is_hex_string('00f', 2))
        self.assertFalse(strings.is_hex_string(b'00ff', 2))


class TestUUIDs(unittest.TestCase):

    def testNewUUID(self):
        value = uuids.new_uuid()
        self.assertEqual(len(value), 36)
        self.assertEqual(value, value.upper())
        self.assertTrue(uuids.is_valid_uuid(value))
        self.assertNotEqual(value, uuids.new_uuid())

    def testInvalid(self):
        self.assertFalse(uuids.is_valid_uuid('not-a-uuid'))
        self.assertFalse(uuids.is_valid_uuid(uuids.new_uuid().lower()))
        self.assertFalse(uuids.is_valid_uuid(None))

    def testMatch(self):
        value = uuids.new_uuid()
        self.assertEqual(uuids.match_uuid('uid: %s.' % value), value)
        self.assertIsNone(uuids.match_uuid('nothing here'))


class TestUtility(unittest.TestCase):

    def testFirst(self):
        self.assertEqual(utility.first([3, 4]), 3)
        self.assertIsNone(utility.first([], None))
        with self.assertRaises(TooFewItemsError):
            utility.first([])

    def testFlatten(self):
        self.assertEqual(list(utility.flatten([['a', ['b']], 'cd', b'e'])), ['a', 'b', 'cd', b'e'])

    def testOnce(self):
        calls = []

        @utility.once
        def count():
            calls.append(None)
            return len(calls)

        self.assertEqual(count(), 1)
        self.assertEqual(count(), 1)
        count.reset()
        self.assertEqual(count(), 2)


if __name__ == '__main__':
    unittest.main()
