"""
Tests for value coercion.

Scope
- Nullable handling shared by every parser ("null" and None).
- String, boolean, integer and float literals.
- Failures raising ValueError.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from commandeer.values import *


class ParseStringTest(TestCase):
    def testNullable(self):
        self.assertIsNone(parse_string(None))
        self.assertIsNone(parse_string("null"))

    def testNotNullableSpellsLiterals(self):
        self.assertEqual(parse_string(None, False), "null")
        self.assertEqual(parse_string("null", False), "null")
        self.assertEqual(parse_string(True, False), "true")
        self.assertEqual(parse_string(False, False), "false")
        self.assertEqual(parse_string(12, False), "12")


class ParseBooleanTest(TestCase):
    def testLiterals(self):
        for value in ("true", "1", "yes", "on"):
            self.assertIs(parse_boolean(value, False), True)
        for value in ("false", "0", "no", "off", ""):
            self.assertIs(parse_boolean(value, False), False)

    def testBooleansPassThrough(self):
        self.assertIs(parse_boolean(True, False), True)
        self.assertIs(parse_boolean(False, False), False)

    def testZeroAndOne(self):
        self.assertIs(parse_boolean(1, False), True)
        self.assertIs(parse_boolean(0, False), False)

    def testNullable(self):
        self.assertIsNone(parse_boolean("null"))
        with self.assertRaises(ValueError):
            parse_boolean("null", False)

    def testRejectsOtherValues(self):
        for value in ("maybe", "TRUE", 2, -1, None):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_boolean(value, False)


class ParseIntegerTest(TestCase):
    def testNumbers(self):
        self.assertEqual(parse_integer("7", False), 7)
        self.assertEqual(parse_integer("-3", False), -3)
        self.assertEqual(parse_integer("7.9", False), 7)
        self.assertEqual(parse_integer("1e3", False), 1000)
        self.assertEqual(parse_integer(4.2, False), 4)
        self.assertEqual(parse_integer(True, False), 1)

    def testRejectsText(self):
        for value in ("x", "7a", "", None):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_integer(value, False)

    def testRejectsOutOfRange(self):
        for value in ("1e400", "-1e400", float("inf")):
            with self.subTest(value=value), self.assertRaises(ValueError):
                parse_integer(value, False)

    def testNullable(self):
        self.assertIsNone(parse_integer("null", True))


class ParseFloatTest(TestCase):
    def testNumbers(self):
        self.assertEqual(parse_float("1.5", False), 1.5)
        self.assertEqual(parse_float(".5", False), 0.5)
        self.assertEqual(parse_float("2", False), 2.0)
        self.assertEqual(parse_float(3, False), 3.0)

    def testRejectsText(self):
        with self.assertRaises(ValueError):
            parse_float("one", False)

    def testNullable(self):
        self.assertIsNone(parse_float(None, True))


if __name__ == "__main__":
    unittest.main()
