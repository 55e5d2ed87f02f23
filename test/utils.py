"""
Tests for the shared building blocks.

Scope
- Unset sentinel identity, falsiness, repr and finality.
- coalesce() only swapping Unset.
- rename() in both call forms.
- mirror() returning detached copies.
- ordinal() labels.
- IntrospectableType shared by formats and commands.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from commandeer.commands import Application
from commandeer.formats import CommandOption
from commandeer.utils import *
from commandeer.utils import IntrospectableType


class UnsetTest(TestCase):
    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(type(Unset)(), Unset)

    def testFalsyAndRepr(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")
        self.assertNotEqual(Unset, None)

    def testCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA
                pass

    def testUsableInTypeUnions(self):
        self.assertIsInstance("x", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class CoalesceTest(TestCase):
    def testReplacesUnsetOnly(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce("", "x"), "")


class RenameTest(TestCase):
    def testDirectForm(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual(function.__name__, "renamed")
        self.assertEqual(function.__qualname__, "renamed")

    def testDecoratorForm(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(1, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 1)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):
    def testReturnsDetachedCopies(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, [2]]

        holder = Holder()
        items = holder.items
        items.append(3)
        items[1].append(4)
        self.assertEqual(holder.items, [1, [2]])

    def testIsReadOnly(self):
        class Holder:
            name = mirror("name")

            def __init__(self):
                self._name = "x"

        with self.assertRaises(AttributeError):
            Holder().name = "y"


class OrdinalTest(TestCase):
    def testWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")


class IntrospectableTypeTest(TestCase):
    def setUp(self):
        class SampleHolder(metaclass=IntrospectableType):
            __introspectable__ = ("name", "tags")
            __displayable__ = ("name",)

            def __init__(self, name, tags):
                self._name = name
                self._tags = tags

        self.holder = SampleHolder("x", ["a"])

    def testTypename(self):
        self.assertEqual(type(self.holder).__typename__, "sample-holder")

    def testMirrors(self):
        self.assertEqual(self.holder.name, "x")
        self.holder.tags.append("b")
        self.assertEqual(self.holder.tags, ["a"])
        with self.assertRaises(AttributeError):
            self.holder.name = "y"

    def testRepr(self):
        self.assertEqual(repr(self.holder), "sample-holder(name='x')")

    def testSharedByFormatsAndCommands(self):
        self.assertIs(type(CommandOption), IntrospectableType)
        self.assertIs(type(Application), IntrospectableType)


if __name__ == "__main__":
    unittest.main()
