"""
Utility tests: the Unset sentinel and the small helpers shared across the package.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from lino.utils import Unset, UnsetType, freeze, mirror, missing, prefer, rename


class TestUnset(TestCase):

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFalseyAndPrintable(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})


class TestHelpers(TestCase):

    def testPreferSkipsNoneAndUnset(self):
        self.assertEqual(prefer(None, Unset, "=", " "), "=")
        self.assertEqual(prefer("", "="), "")
        self.assertEqual(prefer(None, default=" "), " ")

    def testMissing(self):
        for value in (None, Unset, "", (), [], {}):
            with self.subTest(value=value):
                self.assertTrue(missing(value))
        for value in (0, False, "x", ("a",)):
            with self.subTest(value=value):
                self.assertFalse(missing(value))

    def testFreeze(self):
        self.assertEqual(freeze([1, 2]), (1, 2))
        self.assertEqual(freeze(x for x in "ab"), ("a", "b"))
        self.assertIsInstance(freeze({"a": 1}), MappingProxyType)
        self.assertEqual(freeze({1, 2}), frozenset({1, 2}))
        self.assertEqual(freeze("abc"), "abc")

    def testMirror(self):
        class Holder:
            value = mirror("value")

            def __init__(self):
                self._value = 1

        holder = Holder()
        self.assertEqual(holder.value, 1)
        with self.assertRaises(AttributeError):
            holder.value = 2

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        with self.assertRaises(TypeError):
            rename(42, "name")


if __name__ == '__main__':
    unittest.main()
