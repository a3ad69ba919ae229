"""
Tests for the utility helpers and the Unset sentinel.

This module verifies:
- Singleton identity, falsiness and finality of Unset.
- coalesce() only replaces the sentinel.
- mirror() properties are read-only and return copies.
- pluralize() for the words used in messages.
"""
import copy
import unittest
from unittest import TestCase

from flagpole.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `UnsetType` singleton.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFalsyButDistinct(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, "")
        self.assertEqual(repr(Unset), "Unset")

    def testUnionInIsinstance(self):
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertTrue(isinstance("x", str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testFinal(self):
        with self.assertRaises(TypeError):
            type("Sub", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename(), mirror() and pluralize().
    """

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertIs(coalesce(False, True), False)

    def testRenameDecorator(self):
        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__name__, "decorated")
        self.assertEqual(other.__qualname__, "decorated")
        with self.assertRaises(TypeError):
            rename(other, "renamed")
        with self.assertRaises(TypeError):
            rename(42)
        with self.assertRaises(TypeError):
            rename("decorated")("not callable")

    def testMirrorIsReadOnlyAndCopies(self):
        class Record:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", "b"]

        record = Record()
        self.assertEqual(record.items, ("a", "b"))
        with self.assertRaises(AttributeError):
            record.items = ()
        self.assertEqual(record._items, ["a", "b"])

    def testPluralize(self):
        self.assertEqual(pluralize("flag"), "flags")
        self.assertEqual(pluralize("flag", 1), "flag")
        self.assertEqual(pluralize("flag", 0), "flags")
        self.assertEqual(pluralize("positional argument", 3), "positional arguments")
        self.assertEqual(pluralize("entry", 2), "entries")


if __name__ == "__main__":
    unittest.main()
