"""
Faults module behavioral tests (payload, rendering, trigger).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from contextlib import redirect_stderr
from unittest import TestCase

from rich.console import Console

from flagpole.faults import (
    FaultCode,
    FlagException,
    InvalidValueError,
    MissingValueError,
    trigger,
)


class TestFaults(TestCase):
    """Behavioral tests for FlagException and trigger()."""

    def fault(self, **options):
        return InvalidValueError(
            "flag 'count' requires an integer value, got 'abc'",
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint="use a whole number",
            flag="count",
            value="abc",
            rule="int",
            **options,
        )

    def testMessageAndOptions(self):
        fault = self.fault()
        self.assertEqual(str(fault), "flag 'count' requires an integer value, got 'abc'")
        self.assertEqual(fault.options["rule"], "int")
        with self.assertRaises(TypeError):
            fault.options["rule"] = "bool"

    def testEmptyMessage(self):
        self.assertEqual(str(MissingValueError()), "")

    def testReplaceMergesOptions(self):
        fault = copy.replace(self.fault(), shell=True, rule="other")
        self.assertIsInstance(fault, InvalidValueError)
        self.assertTrue(fault.options["shell"])
        self.assertEqual(fault.options["rule"], "other")
        self.assertEqual(fault.options["flag"], "count")

    def testCodesAreGroupedAndStable(self):
        self.assertEqual(FaultCode.INVALID_FLAG_NAME, 11101)
        self.assertEqual(FaultCode.INVALID_VALUE, 11131)
        self.assertEqual(FaultCode.MUTEX_VIOLATION, 11141)
        self.assertEqual(FaultCode.INVALID_VALUE.normalize(), "11131")
        self.assertEqual(len(set(FaultCode)), len(FaultCode.__members__))

    def testRichRendering(self):
        console = Console(record=True, width=100, color_system=None)
        console.print(self.fault(colorful=False))
        output = console.export_text()
        self.assertIn("11131", output)
        self.assertIn("Invalid Value", output)
        self.assertIn("requires an integer value", output)
        self.assertIn("use a whole number", output)

    def testFancyRendering(self):
        console = Console(record=True, width=100, color_system=None)
        console.print(self.fault(colorful=False, fancy=True))
        self.assertIn("╭", console.export_text())

    def testTriggerRaisesOutsideShell(self):
        with self.assertRaises(InvalidValueError) as context:
            trigger(self.fault(), context="ctx")
        self.assertEqual(context.exception.options["context"], "ctx")

    def testTriggerExitsInShell(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            trigger(self.fault(), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        self.assertIn("requires an integer value", stderr.getvalue())

    def testTriggerRejectsOtherObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testBaseClass(self):
        self.assertTrue(issubclass(InvalidValueError, FlagException))
        self.assertTrue(issubclass(FlagException, Exception))


if __name__ == "__main__":
    unittest.main()
