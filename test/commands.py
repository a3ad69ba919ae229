"""
Commands module behavioral tests (module-level API and parse()).

Scope
- Validate that module-level helpers act on the current context.
- Validate parse() help handling in shell and non-shell modes.
- Validate fault handling: re-raise, fallback, rendered exit.

Conventions
- Test method names follow CamelCase per project convention.
- stdout/stderr are captured; shell-mode exits surface as SystemExit.
"""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase

from flagpole import (
    create_context,
    current,
    destroy_context,
    describe,
    fallback,
    get,
    mutex,
    parse,
    positionals,
    register,
    registered,
    require,
    resolution,
)
from flagpole.faults import ContextNotFoundError, MutexViolationError, UnknownFlagError


class TestFrontEnd(TestCase):
    """Behavioral tests for the module-level API."""

    def setUp(self):
        self.context = create_context("cli")

    def tearDown(self):
        for name in registered():
            destroy_context(name)

    def testRegisterTargetsCurrentContext(self):
        flag = register("verbose", "bool", "be chatty", shorthand="v")
        self.assertIs(self.context["verbose"], flag)

    def testRegisterAutoCreatesContext(self):
        destroy_context("cli")
        register("verbose", "bool")
        self.assertIn("verbose", current())
        self.assertEqual(len(registered()), 1)

    def testAccessorsNeedAContext(self):
        destroy_context("cli")
        with self.assertRaises(ContextNotFoundError):
            get("verbose")

    def testParseAndRead(self):
        register("verbose", "bool", shorthand="v")
        register("count", "int", default=1)
        require(1, "inputs")
        result = parse(["-v", "--count", "3", "in.txt"], shell=False, environ={})
        self.assertEqual(result["count"], "3")
        self.assertEqual(get("verbose"), "true")
        self.assertEqual(positionals(), ("in.txt",))
        self.assertEqual(resolution(), result)

    def testParseNonShellReraises(self):
        register("start", "bool")
        register("stop", "bool")
        mutex("start", "stop")
        with self.assertRaises(MutexViolationError) as context:
            parse(["--start", "--stop"], shell=False, environ={})
        self.assertIs(context.exception.options["context"], self.context)
        self.assertFalse(context.exception.options["shell"])

    def testParseShellExitsWithFault(self):
        register("verbose", "bool")
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parse(["--verbos"], shell=True, colorful=False, environ={})
        self.assertEqual(context.exception.code, 1)
        output = stderr.getvalue()
        self.assertIn("Unknown Flag", output)
        self.assertIn("--verbos", output)
        self.assertIn("usage:", output)

    def testParseFallbackReceivesFault(self):
        received = []
        register("verbose", "bool")

        @fallback
        def handler(fault):
            received.append(fault)

        self.assertIsNone(parse(["--nope"], shell=False, environ={}))
        self.assertEqual(len(received), 1)
        self.assertIsInstance(received[0], UnknownFlagError)
        self.assertIs(received[0].options["context"], self.context)

    def testParseHelpNonShellReturns(self):
        describe("Test tool.")
        register("verbose", "bool", "be chatty")
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            result = parse(["--help"], shell=False, colorful=False, environ={})
        self.assertTrue(result.helped)
        self.assertIn("Test tool.", stdout.getvalue())
        self.assertIn("--verbose", stdout.getvalue())

    def testParseHelpShellExitsZero(self):
        register("verbose", "bool")
        stdout = io.StringIO()
        with redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            parse(["-h"], shell=True, colorful=False, environ={})
        self.assertEqual(context.exception.code, 0)
        self.assertIn("usage:", stdout.getvalue())


if __name__ == "__main__":
    unittest.main()
