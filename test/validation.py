"""
Validation module behavioral tests (kinds, choices, patterns, canonical forms).

Scope
- Validate bool/int/string kind rules and the optional-empty bypass.
- Validate choices and generic patterns.
- Validate the built-in email and phone patterns.
- Validate canonical storage forms.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from flagpole import EMAIL_PATTERN, PHONE_PATTERN, Flag, canonical, validate, validate_email
from flagpole.faults import InvalidValueError


class TestKinds(TestCase):
    """Behavioral tests for per-kind validation."""

    def assertRejected(self, flag, value, rule):
        with self.assertRaises(InvalidValueError, msg=value) as context:
            validate(flag, value, source="command line")
        self.assertEqual(context.exception.options["rule"], rule)
        self.assertEqual(context.exception.options["flag"], flag.name)
        self.assertEqual(context.exception.options["value"], value)
        self.assertEqual(context.exception.options["source"], "command line")

    def testBoolAcceptedForms(self):
        flag = Flag("verbose", "bool")
        for value in ("true", "false", "0", "1", "yes", "no", "TRUE", "No", "Yes"):
            validate(flag, value)

    def testBoolRejectedForms(self):
        flag = Flag("verbose", "bool")
        for value in ("on", "off", "y", "2", "", "truthy"):
            self.assertRejected(flag, value, "bool")

    def testIntAcceptedForms(self):
        flag = Flag("count", "int")
        for value in ("42", "-5", "+7", "0", "007"):
            validate(flag, value)

    def testIntRejectedForms(self):
        flag = Flag("count", "int")
        for value in ("abc", "1.5", "", " 1", "1e3", "--5", "5-"):
            self.assertRejected(flag, value, "int")

    def testStringAlwaysTypeValid(self):
        flag = Flag("name", "string")
        for value in ("", "hello world", "ünïcödé ✓", "with 'quotes' and \"doubles\"", "$HOME;rm -rf"):
            validate(flag, value)

    def testOptionalEmptyBypassesEveryCheck(self):
        validate(Flag("count", "int", required=False), "")
        validate(Flag("env", "string", choices=("dev", "prod"), required=False), "")
        validate(Flag("email", "string", pattern=EMAIL_PATTERN, required=False), "")

    def testEmptyIntRejectedWhenRequiredUndeclaredOrTrue(self):
        self.assertRejected(Flag("count", "int"), "", "int")
        self.assertRejected(Flag("count", "int", required=True), "", "int")

    def testChoicesAreExactAndCaseSensitive(self):
        flag = Flag("env", "string", choices=("dev", "prod"))
        validate(flag, "dev")
        self.assertRejected(flag, "DEV", "choices")
        self.assertRejected(flag, "staging", "choices")

    def testChoicesApplyAfterKind(self):
        flag = Flag("level", "int", choices=("1", "2", "3"))
        validate(flag, "2")
        self.assertRejected(flag, "x", "int")
        self.assertRejected(flag, "4", "choices")

    def testGenericPatternUsesSearch(self):
        flag = Flag("version", "string", pattern=r"[0-9]+\.[0-9]+")
        validate(flag, "v1.2-beta")
        self.assertRejected(flag, "latest", "pattern")

    def testAnchoredPattern(self):
        flag = Flag("tag", "string", pattern=r"^[a-z]+$")
        validate(flag, "release")
        self.assertRejected(flag, "Release", "pattern")

    def testNonStringValueRaisesTypeError(self):
        with self.assertRaises(TypeError):
            validate(Flag("count", "int"), 5)


class TestEmail(TestCase):
    """Behavioral tests for the built-in email pattern."""

    def testValidAddresses(self):
        flag = Flag("email", "string", pattern=EMAIL_PATTERN)
        for value in (
            "user@example.com",
            "first.last@example.co.uk",
            "user+tag@sub.example.org",
            "u_1%x@example-domain.io",
            "ab@cd.ef",
        ):
            validate(flag, value)
            self.assertIsNone(validate_email(value), value)

    def testInvalidAddresses(self):
        flag = Flag("email", "string", pattern=EMAIL_PATTERN)
        for value in (
            "user..name@example.com",
            "user@example..com",
            ".user@example.com",
            "user.@example.com",
            "-user@example.com",
            "user-@example.com",
            "user@-example.com",
            "user@example.com-",
            "user@.example.com",
            "user@example.c",
            "user@example",
            "userexample.com",
            "user@@example.com",
            "a@b@example.com",
            "@example.com",
            "user@",
        ):
            with self.assertRaises(InvalidValueError, msg=value) as context:
                validate(flag, value)
            self.assertEqual(context.exception.options["rule"], "pattern")
            self.assertIsNotNone(validate_email(value), value)

    def testSingleCharacterLocalPartRejected(self):
        # local part must start and end with an alphanumeric character
        self.assertIsNotNone(validate_email("a@example.com"))

    def testConsecutiveDotsReason(self):
        self.assertIn("consecutive dots", validate_email("a..b@example.com"))


class TestPhone(TestCase):
    """Behavioral tests for the built-in phone pattern."""

    def testPhoneFormat(self):
        flag = Flag("phone", "string", pattern=PHONE_PATTERN)
        validate(flag, "555-123-4567")
        for value in ("5551234567", "555-1234-567", "(555) 123-4567", "555-123-45678", "abc-def-ghij"):
            with self.assertRaises(InvalidValueError, msg=value):
                validate(flag, value)


class TestCanonical(TestCase):
    """Behavioral tests for canonical storage forms."""

    def testBoolCanonicalForms(self):
        flag = Flag("verbose", "bool")
        for value in ("true", "TRUE", "1", "yes", "Yes"):
            self.assertEqual(canonical(flag, value), "true")
        for value in ("false", "0", "no", "NO"):
            self.assertEqual(canonical(flag, value), "false")

    def testClearedBoolReadsFalse(self):
        self.assertEqual(canonical(Flag("verbose", "bool", required=False), ""), "false")

    def testOtherKindsUnchanged(self):
        self.assertEqual(canonical(Flag("count", "int"), "+7"), "+7")
        self.assertEqual(canonical(Flag("name", "string"), "Yes"), "Yes")


if __name__ == "__main__":
    unittest.main()
