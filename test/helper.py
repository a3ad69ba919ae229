"""
Helper module behavioral tests (help screen content).

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with a recording rich Console, without colors.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from rich.console import Console

from flagpole import EMAIL_PATTERN, Context, render_help


class TestRenderHelp(TestCase):
    """Behavioral tests for render_help()."""

    def setUp(self):
        self.context = Context("deploy")
        self.context.describe(
            "Deploy a release.",
            examples=("deploy -v app.tar.gz", "deploy --env prod app.tar.gz"),
        )
        self.context.register("verbose", "bool", "print every step", shorthand="v")
        self.context.register("dry-run", "bool", "show what would change")
        self.context.register("force", "bool", "skip confirmations")
        self.context.register("env", "string", "target environment", default="dev", choices=("dev", "prod"))
        self.context.register("replicas", "int", "replica count", env="REPLICAS", group="scaling", required=True)
        self.context.register("email", "string", pattern=EMAIL_PATTERN)
        self.context.register("secret", "string", "not shown", hidden=True)
        self.context.mutex("dry-run", "force")
        self.context.require(1, "release archive")
        self.context.configure("/etc/deploy.conf")

    def render(self, **options):
        console = Console(record=True, width=120, color_system=None)
        render_help(self.context, console=console, colorful=False, **options)
        return console.export_text()

    def testUsageDefaultsToProgramPattern(self):
        self.assertIn("usage: deploy [options] [arguments]", self.render())

    def testExplicitUsage(self):
        context = Context("other")
        context.describe(usage="other FILE...")
        console = Console(record=True, width=80, color_system=None)
        render_help(context, console=console, colorful=False)
        self.assertIn("usage: other FILE...", console.export_text())

    def testDescriptionAndConfig(self):
        output = self.render()
        self.assertIn("Deploy a release.", output)
        self.assertIn("config file: /etc/deploy.conf", output)

    def testFlagsAndMeta(self):
        output = self.render()
        self.assertIn("-v, --verbose", output)
        self.assertIn("print every step", output)
        self.assertIn("--env <string>", output)
        self.assertIn("default: dev", output)
        self.assertIn("must be one of: dev, prod", output)
        self.assertIn("(required, int, env: REPLICAS)", output)
        self.assertIn("pattern:", output)

    def testGroupsOrderOptionsLast(self):
        output = self.render()
        self.assertLess(output.index("scaling:"), output.index("options:"))
        self.assertLess(output.index("--replicas"), output.index("--verbose"))

    def testHiddenFlagsSkipped(self):
        self.assertNotIn("--secret", self.render())

    def testConstraintSections(self):
        output = self.render()
        self.assertIn("at least 1 argument required: release archive", output)
        self.assertIn("mutually exclusive flags:", output)
        self.assertIn("--dry-run, --force", output)

    def testExamples(self):
        output = self.render()
        self.assertIn("examples:", output)
        self.assertIn("deploy --env prod app.tar.gz", output)

    def testFancyPanel(self):
        self.assertIn("DEPLOY HELP", self.render(fancy=True))


if __name__ == "__main__":
    unittest.main()
