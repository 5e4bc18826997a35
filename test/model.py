# python
"""
Value model behavioral tests.

Scope
- Validate rendering of every component (Argument, Flag, Option, EnvironmentVariable,
  Subcommand) in both array and string form.
- Validate CommandLine anchor ordering, empty-anchor elision, and env() extraction.
- Validate structural equality, hashing, and the generated reprs.

Conventions
- Test method names follow CamelCase per project convention.
- Executors are injected explicitly; the process-wide configuration is never consulted.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from lino import (
    Argument,
    CommandLine,
    EnvironmentVariable,
    Flag,
    MockExecutor,
    Option,
    Placement,
    Subcommand,
    quote,
)


class TestQuote(TestCase):
    """Literal character wrapping used by string rendering."""

    def testQuoteWrapsValue(self):
        self.assertEqual(quote("a b", '"'), '"a b"')

    def testQuoteEscapesQuotingCharacter(self):
        self.assertEqual(quote('say "hi"', '"'), '"say \\"hi\\""')

    def testQuoteWithoutCharacterReturnsString(self):
        self.assertEqual(quote(42, None), "42")
        self.assertEqual(quote("a b", ""), "a b")


class TestComponents(TestCase):
    """Rendering of individual command-line components."""

    def testArgumentStringifiesAtRenderTime(self):
        self.assertEqual(Argument(5).string(), "5")
        self.assertEqual(Argument(True).array(), ["True"])

    def testFlagDefaultsToAfterCommand(self):
        self.assertIs(Flag("-v").placement, Placement.AFTER_COMMAND)
        self.assertEqual(Flag("-v").array(), ["-v"])

    def testFlagAcceptsPlacementValue(self):
        self.assertIs(Flag("-v", placement="after_arguments").placement, Placement.AFTER_ARGUMENTS)

    def testFlagRejectsUnknownPlacement(self):
        with self.assertRaises(ValueError):
            Flag("-v", placement="nowhere")

    def testOptionSpaceSeparatorSplitsTokens(self):
        option = Option("--opt", "val")
        self.assertEqual(option.string(), "--opt val")
        self.assertEqual(option.array(), ["--opt", "val"])

    def testOptionOtherSeparatorJoinsToken(self):
        option = Option("--opt", "val", separator="=")
        self.assertEqual(option.string(), "--opt=val")
        self.assertEqual(option.array(), ["--opt=val"])

    def testOptionNoneSeparatorFallsBackToSpace(self):
        self.assertEqual(Option("--opt", "val", separator=None).separator, " ")

    def testOptionQuotingOnlyAffectsString(self):
        option = Option("--message", 'say "hi"', quoting='"')
        self.assertEqual(option.string(), '--message "say \\"hi\\""')
        self.assertEqual(option.array(), ["--message", 'say "hi"'])
        self.assertNotIn('\\', "".join(option.array()))

    def testEnvironmentVariableAlwaysQuotedInString(self):
        variable = EnvironmentVariable("X", 1)
        self.assertEqual(variable.string(), 'X="1"')
        self.assertEqual(variable.array(), ["X", "1"])

    def testEnvironmentVariableCustomQuoting(self):
        self.assertEqual(EnvironmentVariable("X", "a b", quoting="'").string(), "X='a b'")

    def testSubcommandRendersOwnOptions(self):
        subcommand = Subcommand("sub", options=[Option("--o", "v"), Flag("-f")])
        self.assertEqual(subcommand.string(), "sub --o v -f")
        self.assertEqual(subcommand.array(), ["sub", "--o", "v", "-f"])

    def testStrIsStringForm(self):
        self.assertEqual(str(Option("--opt", "val", separator="=")), "--opt=val")


class TestCommandLine(TestCase):
    """Assembly of the root aggregate."""

    def setUp(self):
        self.executor = MockExecutor()

    def line(self, command="cmd", **state):
        return CommandLine(command, executor=self.executor, **state)

    def testCommandOnly(self):
        self.assertEqual(self.line().array(), ["cmd"])
        self.assertEqual(self.line().string(), "cmd")

    def testAnchorOrdering(self):
        line = self.line(
            subcommands=[Subcommand("sub", options=[Option("--s", "1")])],
            options=[
                Option("--last", "z", placement=Placement.AFTER_ARGUMENTS),
                Flag("-m", placement=Placement.AFTER_SUBCOMMANDS),
                Flag("-f"),
            ],
            arguments=[Argument("file.txt")],
            environment_variables=[EnvironmentVariable("X", "1")],
        )
        self.assertEqual(line.array(), ["cmd", "-f", "sub", "--s", "1", "-m", "file.txt", "--last", "z"])
        self.assertEqual(line.string(), 'X="1" cmd -f sub --s 1 -m file.txt --last z')

    def testEnvironmentVariablesNeverInArray(self):
        line = self.line(environment_variables=[EnvironmentVariable("X", "1")])
        self.assertEqual(line.array(), ["cmd"])
        self.assertEqual(line.string(), 'X="1" cmd')

    def testEmptyAnchorsLeaveNoStraySpaces(self):
        line = self.line(arguments=[Argument("a")], options=[Flag("-z", placement="after_arguments")])
        self.assertEqual(line.string(), "cmd a -z")
        self.assertFalse(line.string().startswith(" "))

    def testEmptyCommandRendersNothing(self):
        self.assertEqual(self.line("").array(), [])
        self.assertEqual(self.line("").string(), "")

    def testEnvUsesRawValuesAndLaterWins(self):
        line = self.line(environment_variables=[
            EnvironmentVariable("A", "1"),
            EnvironmentVariable("B", "two words", quoting="'"),
            EnvironmentVariable("A", "2"),
        ])
        self.assertEqual(line.env(), {"A": "2", "B": "two words"})

    def testEnvIsFreshMapping(self):
        line = self.line(environment_variables=[EnvironmentVariable("A", "1")])
        line.env()["A"] = "mutated"
        self.assertEqual(line.env(), {"A": "1"})

    def testExecuteDelegatesToExecutor(self):
        line = self.line(arguments=[Argument("x")])
        line.execute(stdout=None)
        self.assertEqual(len(self.executor.calls), 1)
        self.assertEqual(self.executor.calls[0].command_line, line)
        self.assertEqual(self.executor.calls[0].options, {"stdout": None})


class TestEquality(TestCase):
    """Structural equality and hashing."""

    def testComponentsCompareByFields(self):
        self.assertEqual(Option("--a", "1", separator="="), Option("--a", "1", separator="="))
        self.assertNotEqual(Option("--a", "1"), Option("--a", "1", separator="="))
        self.assertEqual(hash(Flag("-v")), hash(Flag("-v")))

    def testEqualValuesOfDifferentTypesAreNotEqual(self):
        self.assertNotEqual(Argument(0), Argument(False))
        self.assertNotEqual(Argument(1), Argument(1.0))
        self.assertNotEqual(Option("--n", 1), Option("--n", True))
        self.assertNotEqual(
            CommandLine("cmd", arguments=[Argument(0)], executor=MockExecutor()),
            CommandLine("cmd", arguments=[Argument(False)], executor=MockExecutor()),
        )
        self.assertEqual(len({Argument(0), Argument(False), Argument(0.0)}), 3)

    def testDifferentTypesAreNotEqual(self):
        self.assertNotEqual(Argument("-v"), Flag("-v"))

    def testCommandLinesCompareStructurally(self):
        first = CommandLine("cmd", arguments=[Argument("x")], executor=MockExecutor())
        second = CommandLine("cmd", arguments=(Argument("x"),), executor=MockExecutor())
        self.assertEqual(first, second)
        self.assertEqual(hash(first), hash(second))

    def testFieldsAreReadOnly(self):
        with self.assertRaises(AttributeError):
            Option("--a", "1").value = "2"

    def testRepr(self):
        self.assertEqual(repr(Argument("x")), "argument(argument='x')")
        self.assertEqual(
            repr(Flag("-v")),
            "flag(flag='-v', placement=<Placement.AFTER_COMMAND: 'after_command'>)",
        )


if __name__ == '__main__':
    # Allow running this test module directly: `python -m pytest` or `python model.py`.
    unittest.main()
