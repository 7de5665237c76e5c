"""
Scanner behavioral tests (token shapes, commands, terminator, faults).

Scope
- Every token shape: --name, --name value, --name=value, -x, -x value, -x=value,
  -xyz=value, -xvalue, -xyz, positional leftovers and the -- terminator.
- Command detection on the first token only, with and without `required`.
- Fault classification, positions and fail-fast behavior.
- Input normalization (iterables, shell-like strings) and result ownership.

Conventions
- Test method names follow CamelCase per project convention.
- Registries are rebuilt for every test; the scanner never mutates them.
"""
import unittest
from unittest import TestCase

from argscan import (
    Registry,
    Scanner,
    ParseResult,
    parse,
    ParseError,
    MissingCommandError,
    UnknownArgumentError,
    InvalidArgumentError,
    MissingValueError,
    InvalidValueError,
    FaultCode,
)


def _registry(**options):
    registry = Registry("test", **options)
    registry.add_flag("flag01")
    registry.add_flag("flag02", "", "f")
    registry.add_flag("flag03", "", "F")
    registry.add_flag("flag04")
    registry.add_option("op01")
    registry.add_option("op02", "", "O")
    registry.add_option("op03", "", "", "", ("10", "20", "30"))
    registry.add_option("op04", "", "o", "hello")
    registry.add_option("level", "", "l", "1", ("1", "2", "3"))
    return registry


def _commands(**options):
    registry = _registry(**options)
    registry.add_command("cmd01")
    registry.add_command("cmd02")
    return registry


class TestDefaults(TestCase):
    """Absent flags are False, absent options take their defaults."""

    def testEmptyInput(self):
        result = parse(_registry(), [])
        self.assertEqual(result.flags, {"flag01": False, "flag02": False, "flag03": False, "flag04": False})
        self.assertEqual(result.options, {"op01": "", "op02": "", "op03": "", "op04": "hello", "level": "1"})
        self.assertEqual(result.command, "")
        self.assertEqual(result.positional, [])

    def testResultIsAParseResult(self):
        result = parse(_registry(), ["x"])
        self.assertIsInstance(result, ParseResult)
        flags, options, command, positional = result
        self.assertEqual(positional, ["x"])


class TestLongForms(TestCase):

    def testFlags(self):
        result = parse(_registry(), ["--flag01", "-fF"])
        self.assertTrue(result.flags["flag01"])
        self.assertTrue(result.flags["flag02"])
        self.assertTrue(result.flags["flag03"])
        self.assertFalse(result.flags["flag04"])

    def testOptions(self):
        result = parse(_registry(), ["--op01", "a", "-O", "b", "--op03=10"])
        self.assertEqual(result.options["op01"], "a")
        self.assertEqual(result.options["op02"], "b")
        self.assertEqual(result.options["op03"], "10")
        self.assertEqual(result.options["op04"], "hello")

    def testSpacedValueValidated(self):
        with self.assertRaises(InvalidValueError) as context:
            parse(_registry(), ["--op03", "40"])
        self.assertIs(context.exception.code, FaultCode.INVALID_VALUE)
        self.assertEqual(context.exception.options["value"], "40")
        self.assertEqual(context.exception.options["allowed"], ("10", "20", "30"))

    def testInlineValueValidated(self):
        with self.assertRaises(InvalidValueError):
            parse(_registry(), ["--op03=40"])

    def testEmptyAllowedAcceptsAnything(self):
        result = parse(_registry(), ["--op01", "whatever", "--op02=anything"])
        self.assertEqual(result.options["op01"], "whatever")
        self.assertEqual(result.options["op02"], "anything")

    def testInlineValueMayStartWithDash(self):
        result = parse(_registry(), ["--op01=-x"])
        self.assertEqual(result.options["op01"], "-x")

    def testInlineValueKeepsLaterEquals(self):
        result = parse(_registry(), ["--op01=a=b"])
        self.assertEqual(result.options["op01"], "a=b")

    def testEmptyInlineValue(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["--op01="])

    def testMissingValueAtEnd(self):
        with self.assertRaises(MissingValueError) as context:
            parse(_registry(), ["--op01"])
        self.assertIs(context.exception.code, FaultCode.MISSING_VALUE)

    def testMissingValueBeforeDashToken(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["--op01", "--flag01"])
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["--op01", "-"])

    def testEmptyNextTokenIsAValue(self):
        result = parse(_registry(), ["--op01", "", "rest"])
        self.assertEqual(result.options["op01"], "")
        self.assertEqual(result.positional, ["rest"])

    def testEmptyNextTokenSkipsValidation(self):
        result = parse(_registry(), ["--op03", ""])
        self.assertEqual(result.options["op03"], "")

    def testUnknownName(self):
        with self.assertRaises(UnknownArgumentError) as context:
            parse(_registry(), ["--flg01"])
        self.assertEqual(context.exception.options["name"], "flg01")
        self.assertEqual(context.exception.options["suggestions"][0], "flag01")
        self.assertIn("--flag01", context.exception.hint)

    def testUnknownInlineName(self):
        with self.assertRaises(UnknownArgumentError):
            parse(_registry(), ["--nope=1"])

    def testFlagCannotTakeInlineValue(self):
        with self.assertRaises(UnknownArgumentError):
            parse(_registry(), ["--flag01=yes"])

    def testCommandNameIsNotASwitch(self):
        with self.assertRaises(UnknownArgumentError):
            parse(_commands(), ["--cmd01"])

    def testLastOccurrenceWins(self):
        result = parse(_registry(), ["--op01", "a", "--op01=b", "-O", "c", "-Od"])
        self.assertEqual(result.options["op01"], "b")
        self.assertEqual(result.options["op02"], "d")

    def testRepeatedFlag(self):
        result = parse(_registry(), ["--flag01", "--flag01"])
        self.assertTrue(result.flags["flag01"])


class TestShortForms(TestCase):

    def testShortFlag(self):
        result = parse(_registry(), ["-f"])
        self.assertTrue(result.flags["flag02"])

    def testShortOptionTakesNextToken(self):
        result = parse(_registry(), ["-o", "world", "tail"])
        self.assertEqual(result.options["op04"], "world")
        self.assertEqual(result.positional, ["tail"])

    def testShortOptionEmptyNextToken(self):
        result = parse(_registry(), ["-o", ""])
        self.assertEqual(result.options["op04"], "")

    def testShortOptionMissingValue(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["-o"])
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["-o", "-f"])

    def testShortOptionValueValidated(self):
        with self.assertRaises(InvalidValueError):
            parse(_registry(), ["-l", "9"])

    def testShortUnknown(self):
        with self.assertRaises(InvalidArgumentError) as context:
            parse(_registry(), ["-z"])
        self.assertEqual(context.exception.options["abbreviation"], "z")
        self.assertIs(context.exception.code, FaultCode.INVALID_ARGUMENT)

    def testShortEquals(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-="])

    def testShortInlineValue(self):
        result = parse(_registry(), ["-o=hi", "-l=2"])
        self.assertEqual(result.options["op04"], "hi")
        self.assertEqual(result.options["level"], "2")

    def testShortInlineValueValidated(self):
        with self.assertRaises(InvalidValueError):
            parse(_registry(), ["-l=9"])

    def testShortInlineEmptyValue(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["-o="])

    def testShortInlineRequiresOption(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-f=1"])
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-z=1"])

    def testEqualsRightAfterDash(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-=value"])

    def testCombinedFlagsAndInlineOption(self):
        result = parse(_registry(), ["-Fo=hi"])
        self.assertTrue(result.flags["flag03"])
        self.assertFalse(result.flags["flag02"])
        self.assertEqual(result.options["op04"], "hi")

    def testCombinedSeveralFlagsAndInlineOption(self):
        result = parse(_registry(), ["-fFl=3"])
        self.assertTrue(result.flags["flag02"])
        self.assertTrue(result.flags["flag03"])
        self.assertEqual(result.options["level"], "3")

    def testCombinedValueValidated(self):
        with self.assertRaises(InvalidValueError):
            parse(_registry(), ["-fl=9"])

    def testCombinedEmptyValue(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["-Fo="])

    def testCombinedUnknownFlag(self):
        with self.assertRaises(InvalidArgumentError) as context:
            parse(_registry(), ["-zo=hi"])
        self.assertEqual(context.exception.options["abbreviation"], "z")

    def testCombinedLastCharacterMustBeOption(self):
        with self.assertRaises(InvalidArgumentError) as context:
            parse(_registry(), ["-fF=hi"])
        self.assertEqual(context.exception.options["abbreviation"], "F")

    def testCombinedOptionBeforeLastIsRejected(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-oF=hi"])

    def testAttachedValue(self):
        result = parse(_registry(), ["-Otest"])
        self.assertEqual(result.options["op02"], "test")

    def testAttachedValueSkipsValidation(self):
        result = parse(_registry(), ["-l9"])
        self.assertEqual(result.options["level"], "9")

    def testAttachedValueMayLookLikeFlags(self):
        result = parse(_registry(), ["-of"])
        self.assertEqual(result.options["op04"], "f")
        self.assertFalse(result.flags["flag02"])

    def testFlagCluster(self):
        result = parse(_registry(), ["-fF"])
        self.assertTrue(result.flags["flag02"])
        self.assertTrue(result.flags["flag03"])

    def testFlagClusterWithUnknown(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-fz"])

    def testFlagClusterWithOptionInside(self):
        with self.assertRaises(InvalidArgumentError):
            parse(_registry(), ["-fo"])


class TestCommands(TestCase):

    def testFirstTokenCommand(self):
        result = parse(_commands(), ["cmd01"])
        self.assertEqual(result.command, "cmd01")
        self.assertEqual(result.positional, [])

    def testCommandOnlyOnFirstToken(self):
        result = parse(_commands(), ["x", "cmd01"])
        self.assertEqual(result.command, "")
        self.assertEqual(result.positional, ["x", "cmd01"])

    def testSecondCommandIsPositional(self):
        result = parse(_commands(), ["cmd01", "cmd02"])
        self.assertEqual(result.command, "cmd01")
        self.assertEqual(result.positional, ["cmd02"])

    def testFirstTokenFallsThrough(self):
        result = parse(_commands(), ["--flag01", "cmd01"])
        self.assertEqual(result.command, "")
        self.assertTrue(result.flags["flag01"])
        self.assertEqual(result.positional, ["cmd01"])

    def testRequiredCommandMissing(self):
        with self.assertRaises(MissingCommandError) as context:
            parse(_commands(required=True), ["cmd03"])
        self.assertIs(context.exception.code, FaultCode.MISSING_COMMAND)
        self.assertEqual(context.exception.options["index"], 1)
        self.assertCountEqual(context.exception.options["suggestions"], ["cmd01", "cmd02"])

    def testRequiredCommandBeforeFlags(self):
        with self.assertRaises(MissingCommandError):
            parse(_commands(required=True), ["--flag01", "cmd01"])

    def testRequiredCommandPresent(self):
        result = parse(_commands(required=True), ["cmd02", "--flag01"])
        self.assertEqual(result.command, "cmd02")
        self.assertTrue(result.flags["flag01"])

    def testRequiredCommandEmptyInput(self):
        result = parse(_commands(required=True), [])
        self.assertEqual(result.command, "")

    def testRequiredIgnoredWithoutCommands(self):
        result = parse(_registry(required=True), ["x"])
        self.assertEqual(result.positional, ["x"])

    def testEverything(self):
        result = parse(_commands(), [
            "cmd02", "--flag01", "-f", "uwu", "-Otest",
            "--op01", "a", "owo", "-Fo=hi",
        ])
        self.assertEqual(result.command, "cmd02")
        self.assertTrue(result.flags["flag01"])
        self.assertTrue(result.flags["flag02"])
        self.assertTrue(result.flags["flag03"])
        self.assertFalse(result.flags["flag04"])
        self.assertEqual(result.options["op01"], "a")
        self.assertEqual(result.options["op02"], "test")
        self.assertEqual(result.options["op03"], "")
        self.assertEqual(result.options["op04"], "hi")
        self.assertEqual(result.positional, ["uwu", "owo"])


class TestPositionals(TestCase):

    def testLeftovers(self):
        registry = Registry()
        registry.add_flag("flag")
        result = parse(registry, ["hello", "--flag", "world"])
        self.assertEqual(result.positional, ["hello", "world"])
        self.assertTrue(result.flags["flag"])

    def testOddShapesArePositional(self):
        result = parse(_registry(), ["-", "", "x", "a-b", "x=y"])
        self.assertEqual(result.positional, ["-", "", "x", "a-b", "x=y"])

    def testDuplicatesPreserved(self):
        result = parse(_registry(), ["a", "b", "a"])
        self.assertEqual(result.positional, ["a", "b", "a"])

    def testTerminator(self):
        result = parse(_registry(), ["a", "--", "--flag01", "-f", "--nope", "--", "b"])
        self.assertEqual(result.positional, ["a", "--flag01", "-f", "--nope", "--", "b"])
        self.assertFalse(result.flags["flag01"])
        self.assertFalse(result.flags["flag02"])

    def testTerminatorAfterCommand(self):
        result = parse(_commands(), ["cmd01", "--", "cmd02"])
        self.assertEqual(result.command, "cmd01")
        self.assertEqual(result.positional, ["cmd02"])

    def testTerminatorFirstWithCommands(self):
        result = parse(_commands(), ["--", "cmd01"])
        self.assertEqual(result.command, "")
        self.assertEqual(result.positional, ["cmd01"])

    def testTerminatorIsNotAValue(self):
        with self.assertRaises(MissingValueError):
            parse(_registry(), ["--op01", "--", "x"])


class TestInputsAndOwnership(TestCase):

    def testShellString(self):
        result = parse(_registry(), "--op01 'a b' rest")
        self.assertEqual(result.options["op01"], "a b")
        self.assertEqual(result.positional, ["rest"])

    def testAnyIterable(self):
        result = parse(_registry(), iter(("x", "-f")))
        self.assertEqual(result.positional, ["x"])
        self.assertTrue(result.flags["flag02"])

    def testTokensAreNotTrimmed(self):
        result = parse(_registry(), [" x "])
        self.assertEqual(result.positional, [" x "])

    def testRejectsNonStringTokens(self):
        with self.assertRaises(TypeError):
            parse(_registry(), ["a", 1])
        with self.assertRaises(TypeError):
            parse(_registry(), 5)

    def testScannerRequiresRegistry(self):
        with self.assertRaises(TypeError):
            Scanner(object())

    def testResultsAreIndependent(self):
        registry = _registry()
        first = parse(registry, ["-f", "a"])
        second = parse(registry, [])
        first.flags["flag01"] = True
        first.positional.append("b")
        self.assertFalse(second.flags["flag02"])
        self.assertEqual(second.positional, [])
        self.assertEqual(parse(registry, []).flags["flag01"], False)

    def testRegistryUntouched(self):
        registry = _commands()
        before = (registry.flags, registry.options, registry.commands)
        parse(registry, ["cmd01", "-fF", "--op01", "x"])
        self.assertEqual((registry.flags, registry.options, registry.commands), before)

    def testScannerIsReusable(self):
        scanner = Scanner(_registry())
        with self.assertRaises(ParseError):
            scanner.parse(["--nope"])
        result = scanner.parse(["-f"])
        self.assertTrue(result.flags["flag02"])
        self.assertEqual(scanner.registry.kindof("flag02").value, "flag")


class TestFaultPositions(TestCase):

    def testPositionOfUnknown(self):
        with self.assertRaises(UnknownArgumentError) as context:
            parse(_registry(), ["x", "--nope"])
        self.assertEqual(context.exception.options["index"], 2)
        self.assertIn("second position", context.exception.message)
        self.assertEqual(context.exception.options["token"], "--nope")

    def testPositionOfInvalidSpacedValue(self):
        with self.assertRaises(InvalidValueError) as context:
            parse(_registry(), ["a", "b", "--op03", "40"])
        self.assertEqual(context.exception.options["index"], 3)
        self.assertIn("third position", str(context.exception))

    def testPositionAfterCommand(self):
        with self.assertRaises(InvalidArgumentError) as context:
            parse(_commands(), ["cmd01", "-z"])
        self.assertEqual(context.exception.options["index"], 2)

    def testFaultsCarryTheRegistry(self):
        registry = _registry()
        with self.assertRaises(ParseError) as context:
            parse(registry, ["-z"])
        self.assertIs(context.exception.options["registry"], registry)


class TestLogging(TestCase):

    def testSuccessfulParseIsLogged(self):
        with self.assertLogs("argscan.scanner", "DEBUG") as logs:
            parse(_registry(), ["a", "-f"])
        self.assertTrue(any("parsed 2 token(s)" in line for line in logs.output))

    def testFailedParseIsLogged(self):
        with self.assertLogs("argscan.scanner", "DEBUG") as logs:
            with self.assertRaises(ParseError):
                parse(_registry(), ["--nope"])
        self.assertTrue(any("parse failed" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
