"""
Tests for command resolution.

Scope
- Descent through named commands and sub-commands.
- Option-command selection (last flag wins) and default children.
- Default tie-break: the first default able to parse the tokens wins.
- Failures as values: unknown command (with suggestions), unknown
  sub-command, missing default command.
- Lazy, memoized binding on ResolvedCommand.
- invoke() prompt forms and fault surfacing, in and out of shell mode.

Conventions
- Test method names follow CamelCase per project convention.
- Trees are built in setUp() with the public factory methods.
"""
import io
import logging
import sys
import threading
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from commandeer.args import RawArgs, StringArgs
from commandeer.commands import Application
from commandeer.faults import *
from commandeer.formats import Argument, Option
from commandeer.parser import ArgsParser
from commandeer.resolver import *


class CountingParser(ArgsParser):
    def __init__(self):
        self.calls = 0
        self.lock = threading.Lock()

    def parse_args(self, raw_args, format):
        with self.lock:
            self.calls += 1
        return super().parse_args(raw_args, format)


class ResolveTest(TestCase):
    def setUp(self):
        self.application = Application("tool", [Option("verbose", "v")])

        self.package = self.application.command(
            "package",
            aliases=["package-alias"],
            elements=[Option("output", "o", Option.REQUIRED_VALUE)],
        )
        self.delete = self.package.option_command("delete", "d")
        self.pack = self.application.command("pack")

        self.stash = self.application.command("stash")
        self.stash_do = self.stash.option_command("do", "D")

        self.server = self.application.command("server")
        self.server_list = self.server.sub_command("list", default=True, elements=[Argument("filter")])
        self.server_do = self.server_list.option_command("do", "D")
        self.server_add = self.server.sub_command("add", elements=[Argument("host", Argument.REQUIRED)])

        self.daemon = self.application.command("daemon")
        self.daemon_list = self.daemon.option_command("list", "l", default=True)
        self.daemon_stop = self.daemon.option_command("stop", "s")

        self.remote = self.application.command("remote")
        self.remote.sub_command("show")
        self.remote.sub_command("prune")

    def resolve(self, prompt):
        return resolve(StringArgs(prompt), self.application)

    def command(self, prompt):
        resolution = self.resolve(prompt)
        self.assertTrue(resolution.ok, resolution.error)
        return resolution.resolved.command

    def testNamedCommand(self):
        self.assertIs(self.command("pack"), self.pack)
        self.assertIs(self.command("package"), self.package)
        self.assertIs(self.command("package-alias"), self.package)

    def testOptionCommand(self):
        self.assertIs(self.command("stash -D"), self.stash_do)
        self.assertIs(self.command("package --delete"), self.delete)
        self.assertIs(self.command("package -v -d"), self.delete)

    def testOptionsStopCommandNameMatching(self):
        self.assertIs(self.command("package -o add"), self.package)

    def testTerminatorStopsOptionCommands(self):
        self.assertIs(self.command("package -- --delete"), self.package)

    def testDefaultSubCommand(self):
        self.assertIs(self.command("server"), self.server_list)
        self.assertIs(self.command("server -D"), self.server_do)
        self.assertIs(self.command("server add example.com"), self.server_add)

    def testUnknownTokenFallsThroughToDefault(self):
        resolved = self.resolve("server foo").resolved
        self.assertIs(resolved.command, self.server_list)
        self.assertEqual(resolved.parsed_args.get_argument("filter"), "foo")

    def testDefaultOptionCommand(self):
        self.assertIs(self.command("daemon"), self.daemon_list)
        self.assertIs(self.command("daemon -s"), self.daemon_stop)

    def testLastOptionCommandWins(self):
        self.assertIs(self.command("daemon --list --stop"), self.daemon_stop)
        self.assertIs(self.command("daemon -s -l"), self.daemon_list)

    def testCommandNotDefined(self):
        resolution = self.resolve("packa")
        self.assertFalse(resolution.ok)
        self.assertIsNone(resolution.resolved)
        self.assertIsInstance(resolution.error, CommandNotDefinedError)
        self.assertIs(resolution.error.code, FaultCode.UNKNOWN_COMMAND)
        self.assertEqual(resolution.error.suggestions, ("pack", "package"))
        self.assertEqual(
            str(resolution.error),
            "the command 'packa' is not defined\n\ndid you mean one of these?\n    pack\n    package",
        )

    def testSuggestionsSkipAliasesOfSuggestedCommands(self):
        self.assertEqual(self.resolve("packag").error.suggestions, ("package", "pack"))

    def testCommandNotDefinedWithoutSuggestions(self):
        error = self.resolve("deploy").error
        self.assertEqual(str(error), "the command 'deploy' is not defined")
        self.assertEqual(error.suggestions, ())

    def testUnknownSubcommand(self):
        error = self.resolve("remote prun").error
        self.assertIsInstance(error, UnknownSubcommandError)
        self.assertIs(error.code, FaultCode.UNKNOWN_SUBCOMMAND)
        self.assertEqual(error.suggestions, ("prune",))
        self.assertEqual(error.options["index"], 2)

    def testNoDefaultCommand(self):
        for prompt in ("", "-v"):
            with self.subTest(prompt=prompt):
                error = self.resolve(prompt).error
                self.assertIsInstance(error, NoDefaultCommandError)
                self.assertIs(error.code, FaultCode.NO_DEFAULT_COMMAND)

    def testUnwrapRaisesOutsideShell(self):
        with self.assertRaises(CommandNotDefinedError) as context:
            self.resolve("packa").unwrap()
        self.assertEqual(context.exception.options["prog"], "tool")
        self.assertIs(self.resolve("pack").unwrap().command, self.pack)

    def testUnwrapPrintsInShell(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        context = ResolverContext(shell=True, console=console)
        resolution = resolve(StringArgs("packa"), self.application, context)
        with self.assertRaises(SystemExit) as exit:
            resolution.unwrap()
        self.assertEqual(exit.exception.code, 1)
        output = console.file.getvalue()
        self.assertIn("Unknown Command", output)
        self.assertIn("11101", output)
        self.assertIn("the command 'packa' is not defined", output)

    def testParseErrorsAreDeferred(self):
        resolution = self.resolve("server add")
        self.assertTrue(resolution.ok)
        resolved = resolution.resolved
        self.assertIs(resolved.command, self.server_add)
        self.assertFalse(resolved.is_parsable())
        self.assertIsNone(resolved.parsed_args)
        self.assertIsInstance(resolved.parse_error, MissingRequiredArgumentError)
        with self.assertRaises(MissingRequiredArgumentError):
            resolved.unwrap()

    def testResolvedCommandBindsTokens(self):
        resolved = self.resolve("server add example.com -v").resolved
        self.assertTrue(resolved.is_parsable())
        self.assertIsNone(resolved.parse_error)
        args = resolved.unwrap()
        self.assertEqual(args.get_argument("host"), "example.com")
        self.assertTrue(args.get_option("verbose"))
        self.assertEqual(resolved.raw_args.tokens, ["server", "add", "example.com", "-v"])

    def testEmitsDebugTraces(self):
        with self.assertLogs("commandeer.resolver", logging.DEBUG) as logs:
            self.resolve("server")
        self.assertTrue(any("'list'" in line for line in logs.output))

    def testRejectsBadInputs(self):
        with self.assertRaises(TypeError):
            resolve(["pack"], self.application)
        with self.assertRaises(TypeError):
            resolve(StringArgs("pack"), self.package)
        with self.assertRaises(TypeError):
            CommandResolver("shell")


class DefaultCommandTest(TestCase):
    def setUp(self):
        self.application = Application("tool")
        self.main = self.application.command("main", default=True)
        self.main_do = self.main.option_command("do", "D")

    def testEmptyPromptUsesDefault(self):
        self.assertIs(resolve(RawArgs([]), self.application).resolved.command, self.main)

    def testOptionCommandThroughDefault(self):
        self.assertIs(resolve(StringArgs("-D"), self.application).resolved.command, self.main_do)

    def testExplicitName(self):
        self.assertIs(resolve(StringArgs("main --do"), self.application).resolved.command, self.main_do)


class OutOfRangeValueTest(TestCase):
    def setUp(self):
        self.application = Application("tool")
        self.count = self.application.command("count", default=True, elements=[Argument("times", Argument.INTEGER)])

    def testDefaultCommandKeepsInvalidValue(self):
        resolution = resolve(StringArgs("-- 1e400"), self.application)
        self.assertTrue(resolution.ok)
        resolved = resolution.resolved
        self.assertIs(resolved.command, self.count)
        self.assertFalse(resolved.is_parsable())
        self.assertIsInstance(resolved.parse_error, InvalidValueError)

    def testNamedCommandKeepsInvalidValue(self):
        resolved = resolve(StringArgs("count 1e400"), self.application).resolved
        self.assertIs(resolved.command, self.count)
        with self.assertRaises(InvalidValueError):
            resolved.unwrap()


class DefaultTieBreakTest(TestCase):
    def setUp(self):
        self.application = Application("tool")
        self.list = self.application.command("list", default=True)
        self.add = self.application.command("add", default=True, elements=[Argument("host", Argument.REQUIRED)])

        self.remote = self.application.command("remote")
        self.remote_list = self.remote.sub_command("list", default=True)
        self.remote_add = self.remote.sub_command("add", default=True, elements=[Argument("host", Argument.REQUIRED)])

    def testFirstDefaultWhenNothingIsGiven(self):
        self.assertIs(resolve(RawArgs([]), self.application).resolved.command, self.list)
        self.assertIs(resolve(StringArgs("remote"), self.application).resolved.command, self.remote_list)

    def testFirstParsableDefaultWins(self):
        resolved = resolve(StringArgs("remote example.com"), self.application).resolved
        self.assertIs(resolved.command, self.remote_add)
        self.assertEqual(resolved.parsed_args.get_argument("host"), "example.com")

    def testFirstDefaultWhenNoneParses(self):
        resolved = resolve(StringArgs("remote a b"), self.application).resolved
        self.assertIs(resolved.command, self.remote_list)
        self.assertIsInstance(resolved.parse_error, TooManyArgumentsError)


class ResolvedCommandTest(TestCase):
    def setUp(self):
        self.application = Application("tool")
        self.command = self.application.command("add", elements=[Argument("host")])

    def testParsesOnceAcrossThreads(self):
        parser = CountingParser()
        resolved = ResolvedCommand(self.command, StringArgs("add example.com"), ResolverContext(parser=parser))
        self.assertEqual(parser.calls, 0)

        results = []
        threads = [threading.Thread(target=lambda: results.append(resolved.parsed_args)) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(parser.calls, 1)
        self.assertEqual(len(results), 8)
        self.assertTrue(all(args is results[0] for args in results))

    def testRejectsBadRawArgs(self):
        with self.assertRaises(TypeError):
            ResolvedCommand(self.command, ["add"])


class ResolutionTest(TestCase):
    def testExactlyOneOutcome(self):
        with self.assertRaises(ValueError):
            Resolution()
        with self.assertRaises(ValueError):
            Resolution(object(), NoDefaultCommandError("x"))


class ResolverContextTest(TestCase):
    def testDefaults(self):
        context = ResolverContext()
        self.assertFalse(context.shell)
        self.assertTrue(context.fancy)
        self.assertTrue(context.colorful)
        self.assertEqual(context.styles, {})
        self.assertIsInstance(context.console, Console)
        self.assertIsInstance(context.parser, ArgsParser)

    def testOptions(self):
        context = ResolverContext(codes={FaultCode.UNKNOWN_COMMAND: "E1"}, fancy=False)
        options = context.options(Application("tool"))
        self.assertEqual(options["prog"], "tool")
        self.assertFalse(options["fancy"])
        self.assertEqual(options["codes"][FaultCode.UNKNOWN_COMMAND], "E1")
        self.assertNotIn("prog", context.options())

    def testIsReadOnly(self):
        with self.assertRaises(AttributeError):
            ResolverContext().shell = True

    def testRejectsNonBooleans(self):
        with self.assertRaises(TypeError):
            ResolverContext(shell="yes")


class InvokeTest(TestCase):
    def setUp(self):
        self.application = Application("tool", [Option("verbose", "v")])
        self.server = self.application.command("server")
        self.add = self.server.sub_command("add", elements=[Argument("host", Argument.REQUIRED)])

    def testStringPrompt(self):
        resolved = invoke(self.application, "server add example.com")
        self.assertIs(resolved.command, self.add)
        self.assertEqual(resolved.parsed_args.get_argument("host"), "example.com")

    def testIterablePromptIsSanitized(self):
        resolved = invoke(self.application, [" server ", "", "add", "my host"])
        self.assertEqual(resolved.raw_args.tokens, ["server", "add", "my host"])
        self.assertEqual(resolved.parsed_args.get_argument("host"), "my host")

    def testRawArgsPrompt(self):
        raw_args = RawArgs(["server", "add", "x"])
        self.assertIs(invoke(self.application, raw_args).raw_args, raw_args)

    def testSysArgvPrompt(self):
        with patch.object(sys, "argv", ["tool", "server", "add", "example.com"]):
            resolved = invoke(self.application)
        self.assertEqual(resolved.raw_args.script_name, "tool")
        self.assertEqual(resolved.parsed_args.script_name, "tool")

    def testRaisesResolutionFaults(self):
        with self.assertRaises(CommandNotDefinedError):
            invoke(self.application, "serve add x")

    def testRaisesParseFaults(self):
        with self.assertRaises(MissingRequiredArgumentError):
            invoke(self.application, "server add")
        with self.assertRaises(UnknownOptionError):
            invoke(self.application, "server add x --nope")

    def testShellModeExits(self):
        console = Console(file=io.StringIO(), width=100, color_system=None)
        with self.assertRaises(SystemExit):
            invoke(self.application, "server add", ResolverContext(shell=True, console=console))
        self.assertIn("missing required argument 'host'", console.file.getvalue())

    def testRejectsBadPrompts(self):
        with self.assertRaises(TypeError):
            invoke(self.application, 12)
        with self.assertRaises(TypeError):
            invoke(self.application, ["server", 1])


if __name__ == "__main__":
    unittest.main()
