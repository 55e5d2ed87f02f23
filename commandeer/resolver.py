"""
Commandeer resolver: pick the command that handles a token stream.

phases
- classification: tokens before the first "-"-prefixed token (or "--") are
  argument candidates; after that, "--name" (longer than two characters) and
  two-character "-x" tokens are option candidates, up to "--". The resolver
  never knows which options take values, so nothing after the first option
  is read as a command name ("tool -f add" resolves to "tool" itself).
- descent: argument candidates walk down named commands and sub-commands
  for as long as they match.
- no match: leftover argument candidates fail with CommandNotDefinedError
  (with "did you mean" suggestions); no tokens at all fall back to the
  application's default commands, or fail with NoDefaultCommandError.
- refinement: from the working command, the last option candidate naming one
  of its option commands wins; otherwise its default sub-commands apply
  (the first one able to parse the tokens, else the first declared). this
  repeats until neither applies.

failures are returned as values (Resolution.error, ResolvedCommand.parse_error)
and only surfaced through trigger() when the caller asks for it (unwrap()).
"""
import logging
import threading
from collections.abc import Iterable
from types import MappingProxyType

from rich.console import Console

from .args import ArgvArgs, RawArgs, StringArgs
from .commands import Application, CommandCollection
from .faults import *
from .parser import ArgsParser
from .suggestions import describe_suggestions, find_similar_names
from .utils import *

logger = logging.getLogger(__name__)


class ResolverContext:
    """
    Explicit runtime settings for resolution, binding and fault rendering.

    Parameters (keyword-only)
    - shell: when True, triggered faults are printed and the process exits;
      otherwise they are raised.
    - fancy: render faults inside a rich Panel.
    - colorful: apply styles to rendered faults.
    - styles: mapping merged over the built-in fault styles.
    - codes: mapping used to relabel fault codes.
    - console: rich Console receiving rendered faults (stderr by default).
    - parser: the ArgsParser used to bind tokens.
    """

    shell = mirror("shell")
    fancy = mirror("fancy")
    colorful = mirror("colorful")
    styles = mirror("styles")
    codes = mirror("codes")
    console = mirror("console")
    parser = mirror("parser")

    def __init__(
            self,
            *,
            shell=False,
            fancy=True,
            colorful=True,
            styles=Unset,
            codes=Unset,
            console=Unset,
            parser=Unset,
    ):
        for name, value in (("shell", shell), ("fancy", fancy), ("colorful", colorful)):
            if not isinstance(value, bool):
                raise TypeError(f"resolver-context {name!r} must be a boolean")
        self._shell = shell
        self._fancy = fancy
        self._colorful = colorful
        self._styles = MappingProxyType(dict(coalesce(styles, {})))
        self._codes = MappingProxyType(dict(coalesce(codes, {})))
        self._console = coalesce(console, None) or Console(stderr=True)
        self._parser = coalesce(parser, None) or ArgsParser()

    def options(self, application=None):
        """
        Rendering options handed to trigger().
        """
        options = {
            "shell": self._shell,
            "fancy": self._fancy,
            "colorful": self._colorful,
            "styles": self._styles,
            "codes": self._codes,
            "console": self._console,
        }
        if application is not None:
            options["prog"] = application.name
        return options


class ResolvedCommand:
    """
    A command paired with the raw tokens destined for it.

    Binding happens on first access to parsed_args/parse_error/is_parsable()
    and is cached; the lock makes concurrent first reads parse only once.
    """

    def __init__(self, command, raw_args, context=Unset):
        if not isinstance(raw_args, RawArgs):
            raise TypeError("resolved-command raw args must be raw-args")
        self._command = command
        self._raw_args = raw_args
        self._context = coalesce(context, None) or ResolverContext()
        self._lock = threading.Lock()
        self._parsed = False
        self._args = None
        self._error = None

    @property
    def command(self):
        return self._command

    @property
    def raw_args(self):
        return self._raw_args

    def _parse(self):
        with self._lock:
            if self._parsed:
                return
            try:
                self._args = self._context.parser.parse_args(self._raw_args, self._command.format)
            except CannotParseArgsError as error:
                logger.debug("command %r cannot parse %r: %s", self._command.name, self._raw_args.tokens, error)
                self._error = error
            self._parsed = True

    @property
    def parsed_args(self):
        self._parse()
        return self._args

    @property
    def parse_error(self):
        self._parse()
        return self._error

    def is_parsable(self):
        self._parse()
        return self._error is None

    def unwrap(self):
        """
        Return the parsed args, or trigger the parse error.
        """
        if not self.is_parsable():
            trigger(self._error, **self._context.options(self._command.application))
        return self._args

    def __repr__(self):
        return f"resolved-command(command={self._command.name!r}, tokens={self._raw_args.tokens!r})"


class Resolution:
    """
    Outcome of CommandResolver.resolve(): a ResolvedCommand or a fault.
    """

    def __init__(self, resolved=None, error=None, *, application=None, context=Unset):
        if (resolved is None) == (error is None):
            raise ValueError("resolution takes exactly one of a resolved command or an error")
        self._resolved = resolved
        self._error = error
        self._application = application
        self._context = coalesce(context, None) or ResolverContext()

    @property
    def resolved(self):
        return self._resolved

    @property
    def error(self):
        return self._error

    @property
    def ok(self):
        return self._error is None

    def unwrap(self):
        """
        Return the resolved command, or trigger the resolution error.
        """
        if self._error is not None:
            trigger(self._error, **self._context.options(self._application))
        return self._resolved

    def __repr__(self):
        return f"resolution(resolved={self._resolved!r}, error={self._error!r})"


def _classify(tokens):
    """
    Split tokens into argument candidates and dash-less option candidates.
    """
    arguments, options = [], []

    index = 0
    while index < len(tokens) and tokens[index] != "--" and not tokens[index].startswith("-"):
        arguments.append(tokens[index])
        index += 1

    for token in tokens[index:]:
        if token == "--":
            break
        if token.startswith("--") and len(token) > 2:
            options.append(token[2:])
        elif token.startswith("-") and len(token) == 2:
            options.append(token[1:])

    return arguments, options


class CommandResolver:
    def __init__(self, context=Unset):
        if context not in (Unset, None) and not isinstance(context, ResolverContext):
            raise TypeError("command-resolver context must be a resolver-context")
        self._context = coalesce(context, None) or ResolverContext()

    @property
    def context(self):
        return self._context

    def resolve(self, raw_args, application):
        if not isinstance(raw_args, RawArgs):
            raise TypeError("resolve() first argument must be raw-args")
        if not isinstance(application, Application):
            raise TypeError("resolve() second argument must be an application")

        arguments, options = _classify(raw_args.tokens)
        logger.debug("argument candidates %r, option candidates %r", arguments, options)

        command, consumed = None, 0
        named = application.named_commands
        for token in arguments:
            if token not in named or (candidate := named.get(token)).is_option_command():
                break
            command, consumed = candidate, consumed + 1
            named = command.named_sub_commands

        if command is None:
            if arguments:
                return self._fail(self._not_defined(arguments[0], application.named_commands), application)
            if (command := self._pick_default(raw_args, application.default_commands)) is None:
                return self._fail(NoDefaultCommandError(
                    "no default command is defined",
                    title="no default command",
                    code=FaultCode.NO_DEFAULT_COMMAND,
                    hint="pass the name of the command to run",
                ), application)
        elif consumed < len(arguments) and not command.default_sub_commands:
            subcommands = CommandCollection(child for child in named if child.is_sub_command())
            if subcommands and not command.format.has_arguments():
                return self._fail(self._unknown_subcommand(arguments[consumed], command, subcommands), application)

        command = self._refine(raw_args, command, options)
        logger.debug("resolved %r to command %r", raw_args.tokens, command.name)
        return Resolution(ResolvedCommand(command, raw_args, self._context), application=application, context=self._context)

    def _refine(self, raw_args, command, options):
        while True:
            children, chosen = command.named_sub_commands, None
            for name in options:
                if name in children and (child := children.get(name)).is_option_command():
                    chosen = child
            if chosen is not None:
                logger.debug("option command %r selected under %r", chosen.name, command.name)
                command = chosen
            elif defaults := command.default_sub_commands:
                command = self._pick_default(raw_args, defaults)
            else:
                return command

    def _pick_default(self, raw_args, defaults):
        """
        Return the first default able to parse raw_args, else the first default.
        """
        first = None
        for candidate in defaults:
            if ResolvedCommand(candidate, raw_args, self._context).is_parsable():
                logger.debug("default command %r accepts the tokens", candidate.name)
                return candidate
            first = first or candidate
        if first is not None:
            logger.debug("no default command accepts the tokens, using %r", first.name)
        return first

    def _not_defined(self, name, commands):
        suggestions = find_similar_names(name, commands)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "check the spelling of the command name"
        return CommandNotDefinedError(
            "the command %r is not defined%s" % (name, describe_suggestions(suggestions)),
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            input=name,
            index=1,
            suggestions=suggestions,
            hint=hint,
        )

    def _unknown_subcommand(self, name, command, commands):
        suggestions = find_similar_names(name, commands)
        route = " ".join(step.name for step in command.path)
        try:
            hint = "did you mean %r?" % suggestions[0]
        except IndexError:
            hint = "pass one of the sub-commands of %r" % route
        return UnknownSubcommandError(
            "unknown sub-command %r for %r at %s position%s" % (
                name, route, ordinal(len(command.path) + 1), describe_suggestions(suggestions)
            ),
            title="unknown sub-command",
            code=FaultCode.UNKNOWN_SUBCOMMAND,
            input=name,
            index=len(command.path) + 1,
            suggestions=suggestions,
            hint=hint,
        )

    def _fail(self, error, application):
        logger.debug("resolution failed: %s", error)
        return Resolution(error=error, application=application, context=self._context)


def resolve(raw_args, application, context=Unset):
    """
    Shortcut for CommandResolver(context).resolve(raw_args, application).
    """
    return CommandResolver(context).resolve(raw_args, application)


def invoke(application, prompt=Unset, /, context=Unset):
    """
    Resolve and bind a prompt against an application, triggering any fault.

    Parameters
    - prompt:
      • Unset: read tokens from sys.argv (the first item is the script name).
      • RawArgs: used as-is.
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence; items are trimmed and empty
        items dropped.

    Returns
    - the ResolvedCommand, already bound (its parsed_args is set).
    """
    if prompt is Unset:
        raw_args = ArgvArgs()
    elif isinstance(prompt, RawArgs):
        raw_args = prompt
    elif isinstance(prompt, str):
        raw_args = StringArgs(prompt)
    elif isinstance(prompt, Iterable):
        def _sanitized(iterable):
            for item in iterable:
                if not isinstance(item, str):
                    raise TypeError("invoke() prompt must be a string or an iterable of strings")
                if item := item.strip():
                    yield item
        raw_args = RawArgs(list(_sanitized(prompt)))
    else:
        raise TypeError("invoke() prompt must be a string or an iterable of strings")

    resolved = resolve(raw_args, application, context).unwrap()
    resolved.unwrap()
    return resolved


__all__ = (
    "ResolverContext",
    "ResolvedCommand",
    "Resolution",
    "CommandResolver",
    "resolve",
    "invoke",
)
