"""
Commandeer args parser: bind raw tokens to an ArgsFormat.

grammar (per token, in priority order)
- "--" ends option parsing; every later token is positional.
- "--name" / "--name=value": long option. A value-accepting option without an
  inline value takes the next token unless it starts with "-"; then it fails
  (required value) or is stored as None (optional value).
- "-x", "-xvalue", "-abc": short option or fused set. The first option of the
  set that accepts a value consumes the rest of the token (or the next token).
- anything else is positional.

command tokens
- command options (with their aliases) are recognized and skipped.
- leading positionals matching the format's command names are skipped; once
  one does not match, the remaining command names count as missing.

leniency
- a required argument left empty is only reported once every command name
  was present and, when the format declares command options, one was given.
  this keeps a partially typed command from producing cascading faults.

every fault raised here is a CannotParseArgsError subclass carrying a
lowercase, position-first message plus title/code/hint options.
"""
import difflib
import logging
from collections import deque

from .args import Args, RawArgs
from .faults import *
from .formats import ArgsFormat
from .utils import ordinal

logger = logging.getLogger(__name__)


class _Binding:
    """
    Mutable state of one parse_args() call.
    """

    def __init__(self, raw_args, format):
        self.format = format
        self.args = Args(format, raw_args)
        self.tokens = deque(raw_args.tokens)
        self.index = 0
        self.positionals = []
        self.multiples = {}
        self.command_options = format.get_command_options()
        self.command_option_seen = False

    def run(self):
        parsing_options = True
        while self.tokens:
            token = self.tokens.popleft()
            self.index += 1

            if not parsing_options or token == "-" or not token.startswith("-"):
                self.positionals.append((self.index, token))
            elif token == "--":
                parsing_options = False
            elif token.startswith("--"):
                self._parse_long(token)
            else:
                self._parse_short(token)

        self._bind_positionals()
        return self.args

    def _is_command_option(self, name):
        if any(option.match(name) for option in self.command_options):
            self.command_option_seen = True
            logger.debug("skipped command option %r at position %d", name, self.index)
            return True
        return False

    def _parse_long(self, token):
        name, separator, value = token[2:].partition("=")

        if self._is_command_option(name):
            if separator:
                raise OptionValueNotAcceptedError(
                    "command option %r at %s position does not accept a value" % ("--" + name, ordinal(self.index)),
                    title="option takes no value",
                    code=FaultCode.OPTION_VALUE_NOT_ACCEPTED,
                    input="--" + name,
                    index=self.index,
                    hint="remove everything from '=' (for example: --%s)" % name,
                )
            return

        if (option := self.format.get_options().get(name)) is None:
            suggestions = difflib.get_close_matches(name, self.format.get_options().keys(), 3)
            self._unknown("--" + name, ["--" + suggestion for suggestion in suggestions])

        self._bind_option(option, "--" + name, value if separator else None, inline=bool(separator))

    def _parse_short(self, token):
        cluster = token[1:]
        for offset, letter in enumerate(cluster):
            if self._is_command_option(letter):
                continue

            try:
                option = self.format.get_option(letter)
            except NoSuchOptionError:
                shorts = [option.short_name for option in self.format.get_options().values() if option.short_name]
                self._unknown("-" + letter, ["-" + suggestion for suggestion in difflib.get_close_matches(letter, shorts, 3)])

            if not option.accepts_value():
                self._bind_option(option, "-" + letter, None, inline=False)
                continue

            rest = cluster[offset + 1:]
            self._bind_option(option, "-" + letter, rest or None, inline=bool(rest))
            break

    def _unknown(self, input, suggestions):
        try:
            hint = "did you mean %r? otherwise remove it" % suggestions[0]
        except IndexError:
            hint = "remove it or check its spelling"
        raise UnknownOptionError(
            "unknown option %r at %s position" % (input, ordinal(self.index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=input,
            index=self.index,
            suggestions=suggestions,
            hint=hint,
        )

    def _bind_option(self, option, input, value, *, inline):
        if not option.accepts_value():
            if inline:
                raise OptionValueNotAcceptedError(
                    "option %r at %s position does not accept a value" % (input, ordinal(self.index)),
                    title="option takes no value",
                    code=FaultCode.OPTION_VALUE_NOT_ACCEPTED,
                    input=input,
                    index=self.index,
                    hint="remove everything from '=' (for example: %s)" % input,
                )
            return self._store(option, input, True)

        if value is None and not inline:
            if self.tokens and not self.tokens[0].startswith("-"):
                value = self.tokens.popleft()
                self.index += 1
            elif option.is_value_required():
                raise MissingOptionValueError(
                    "option %r at %s position requires a value" % (input, ordinal(self.index)),
                    title="missing option value",
                    code=FaultCode.MISSING_OPTION_VALUE,
                    input=input,
                    index=self.index,
                    hint="pass a value inline or after a space (for example: --%s=<%s>)" % (option.long_name, option.value_name),
                )

        self._store(option, input, value)

    def _store(self, option, input, value):
        try:
            if option.is_multi_valued():
                self.multiples.setdefault(option.long_name, []).append(value)
                self.args.set_option(option.long_name, self.multiples[option.long_name])
            else:
                self.args.set_option(option.long_name, value)
        except ValueError as error:
            raise InvalidValueError(
                "invalid value %r for option %r at %s position" % (value, input, ordinal(self.index)),
                title="invalid value",
                code=FaultCode.INVALID_VALUE,
                input=input,
                index=self.index,
                hint=str(error),
            ) from None
        logger.debug("bound option %r to %r", option.long_name, self.args.get_option(option.long_name))

    def _bind_positionals(self):
        values = deque(self.positionals)
        names = deque(self.format.get_command_names())

        while names and values and names[0].match(values[0][1]):
            names.popleft()
            values.popleft()
        missing_names = [str(name) for name in names]
        if missing_names:
            logger.debug("command names %r were not given", missing_names)

        arguments = deque(self.format.get_arguments().values())
        collected = []
        for index, token in values:
            if not arguments:
                raise TooManyArgumentsError(
                    "too many arguments: unexpected %r at %s position" % (token, ordinal(index)),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    input=token,
                    index=index,
                    hint="remove this extra value",
                )

            argument = arguments[0]
            try:
                if argument.is_multi_valued():
                    collected.append(token)
                    self.args.set_argument(argument.name, collected)
                else:
                    self.args.set_argument(argument.name, token)
                    arguments.popleft()
            except ValueError as error:
                raise InvalidValueError(
                    "invalid value %r for argument %r at %s position" % (token, argument.name, ordinal(index)),
                    title="invalid value",
                    code=FaultCode.INVALID_VALUE,
                    input=token,
                    index=index,
                    hint=str(error),
                ) from None
            logger.debug("bound argument %r to %r", argument.name, self.args.get_argument(argument.name))

        if missing_names or (self.command_options and not self.command_option_seen):
            return

        for argument in self.format.get_arguments().values():
            if argument.is_required() and not self.args.is_argument_set(argument.name):
                raise MissingRequiredArgumentError(
                    "missing required argument %r" % argument.name,
                    title="missing argument",
                    code=FaultCode.MISSING_REQUIRED_ARGUMENT,
                    input=argument.name,
                    hint="pass a value for %r after the command" % argument.name,
                )


class ArgsParser:
    """
    Stateless binder turning RawArgs into Args for a given ArgsFormat.
    """

    def parse_args(self, raw_args, format):
        if not isinstance(raw_args, RawArgs):
            raise TypeError("parse_args() first argument must be raw-args")
        if not isinstance(format, ArgsFormat):
            raise TypeError("parse_args() second argument must be an args-format")
        return _Binding(raw_args, format).run()


__all__ = (
    "ArgsParser",
)
