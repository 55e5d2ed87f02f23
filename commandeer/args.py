"""
Commandeer args: raw token streams and the typed values bound from them.

Raw tokens
- RawArgs: base type exposing script_name, tokens, has_token() and to_string().
- ArgvArgs: built from an argv-like list (sys.argv by default); the first item
  is the script name.
- StringArgs: built from a shell-like string, split with shlex.

Typed values
- Args: mutable container bound to one ArgsFormat. Options are stored under
  their long name and arguments under their name, already coerced. Defaults
  are never stored: they are computed from the format on read, so
  is_option_set()/is_argument_set() tell explicit input apart.
"""
import shlex
import sys
from collections.abc import Iterable, Mapping, Sequence

from .formats import ArgsFormat
from .utils import Unset


class RawArgs:
    """
    Ordered tokens as typed by the user, without any interpretation.
    """

    def __init__(self, tokens, script_name=None):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError(f"{type(self).__name__} tokens must be an iterable of strings")
        tokens = tuple(tokens)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{type(self).__name__} tokens must be strings")
        self._tokens = tokens
        self._script_name = script_name

    @property
    def script_name(self):
        return self._script_name

    @property
    def tokens(self):
        return list(self._tokens)

    def has_token(self, token):
        return token in self._tokens

    def to_string(self, script_name=True):
        string = shlex.join(self._tokens)
        if script_name and self._script_name:
            string = (shlex.quote(self._script_name) + " " + string).rstrip()
        return string

    def __len__(self):
        return len(self._tokens)

    def __iter__(self):
        return iter(self._tokens)

    def __repr__(self):
        return f"{type(self).__name__}({self.to_string()!r})"


class ArgvArgs(RawArgs):
    def __init__(self, argv=Unset):
        if argv is Unset or argv is None:
            argv = sys.argv
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("ArgvArgs argv must be an iterable of strings")
        script_name, *tokens = list(argv) or [None]
        super().__init__(tokens, script_name)


class StringArgs(RawArgs):
    def __init__(self, string):
        if not isinstance(string, str):
            raise TypeError("StringArgs argument must be a string")
        super().__init__(shlex.split(string))


class Args:
    """
    Values bound to an ArgsFormat for one invocation.

    Reads fall back to defaults; writes coerce through the declaring
    Argument/Option and raise ValueError when a value cannot be coerced.
    Unknown names raise NoSuchArgumentError/NoSuchOptionError.
    """

    def __init__(self, format, raw_args=None):
        if not isinstance(format, ArgsFormat):
            raise TypeError("args format must be an args-format")
        if raw_args is not None and not isinstance(raw_args, RawArgs):
            raise TypeError("args raw args must be raw-args")
        self._format = format
        self._raw_args = raw_args
        self._options = {}
        self._arguments = {}

    @property
    def format(self):
        return self._format

    @property
    def raw_args(self):
        return self._raw_args

    @property
    def script_name(self):
        return self._raw_args.script_name if self._raw_args else None

    @property
    def command_names(self):
        return self._format.get_command_names()

    @property
    def command_options(self):
        return self._format.get_command_options()

    def get_option(self, name):
        option = self._format.get_option(name)
        if option.long_name in self._options:
            return self._options[option.long_name]
        if option.accepts_value():
            return option.default
        return False

    def get_options(self, include_defaults=True):
        if not include_defaults:
            return dict(self._options)
        options = {}
        for name, option in self._format.get_options().items():
            if name in self._options:
                options[name] = self._options[name]
            elif option.accepts_value():
                options[name] = option.default
            else:
                options[name] = False
        return options

    def set_option(self, name, value=True):
        """
        Store a coerced value for the option.

        Multi-valued options coerce every element of a sequence (a scalar is
        boxed into a one-element list); an optional-value option given None
        keeps None (it was passed without a value); options without a value
        store True, or are unset by False.
        """
        option = self._format.get_option(name)
        if option.is_multi_valued():
            values = value if isinstance(value, Sequence) and not isinstance(value, str) else [value]
            value = [option.parse_value(value) for value in values]
        elif option.accepts_value():
            if value is not None or not option.is_value_optional():
                value = option.parse_value(value)
        elif value is False:
            self._options.pop(option.long_name, None)
            return self
        else:
            value = True
        self._options[option.long_name] = value
        return self

    def add_options(self, options):
        if not isinstance(options, Mapping):
            raise TypeError("add_options() argument must be a mapping")
        for name, value in options.items():
            self.set_option(name, value)
        return self

    def set_options(self, options):
        self._options = {}
        return self.add_options(options)

    def is_option_set(self, name):
        return name in self._options

    def is_option_defined(self, name):
        return self._format.has_option(name)

    def get_argument(self, name):
        argument = self._format.get_argument(name)
        if argument.name in self._arguments:
            return self._arguments[argument.name]
        return argument.default

    def get_arguments(self, include_defaults=True):
        if not include_defaults:
            return dict(self._arguments)
        arguments = {}
        for name, argument in self._format.get_arguments().items():
            arguments[name] = self._arguments.get(name, argument.default)
        return arguments

    def set_argument(self, name, value):
        argument = self._format.get_argument(name)
        if argument.is_multi_valued():
            values = value if isinstance(value, Sequence) and not isinstance(value, str) else [value]
            value = [argument.parse_value(value) for value in values]
        else:
            value = argument.parse_value(value)
        self._arguments[argument.name] = value
        return self

    def add_arguments(self, arguments):
        if not isinstance(arguments, Mapping):
            raise TypeError("add_arguments() argument must be a mapping")
        for name, value in arguments.items():
            self.set_argument(name, value)
        return self

    def set_arguments(self, arguments):
        self._arguments = {}
        return self.add_arguments(arguments)

    def is_argument_set(self, name):
        return name in self._arguments

    def is_argument_defined(self, name):
        return self._format.has_argument(name)

    def __repr__(self):
        return f"args(options={self._options!r}, arguments={self._arguments!r})"

    def __rich_repr__(self):
        yield "options", self.get_options()
        yield "arguments", self.get_arguments()


__all__ = (
    "RawArgs",
    "ArgvArgs",
    "StringArgs",
    "Args",
)
