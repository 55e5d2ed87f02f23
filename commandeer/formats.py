r"""
Commandeer argument formats (the declarative schema of a command).

Overview
- Elements
  • CommandName: keyword that must appear verbatim (or as an alias), e.g. the
    "add" in "tool package add".
  • CommandOption: same role as CommandName but spelled as a flag ("--add"/"-a").
  • Argument: positional value slot (required/optional/multi-valued, typed).
  • Option: named value slot with a long name, an optional short name, a
    value-acceptance mode (none/optional/required), multiplicity and a type.

- Aggregates
  • ArgsFormatBuilder: mutable, chainable builder that enforces the ordering
    and uniqueness rules while elements are added.
  • ArgsFormat: immutable result. May chain to a base format whose elements
    come first in every listing (e.g. "global options + command options").

Flags
- ArgumentFlag: REQUIRED, OPTIONAL, MULTI_VALUED, STRING, BOOLEAN, INTEGER,
  FLOAT, NULLABLE. Missing groups default to OPTIONAL and STRING.
- OptionFlag: PREFER_LONG_NAME, PREFER_SHORT_NAME, NO_VALUE, REQUIRED_VALUE,
  OPTIONAL_VALUE, MULTI_VALUED, STRING, BOOLEAN, INTEGER, FLOAT, NULLABLE.
  Missing groups default to NO_VALUE, STRING and PREFER_LONG_NAME; MULTI_VALUED
  implies REQUIRED_VALUE.
  Both flag sets are also reachable as class attributes (Argument.REQUIRED,
  Option.OPTIONAL_VALUE, ...).

Build-time rules (SchemaViolation subclasses, see faults)
- an argument name may be declared once ('exists-already').
- nothing may follow a multi-valued argument ('multi-valued-exists').
- a required argument may not follow an optional one ('required-after-optional').
- a long or short option name may be declared once per format ('exists-already').

Quick example
    >>> format = ArgsFormat([
    ...     CommandName("server"),
    ...     CommandName("add"),
    ...     Argument("host", Argument.REQUIRED),
    ...     Option("port", "p", Option.OPTIONAL_VALUE | Option.INTEGER, default=80),
    ... ])
    >>> format.get_option("p").default
    80
"""
import functools
import operator
import re
from collections.abc import Iterable, Sequence
from enum import IntFlag

from .faults import CannotAddArgumentError, CannotAddOptionError, NoSuchArgumentError, NoSuchOptionError
from .utils import *
from .utils import IntrospectableType
from .values import *


class ArgumentFlag(IntFlag):
    REQUIRED = 1
    OPTIONAL = 2
    MULTI_VALUED = 4
    STRING = 16
    BOOLEAN = 32
    INTEGER = 64
    FLOAT = 128
    NULLABLE = 256


class OptionFlag(IntFlag):
    PREFER_LONG_NAME = 1
    PREFER_SHORT_NAME = 2
    NO_VALUE = 4
    REQUIRED_VALUE = 8
    OPTIONAL_VALUE = 16
    MULTI_VALUED = 32
    STRING = 128
    BOOLEAN = 256
    INTEGER = 512
    FLOAT = 1024
    NULLABLE = 2048


_ARGUMENT_TYPES = ArgumentFlag.STRING | ArgumentFlag.BOOLEAN | ArgumentFlag.INTEGER | ArgumentFlag.FLOAT
_OPTION_TYPES = OptionFlag.STRING | OptionFlag.BOOLEAN | OptionFlag.INTEGER | OptionFlag.FLOAT
_OPTION_VALUES = OptionFlag.REQUIRED_VALUE | OptionFlag.OPTIONAL_VALUE | OptionFlag.MULTI_VALUED
_PREFERENCES = OptionFlag.PREFER_LONG_NAME | OptionFlag.PREFER_SHORT_NAME

_NAME = re.compile(r"[a-zA-Z][a-zA-Z0-9-]*")
_KEYWORD = re.compile(r"[^\s-]\S*")


def _sanitize_description(cls, metadata, /):
    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} description must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} description cannot be empty")
    metadata["description"] = coalesce(description)


def _sanitize_flags(cls, metadata, flags, /):
    """
    Convert the raw integer into the given IntFlag, rejecting unknown bits.
    """
    if isinstance(metadata["flags"], bool) or not isinstance(metadata["flags"], int):
        raise TypeError(f"{cls.__typename__} flags must be an integer")
    if metadata["flags"] & ~functools.reduce(operator.or_, flags, 0):
        raise ValueError(f"{cls.__typename__} flags contain unknown bits")
    metadata["flags"] = flags(metadata["flags"])


def _sanitize_multi_valued_default(cls, metadata, /):
    if (default := metadata["default"]) is None:
        metadata["default"] = []
    elif not isinstance(default, Sequence) or isinstance(default, str):
        raise TypeError(f"multi-valued {cls.__typename__} default must be a sequence")
    else:
        metadata["default"] = list(default)


def _sanitize_long_name(cls, name, /):
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} long name must be a string")
    name = name.removeprefix("--")
    if len(name) < 2:
        raise ValueError(f"{cls.__typename__} long name must be longer than one character, got {name!r}")
    if not _NAME.fullmatch(name):
        raise ValueError(f"{cls.__typename__} long name must start with a letter and contain only letters, digits and hyphens, got {name!r}")
    return name


def _sanitize_short_name(cls, name, /):
    if name is None or name is Unset:
        return None
    if not isinstance(name, str):
        raise TypeError(f"{cls.__typename__} short name must be a string")
    name = name.removeprefix("-")
    if not re.fullmatch(r"[a-zA-Z]", name):
        raise ValueError(f"{cls.__typename__} short name must be exactly one letter, got {name!r}")
    return name


def _sanitize_names(cls, metadata, /):
    """
    Shared by Option and CommandOption: names plus the name preference flags.
    """
    metadata["long_name"] = _sanitize_long_name(cls, metadata["long_name"])
    metadata["short_name"] = _sanitize_short_name(cls, metadata["short_name"])

    flags = metadata["flags"]
    if flags & OptionFlag.PREFER_LONG_NAME and flags & OptionFlag.PREFER_SHORT_NAME:
        raise ValueError(f"{cls.__typename__} flags PREFER_LONG_NAME and PREFER_SHORT_NAME cannot be combined")
    if flags & OptionFlag.PREFER_SHORT_NAME and metadata["short_name"] is None:
        raise ValueError(f"{cls.__typename__} cannot prefer a short name when none is given")
    if not flags & _PREFERENCES:
        metadata["flags"] = flags | OptionFlag.PREFER_LONG_NAME


def _sanitize_keywords(cls, metadata, /):
    """
    Shared by CommandName: the keyword and its aliases.
    """
    if not isinstance(string := metadata["string"], str):
        raise TypeError(f"{cls.__typename__} must be a string")
    if not _KEYWORD.fullmatch(string):
        raise ValueError(f"{cls.__typename__} must be a non-empty word not starting with '-', got {string!r}")

    if isinstance(metadata["aliases"], str) or not isinstance(metadata["aliases"], Iterable):
        raise TypeError(f"{cls.__typename__} aliases must be an iterable of strings")
    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        if not _KEYWORD.fullmatch(alias):
            raise ValueError(f"{cls.__typename__} aliases must be non-empty words not starting with '-', got {alias!r}")
        aliases.append(alias)
    metadata["aliases"] = tuple(aliases)


class CommandName(metaclass=IntrospectableType):
    """
    A keyword that must be typed verbatim (or as one of its aliases).
    """

    __introspectable__ = (
        "string",
        "aliases",
    )

    def __new__(cls, string, aliases=()):
        metadata = {
            "string": string,
            "aliases": aliases,
        }
        _sanitize_keywords(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def match(self, token):
        return token == self._string or token in self._aliases

    def __str__(self):
        return self._string


class CommandOption(metaclass=IntrospectableType):
    """
    A command selected by a flag-like token instead of a bare word.

    Aliases are given with or without dashes; one-letter aliases are treated
    as short aliases, longer ones as long aliases.
    """

    PREFER_LONG_NAME = OptionFlag.PREFER_LONG_NAME
    PREFER_SHORT_NAME = OptionFlag.PREFER_SHORT_NAME

    __introspectable__ = (
        "long_name",
        "short_name",
        "aliases",
        "long_aliases",
        "short_aliases",
        "flags",
    )
    __displayable__ = (
        "long_name",
        "short_name",
        "aliases",
        "flags",
    )

    def __new__(cls, long_name, short_name=Unset, aliases=(), flags=0):
        metadata = {
            "long_name": long_name,
            "short_name": short_name,
            "flags": flags,
        }
        _sanitize_flags(cls, metadata, OptionFlag)
        if metadata["flags"] & ~_PREFERENCES:
            raise ValueError(f"{cls.__typename__} only accepts the PREFER_LONG_NAME and PREFER_SHORT_NAME flags")
        _sanitize_names(cls, metadata)

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{cls.__typename__} aliases must be an iterable of strings")
        long_aliases, short_aliases = [], []
        for alias in aliases:
            if not isinstance(alias, str):
                raise TypeError(f"{cls.__typename__} aliases must be strings")
            if len(alias := alias.lstrip("-")) == 1:
                short_aliases.append(_sanitize_short_name(cls, alias))
            else:
                long_aliases.append(_sanitize_long_name(cls, alias))
        metadata["long_aliases"] = tuple(long_aliases)
        metadata["short_aliases"] = tuple(short_aliases)
        metadata["aliases"] = tuple(long_aliases + short_aliases)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def match(self, name):
        """
        Return whether the dash-less name is one of this option's names or aliases.
        """
        return name in (self._long_name, self._short_name) + self._aliases if name else False

    def is_long_name_preferred(self):
        return bool(self._flags & OptionFlag.PREFER_LONG_NAME)

    def is_short_name_preferred(self):
        return bool(self._flags & OptionFlag.PREFER_SHORT_NAME)


class Argument(metaclass=IntrospectableType):
    """
    Positional value slot.

    Parameters
    - name: starts with a letter, then letters, digits or hyphens.
    - flags: ArgumentFlag bits (at most one of REQUIRED/OPTIONAL and one type).
    - description: optional help text (non-empty when given).
    - default: returned when the argument is absent. Required arguments take
      none; multi-valued arguments default to [] and only take sequences.
    """

    REQUIRED = ArgumentFlag.REQUIRED
    OPTIONAL = ArgumentFlag.OPTIONAL
    MULTI_VALUED = ArgumentFlag.MULTI_VALUED
    STRING = ArgumentFlag.STRING
    BOOLEAN = ArgumentFlag.BOOLEAN
    INTEGER = ArgumentFlag.INTEGER
    FLOAT = ArgumentFlag.FLOAT
    NULLABLE = ArgumentFlag.NULLABLE

    __introspectable__ = (
        "name",
        "flags",
        "description",
        "default",
    )

    def __new__(cls, name, flags=0, description=Unset, default=None):
        metadata = {
            "name": name,
            "flags": flags,
            "description": description,
            "default": default,
        }

        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} name must be a string")
        if not _NAME.fullmatch(name):
            raise ValueError(f"{cls.__typename__} name must start with a letter and contain only letters, digits and hyphens, got {name!r}")

        _sanitize_flags(cls, metadata, ArgumentFlag)
        flags = metadata["flags"]
        if flags & ArgumentFlag.REQUIRED and flags & ArgumentFlag.OPTIONAL:
            raise ValueError(f"{cls.__typename__} flags REQUIRED and OPTIONAL cannot be combined")
        if (flags & _ARGUMENT_TYPES).bit_count() > 1:
            raise ValueError(f"{cls.__typename__} flags accept only one of STRING, BOOLEAN, INTEGER or FLOAT")
        if not flags & (ArgumentFlag.REQUIRED | ArgumentFlag.OPTIONAL):
            flags |= ArgumentFlag.OPTIONAL
        if not flags & _ARGUMENT_TYPES:
            flags |= ArgumentFlag.STRING
        metadata["flags"] = flags

        _sanitize_description(cls, metadata)

        if flags & ArgumentFlag.REQUIRED and default is not None:
            raise ValueError(f"required {cls.__typename__} {name!r} cannot have a default value")
        if flags & ArgumentFlag.MULTI_VALUED:
            _sanitize_multi_valued_default(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def is_required(self):
        return bool(self._flags & ArgumentFlag.REQUIRED)

    def is_optional(self):
        return bool(self._flags & ArgumentFlag.OPTIONAL)

    def is_multi_valued(self):
        return bool(self._flags & ArgumentFlag.MULTI_VALUED)

    def parse_value(self, value):
        """
        Coerce one raw value according to the declared type flag.
        """
        nullable = bool(self._flags & ArgumentFlag.NULLABLE)
        if self._flags & ArgumentFlag.BOOLEAN:
            return parse_boolean(value, nullable)
        if self._flags & ArgumentFlag.INTEGER:
            return parse_integer(value, nullable)
        if self._flags & ArgumentFlag.FLOAT:
            return parse_float(value, nullable)
        return parse_string(value, nullable)


class Option(metaclass=IntrospectableType):
    """
    Named value slot ("--port 80", "-p80", "--verbose").

    Parameters
    - long_name: required, with or without the leading "--".
    - short_name: optional single letter, with or without the leading "-".
    - flags: OptionFlag bits.
    - description: optional help text.
    - default: returned when a value-accepting option is absent.
    - value_name: label of the value in help output.
    """

    PREFER_LONG_NAME = OptionFlag.PREFER_LONG_NAME
    PREFER_SHORT_NAME = OptionFlag.PREFER_SHORT_NAME
    NO_VALUE = OptionFlag.NO_VALUE
    REQUIRED_VALUE = OptionFlag.REQUIRED_VALUE
    OPTIONAL_VALUE = OptionFlag.OPTIONAL_VALUE
    MULTI_VALUED = OptionFlag.MULTI_VALUED
    STRING = OptionFlag.STRING
    BOOLEAN = OptionFlag.BOOLEAN
    INTEGER = OptionFlag.INTEGER
    FLOAT = OptionFlag.FLOAT
    NULLABLE = OptionFlag.NULLABLE

    __introspectable__ = (
        "long_name",
        "short_name",
        "flags",
        "description",
        "default",
        "value_name",
    )
    __displayable__ = (
        "long_name",
        "short_name",
        "flags",
        "default",
    )

    def __new__(cls, long_name, short_name=Unset, flags=0, description=Unset, default=None, value_name="value"):
        metadata = {
            "long_name": long_name,
            "short_name": short_name,
            "flags": flags,
            "description": description,
            "default": default,
            "value_name": value_name,
        }
        _sanitize_flags(cls, metadata, OptionFlag)

        flags = metadata["flags"]
        if flags & OptionFlag.NO_VALUE and flags & _OPTION_VALUES:
            raise ValueError(f"{cls.__typename__} flag NO_VALUE cannot be combined with REQUIRED_VALUE, OPTIONAL_VALUE or MULTI_VALUED")
        if flags & OptionFlag.REQUIRED_VALUE and flags & OptionFlag.OPTIONAL_VALUE:
            raise ValueError(f"{cls.__typename__} flags REQUIRED_VALUE and OPTIONAL_VALUE cannot be combined")
        if flags & OptionFlag.OPTIONAL_VALUE and flags & OptionFlag.MULTI_VALUED:
            raise ValueError(f"{cls.__typename__} flags OPTIONAL_VALUE and MULTI_VALUED cannot be combined")
        if (flags & _OPTION_TYPES).bit_count() > 1:
            raise ValueError(f"{cls.__typename__} flags accept only one of STRING, BOOLEAN, INTEGER or FLOAT")
        if flags & OptionFlag.MULTI_VALUED:
            flags |= OptionFlag.REQUIRED_VALUE
        if not flags & (OptionFlag.NO_VALUE | _OPTION_VALUES):
            flags |= OptionFlag.NO_VALUE
        if not flags & _OPTION_TYPES:
            flags |= OptionFlag.STRING
        metadata["flags"] = flags

        _sanitize_names(cls, metadata)
        _sanitize_description(cls, metadata)

        if not isinstance(value_name, str):
            raise TypeError(f"{cls.__typename__} value name must be a string")
        metadata["value_name"] = value_name.strip()
        if not metadata["value_name"]:
            raise ValueError(f"{cls.__typename__} value name cannot be empty")

        if metadata["flags"] & OptionFlag.NO_VALUE and default is not None:
            raise ValueError(f"{cls.__typename__} '--{metadata["long_name"]}' does not accept a value and cannot have a default")
        if metadata["flags"] & OptionFlag.MULTI_VALUED:
            _sanitize_multi_valued_default(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    def accepts_value(self):
        return not self._flags & OptionFlag.NO_VALUE

    def is_value_required(self):
        return bool(self._flags & OptionFlag.REQUIRED_VALUE)

    def is_value_optional(self):
        return bool(self._flags & OptionFlag.OPTIONAL_VALUE)

    def is_multi_valued(self):
        return bool(self._flags & OptionFlag.MULTI_VALUED)

    def is_long_name_preferred(self):
        return bool(self._flags & OptionFlag.PREFER_LONG_NAME)

    def is_short_name_preferred(self):
        return bool(self._flags & OptionFlag.PREFER_SHORT_NAME)

    def parse_value(self, value):
        nullable = bool(self._flags & OptionFlag.NULLABLE)
        if self._flags & OptionFlag.BOOLEAN:
            return parse_boolean(value, nullable)
        if self._flags & OptionFlag.INTEGER:
            return parse_integer(value, nullable)
        if self._flags & OptionFlag.FLOAT:
            return parse_float(value, nullable)
        return parse_string(value, nullable)


class _FormatQueries:
    """
    Read-only queries shared by ArgsFormat and ArgsFormatBuilder.

    Every query takes include_base; base elements come first in listings and
    own options replace base options of the same long name.
    """

    _base_format = None

    @property
    def base_format(self):
        return self._base_format

    def _base(self, include_base):
        return self._base_format if include_base and self._base_format is not None else None

    def get_command_names(self, include_base=True):
        names = list(self._command_names)
        if base := self._base(include_base):
            names[:0] = base.get_command_names()
        return names

    def has_command_names(self, include_base=True):
        return bool(self.get_command_names(include_base))

    def get_command_option(self, name, include_base=True):
        if name in self._command_options:
            return self._command_options[name]
        if name in self._command_options_by_short:
            return self._command_options_by_short[name]
        if base := self._base(include_base):
            return base.get_command_option(name)
        raise NoSuchOptionError("the command option %r does not exist" % name)

    def get_command_options(self, include_base=True):
        options = list(self._command_options.values())
        if base := self._base(include_base):
            options[:0] = base.get_command_options()
        return options

    def has_command_option(self, name, include_base=True):
        try:
            self.get_command_option(name, include_base)
        except NoSuchOptionError:
            return False
        return True

    def has_command_options(self, include_base=True):
        return bool(self.get_command_options(include_base))

    def get_argument(self, name, include_base=True):
        """
        Look an argument up by name or by 0-based position.
        """
        if isinstance(name, int) and not isinstance(name, bool):
            arguments = list(self.get_arguments(include_base).values())
            if not 0 <= name < len(arguments):
                raise NoSuchArgumentError("the argument at position %d does not exist" % name)
            return arguments[name]
        if name in self._arguments:
            return self._arguments[name]
        if base := self._base(include_base):
            return base.get_argument(name)
        raise NoSuchArgumentError("the argument %r does not exist" % name)

    def get_arguments(self, include_base=True):
        arguments = dict(self._arguments)
        if base := self._base(include_base):
            arguments = base.get_arguments() | arguments
        return arguments

    def has_argument(self, name, include_base=True):
        try:
            self.get_argument(name, include_base)
        except NoSuchArgumentError:
            return False
        return True

    def has_multi_valued_argument(self, include_base=True):
        return any(argument.is_multi_valued() for argument in self.get_arguments(include_base).values())

    def has_optional_argument(self, include_base=True):
        return any(argument.is_optional() for argument in self.get_arguments(include_base).values())

    def has_required_argument(self, include_base=True):
        return any(argument.is_required() for argument in self.get_arguments(include_base).values())

    def has_arguments(self, include_base=True):
        return bool(self.get_arguments(include_base))

    def get_number_of_arguments(self, include_base=True):
        return len(self.get_arguments(include_base))

    def get_number_of_required_arguments(self, include_base=True):
        return sum(argument.is_required() for argument in self.get_arguments(include_base).values())

    def get_option(self, name, include_base=True):
        """
        Look an option up by long name or short name (without dashes).
        """
        if name in self._options:
            return self._options[name]
        if name in self._options_by_short:
            return self._options_by_short[name]
        if base := self._base(include_base):
            return base.get_option(name)
        raise NoSuchOptionError("the option %r does not exist" % name)

    def get_options(self, include_base=True):
        options = dict(self._options)
        if base := self._base(include_base):
            options = base.get_options() | options
        return options

    def has_option(self, name, include_base=True):
        try:
            self.get_option(name, include_base)
        except NoSuchOptionError:
            return False
        return True

    def has_options(self, include_base=True):
        return bool(self.get_options(include_base))


class ArgsFormatBuilder(_FormatQueries):
    """
    Mutable builder for ArgsFormat; every mutator returns the builder.
    """

    def __init__(self, base_format=None):
        if base_format is not None and not isinstance(base_format, ArgsFormat):
            raise TypeError("args-format-builder base format must be an args-format")
        self._base_format = base_format
        self._command_names = []
        self._command_options = {}
        self._command_options_by_short = {}
        self._arguments = {}
        self._options = {}
        self._options_by_short = {}

    def set_command_names(self, command_names):
        self._command_names = []
        return self.add_command_names(command_names)

    def add_command_names(self, command_names):
        for command_name in command_names:
            self.add_command_name(command_name)
        return self

    def add_command_name(self, command_name):
        if not isinstance(command_name, CommandName):
            raise TypeError("add_command_name() argument must be a command-name")
        self._command_names.append(command_name)
        return self

    def set_command_options(self, command_options):
        self._command_options = {}
        self._command_options_by_short = {}
        return self.add_command_options(command_options)

    def add_command_options(self, command_options):
        for command_option in command_options:
            self.add_command_option(command_option)
        return self

    def add_command_option(self, command_option):
        if not isinstance(command_option, CommandOption):
            raise TypeError("add_command_option() argument must be a command-option")
        self._claim(command_option)
        self._command_options[command_option.long_name] = command_option
        if command_option.short_name is not None:
            self._command_options_by_short[command_option.short_name] = command_option
        return self

    def set_arguments(self, arguments):
        self._arguments = {}
        return self.add_arguments(arguments)

    def add_arguments(self, arguments):
        for argument in arguments:
            self.add_argument(argument)
        return self

    def add_argument(self, argument):
        if not isinstance(argument, Argument):
            raise TypeError("add_argument() argument must be an argument")

        if self.has_argument(name := argument.name):
            raise CannotAddArgumentError("an argument with the name %r exists already" % name, reason="exists-already")
        if self.has_multi_valued_argument():
            raise CannotAddArgumentError("cannot add argument %r after a multi-valued argument" % name, reason="multi-valued-exists")
        if argument.is_required() and self.has_optional_argument():
            raise CannotAddArgumentError("cannot add required argument %r after an optional one" % name, reason="required-after-optional")

        self._arguments[name] = argument
        return self

    def set_options(self, options):
        self._options = {}
        self._options_by_short = {}
        return self.add_options(options)

    def add_options(self, options):
        for option in options:
            self.add_option(option)
        return self

    def add_option(self, option):
        if not isinstance(option, Option):
            raise TypeError("add_option() argument must be an option")
        self._claim(option)
        self._options[option.long_name] = option
        if option.short_name is not None:
            self._options_by_short[option.short_name] = option
        return self

    def _claim(self, option):
        """
        Reject names already taken by an option or command option of this builder.
        """
        if option.long_name in self._options or option.long_name in self._command_options:
            raise CannotAddOptionError("an option named '--%s' exists already" % option.long_name, reason="exists-already")
        if option.short_name is not None and (
            option.short_name in self._options_by_short or
            option.short_name in self._command_options_by_short
        ):
            raise CannotAddOptionError("an option named '-%s' exists already" % option.short_name, reason="exists-already")

    def get_format(self):
        return ArgsFormat(self, self._base_format)


class ArgsFormat(_FormatQueries, metaclass=IntrospectableType):
    """
    Immutable description of what a command accepts.

    Built from an iterable of elements (CommandName, CommandOption, Argument,
    Option) or from an ArgsFormatBuilder. The base format, if any, contributes
    its elements first to every listing.
    """

    __introspectable__ = (
        "elements",
        "base_format",
    )
    __displayable__ = (
        "elements",
    )

    def __new__(cls, elements=(), base_format=None):
        if isinstance(elements, ArgsFormatBuilder):
            builder = elements
            if base_format is None:
                base_format = builder.base_format
            elif base_format is not builder.base_format:
                raise ValueError(f"{cls.__typename__} base format differs from the builder's base format")
        elif isinstance(elements, Iterable):
            builder = ArgsFormatBuilder(base_format)
            for element in elements:
                match element:
                    case CommandName():
                        builder.add_command_name(element)
                    case CommandOption():
                        builder.add_command_option(element)
                    case Argument():
                        builder.add_argument(element)
                    case Option():
                        builder.add_option(element)
                    case _:
                        raise TypeError(f"{cls.__typename__} elements must be command names, command options, arguments or options, got {type(element).__name__!r}")
        else:
            raise TypeError(f"{cls.__typename__} elements must be an iterable or an args-format-builder")

        self = super().__new__(cls)
        self._base_format = base_format
        self._command_names = tuple(builder.get_command_names(False))
        self._command_options = dict(builder._command_options)
        self._command_options_by_short = dict(builder._command_options_by_short)
        self._arguments = builder.get_arguments(False)
        self._options = builder.get_options(False)
        self._options_by_short = dict(builder._options_by_short)
        self._elements = (
            *self._command_names,
            *self._command_options.values(),
            *self._arguments.values(),
            *self._options.values(),
        )
        return self

    @classmethod
    def build(cls, base_format=None):
        return ArgsFormatBuilder(base_format)


__all__ = (
    "ArgumentFlag",
    "OptionFlag",
    "CommandName",
    "CommandOption",
    "Argument",
    "Option",
    "ArgsFormat",
    "ArgsFormatBuilder",
)
