"""
Commandeer faults (user-facing errors, schema violations) and rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing failure,
  grouped by domain (routing, options, positionals, values).
- CommandException: base type carrying a lowercase message plus options,
  able to render itself with rich and to surface itself via trigger().
  • CannotResolveCommandError: resolution failures (unknown command or
    sub-command, no default command).
  • CannotParseArgsError: binding failures (unknown option, missing value,
    missing argument, too many arguments, invalid value).
- SchemaViolation: configuration errors raised while building formats and
  command trees. These are programming errors and are never deferred.
- NoSuch*Error: lookups of undeclared arguments, options or commands.

Rendering options
- shell: print and exit(1) instead of raising.
- fancy: wrap the fault in a Panel.
- colorful: apply styles (merged over the built-in palette via "styles").
- codes: optional mapping used by FaultCode.normalize().
- console: the rich Console receiving the output (stderr by default).
- prog: program name shown in the header.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - routing (1110x)
      • UNKNOWN_COMMAND, UNKNOWN_SUBCOMMAND, NO_DEFAULT_COMMAND
    - options (1111x)
      • UNKNOWN_OPTION, OPTION_VALUE_NOT_ACCEPTED, MISSING_OPTION_VALUE
    - positionals (1112x)
      • MISSING_REQUIRED_ARGUMENT, TOO_MANY_ARGUMENTS
    - values (1113x)
      • INVALID_VALUE
    """
    # --- routing errors ---
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102
    NO_DEFAULT_COMMAND          = 11103

    # --- option errors ---
    UNKNOWN_OPTION              = 11111
    OPTION_VALUE_NOT_ACCEPTED   = 11112
    MISSING_OPTION_VALUE        = 11113

    # --- positional errors ---
    MISSING_REQUIRED_ARGUMENT   = 11121
    TOO_MANY_ARGUMENTS          = 11122

    # --- value errors ---
    INVALID_VALUE               = 11131

    def normalize(self, codes=None):
        """
        return the label for this code, remapped through codes when given.
        """
        return str(dict(codes or {}).get(self, self.value))


_STYLES = {
    # header
    "prog-name": "bold #E6E6F0",
    "code": "bold #00E5FF",
    "error-title": "bold #FF4DA6",

    # body
    "error-message": "#C8C8D0",
    "hint-arrow": "#9CE19C dim",
    "hint": "italic #9CE19C",
}


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    @property
    def suggestions(self):
        return tuple(self.options.get("suggestions", ()))

    def __rich__(self):
        styles = defaultdict(str, _STYLES | dict(self.options.get("styles") or {}))
        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(self.options.get("prog", "cli"), "prog-name"),
            " | ",
            text(code.normalize(self.options.get("codes")) if code else "", "code"),
            " | ",
            text(str(self.options.get("title", "error")).title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))

        if self.options.get("fancy", True):
            return Panel(Group(message, hint), title=header, title_align="left")

        return Group(header, message, hint)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from None
        console = self.options.get("console") or Console(stderr=True)
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CannotResolveCommandError(CommandException): ...
class CommandNotDefinedError(CannotResolveCommandError): ...
class UnknownSubcommandError(CannotResolveCommandError): ...
class NoDefaultCommandError(CannotResolveCommandError): ...

class CannotParseArgsError(CommandException): ...
class UnknownOptionError(CannotParseArgsError): ...
class OptionValueNotAcceptedError(CannotParseArgsError): ...
class MissingOptionValueError(CannotParseArgsError): ...
class MissingRequiredArgumentError(CannotParseArgsError): ...
class TooManyArgumentsError(CannotParseArgsError): ...
class InvalidValueError(CannotParseArgsError): ...


class SchemaViolation(ValueError):
    """
    a format or command tree was declared inconsistently.

    reason is a short machine-readable tag such as 'exists-already',
    'multi-valued-exists' or 'required-after-optional'.
    """

    def __init__(self, message, /, reason):
        super().__init__(message)
        self.reason = reason


class CannotAddArgumentError(SchemaViolation): ...
class CannotAddOptionError(SchemaViolation): ...
class CannotAddCommandError(SchemaViolation): ...


class NoSuchArgumentError(LookupError): ...
class NoSuchOptionError(LookupError): ...
class NoSuchCommandError(LookupError): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options are merged into the fault via copy.replace() before triggering.
    - in shell mode the fault is printed and the process exits; otherwise it is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "CommandException",
    "CannotResolveCommandError",
    "CommandNotDefinedError",
    "UnknownSubcommandError",
    "NoDefaultCommandError",
    "CannotParseArgsError",
    "UnknownOptionError",
    "OptionValueNotAcceptedError",
    "MissingOptionValueError",
    "MissingRequiredArgumentError",
    "TooManyArgumentsError",
    "InvalidValueError",
    "SchemaViolation",
    "CannotAddArgumentError",
    "CannotAddOptionError",
    "CannotAddCommandError",
    "NoSuchArgumentError",
    "NoSuchOptionError",
    "NoSuchCommandError",
    "trigger",
)
