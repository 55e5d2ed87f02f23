"""
Value coercion for argument and option tokens.

Every parser takes the raw value (usually a string, sometimes an already
coerced Python value) and a `nullable` switch. When nullable, both None and
the literal "null" map to None.

Failures raise ValueError with a lowercase message; the binder wraps them into
InvalidValueError naming the offending argument or option.
"""
import re

_NUMERIC = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*")
_INTEGRAL = re.compile(r"\s*[+-]?\d+\s*")

_TRUTHY = frozenset(("true", "1", "yes", "on"))
_FALSY = frozenset(("false", "0", "no", "off", ""))


def _isnull(value, nullable):
    return nullable and (value is None or value == "null")


def _isnumeric(value):
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    return isinstance(value, str) and _NUMERIC.fullmatch(value) is not None


def parse_string(value, nullable=True):
    """
    Coerce a value to a string.

    None and booleans are spelled the way they are typed on a command line
    ("null", "true", "false") so that a non-nullable string never loses them.
    """
    if _isnull(value, nullable):
        return None
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def parse_boolean(value, nullable=True):
    """
    Coerce a value to a boolean.

    Accepted literals are case-sensitive: true/1/yes/on and false/0/no/off.
    The empty string is false. The integers 0 and 1 are accepted as well.
    """
    if _isnull(value, nullable):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        if value in _FALSY:
            return False
        if value in _TRUTHY:
            return True
    raise ValueError("the value %r cannot be parsed as boolean" % (value,))


def parse_integer(value, nullable=True):
    if _isnull(value, nullable):
        return None
    if isinstance(value, bool):
        return int(value)
    if _isnumeric(value):
        if isinstance(value, str) and _INTEGRAL.fullmatch(value):
            return int(value)
        try:
            return int(float(value))
        except OverflowError:
            pass
    raise ValueError("the value %r cannot be parsed as integer" % (value,))


def parse_float(value, nullable=True):
    if _isnull(value, nullable):
        return None
    if isinstance(value, bool):
        return float(value)
    if _isnumeric(value):
        return float(value)
    raise ValueError("the value %r cannot be parsed as float" % (value,))


__all__ = (
    "parse_string",
    "parse_boolean",
    "parse_integer",
    "parse_float",
)
