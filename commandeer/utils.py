"""
Commandeer utilities (small building blocks shared by every layer)

Overview
- UnsetType / Unset
  • Sealed singleton marking "nothing was given", distinct from None.
  • Falsey, printable as "Unset".

- coalesce(value, default=None)
  • Swap Unset for a concrete default while keeping None/0/""/[] untouched.

- rename(callable, name) / @rename("name")
  • Stable __name__/__qualname__ for generated helpers.

- mirror("attr")
  • Read-only property over self._attr; containers are copied on access.

- ordinal(number)
  • "first", "second", ..., "11th", "22nd" labels for position-first messages.

- IntrospectableType
  • Metaclass deriving __typename__, mirrors and reprs from class attributes.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> ordinal(3)
    'third'
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for parameters that were not provided.

    Only one instance exists (Unset). It is falsey, prints as "Unset" and the
    type refuses to be subclassed.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values other than Unset are returned untouched:
    - coalesce(None, "x") -> None
    - coalesce(Unset, "x") -> "x"
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Assign __name__/__qualname__ to a callable, or build a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - rename(name) -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _detach(object):
    """
    Copy containers recursively so callers cannot mutate the backing field.

    Tuples keep their type (they are already immutable); other sequences come
    back as lists, mappings as dicts and sets as sets.
    """
    if isinstance(object, tuple):
        return tuple(map(_detach, object))
    elif isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_detach, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_detach, object.values())))
    elif isinstance(object, Set):
        return set(map(_detach, object))
    return object


def mirror(name, /):
    """
    Define a read-only property exposing the private field "_{name}".
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _detach(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    # 11th, 12th, 13th (and 111th, 112th, ...)
    if 10 < number % 100 < 20:
        return f"{number}th"

    return f"{number}%s" % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


class IntrospectableType(type):
    """
    Metaclass of the format elements, ArgsFormat, Command and Application.

    - __typename__ is derived from the class name ("CommandOption" becomes
      "command-option") and prefixes every validation message.
    - Each name in __introspectable__ becomes a read-only property mirroring
      the private "_name" field.
    - __repr__/__rich_repr__ list the __displayable__ names (falling back to
      __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
)
