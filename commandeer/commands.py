"""
Commandeer command layer: the tree the resolver walks.

What this module provides
- CommandKind: closed set of node kinds carried by one Command type.
  • SIMPLE: top-level command, selected by a bare word ("tool package").
  • SUB_COMMAND: child selected by a bare word ("tool package add").
  • OPTION_COMMAND: child selected by a flag ("tool package --delete" / "-d").
- Command: one node; owns an ArgsFormat built on top of its parent's format,
  so command names and options are inherited down the tree.
- CommandCollection: read-only lookup of commands by name, short name or alias.
- Application: the root; owns the global format and the top-level commands.

Building a tree
    app = Application("tool", [Option("verbose", "v")])
    server = app.command("server", aliases=("srv",))
    server.sub_command("list", default=True).option_command("do", "D")
    server.sub_command("add", elements=[Argument("host", Argument.REQUIRED)])

Rules (CannotAddCommandError, a SchemaViolation)
- names and aliases cannot be empty ('empty-name').
- a name, short name or alias can be used once under one parent; option
  commands also cannot reuse an option name of the parent format
  ('exists-already').
- anonymous commands are never matched by name, hence they are always defaults.
"""
from collections.abc import Iterable
from enum import Enum

from .faults import CannotAddCommandError, NoSuchCommandError
from .formats import ArgsFormat, CommandName, CommandOption
from .utils import *
from .utils import IntrospectableType


class CommandKind(Enum):
    SIMPLE = "simple"
    SUB_COMMAND = "sub-command"
    OPTION_COMMAND = "option-command"


class CommandCollection:
    """
    Commands indexed by name, short name and alias.

    Iteration yields commands in insertion order; get_names() is sorted.
    """

    def __init__(self, commands=()):
        self._commands = {}
        self._short_names = {}
        self._aliases = {}
        for command in commands:
            self._add(command)

    def _add(self, command):
        self._commands[command.name] = command
        if command.short_name is not None:
            self._short_names[command.short_name] = command
        for alias in command.aliases:
            self._aliases[alias] = command

    def get(self, name):
        """
        Return the command registered under name, short name or alias.
        """
        for index in (self._commands, self._short_names, self._aliases):
            if name in index:
                return index[name]
        raise NoSuchCommandError("the command %r does not exist" % name)

    def contains(self, name):
        return name in self._commands or name in self._short_names or name in self._aliases

    def get_names(self, include_aliases=False):
        names = list(self._commands)
        if include_aliases:
            names += self._aliases
        return sorted(names)

    @property
    def aliases(self):
        return {alias: command.name for alias, command in self._aliases.items()}

    def to_list(self):
        return list(self._commands.values())

    def __getitem__(self, name):
        return self.get(name)

    def __contains__(self, name):
        return self.contains(name)

    def __iter__(self):
        return iter(list(self._commands.values()))

    def __len__(self):
        return len(self._commands)

    def __bool__(self):
        return bool(self._commands)

    def __repr__(self):
        return f"command-collection({", ".join(map(repr, self._commands))})"


def _sanitize_name(cls, metadata, /):
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} name must be a string")
    if not (name := name.strip()):
        raise CannotAddCommandError(f"{cls.__typename__} name cannot be empty", reason="empty-name")
    metadata["name"] = name

    if isinstance(metadata["aliases"], str) or not isinstance(metadata["aliases"], Iterable):
        raise TypeError(f"{cls.__typename__} aliases must be an iterable of strings")
    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        if not (alias := alias.strip()):
            raise CannotAddCommandError(f"{cls.__typename__} aliases cannot be empty", reason="empty-name")
        aliases.append(alias)
    metadata["aliases"] = tuple(aliases)

    if not isinstance(description := metadata["description"], str | Unset):
        raise TypeError(f"{cls.__typename__} description must be a string")
    elif isinstance(description, str) and not (description := description.strip()):
        raise ValueError(f"{cls.__typename__} description cannot be empty")
    metadata["description"] = coalesce(description)


def _attach_to_parent(self, parent):
    """
    Register self under parent, refusing names the parent already knows.
    """
    siblings = parent.sub_commands if isinstance(parent, Command) else parent.commands
    typeof = "option command" if self.kind is CommandKind.OPTION_COMMAND else "command"

    for name in (self.name, self.short_name, *self.aliases):
        if name is None:
            continue
        if name in siblings:
            raise CannotAddCommandError(f"{typeof} name {name!r} is already in use", reason="exists-already")
        if self.kind is CommandKind.OPTION_COMMAND and parent.format.has_option(name):
            raise CannotAddCommandError(f"{typeof} name {name!r} is already used by an option", reason="exists-already")

    parent._children._add(self)


class Command(metaclass=IntrospectableType):
    """
    One node of the command tree.

    Nodes are created through Application.command(), Command.sub_command() and
    Command.option_command() rather than directly. The node's format chains to
    the parent's format and starts with the node's own CommandName (or
    CommandOption for option commands) unless the node is anonymous.
    """

    __introspectable__ = (
        "name",
        "short_name",
        "aliases",
        "kind",
        "description",
        "default",
        "anonymous",
        "parent",
        "format",
    )
    __displayable__ = (
        "name",
        "short_name",
        "aliases",
        "kind",
        "default",
        "anonymous",
        "sub_commands",
    )

    def __new__(
            cls,
            name,
            parent,
            kind=CommandKind.SIMPLE,
            /,
            short_name=Unset,
            aliases=(),
            elements=(),
            description=Unset,
            *,
            default=False,
            anonymous=False,
    ):
        if not isinstance(parent, Command | Application):
            raise TypeError(f"{cls.__typename__} parent must be a command or an application")
        if not isinstance(kind, CommandKind):
            raise TypeError(f"{cls.__typename__} kind must be a command kind")
        if (kind is CommandKind.SIMPLE) != isinstance(parent, Application):
            raise ValueError(f"{cls.__typename__} of kind {kind.value!r} cannot be attached to a {type(parent).__typename__}")
        if short_name is not Unset and kind is not CommandKind.OPTION_COMMAND:
            raise TypeError(f"{cls.__typename__} short name is only accepted by option commands")

        metadata = {
            "name": name,
            "aliases": aliases,
            "description": description,
        }
        _sanitize_name(cls, metadata)

        if kind is CommandKind.OPTION_COMMAND:
            # Validated even for anonymous nodes so that names stay option-shaped.
            option = CommandOption(metadata["name"], short_name, metadata["aliases"])
            metadata["name"] = option.long_name
            metadata["short_name"] = option.short_name
            metadata["aliases"] = option.aliases
            head = option
        else:
            head = CommandName(metadata["name"], metadata["aliases"])
            metadata["short_name"] = None

        self = super().__new__(cls)
        self._name = metadata["name"]
        self._short_name = metadata["short_name"]
        self._aliases = metadata["aliases"]
        self._description = metadata["description"]
        self._kind = kind
        self._anonymous = bool(anonymous)
        self._default = bool(default) or self._anonymous
        self._parent = parent
        self._children = CommandCollection()
        self._format = ArgsFormat(
            [*(() if self._anonymous else (head,)), *elements],
            parent.format,
        )

        _attach_to_parent(self, parent)
        return self

    @property
    def application(self):
        parent = self._parent
        while isinstance(parent, Command):
            parent = parent.parent
        return parent

    @property
    def path(self):
        """
        Commands from the top-level one down to this node.
        """
        path = [command := self]
        while isinstance(command.parent, Command):
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def sub_commands(self):
        return CommandCollection(self._children)

    @property
    def named_sub_commands(self):
        return CommandCollection(command for command in self._children if not command.anonymous)

    @property
    def default_sub_commands(self):
        return CommandCollection(command for command in self._children if command.default)

    def is_option_command(self):
        return self._kind is CommandKind.OPTION_COMMAND

    def is_sub_command(self):
        return self._kind is CommandKind.SUB_COMMAND

    def sub_command(self, name, aliases=(), elements=(), description=Unset, *, default=False, anonymous=False):
        """
        Create a child selected by a bare word and return it.
        """
        return Command(
            name, self, CommandKind.SUB_COMMAND,
            aliases=aliases,
            elements=elements,
            description=description,
            default=default,
            anonymous=anonymous,
        )

    def option_command(self, name, short_name=Unset, aliases=(), elements=(), description=Unset, *, default=False, anonymous=False):
        """
        Create a child selected by a flag ("--name" or "-n") and return it.
        """
        return Command(
            name, self, CommandKind.OPTION_COMMAND,
            short_name=short_name,
            aliases=aliases,
            elements=elements,
            description=description,
            default=default,
            anonymous=anonymous,
        )


class Application(metaclass=IntrospectableType):
    """
    Root of the command tree.

    Parameters
    - name: program name, shown in fault headers.
    - elements: global arguments and options, inherited by every command.
    - description: optional one-line description.
    """

    __introspectable__ = (
        "name",
        "description",
        "format",
    )
    __displayable__ = (
        "name",
        "description",
        "commands",
    )

    def __new__(cls, name, elements=(), *, description=Unset):
        metadata = {
            "name": name,
            "aliases": (),
            "description": description,
        }
        _sanitize_name(cls, metadata)

        self = super().__new__(cls)
        self._name = metadata["name"]
        self._description = metadata["description"]
        self._children = CommandCollection()
        self._format = ArgsFormat(elements)
        return self

    @property
    def commands(self):
        return CommandCollection(self._children)

    @property
    def named_commands(self):
        return CommandCollection(command for command in self._children if not command.anonymous)

    @property
    def default_commands(self):
        return CommandCollection(command for command in self._children if command.default)

    def get_command(self, name):
        return self._children.get(name)

    def has_command(self, name):
        return self._children.contains(name)

    def command(self, name, aliases=(), elements=(), description=Unset, *, default=False, anonymous=False):
        """
        Create a top-level command and return it.
        """
        return Command(
            name, self, CommandKind.SIMPLE,
            aliases=aliases,
            elements=elements,
            description=description,
            default=default,
            anonymous=anonymous,
        )


__all__ = (
    "CommandKind",
    "CommandCollection",
    "Command",
    "Application",
)
