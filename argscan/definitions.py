r"""
Argscan definitions: the declared flags, options and commands.

Overview
- FlagDef: presence-only switch, matched as --name or through its abbreviation (-x).
- OptionDef: value-bearing switch with a string default and an optional ordered
  set of allowed values (empty means any value is accepted).
- CommandDef: mode selector, only ever matched on the first token.
- Kind: classification returned by registry lookups (flag/option/command/unknown).

Definitions are immutable once built: every field is exposed through a read-only
property (see DefinitionType) and containers are handed out as copies.

Metadata (sanitized on construction)
- name: non-empty, no whitespace, no '=' and no leading '-'
  (matches r"[^\s=-][^\s=]*"); the scanner could never reach anything else.
- abbreviation: Unset, "" or "\0" mean “no abbreviation”; otherwise exactly one
  character that is not '-', '=' or whitespace. Stored as "" when absent.
- help: string, trimmed (display-only, no parsing effect).
- default (options): string, "" when omitted.
- allowed (options): iterable of strings, duplicates rejected, kept in
  declaration order as a tuple.

Quick example:
    >>> from argscan.definitions import FlagDef, OptionDef
    >>> FlagDef("verbose", "talk more", "v")
    flag-def(name='verbose', help='talk more', abbreviation='v')
    >>> OptionDef("mode", abbreviation="m", default="fast", allowed=("fast", "safe")).allows("slow")
    False
"""
import functools
import operator
import re
from collections.abc import Iterable
from enum import Enum

from .utils import *


class Kind(Enum):
    """what a long name or an abbreviation resolves to."""
    FLAG = "flag"
    OPTION = "option"
    COMMAND = "command"
    UNKNOWN = "unknown"

    def __bool__(self):
        return self is not Kind.UNKNOWN


class DefinitionType(type):
    """
    Metaclass that turns definition classes into immutable, introspectable records.

    Responsibilities
    - Derive __typename__ from the class name ("FlagDef" -> "flag-def") for messages.
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field.
    - Provide stable __repr__/__rich_repr__ for diagnostics and pretty printers.
    """
    __introspectable__ = ()

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
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the fields shared by every definition.

    - name: must be a string (TypeError) shaped like r"[^\\s=-][^\\s=]*" (ValueError).
    - help: must be a string (TypeError); trimmed.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\s=-][^\s=]*", name):
        raise ValueError(
            f"{cls.__typename__} 'name' {name!r} cannot start with '-' nor contain '=' or whitespaces"
        )

    if not isinstance(help := metadata["help"], str):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    metadata["help"] = help.strip()


def _sanitize_switch_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the abbreviation of flags and options.

    Unset, "" and "\\0" all mean “no abbreviation” and are stored as "".
    """
    if not isinstance(abbreviation := metadata["abbreviation"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'abbreviation' must be a single character string")

    abbreviation = coalesce(abbreviation, "")
    if abbreviation == "\0":
        abbreviation = ""

    if len(abbreviation) > 1:
        raise ValueError(f"{cls.__typename__} 'abbreviation' must be a single character")
    elif abbreviation and (abbreviation in "-=" or abbreviation.isspace()):
        raise ValueError(f"{cls.__typename__} 'abbreviation' cannot be {abbreviation!r}")

    metadata["abbreviation"] = abbreviation


def _sanitize_valued_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the default and allowed values of options.

    - default: must be a string.
    - allowed: must be a non-string iterable of strings; duplicates are rejected
      and the declaration order is kept in a tuple.
    """
    if not isinstance(metadata["default"], str):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")

    if isinstance(allowed := metadata["allowed"], str) or not isinstance(allowed, Iterable):
        raise TypeError(f"{cls.__typename__} 'allowed' must be an iterable of strings")

    sanitized = []
    for value in allowed:
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'allowed' values must be strings")
        elif value in sanitized:
            raise ValueError(f"{cls.__typename__} 'allowed' cannot contain duplicates")
        sanitized.append(value)
    metadata["allowed"] = tuple(sanitized)


class FlagDef(metaclass=DefinitionType):
    """
    Presence-only switch definition.

    Absent from the input, a flag parses to False; present anywhere (as --name,
    -x or inside a cluster such as -xyz), it parses to True.
    """
    __introspectable__ = (
        "name",
        "help",
        "abbreviation",
    )
    __kind__ = Kind.FLAG

    def __new__(cls, name, /, help="", abbreviation=Unset):
        metadata = {
            "name": name,
            "help": help,
            "abbreviation": abbreviation,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_switch_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def kind(self):
        return type(self).__kind__

    @property
    def forms(self):
        """spellings accepted on the command line, long form first."""
        return ("--" + self.name,) + (("-" + self.abbreviation,) if self.abbreviation else ())


class OptionDef(metaclass=DefinitionType):
    """
    Value-bearing switch definition.

    The parsed value is always a string: the default when the option is absent,
    otherwise the value of its last occurrence. `allowed` restricts the accepted
    values (an empty tuple accepts anything) and does not need to contain the
    default.
    """
    __introspectable__ = (
        "name",
        "help",
        "abbreviation",
        "default",
        "allowed",
    )
    __kind__ = Kind.OPTION

    def __new__(cls, name, /, help="", abbreviation=Unset, default="", allowed=()):
        metadata = {
            "name": name,
            "help": help,
            "abbreviation": abbreviation,
            "default": default,
            "allowed": allowed,
        }
        _sanitize_metadata(cls, metadata)
        _sanitize_switch_metadata(cls, metadata)
        _sanitize_valued_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def kind(self):
        return type(self).__kind__

    @property
    def forms(self):
        """spellings accepted on the command line, long form first."""
        return ("--" + self.name,) + (("-" + self.abbreviation,) if self.abbreviation else ())

    def allows(self, value, /):
        """True when value is acceptable (vacuously so for an empty allowed set)."""
        return not self._allowed or value in self._allowed


class CommandDef(metaclass=DefinitionType):
    """Mode selector definition, only matched on the very first token."""
    __introspectable__ = (
        "name",
        "help",
    )
    __kind__ = Kind.COMMAND

    def __new__(cls, name, /, help=""):
        metadata = {
            "name": name,
            "help": help,
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def kind(self):
        return type(self).__kind__


__all__ = (
    "Kind",
    "FlagDef",
    "OptionDef",
    "CommandDef",
)

# The metaclass is an implementation detail.
del DefinitionType
