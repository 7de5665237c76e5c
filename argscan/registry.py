"""
Argscan definition registry.

Scope
- Registry: the set of declared flags, options and commands, keyed by long name,
  plus the abbreviation bindings of flags and options.
- init_registry(): functional constructor mirroring Registry(...).

Namespaces
- flags and options share one long-name namespace;
- flag and option abbreviations share one character namespace;
- commands live in their own namespace;
- long names and abbreviations never conflict with each other ("v" the name and
  "v" the abbreviation are unrelated).

Registration contract
- The long name is checked and bound first, the abbreviation second. When only the
  abbreviation collides, DuplicateAbbreviationError is raised but the definition
  stays registered under its long name (without abbreviation).
- A registry is populated once, then only read. freeze() turns further
  registration into a RuntimeError; the scanner never mutates a registry.

Display knobs
- Headers, color toggle and palette are stored for an external help renderer and
  have no parsing effect. Palette entries are rich style strings validated on
  construction.
"""
import logging
from types import MappingProxyType

from rich.style import Style

from .definitions import *
from .faults import DuplicateNameError, DuplicateAbbreviationError
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_PALETTE = MappingProxyType({
    "title": "green",
    "description": "white",
    "header": "red",
    "command": "magenta",
    "command-description": "white",
    "flag": "blue",
    "flag-description": "white",
    "option": "blue",
    "option-description": "white",
    "option-allowed": "yellow",
})


def _without_abbreviation(definition, /):
    if isinstance(definition, OptionDef):
        return OptionDef(definition.name, definition.help, Unset, definition.default, definition.allowed)
    return FlagDef(definition.name, definition.help)


class Registry:
    """
    Declared flags, options and commands of a program.

    Parameters
    - name, description: program identity, display-only.
    - required: when True and at least one command is registered, the first
      token must be a command.
    - commands_header, flags_header, options_header: section headers for a renderer.
    - colorful: color toggle for a renderer.
    - palette: overrides of DEFAULT_PALETTE (rich style strings).
    """

    name = mirror("name")
    description = mirror("description")
    required = mirror("required")
    commands_header = mirror("commands_header")
    flags_header = mirror("flags_header")
    options_header = mirror("options_header")
    colorful = mirror("colorful")
    palette = mirror("palette")
    flags = mirror("flags")
    options = mirror("options")
    commands = mirror("commands")
    flag_abbreviations = mirror("flag_abbreviations")
    option_abbreviations = mirror("option_abbreviations")
    frozen = mirror("frozen")

    def __init__(
            self,
            name="",
            description="",
            *,
            required=False,
            commands_header="COMMANDS",
            flags_header="FLAGS",
            options_header="OPTIONS",
            colorful=False,
            palette=MappingProxyType({})
    ):
        for field, value in (
                ("name", name),
                ("description", description),
                ("commands_header", commands_header),
                ("flags_header", flags_header),
                ("options_header", options_header),
        ):
            if not isinstance(value, str):
                raise TypeError(f"registry {field!r} must be a string")

        styles = dict(DEFAULT_PALETTE)
        for key, style in dict(palette).items():
            if key not in DEFAULT_PALETTE:
                raise ValueError(f"registry 'palette' has no {key!r} entry")
            if not isinstance(style, str):
                raise TypeError(f"registry 'palette' entry {key!r} must be a style string")
            Style.parse(style)  # raises rich.errors.StyleSyntaxError
            styles[key] = style

        self._name = name
        self._description = description
        self._required = bool(required)
        self._commands_header = commands_header
        self._flags_header = flags_header
        self._options_header = options_header
        self._colorful = bool(colorful)
        self._palette = styles

        self._flags = {}
        self._options = {}
        self._commands = {}
        self._flag_abbreviations = {}
        self._option_abbreviations = {}
        self._frozen = False

    def freeze(self):
        """Forbid any further registration; returns the registry itself."""
        self._frozen = True
        return self

    def _check_mutable(self, operation):
        if self._frozen:
            raise RuntimeError(f"{operation}() cannot modify a frozen registry")

    def _bind(self, definition, names, abbreviations):
        """
        Register a flag or option: long name first, abbreviation second.

        The abbreviation is checked against both flag and option abbreviations only
        after the long name has been bound, so a colliding abbreviation leaves the
        definition usable by its long name.
        """
        kind = definition.kind.value
        name = definition.name

        if name in self._flags or name in self._options:
            owner = self.kindof(name).value
            raise DuplicateNameError(
                "%s name %r is already in use by %s %s" % (kind, name, "an" if owner == "option" else "a", owner),
                registry=self,
                name=name,
                hint="pick another long name for this %s" % kind,
            )

        names[name] = definition
        logger.debug("registered %s %r", kind, name)

        if not (abbreviation := definition.abbreviation):
            return definition

        if abbreviation in self._flag_abbreviations or abbreviation in self._option_abbreviations:
            names[name] = _without_abbreviation(definition)
            owner, _ = self.resolve(abbreviation)
            logger.debug("rejected abbreviation %r of %s %r (bound to %r)", abbreviation, kind, name, owner)
            raise DuplicateAbbreviationError(
                "abbreviation %r of %s %r is already bound to %r" % (abbreviation, kind, name, owner),
                registry=self,
                name=name,
                abbreviation=abbreviation,
                hint="%s %r stays usable as '--%s'; pick another abbreviation" % (kind, name, name),
            )

        abbreviations[abbreviation] = name
        logger.debug("bound abbreviation %r to %s %r", abbreviation, kind, name)
        return definition

    def add_flag(self, name, help="", abbreviation=Unset):
        """
        Declare a flag.

        Raises
        - DuplicateNameError: name already used by a flag or an option.
        - DuplicateAbbreviationError: abbreviation already bound (the flag itself
          is registered anyway, without abbreviation).
        """
        self._check_mutable("add_flag")
        return self._bind(FlagDef(name, help, abbreviation), self._flags, self._flag_abbreviations)

    def add_option(self, name, help="", abbreviation=Unset, default="", allowed=()):
        """
        Declare an option.

        Same uniqueness contract as add_flag(). `allowed` need not contain `default`.
        """
        self._check_mutable("add_option")
        return self._bind(
            OptionDef(name, help, abbreviation, default, allowed),
            self._options,
            self._option_abbreviations,
        )

    def add_command(self, name, help=""):
        """
        Declare a command.

        Raises
        - DuplicateNameError: name already used by a command.
        """
        self._check_mutable("add_command")
        definition = CommandDef(name, help)
        if definition.name in self._commands:
            raise DuplicateNameError(
                "command name %r is already in use" % definition.name,
                registry=self,
                name=definition.name,
                hint="pick another name for this command",
            )
        self._commands[definition.name] = definition
        logger.debug("registered command %r", definition.name)
        return definition

    def kindof(self, name, /):
        """Classify a long name; flags and options win over a same-named command."""
        if name in self._flags:
            return Kind.FLAG
        elif name in self._options:
            return Kind.OPTION
        elif name in self._commands:
            return Kind.COMMAND
        return Kind.UNKNOWN

    def resolve(self, abbreviation, /):
        """Return (name, kind) bound to an abbreviation, or ("", Kind.UNKNOWN)."""
        try:
            return self._flag_abbreviations[abbreviation], Kind.FLAG
        except KeyError:
            pass
        try:
            return self._option_abbreviations[abbreviation], Kind.OPTION
        except KeyError:
            return "", Kind.UNKNOWN

    def allows(self, option, value, /):
        """True when value is acceptable for the option; KeyError for an unknown option."""
        return self._options[option].allows(value)

    def abbreviation_of(self, name, /):
        """Reverse lookup of the abbreviation bound to a flag or option ("" if none)."""
        definition = self._flags.get(name) or self._options.get(name)
        return definition.abbreviation if definition else ""

    def __contains__(self, name):
        return name in self._flags or name in self._options or name in self._commands

    def __iter__(self):
        yield from self._commands.values()
        yield from self._flags.values()
        yield from self._options.values()

    def __len__(self):
        return len(self._commands) + len(self._flags) + len(self._options)

    def __rich_repr__(self):
        yield "name", self._name
        yield "description", self._description
        yield "required", self._required
        yield "commands", list(self._commands.values())
        yield "flags", list(self._flags.values())
        yield "options", list(self._options.values())

    def __repr__(self):
        return "registry(name=%r, commands=%d, flags=%d, options=%d)" % (
            self._name, len(self._commands), len(self._flags), len(self._options)
        )


def init_registry(name="", description="", /, **options):
    """Build a Registry with default display options (see Registry for keywords)."""
    return Registry(name, description, **options)


__all__ = (
    "Registry",
    "init_registry",
    "DEFAULT_PALETTE",
)
