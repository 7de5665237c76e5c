"""
Argscan faults (registration and parsing errors) and their rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing error.
  Codes are grouped by domain to keep messages consistent and logs searchable.
- ArgumentException: base type carrying a message plus read-only context options,
  able to render itself through rich in a friendly, lowercased way.
- RegistryError / ParseError: the two failure domains (registration vs scanning).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Position-first messages: parse faults include the ordinal position of the
  offending token (“at third position”) and name the token or character.
- Short titles, one-sentence bodies, a single clear hint.

Integration
- The registry and the scanner raise these exceptions; nothing here prints.
  A host that wants pretty output can `Console(stderr=True).print(fault)`.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (211xx)
      • DUPLICATE_NAME, DUPLICATE_ABBREVIATION
    - routing (221xx)
      • MISSING_COMMAND
    - flags/options (2211x)
      • UNKNOWN_ARGUMENT, INVALID_ARGUMENT, MISSING_VALUE, INVALID_VALUE

    normalize() lets the host remap codes to its own labels through a
    __codes__ mapping in __main__.
    """
    # --- registration errors (21xxx) ---
    DUPLICATE_NAME              = 21101
    DUPLICATE_ABBREVIATION      = 21102

    # --- routing errors (22xxx) ---
    MISSING_COMMAND             = 22101

    # --- flag/option errors (22xxx) ---
    UNKNOWN_ARGUMENT            = 22111
    INVALID_ARGUMENT            = 22112
    MISSING_VALUE               = 22113
    INVALID_VALUE               = 22114

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ exposes no __codes__ mapping (or the code is not in it),
        the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ArgumentException(Exception):
    """
    base type of every argscan fault.

    options
    - code/title: default to the class-level __code__/__title__.
    - hint: one actionable sentence shown under the message.
    - registry: the registry involved (used for the program name and colors).
    - any other context (token, index, name, value, ...) is kept verbatim and
      exposed read-only through `options`.
    """
    __code__ = Unset
    __title__ = "argument error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | Unset):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(coalesce(message, ""))
        self.message = coalesce(message, "")
        self.options = MappingProxyType({
            "code": type(self).__code__,
            "title": type(self).__title__,
            "hint": "",
        } | options)

    @property
    def code(self):
        return self.options["code"]

    @property
    def title(self):
        return self.options["title"]

    @property
    def hint(self):
        return self.options["hint"]

    def __rich__(self):
        main = __import__("__main__")
        registry = self.options.get("registry")

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        colorful = self.options.get("colorful", getattr(registry, "colorful", False))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style] if colorful else "")

        prog = getattr(main, "__prog__", "") or getattr(registry, "name", "") or "argscan"
        code = self.code.normalize() if isinstance(self.code, FaultCode) else "-"

        header = Text.assemble(
            "[ ",
            text(prog, "prog-name"),
            " — ",
            text(code, "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")

        body = [message]
        if self.hint:
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*body), title=header, title_align="left")

        return Group(header, *body)


class RegistryError(ArgumentException, ValueError):
    """registration-time fault (never raised while parsing)."""
    __title__ = "registration error"


class ParseError(ArgumentException):
    """parse-time fault; the parse call returns no partial result."""
    __title__ = "parse error"


class DuplicateNameError(RegistryError):
    __code__ = FaultCode.DUPLICATE_NAME
    __title__ = "duplicate name"


class DuplicateAbbreviationError(RegistryError):
    __code__ = FaultCode.DUPLICATE_ABBREVIATION
    __title__ = "duplicate abbreviation"


class MissingCommandError(ParseError):
    __code__ = FaultCode.MISSING_COMMAND
    __title__ = "missing command"


class UnknownArgumentError(ParseError):
    __code__ = FaultCode.UNKNOWN_ARGUMENT
    __title__ = "unknown option or flag"


class InvalidArgumentError(ParseError):
    __code__ = FaultCode.INVALID_ARGUMENT
    __title__ = "invalid abbreviation"


class MissingValueError(ParseError):
    __code__ = FaultCode.MISSING_VALUE
    __title__ = "missing value"


class InvalidValueError(ParseError):
    __code__ = FaultCode.INVALID_VALUE
    __title__ = "invalid value"


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    returns None when nothing is registered for the code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "FaultCode",
    "ArgumentException",
    "RegistryError",
    "ParseError",
    "DuplicateNameError",
    "DuplicateAbbreviationError",
    "MissingCommandError",
    "UnknownArgumentError",
    "InvalidArgumentError",
    "MissingValueError",
    "InvalidValueError",
    "getdoc",
)
