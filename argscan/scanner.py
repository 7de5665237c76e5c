"""
Argscan token scanner.

Scope
- Scanner: walks a token sequence left to right against a Registry and builds a
  ParseResult, raising the first ParseError it meets.
- ParseResult: flags, options, command and positional leftovers of one parse.
- parse(registry, tokens): one-shot helper building a fresh Scanner per call.

Token shapes (checked in this order)
- first token, when commands are registered: a command name selects the command;
  anything else raises MissingCommandError if the registry requires a command,
  otherwise it falls through to the shapes below. This check happens once.
- "--": terminator, every remaining token becomes positional.
- "--name=value": option with an inline value.
- "--name": flag, or option taking the next token as its value.
- "-x": flag abbreviation, or option abbreviation taking the next token.
- "-x=value": option abbreviation with an inline value.
- "-xy=value": flag abbreviations x, then option abbreviation y with an inline value.
- "-xvalue": option abbreviation x with an attached value (allowed values are
  NOT checked on this form), otherwise a cluster of flag abbreviations "-xyz".
- anything else ("-", "", "word", ...): positional.

Values taken from the next token
- the next token must exist and must not start with '-' (MissingValueError);
- an empty next token is accepted verbatim;
- any other value must be one of the option's allowed values (InvalidValueError).

Indexing
- Positions in messages are 1-based ordinals of the offending token within the
  given sequence (“at second position”).
"""
import difflib
import logging
import shlex
from collections import deque
from collections.abc import Iterable

from .definitions import Kind
from .faults import *
from .registry import Registry
from .utils import ordinal

logger = logging.getLogger(__name__)

ParseResult = __import__("collections").namedtuple("ParseResult", (
    "flags",
    "options",
    "command",
    "positional",
))
ParseResult.__doc__ = """
Outcome of one parse.

- flags: every declared flag name -> bool (False unless present).
- options: every declared option name -> str (default unless supplied; last occurrence wins).
- command: the selected command name, or "".
- positional: leftover tokens, in input order.
"""


def _tokenize(tokens):
    """
    Normalize the parse input into a list of tokens.

    - str: shell-style split via shlex.split.
    - Iterable[str]: taken as-is; tokens are never trimmed, empty ones are kept.
    """
    if isinstance(tokens, str):
        return shlex.split(tokens)
    elif isinstance(tokens, Iterable):
        tokens = list(tokens)
        for token in tokens:
            if not isinstance(token, str):
                raise TypeError("parse() tokens must be a string or an iterable of strings")
        return tokens
    raise TypeError("parse() tokens must be a string or an iterable of strings")


class Scanner:
    """
    Stateful walker over one token sequence at a time.

    A Scanner only reads its registry. It keeps per-parse state, so one instance
    must not run two parses concurrently; parse() builds a fresh one per call.
    """

    def __init__(self, registry, /):
        if not isinstance(registry, Registry):
            raise TypeError("Scanner() argument must be a registry")
        self._registry = registry
        self._tokens = deque()
        self._index = 0
        self._flags = {}
        self._options = {}
        self._positional = []

    @property
    def registry(self):
        return self._registry

    def _pop(self):
        self._index += 1
        return self._tokens.popleft()

    def _fault(self, exception, message, /, **options):
        return exception(
            message,
            registry=self._registry,
            index=self._index,
            docs=getdoc(exception.__code__),
            **options
        )

    def _suggest(self, name):
        candidates = list(self._flags) + list(self._options)
        suggestions = difflib.get_close_matches(name, candidates, 3)
        if suggestions:
            return "did you mean '--%s'?" % suggestions[0], suggestions
        return "check the spelling against the declared flags and options", suggestions

    def _validate(self, option, value, token):
        if self._registry.allows(option, value):
            return value
        allowed = self._registry.options[option].allowed
        suggestions = difflib.get_close_matches(value, allowed, 1)
        raise self._fault(
            InvalidValueError,
            "invalid value %r for option %r at %s position" % (value, option, ordinal(self._index)),
            token=token,
            name=option,
            value=value,
            allowed=allowed,
            hint=("did you mean %r? " % suggestions[0] if suggestions else "")
                 + "expected one of: %s" % ", ".join(allowed),
        )

    def _take_value(self, option, token):
        """consume the next token as the value of an option (one token of lookahead)."""
        if not self._tokens or self._tokens[0].startswith("-"):
            raise self._fault(
                MissingValueError,
                "option %r at %s position expects a value" % (token, ordinal(self._index)),
                token=token,
                name=option,
                hint="pass a value after it (for example: %s <value>)" % token,
            )
        # an empty value is taken verbatim; others are checked before being consumed
        if value := self._tokens[0]:
            self._validate(option, value, token)
        return self._pop()

    def _unresolved(self, char, token, expected):
        raise self._fault(
            InvalidArgumentError,
            "unknown %s abbreviation %r in %r at %s position" % (expected, char, token, ordinal(self._index)),
            token=token,
            abbreviation=char,
            hint="use a declared abbreviation or the long form (--name)",
        )

    def _missing_inline(self, option, token):
        raise self._fault(
            MissingValueError,
            "option %r at %s position has nothing after '='" % (token, ordinal(self._index)),
            token=token,
            name=option,
            hint="add a value after '=' (for example: %s<value>)" % token,
        )

    def _scan_long(self, token):
        """--name, --name value, --name=value"""
        name, equals, value = token[2:].partition("=")
        kind = self._registry.kindof(name)

        if equals:
            if kind is not Kind.OPTION:
                hint, suggestions = self._suggest(name)
                if kind is Kind.FLAG:
                    message = "flag '--%s' at %s position cannot take a value" % (name, ordinal(self._index))
                    hint = "remove everything from '=' (for example: --%s)" % name
                else:
                    message = "unknown option '--%s' at %s position" % (name, ordinal(self._index))
                raise self._fault(
                    UnknownArgumentError,
                    message,
                    token=token,
                    name=name,
                    suggestions=suggestions,
                    hint=hint,
                )
            if not value:
                self._missing_inline(name, token)
            self._options[name] = self._validate(name, value, token)
        elif kind is Kind.FLAG:
            self._flags[name] = True
        elif kind is Kind.OPTION:
            self._options[name] = self._take_value(name, token)
        else:
            hint, suggestions = self._suggest(name)
            raise self._fault(
                UnknownArgumentError,
                "unknown option or flag %r at %s position" % (token, ordinal(self._index)),
                token=token,
                name=name,
                suggestions=suggestions,
                hint=hint,
            )

    def _scan_short(self, token):
        """-x, -x value"""
        name, kind = self._registry.resolve(char := token[1])
        if kind is Kind.FLAG:
            self._flags[name] = True
        elif kind is Kind.OPTION:
            self._options[name] = self._take_value(name, token)
        else:
            self._unresolved(char, token, "flag or option")

    def _scan_cluster(self, token):
        """-x=value, -xyz=value, -xvalue, -xyz"""
        equals = token.find("=")

        if equals == 1:
            self._unresolved("=", token, "flag or option")

        if equals == 2:
            name, kind = self._registry.resolve(char := token[1])
            if kind is not Kind.OPTION:
                self._unresolved(char, token, "option")
            if not (value := token[3:]):
                self._missing_inline(name, token)
            self._options[name] = self._validate(name, value, token)
            return

        if equals > 2:
            flags = []
            for char in token[1:equals - 1]:
                name, kind = self._registry.resolve(char)
                if kind is not Kind.FLAG:
                    self._unresolved(char, token, "flag")
                flags.append(name)
            option, kind = self._registry.resolve(char := token[equals - 1])
            if kind is not Kind.OPTION:
                self._unresolved(char, token, "option")
            if not (value := token[equals + 1:]):
                self._missing_inline(option, token)
            self._options[option] = self._validate(option, value, token)
            self._flags.update(dict.fromkeys(flags, True))
            return

        name, kind = self._registry.resolve(token[1])
        if kind is Kind.OPTION:
            # attached value: allowed values are deliberately not enforced here
            self._options[name] = token[2:]
            return

        flags = []
        for char in token[1:]:
            name, kind = self._registry.resolve(char)
            if kind is not Kind.FLAG:
                self._unresolved(char, token, "flag")
            flags.append(name)
        self._flags.update(dict.fromkeys(flags, True))

    def _scan_command(self, commands):
        if self._tokens[0] in commands:
            return self._pop()
        if self._registry.required:
            token = self._tokens[0]
            suggestions = difflib.get_close_matches(token, commands, 3)
            self._index += 1
            raise self._fault(
                MissingCommandError,
                "%r at %s position is not a command" % (token, ordinal(self._index)),
                token=token,
                suggestions=suggestions,
                hint=("did you mean %r? " % suggestions[0] if suggestions else "")
                     + "start with one of: %s" % ", ".join(commands),
            )
        return ""

    def parse(self, tokens, /):
        """
        Scan tokens and return a ParseResult.

        Raises the first ParseError met; nothing is returned in that case.
        """
        self._tokens = deque(_tokenize(tokens))
        self._index = 0
        self._flags = dict.fromkeys(self._registry.flags, False)
        self._options = {name: option.default for name, option in self._registry.options.items()}
        self._positional = []
        count = len(self._tokens)
        command = ""

        try:
            if (commands := self._registry.commands) and self._tokens:
                command = self._scan_command(list(commands))

            while self._tokens:
                token = self._pop()

                if token == "--":
                    self._positional.extend(self._tokens)
                    self._tokens.clear()
                elif token.startswith("--"):
                    self._scan_long(token)
                elif token.startswith("-") and len(token) == 2:
                    self._scan_short(token)
                elif token.startswith("-") and len(token) > 2:
                    self._scan_cluster(token)
                else:
                    self._positional.append(token)
        except ParseError as fault:
            logger.debug("parse failed: %s", fault)
            raise

        logger.debug(
            "parsed %d token(s): command=%r, %d positional(s)",
            count, command, len(self._positional)
        )
        return ParseResult(self._flags, self._options, command, self._positional)


def parse(registry, tokens, /):
    """
    Parse tokens against a registry with a fresh Scanner.

    Parameters
    - registry: a populated Registry (only read).
    - tokens: the argument vector without the program name, as an iterable of
      strings or a single shell-like string.

    Returns
    - ParseResult(flags, options, command, positional)
    """
    return Scanner(registry).parse(tokens)


__all__ = (
    "ParseResult",
    "Scanner",
    "parse",
)
