"""Line parser for the shell.

Grammar:
    command     = ws (let_cmd | quit_cmd | empty) ws
    let_cmd     = "let" assignment
    quit_cmd    = "quit"
    assignment  = ws IDENT ws "=" ws value
    value       = UNSIGNED | string
    string      = '"' (ALNUM | escape)* '"'
    escape      = "\\" ('"' | "n" | "\\")
    IDENT       = [A-Za-z_][A-Za-z0-9_]*
    UNSIGNED    = [0-9]+                      (0 .. 2**32 - 1)
    ws          = (" " | "\t" | "\r" | "\n")*

Every rule is a function of ``(text, pos)`` returning ``Success`` or
``Backtrack``. A ``Backtrack`` lets the caller try the next alternative at
the same position. Once a keyword, an opening quote or an ``=`` has been
seen the parse is committed: failures raise ``ParseError`` and are never
retried as something else.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .ast import U32_MAX, Assignment, Command, Empty, Quit, Str, Unsigned

WHITESPACE = " \t\r\n"

ESCAPES = {'"': '"', "n": "\n", "\\": "\\"}


class ErrorKind(Enum):
    NO_MATCH = "no match"  # soft failure, never raised
    MALFORMED_ESCAPE = "malformed escape"
    UNTERMINATED_STRING = "unterminated string"
    ILLEGAL_CHARACTER = "illegal character"
    INVALID_VALUE = "invalid value"
    EXPECTED_IDENTIFIER = "expected identifier"
    EXPECTED_SEPARATOR = "expected separator"
    UNRECOGNIZED_COMMAND = "unrecognized command"
    TRAILING_INPUT = "trailing input"


class ParseError(Exception):
    """Committed parse failure at ``position`` (0-based) in ``line``."""

    def __init__(self, kind: ErrorKind, msg: str, line: str, position: int):
        super().__init__(f"col {position + 1}: {msg}")
        self.kind = kind
        self.msg = msg
        self.line = line
        self.position = position

    @property
    def remainder(self) -> str:
        """Input left at the point of failure."""
        return self.line[self.position :]


@dataclass(frozen=True)
class Success:
    pos: int
    value: Any


@dataclass(frozen=True)
class Backtrack:
    pos: int
    expected: str
    reason: str | None = None


Result = Success | Backtrack


def _is_ident_start(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalpha())


def _is_ident_char(c: str) -> bool:
    return c == "_" or (c.isascii() and c.isalnum())


def _describe(text: str, pos: int) -> str:
    if pos >= len(text):
        return "end of line"
    return repr(text[pos])


# Lexical primitives


def skip_whitespace(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in WHITESPACE:
        pos += 1
    return pos


def keyword(text: str, pos: int, word: str) -> Result:
    """Match ``word`` only when it is not the prefix of a longer identifier."""
    end = pos + len(word)
    if text.startswith(word, pos) and (end == len(text) or not _is_ident_char(text[end])):
        return Success(end, word)
    return Backtrack(pos, repr(word))


def identifier(text: str, pos: int) -> Result:
    if pos >= len(text) or not _is_ident_start(text[pos]):
        return Backtrack(pos, "identifier")
    end = pos + 1
    while end < len(text) and _is_ident_char(text[end]):
        end += 1
    return Success(end, text[pos:end])


def unsigned(text: str, pos: int) -> Result:
    """Decimal digits as an unsigned 32-bit integer. Leading zeros are not octal."""
    end = pos
    while end < len(text) and text[end].isascii() and text[end].isdigit():
        end += 1
    if end == pos:
        return Backtrack(pos, "unsigned integer")
    digits = text[pos:end]
    n = int(digits, 10)
    if n > U32_MAX:
        return Backtrack(
            pos,
            "unsigned integer",
            reason=f"integer literal {digits} is out of range (max {U32_MAX})",
        )
    return Success(end, n)


def string(text: str, pos: int) -> Result:
    """Double-quoted string; returns the decoded body.

    Backtracks only if there is no opening quote. Everything after the quote
    is committed.
    """
    if pos >= len(text) or text[pos] != '"':
        return Backtrack(pos, "quoted string")
    chars = []
    i = pos + 1
    while i < len(text):
        c = text[i]
        if c == '"':
            return Success(i + 1, "".join(chars))
        if c == "\\":
            i += 1
            if i >= len(text):
                break
            if text[i] not in ESCAPES:
                raise ParseError(
                    ErrorKind.MALFORMED_ESCAPE,
                    f"invalid escape '\\{text[i]}' (expected \\\", \\n or \\\\)",
                    text,
                    i,
                )
            chars.append(ESCAPES[text[i]])
        elif c.isascii() and c.isalnum():
            chars.append(c)
        else:
            raise ParseError(
                ErrorKind.ILLEGAL_CHARACTER,
                f"illegal character {c!r} in string (only letters, digits and escapes)",
                text,
                i,
            )
        i += 1
    raise ParseError(
        ErrorKind.UNTERMINATED_STRING,
        f"unterminated string: no closing '\"' for the quote at col {pos + 1}",
        text,
        len(text),
    )


# Composite rules


def value(text: str, pos: int) -> Result:
    """Unsigned integer, else quoted string. Numbers are tried first."""
    number = unsigned(text, pos)
    if isinstance(number, Success):
        return Success(number.pos, Unsigned(n=number.value))
    quoted = string(text, pos)
    if isinstance(quoted, Success):
        return Success(quoted.pos, Str(text=quoted.value))
    return Backtrack(pos, "unsigned integer or quoted string", reason=number.reason)


def assignment(text: str, pos: int) -> Result:
    """``name = value``; only called once ``let`` has been recognised."""
    start = skip_whitespace(text, pos)
    name = identifier(text, start)
    if isinstance(name, Backtrack):
        raise ParseError(
            ErrorKind.EXPECTED_IDENTIFIER,
            f"expected an identifier after 'let', found {_describe(text, start)}",
            text,
            start,
        )

    sep = skip_whitespace(text, name.pos)
    if not text.startswith("=", sep):
        raise ParseError(
            ErrorKind.EXPECTED_SEPARATOR,
            f"expected '=' after {name.value!r}, found {_describe(text, sep)}",
            text,
            sep,
        )

    start = skip_whitespace(text, sep + 1)
    result = value(text, start)
    if isinstance(result, Backtrack):
        msg = result.reason or (
            f"expected an unsigned integer or a quoted string, found {_describe(text, start)}"
        )
        raise ParseError(ErrorKind.INVALID_VALUE, msg, text, start)
    return Success(result.pos, Assignment(name=name.value, value=result.value))


def _dispatch(text: str, pos: int) -> Success:
    if isinstance(kw := keyword(text, pos, "let"), Success):
        return assignment(text, kw.pos)
    if isinstance(kw := keyword(text, pos, "quit"), Success):
        return Success(kw.pos, Quit())
    if pos == len(text):
        return Success(pos, Empty())
    end = pos
    while end < len(text) and text[end] not in WHITESPACE:
        end += 1
    word = text[pos:end]
    raise ParseError(
        ErrorKind.UNRECOGNIZED_COMMAND,
        f"unrecognized command {word!r} (expected 'let', 'quit' or an empty line)",
        text,
        pos,
    )


def parse_command(line: str) -> tuple[str, Command]:
    """Parse one line. Returns ``(remainder, command)``.

    Surrounding whitespace is discarded, so the remainder is empty unless the
    command was followed by something else. Raises ``ParseError``.
    """
    text = line.rstrip(WHITESPACE)
    result = _dispatch(text, skip_whitespace(text, 0))
    end = skip_whitespace(text, result.pos)
    return text[end:], result.value


def parse_line(line: str) -> Command:
    """Parse one line that must contain exactly one command."""
    rest, command = parse_command(line)
    if rest:
        text = line.rstrip(WHITESPACE)
        position = len(text) - len(rest)
        if position > 0 and text[position - 1].isdigit() and _is_ident_char(rest[0]):
            msg = f"unexpected {rest!r} directly after a number (strings must be quoted)"
        else:
            msg = f"unexpected trailing input {rest!r}"
        raise ParseError(ErrorKind.TRAILING_INPUT, msg, text, position)
    return command
