"""simple-shell: a minimal line-oriented command interpreter.

Each line is one command: an empty line, ``let <name> = <value>`` or
``quit``. Values are unsigned 32-bit integers or quoted strings.

Example:
    from simple_shell import parse_command, Assignment, Unsigned

    rest, command = parse_command("let x = 1")
    assert command == Assignment(name="x", value=Unsigned(n=1))
"""

__version__ = "0.1.0"

from .ast import Assignment, Command, Empty, Quit, Str, Unsigned, Value
from .parser import ErrorKind, ParseError, parse_command, parse_line
from .repl import Environment, Interpreter

__all__ = [
    # Parse
    "parse_command",
    "parse_line",
    "ParseError",
    "ErrorKind",
    # AST
    "Value",
    "Str",
    "Unsigned",
    "Command",
    "Empty",
    "Assignment",
    "Quit",
    # Shell
    "Environment",
    "Interpreter",
]
