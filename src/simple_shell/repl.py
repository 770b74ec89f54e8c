"""Interactive shell: read a line, parse it, apply it to the environment.

Usage:
    simple-shell
    simple-shell script.sh --keep-going
    simple-shell --dump-env -v < script.sh
"""

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from pydantic import BaseModel

from .ast import Assignment, Command, Empty, Quit, Value
from .parser import ParseError, parse_line

logger = logging.getLogger(__name__)


class Environment(BaseModel):
    """Variables bound by ``let``. Last write wins, no declaration needed."""

    bindings: dict[str, Value] = {}

    def assign(self, name: str, value: Value) -> None:
        self.bindings[name] = value

    def get(self, name: str, default: Value | None = None) -> Value | None:
        return self.bindings.get(name, default)

    def names(self) -> list[str]:
        return list(self.bindings)

    def __contains__(self, name: str) -> bool:
        return name in self.bindings

    def __len__(self) -> int:
        return len(self.bindings)

    def to_json(self) -> str:
        return json.dumps(
            {name: value.model_dump() for name, value in self.bindings.items()},
            indent=2,
        )


class Interpreter:
    """Reads commands from ``stdin`` until ``quit``, end of input or an error."""

    def __init__(
        self,
        stdin: IO[str],
        stdout: IO[str],
        stderr: IO[str],
        prompt: str = ">",
        keep_going: bool = False,
        echo: bool = False,
        env: Environment | None = None,
    ):
        self.stdin = stdin
        self.stdout = stdout
        self.stderr = stderr
        self.prompt = prompt
        self.keep_going = keep_going
        self.echo = echo
        self.env = env if env is not None else Environment()
        self.errors = 0

    def _lines(self) -> Iterator[str]:
        while True:
            if self.prompt:
                self.stdout.write(self.prompt)
                self.stdout.flush()
            line = self.stdin.readline()
            if not line:
                return
            yield line

    def execute(self, command: Command) -> bool:
        """Apply one command. Returns False when the shell should stop."""
        if isinstance(command, Quit):
            return False
        if isinstance(command, Assignment):
            self.env.assign(command.name, command.value)
            logger.debug("bound %s = %r", command.name, command.value)
        return True

    def run(self) -> int:
        """Run until done and return the process exit status.

        ``quit`` exits 0. Otherwise the status is 1 if any line failed to
        parse (with ``keep_going``, only after the input is exhausted).
        """
        for lineno, line in enumerate(self._lines(), 1):
            try:
                command = parse_line(line)
            except ParseError as e:
                self.errors += 1
                self.stderr.write(f"error: {e}\n")
                logger.debug("line %d: %s at %r", lineno, e.kind.value, e.remainder)
                if not self.keep_going:
                    return 1
                continue

            if not self.execute(command):
                logger.debug("quit at line %d", lineno)
                return 0
            if self.echo and not isinstance(command, Empty):
                self.stdout.write(line.rstrip("\r\n") + "\n")

        return 1 if self.errors else 0


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Minimal line-oriented command shell")
    parser.add_argument(
        "script",
        nargs="?",
        type=Path,
        default=None,
        help="Read commands from this file instead of stdin",
    )
    parser.add_argument(
        "--prompt",
        default=None,
        help="Prompt shown before each line (default: '>' for stdin, none for a script)",
    )
    parser.add_argument(
        "--keep-going", action="store_true", help="Report parse errors and continue"
    )
    parser.add_argument("--echo", action="store_true", help="Echo each executed line")
    parser.add_argument(
        "--dump-env", action="store_true", help="Print variables as JSON on exit"
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.script is not None and not args.script.exists():
        print(f"error: {args.script} not found", file=sys.stderr)
        sys.exit(2)

    prompt = args.prompt
    if prompt is None:
        prompt = "" if args.script is not None else ">"

    env = Environment()
    if args.script is not None:
        with args.script.open() as f:
            status = Interpreter(
                f, sys.stdout, sys.stderr, prompt, args.keep_going, args.echo, env
            ).run()
    else:
        status = Interpreter(
            sys.stdin, sys.stdout, sys.stderr, prompt, args.keep_going, args.echo, env
        ).run()

    if args.dump_env:
        print(env.to_json())
    sys.exit(status)


if __name__ == "__main__":
    main()
