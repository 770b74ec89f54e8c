"""Batch validation: parse every line of one or more shell scripts.

Usage:
    simple-shell-check setup.sh
    simple-shell-check scripts/*.sh -v
"""

import argparse
import sys
from pathlib import Path

from .parser import ParseError, parse_line


def check_file(path: Path) -> tuple[int, list[tuple[int, ParseError]]]:
    """Parse each line of a file. Returns (ok, [(lineno, error), ...]).

    Undecodable bytes become U+FFFD and fail to parse like any other
    stray character.
    """
    ok = 0
    errors: list[tuple[int, ParseError]] = []
    with Path(path).open(encoding="utf-8", errors="replace") as f:
        for lineno, line in enumerate(f, 1):
            try:
                parse_line(line)
                ok += 1
            except ParseError as e:
                errors.append((lineno, e))
    return ok, errors


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Check that every line of a script parses")
    parser.add_argument("files", nargs="+", type=Path)
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    total_ok = 0
    total_err = 0
    all_errors: list[tuple[Path, int, ParseError]] = []

    for path in args.files:
        if not path.is_file():
            print(f"  SKIP  {path} (not found)")
            continue

        ok, errors = check_file(path)
        total_ok += ok
        total_err += len(errors)
        all_errors.extend((path, lineno, e) for lineno, e in errors)

        status = "OK" if not errors else "FAIL"
        print(f"  {status:4s}  {path}: {ok}/{ok + len(errors)} lines parse")

        if args.verbose:
            for lineno, e in errors:
                print(f"        line {lineno}: {e}")

    print()
    print(f"  Total: {total_ok}/{total_ok + total_err} lines parse")

    if total_err > 0:
        print()
        print("  Errors:")
        for path, lineno, e in all_errors:
            print(f"    {path}:{lineno}: {e}")
        sys.exit(1)
    else:
        print("  All clear.")


if __name__ == "__main__":
    main()
