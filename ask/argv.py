"""
Reorders command-line arguments before click sees them.

A prompt is free text and may contain words starting with ``-``, while flags
ask doesn't know are meant for the claude CLI. A strict option parser can't
tell those apart, so this pass sorts every token into:

- ask's own flags (and the values they take), kept first,
- unknown flags (and their values), set aside for the external program,
- prompt words, placed after a ``--`` separator so the parser never
  reads them as options.
"""

import re
from typing import NamedTuple

SEPARATOR = "--"

# subcommand names and aliases, these are never reordered
SUBCOMMANDS = frozenset({"history", "h", "config", "models", "help"})

# ask flags that consume the next argument as a value
VALUE_FLAGS = frozenset({"-m", "--model"})

# ask boolean flags, which may be given as --flag=value
BOOL_FLAGS = frozenset(
    {
        "--raw",
        "--dry-run",
        "--think",
        "--search",
        "-h",
        "--help",
        "-v",
        "--version",
    }
)

# "-1" or "-2.5" is part of the prompt, not a flag
_NEGATIVE_NUMBER = re.compile(r"-\d+(\.\d+)?")


class ClassifiedArgs(NamedTuple):
    flags: list[str]
    passthrough: list[str]
    positional: list[str]
    # a value flag given last, with nothing after it
    missing_value: str | None = None

    @property
    def args(self) -> list[str]:
        """The canonical argument list: flags, then ``--`` and the prompt words.

        A value flag missing its value is only kept when there are no prompt
        words, since the separator would otherwise be read as its value.
        """
        if not self.positional:
            if self.missing_value:
                return [*self.flags, self.missing_value]
            return list(self.flags)
        return [*self.flags, SEPARATOR, *self.positional]


def is_bool_flag(arg: str) -> bool:
    """True for a known boolean flag, with or without ``=value``."""
    if arg in BOOL_FLAGS:
        return True
    name, eq, _ = arg.partition("=")
    return bool(eq) and name in BOOL_FLAGS


def is_flag(arg: str) -> bool:
    return arg.startswith("-") and not _NEGATIVE_NUMBER.fullmatch(arg)


def classify(args: list[str]) -> ClassifiedArgs:
    """Sort arguments into ask flags, pass-through flags and prompt words.

    Each bucket keeps the original relative order of its tokens.
    """
    flags: list[str] = []
    passthrough: list[str] = []
    positional: list[str] = []
    missing_value: str | None = None

    i = 0
    while i < len(args):
        arg = args[i]
        i += 1

        # everything after an explicit separator is prompt text
        if arg == SEPARATOR:
            positional.extend(args[i:])
            break

        # ask flag with value (-m opus), the value is taken whatever it looks like
        if arg in VALUE_FLAGS:
            if i == len(args):
                missing_value = arg
                break
            flags += [arg, args[i]]
            i += 1
            continue

        # ask bool flag (--raw, --think=false, ...)
        if is_bool_flag(arg):
            flags.append(arg)
            continue

        # unknown flag, for the external program
        if is_flag(arg):
            passthrough.append(arg)
            # --flag=value is self-contained
            if "=" in arg:
                continue
            if i < len(args) and not args[i].startswith("-"):
                passthrough.append(args[i])
                i += 1
            continue

        positional.append(arg)

    return ClassifiedArgs(flags, passthrough, positional, missing_value)


def first_positional_arg(args: list[str]) -> str:
    """Return the first argument that isn't a flag or a flag's value, or ``""``."""
    skip = False
    for i, arg in enumerate(args):
        if skip:
            skip = False
            continue
        if arg == SEPARATOR:
            return args[i + 1] if i + 1 < len(args) else ""
        if arg in VALUE_FLAGS:
            skip = True
            continue
        if is_flag(arg):
            continue
        return arg
    return ""


def needs_reorder(args: list[str]) -> bool:
    """True if the arguments hold a prompt rather than a subcommand."""
    first = first_positional_arg(args)
    return bool(first) and first not in SUBCOMMANDS
