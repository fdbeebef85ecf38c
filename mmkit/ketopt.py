"""Command-line option parsing with short clusters, long-option prefixes and permutation."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Hashable, Optional, Sequence


class ArgKind(enum.IntEnum):
    """Whether a long option takes an argument."""

    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


@dataclass(frozen=True)
class LongOption:
    """A long option: its name, argument kind and the value reported for it."""

    name: str
    has_arg: ArgKind
    val: Hashable


@dataclass(frozen=True)
class ParsedOption:
    """One parsed option.

    ``opt`` is the option character for a short option, or the ``val`` of the
    matching :class:`LongOption`. ``longidx`` is the index of that long option,
    or ``None`` for a short option.
    """

    opt: Hashable
    arg: Optional[str] = None
    longidx: Optional[int] = None


class OptionError(ValueError):
    """Base class for errors in the command line."""

    def __init__(self, message: str, argument: str):
        super().__init__(message)
        self.argument = argument


class UnknownOptionError(OptionError):
    """An unknown or ambiguous option was given."""


class MissingArgumentError(OptionError):
    """An option that needs an argument was the last word of the command line."""


def _match_long(text: str, longopts: Sequence[LongOption]) -> Optional[int]:
    exact = [k for k, o in enumerate(longopts) if o.name == text]
    partial = [k for k, o in enumerate(longopts) if o.name != text and o.name.startswith(text)]
    if len(exact) > 1 or (not exact and len(partial) > 1):
        return None
    if len(exact) == 1:
        return exact[0]
    if len(partial) == 1:
        return partial[0]
    return None


def parse_options(
    argv: Sequence[str],
    optstring: str,
    longopts: Optional[Sequence[LongOption]] = None,
    permute: bool = True,
) -> tuple[list[ParsedOption], list[str]]:
    """Parse ``argv`` (whose first element is the program name).

    Returns the parsed options in order and the remaining non-option arguments.
    With ``permute`` true, options may follow non-option arguments; otherwise
    parsing stops at the first non-option argument. A bare ``--`` ends option
    parsing. Raises :class:`UnknownOptionError` or :class:`MissingArgumentError`.
    """
    longopts = list(longopts or ())
    words = list(argv[1:])
    options: list[ParsedOption] = []
    positionals: list[str] = []
    i = 0
    while i < len(words):
        word = words[i]
        if word == "--":
            positionals.extend(words[i + 1:])
            break
        if not word.startswith("-") or word == "-":
            if permute:
                positionals.append(word)
                i += 1
                continue
            positionals.extend(words[i:])
            break
        if word.startswith("--"):
            name, has_eq, value = word[2:].partition("=")
            idx = _match_long(name, longopts) if longopts else None
            if idx is None:
                raise UnknownOptionError(f"unknown option in \"{word}\"", word)
            lo = longopts[idx]
            arg = value if has_eq else None
            if lo.has_arg == ArgKind.REQUIRED and not has_eq:
                if i + 1 < len(words):
                    i += 1
                    arg = words[i]
                else:
                    raise MissingArgumentError("missing option argument", word)
            options.append(ParsedOption(lo.val, arg, idx))
            i += 1
            continue
        pos = 1
        while pos < len(word):
            ch = word[pos]
            pos += 1
            where = optstring.find(ch) if ch != ":" else -1
            if where < 0:
                raise UnknownOptionError(f"unknown option in \"{word}\"", word)
            if optstring[where + 1:where + 2] == ":":
                if pos < len(word):
                    arg = word[pos:]
                elif i + 1 < len(words):
                    i += 1
                    arg = words[i]
                else:
                    raise MissingArgumentError("missing option argument", word)
                options.append(ParsedOption(ch, arg))
                break
            options.append(ParsedOption(ch))
        i += 1
    return options, positionals