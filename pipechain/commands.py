"""Splitting command strings into argument vectors and locating executables."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

DEFAULT_SEARCH_PATHS = ("/usr/bin/", "/bin/", "/usr/local/bin/")

_QUOTE = "'"
_SPACE = " "


@dataclass(frozen=True)
class ResolvedCommand:
    """An argument vector with its program located, and whether it was found."""

    argv: tuple[str, ...]
    found: bool

    @property
    def program(self) -> str:
        """The program path or name, the first element of ``argv``."""
        return self.argv[0]


def count_args(cmd: str) -> int:
    """Return an upper bound on the number of arguments in *cmd*.

    Words end at spaces or at a single quote; a quoted run counts as one
    argument. Trailing spaces count as one more (empty) slot.
    """
    count = 0
    i = 0
    length = len(cmd)
    while i < length:
        while i < length and cmd[i] == _SPACE:
            i += 1
        if i < length and cmd[i] == _QUOTE:
            closing = cmd.find(_QUOTE, i + 1)
            i = length if closing == -1 else closing + 1
        else:
            while i < length and cmd[i] not in (_SPACE, _QUOTE):
                i += 1
        count += 1
    return count


def _tokens(cmd: str):
    i = 0
    length = len(cmd)
    while i < length:
        while i < length and cmd[i] == _SPACE:
            i += 1
        if i < length and cmd[i] == _QUOTE:
            start = i + 1
            closing = cmd.find(_QUOTE, start)
            if closing == -1:
                yield cmd[start:]
                i = length
            else:
                yield cmd[start:closing]
                i = closing + 1
        else:
            start = i
            closing = cmd.find(_SPACE, start)
            i = length if closing == -1 else closing
            if i > start:
                yield cmd[start:i]


def split_cmd(cmd: str) -> list[str]:
    """Split *cmd* on spaces, keeping single-quoted runs as one argument.

    A quote only opens a quoted argument at the start of a word; an unclosed
    quote runs to the end of the string.
    """
    return list(_tokens(cmd))


def search_paths(env: Mapping[str, str] | None = None) -> list[str]:
    """Return the directories to search for programs, each ending in ``/``.

    An empty environment falls back to a fixed list of standard directories.
    Without ``PATH`` the only entry is ``""``, so names resolve against the
    working directory. Empty ``PATH`` fields are dropped.
    """
    if env is None:
        env = os.environ
    if not env:
        return list(DEFAULT_SEARCH_PATHS)
    if "PATH" not in env:
        return [""]
    return [f"{entry}/" for entry in env["PATH"].split(":") if entry]


def command_exists(directory: str, name: str) -> bool:
    """Tell whether ``directory + name`` exists on the file system."""
    return os.access(directory + name, os.F_OK)


def _argv_for(cmd: str) -> list[str]:
    if cmd == "":
        return ["."]
    if cmd.strip(_SPACE) == "":
        return ["\t"]
    return split_cmd(cmd) or ["/"]


def resolve_command(cmd: str, paths: Iterable[str]) -> ResolvedCommand:
    """Split *cmd* and locate its program in *paths*.

    A name holding ``/`` is taken as given. Otherwise the first directory
    holding the name wins and is prefixed to it. With no directories to
    search nothing is ever reported found.
    """
    argv = _argv_for(cmd)
    found = False
    for directory in paths:
        if "/" in argv[0]:
            found = True
            continue
        if not found and command_exists(directory, argv[0]):
            argv[0] = directory + argv[0]
            found = True
    return ResolvedCommand(tuple(argv), found)