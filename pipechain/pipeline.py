"""Running a chain of commands connected by pipes, like a shell pipeline."""

from __future__ import annotations

import errno
import os
import subprocess
import sys
import tempfile
from collections.abc import Iterable, Mapping, Sequence
from typing import IO

from pipechain.commands import ResolvedCommand, resolve_command, search_paths

HERE_DOC = "here_doc"
NOT_FOUND_EXIT = 127
NOT_EXECUTABLE_EXIT = 126
GENERAL_FAILURE = 1

_USAGE_PAIR = "Error\nAllowed format : infile cmd1 cmd2 outfile\n"
_USAGE_CHAIN = "Error\nAllowed format : infile cmd1 cmd-N outfile\n"
_USAGE_HERE_DOC = "here_doc need at least 5 arguments\n"


class UsageError(Exception):
    """Raised when the command line does not have the expected shape."""

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


def exit_code_for(error: OSError) -> int:
    """Map a failure to start a program onto a shell-style exit status."""
    if error.errno == errno.ENOENT:
        return NOT_FOUND_EXIT
    if error.errno == errno.EACCES:
        return NOT_EXECUTABLE_EXIT
    return GENERAL_FAILURE


def read_here_doc(limiter: str, stream: IO[str]) -> str:
    """Collect lines from *stream* up to the line holding only *limiter*.

    The limiter line must end in a newline to count; end of input also stops.
    """
    terminator = limiter + "\n"
    collected = []
    for line in stream:
        if line == terminator:
            break
        collected.append(line)
    return "".join(collected)


def _report(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def _spawn(resolved: ResolvedCommand, stdin_fd: int, stdout_fd: int,
           child_env: Mapping[str, str]) -> subprocess.Popen | int:
    program = resolved.program
    executable = program if "/" in program else "./" + program
    try:
        return subprocess.Popen(
            list(resolved.argv),
            executable=executable,
            stdin=stdin_fd,
            stdout=stdout_fd,
            env=dict(child_env),
        )
    except OSError as error:
        _report(f"execve: {error.strerror}")
        return exit_code_for(error)


def _open_input(infile: str, here_doc: bool, stack: list[int]) -> tuple[int, OSError | None]:
    if here_doc:
        spool = tempfile.TemporaryFile()
        spool.write(infile.encode("utf-8", "surrogateescape"))
        spool.flush()
        fd = os.dup(spool.fileno())
        spool.close()
        os.lseek(fd, 0, os.SEEK_SET)
        stack.append(fd)
        return fd, None
    try:
        fd = os.open(infile, os.O_RDONLY)
    except OSError as error:
        _report(f"inputfile: {error.strerror}")
        fd = os.open(os.devnull, os.O_RDONLY)
        stack.append(fd)
        return fd, error
    stack.append(fd)
    return fd, None


def run_pipeline(
    commands: Iterable[str],
    infile: str,
    outfile: str,
    env: Mapping[str, str] | None = None,
    here_doc: bool = False,
    pass_env: bool = True,
) -> int:
    """Run *commands* as a pipeline from *infile* to *outfile*.

    With *here_doc* set, *infile* is the input text itself and *outfile* is
    appended to rather than truncated. An unreadable input file is reported
    and replaced by an empty input; the first command is then not run.
    Returns the exit status of the last command. Raises ``OSError`` when the
    output file cannot be opened.
    """
    commands = list(commands)
    if not commands:
        raise ValueError("at least one command is required")
    if env is None:
        env = os.environ
    child_env: Mapping[str, str] = env if pass_env else {}

    mode = os.O_APPEND if here_doc else os.O_TRUNC
    out_fd = os.open(outfile, os.O_CREAT | os.O_WRONLY | mode, 0o644)
    open_fds = [out_fd]
    processes: list[subprocess.Popen] = []
    last_result: subprocess.Popen | int = 0
    try:
        read_fd, infile_error = _open_input(infile, here_doc, open_fds)
        paths = search_paths(env)
        final = len(commands) - 1
        for index, cmd in enumerate(commands):
            if index == final:
                write_fd = out_fd
                next_read = -1
            else:
                next_read, write_fd = os.pipe()
                open_fds.extend((next_read, write_fd))

            resolved = resolve_command(cmd, paths)
            skip_first = index == 0 and infile_error is not None
            if not resolved.found and not skip_first:
                _report(f"Command not found : {resolved.program}")

            if skip_first:
                result: subprocess.Popen | int = exit_code_for(infile_error)
            elif not resolved.found:
                result = NOT_FOUND_EXIT
            else:
                result = _spawn(resolved, read_fd, write_fd, child_env)
            if isinstance(result, subprocess.Popen):
                processes.append(result)
            last_result = result

            os.close(read_fd)
            open_fds.remove(read_fd)
            if write_fd != out_fd:
                os.close(write_fd)
                open_fds.remove(write_fd)
            read_fd = next_read
    finally:
        for fd in open_fds:
            os.close(fd)

    for process in processes:
        process.wait()
    if isinstance(last_result, subprocess.Popen):
        code = last_result.returncode
        return code if code >= 0 else 0
    return last_result


def _parse_chain(args: Sequence[str]) -> tuple[bool, str | None, list[str], str]:
    argc = len(args) + 1
    here_doc = bool(args) and args[0] == HERE_DOC
    if here_doc:
        if argc < 6:
            raise UsageError(_USAGE_HERE_DOC, 2)
        return True, args[1], list(args[2:-1]), args[-1]
    if argc < 5:
        raise UsageError(_USAGE_CHAIN, 3)
    return False, args[0], list(args[1:-1]), args[-1]


def main(argv: Sequence[str] | None = None) -> int:
    """Run ``infile cmd1 ... cmdN outfile`` or ``here_doc LIMITER cmd1 ... cmdN outfile``."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        here_doc, source, commands, outfile = _parse_chain(args)
    except UsageError as error:
        sys.stderr.write(error.message)
        sys.stderr.flush()
        return error.exit_code
    if here_doc:
        source = read_here_doc(source, sys.stdin)
    try:
        return run_pipeline(commands, source, outfile, os.environ,
                            here_doc=here_doc, pass_env=False)
    except OSError as error:
        _report(f"outfile: {error.strerror}")
        return GENERAL_FAILURE


def main_pair(argv: Sequence[str] | None = None) -> int:
    """Run exactly ``infile cmd1 cmd2 outfile``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 4:
        sys.stderr.write(_USAGE_PAIR)
        sys.stderr.flush()
        return GENERAL_FAILURE
    infile, first, second, outfile = args
    try:
        return run_pipeline([first, second], infile, outfile, os.environ,
                            here_doc=False, pass_env=True)
    except OSError as error:
        _report(f"outfile: {error.strerror}")
        return GENERAL_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())