# pipechain

`pipechain` runs a chain of commands the way a shell pipeline does: the
first command reads from an input file, each command's output feeds the
next, and the last command writes to an output file.

    infile -> cmd1 -> cmd2 -> ... -> cmdN -> outfile

No shell is involved. Each command string is split on spaces, and text
inside single quotes is kept together as one argument, so
`"grep 'hello world'"` runs `grep` with the single argument `hello world`.
A quote only starts a quoted argument at the beginning of a word, and an
unclosed quote runs to the end of the string.

## Installation

    pip install .

## Usage

### Any number of commands

    pipechain infile "cmd1" "cmd2" ... "cmdN" outfile

At least two commands are required. The output file is created if needed
(mode 0644) and truncated. In this form the commands are started with an
empty environment.

    pipechain input.txt "cat" "grep error" "wc -l" count.txt

### Here-document input

    pipechain here_doc LIMITER "cmd1" "cmd2" ... "cmdN" outfile

Lines are read from standard input until a line equal to `LIMITER` (or
the end of input) is seen; those lines become the input of the first
command. In this mode the output file is appended to instead of
truncated.

    pipechain here_doc END "cat" "tr a-z A-Z" shout.txt

### Exactly two commands

    pipechain-pair infile "cmd1" "cmd2" outfile

This form accepts exactly two commands and behaves like
`< infile cmd1 | cmd2 > outfile`. The commands receive the caller's
environment.

## Finding programs

A command whose name contains a `/` is used as given. Otherwise the
directories of `PATH` are searched in order and the first one holding the
name wins; empty `PATH` fields are ignored. If the environment has no
`PATH`, names are looked up in the working directory; if the environment
is entirely empty, `/usr/bin/`, `/bin/` and `/usr/local/bin/` are searched.

## Errors and exit status

- A missing or unreadable input file is reported on standard error; the
  pipeline still runs, with the first command skipped and empty input
  passed along.
- A command that cannot be found is reported as
  `Command not found : <name>`.
- An output file that cannot be opened is reported and the exit status
  is 1.
- The exit status is that of the last command: 127 when it was not found,
  126 when it could not be executed, otherwise its own status (0 if it was
  ended by a signal).
- Wrong arguments print a usage message and exit non-zero: 1 for
  `pipechain-pair`, 3 for `pipechain`, 2 for `pipechain here_doc` with too
  few arguments.

## Library use

`pipechain.commands` splits and resolves commands:

```python
from pipechain.commands import split_cmd, resolve_command, search_paths

split_cmd("grep 'hello world' notes.txt")
# ['grep', 'hello world', 'notes.txt']

resolved = resolve_command("ls -l", search_paths())
resolved.found, resolved.program, resolved.argv
```

`count_args` gives an upper bound on the number of arguments in a
command string, and `command_exists(directory, name)` checks whether
`directory + name` exists.

`pipechain.pipeline` runs pipelines:

```python
from pipechain.pipeline import run_pipeline

status = run_pipeline(["cat", "wc -l"], "input.txt", "count.txt")
status = run_pipeline(["cat"], "line one\nline two\n", "out.txt", here_doc=True)
```

With `here_doc=True` the input argument is the text itself. `pass_env`
controls whether the commands get `env` (default `os.environ`) or an
empty environment. `read_here_doc(limiter, stream)` collects lines up to
the limiter, and `exit_code_for(error)` maps an `OSError` onto 127, 126
or 1.

## What it does not do

Only the splitting described above is done. There are no double quotes,
backslash escapes, variable expansion, globbing or redirections inside
command strings.

## Running the tests

    pip install .[test]
    pytest