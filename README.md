# minish

A small interactive shell for POSIX systems. It reads a line at the
`minishell> ` prompt, checks it for syntax errors, splits it into tokens,
expands variables and quotes, and runs the result, either as a single
command or as a pipeline.

## Features

- Single and double quotes. `$NAME` and `$?` are expanded outside single
  quotes; an unquoted expansion that contains blanks is split into several
  words, and one that expands to nothing is dropped.
- Pipelines joined with `|`; each command of a pipeline runs in its own
  process and the exit status of the last one becomes the shell's status.
- Redirections: `<`, `>`, `>>` and here-documents with `<<`. A quoted
  here-document delimiter turns off expansion inside the body. The body is
  written to a temporary file in the system temporary directory, which is
  removed once it has been opened.
- Builtins: `echo` (with `-n`), `cd` (with no argument or `~` for `HOME`,
  and `-` for `OLDPWD`), `pwd`, `export`, `unset`, `env` and `exit`.
- Other commands are looked up on `PATH`; names containing a `/` are used
  as given. A file that cannot be executed directly and does not start
  with `#!` is run through `/bin/sh`.
- `SHLVL` is raised by one on start. With an empty environment a default
  one is created with `OLDPWD`, `PATH`, `PWD` and `SHLVL=1`.
- Syntax errors (`bad quote`, `bad pipe`, `bad op`, `bad arg`) are reported
  and set the exit status to 2. Ctrl-C at the prompt sets it to 130.

## Installing

```
pip install .
```

## Running

```
minish
```

The shell takes no arguments and must be started from a terminal. When the
`readline` module is available, line editing and history work at the
prompt. End the session with `exit [code]` or Ctrl-D.

## Using it from Python

```python
from minish.shell import Shell

shell = Shell(["PATH=/usr/bin:/bin", "HOME=/tmp"])
status = shell.run_line("echo hello | tr a-z A-Z")
```

`Shell` takes the environment as `KEY=VALUE` strings (by default the
current process environment) and an optional `read_line` function, called
with a prompt and returning a line or `None` at end of input; it is used for
the prompt and for here-document bodies. `Shell.run_line()` runs one line
and returns the exit status; the `exit` builtin raises
`minish.builtins.ShellExit`, whose `code` is the requested exit code.
`Shell.loop()` runs the prompt loop until input ends or `exit` is run and
returns the exit code.

The stages are also usable on their own: `minish.syntax.check_syntax`,
`minish.lexer.tokenize`, `minish.expansion.expand_tokens`,
`minish.parser.parse_commands` and, in `minish.executor`, `run_command` and
`run_pipeline`.

## What it does not do

There is no `;`, `&&`, `||`, subshells, background jobs or job control, no
filename globbing, no backslash escapes and no shell scripts: the shell only
runs lines typed at its prompt. Assignments such as `NAME=value` on their own
are not variable assignments; use `export`. There is no history file.

## Tests

```
pip install .[test]
pytest
```