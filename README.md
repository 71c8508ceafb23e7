# minishell

A small interactive shell. It reads command lines, splits them into
pipelines, expands variables and runs each command, either as a builtin
or as an external program found on `PATH`.

## Installing

```
pip install .
```

## Running

```
minishell
```

The prompt is `minishell$ `. End of input (Ctrl-D) prints `exit` and
leaves the shell; so does the `exit` builtin. Ctrl-C at the prompt
starts a fresh line and sets the exit status to 1. Command-line
arguments to `minishell` are ignored.

## What it understands

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `< file`, `> file`, `>> file` and here-documents with
  `<< DELIM` (the here-document lines are read from the shell's input)
- Single quotes, which keep their contents as they are, and double
  quotes, which still expand variables
- `$NAME` expansion from the shell's variables and `$?` for the exit
  status of the last command; a lone `$` stays as it is
- Builtins: `echo` (with `-n`, `-nn`, ...), `cd`, `pwd`, `env`,
  `export`, `unset` and `exit`

A line that starts with `|`, has an empty pipeline segment, an unclosed
quote or a redirection without a file name is rejected as a syntax error
and sets the exit status to 258. A command that cannot be found sets it
to 127.

## How commands run

- A builtin that stands alone without redirections runs in the shell
  itself, so `cd`, `export` and `unset` change the session.
- A builtin inside a pipeline or with a redirection runs on a copy of
  the variables and the working directory is restored afterwards; its
  changes do not last.
- The stages of a pipeline run one after another: each stage's whole
  output is collected and handed to the next as its input.
- External programs are started with an empty environment; the shell's
  variables are not passed on to them.
- `cd` with no argument goes to the shell's `HOME`; an argument holding
  `~` is resolved against the `HOME` of the process.

## Using it from Python

```python
from minishell.shell import Shell

shell = Shell(environ={"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
shell.execute("export GREETING=hello")
status = shell.execute('echo "$GREETING world"')
```

`Shell.execute` returns the exit status of the line; on `exit` it raises
`minishell.errors.ExitShell`, whose `code` holds the status.
`Shell.repl` runs the interactive loop and accepts a function to read
lines with in place of `input`.

Other parts can be used alone:

- `minishell.parser.parse_line` turns a line into `Command` objects
  (`minishell.models`) without running anything; `split_pipeline`,
  `split_words` and `expand` expose the single steps.
- `minishell.env.Environment` holds the variables that `export`,
  `unset` and `env` work on.
- `minishell.builtins.run_builtin` runs one builtin against given
  streams.
- `minishell.executor.Executor` runs a list of parsed commands.

## What it does not do

There is no `;`, `&&` or `||`, no background jobs, no globbing, no
redirection of descriptors other than standard input and output (such
as `2>`), and no running of script files: the shell reads commands
only interactively or through `Shell.execute`.

## Tests

```
pip install .[test]
pytest
```