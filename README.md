# gimme

Building blocks for a multi-repo manager. The package holds the settings that
such a tool keeps, which are:

- *search groups*, the folders to look in for git repositories
- pinned repositories
- protected and pinned branches
- aliases

It also provides the `config` command that edits those settings, plus the
console and path helpers that the rest of the package uses.

## Installation

```
pip install .
```

To install it with the test dependencies:

```
pip install .[test]
```

## Settings: `gimme.config`

`Config.load()` reads the first configuration file it finds. It looks in
`$HOME` first, then in the current directory. In each directory it tries
`.gimme.config.yaml`, then `.gimme.config.yml`, then `.gimme.config`. You can
pass your own list of directories as `Config.load(search_dirs)`.

Values that the file does not set fall back to these defaults:

- search folders: `~/`
- pinned repositories: none
- globally protected branches: `main` and `master`
- per-repository pinned branches: none
- aliases: none

```python
from gimme.config import Config

config = Config.load()
config.search_folders()                 # normalised folder paths
config.add_group("~/code")              # replaces the default "~/" if it is the only one
config.add_alias("app", "~/code/app")
config.add_pinned_repo("~/code/app")
config.add_repo_pinned_branch("github.com/user/app", "feature")
config.pinned_branches_for_repo("github.com/user/app")
# ['main', 'master', 'feature']
```

Other methods:

- `delete_group`, `delete_group_by_index`
- `pinned_repos`, `delete_pinned_repo`, `delete_pinned_repo_by_index`
- `global_pinned_branches`, `is_branch_globally_pinned`,
  `add_global_pinned_branch`, `delete_global_pinned_branch`
- `repo_pinned_branches`, `delete_repo_pinned_branch`,
  `is_branch_pinned_for_repo`
- `aliases`, `delete_alias`

Each method that changes a setting writes the file straight away. If no file
was loaded, `save()` creates `~/.gimme.config.yaml`. When the file cannot be
written, these methods log an error and carry on.

Two methods work differently. `add_global_pinned_branch` and
`delete_global_pinned_branch` need a configuration file that is already in
use. They raise `ConfigError` when there is none or when writing fails.

## The `config` command: `gimme.config_commands`

`add_parser(subparsers)` registers `config` and its subcommands on an
`argparse` subparsers object. `run(config, options)` carries out the
subcommand that was parsed.

```python
import argparse
from gimme import config_commands
from gimme.config import Config

parser = argparse.ArgumentParser(prog="gimme")
config_commands.add_parser(parser.add_subparsers(dest="command"))
options = parser.parse_args(["config", "ls", "aliases"])
config_commands.run(Config.load(), options)
```

The subcommands are:

```
config add group <path>
config add alias <short> <expanded>
config add protected <branch>
config delete group <path|index>     (also: rm, remove)
config delete alias <short>
config delete protected <branch>
config ls [group|repo|branch|alias]  (also: list; groups, repos, branches, aliases)
```

`config`, `config add` and `config delete` print their help when you give no
subcommand. `config ls` with no section lists everything. The functions
`show_groups`, `show_pinned_repos`, `show_pinned_branches`, `show_aliases` and
`show_all` can also be called directly.

## Console output: `gimme.log`

User messages are written to standard error:

- `echo` writes the message with no label.
- `info`, `warning` and `error` add a level label.
- `debug` and `fatal` also add the call site. `fatal` then exits with status 1.

Messages can hold placeholders:

- `{}` takes the next argument.
- `{0}`, `{1}` and so on take an indexed argument.
- `{Name}` takes a field of an argument.

```python
from gimme.log import format_message

format_message("{} -> {}", "app", "~/code/app")   # 'app -> ~/code/app'
```

`to_stdout(path)` writes `cd://<path>` to standard output. A shell function
can read that line and change directory.

## Paths: `gimme.paths`

`normalize(path)` works in three steps:

1. It expands `$VAR` and `${VAR}`.
2. It replaces a leading `~` with the home directory.
3. It cleans the result.

It raises `OSError` when the home directory is needed but unknown.

## What this package does not do

The package does not install a command-line program. It does not walk the
search groups to find repositories. It does not work out which repository or
branch you are in. It does not run `git` to list branches or to report merged,
stale or worktree branches. It stores pins and aliases but does not act on
them.