"""The ``config`` command: add, delete and list configuration values."""

from __future__ import annotations

import argparse
import re
import sys
from typing import Any, Callable

from gimme import log
from gimme.config import Config, ConfigError

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _help_on(parser: argparse.ArgumentParser) -> None:
    parser.set_defaults(config_action="help", help_parser=parser)


def add_parser(subparsers: Any) -> argparse.ArgumentParser:
    """Register the ``config`` command and its subcommands; return its parser."""
    config_parser = subparsers.add_parser(
        "config",
        help="Manage gimme configuration",
        description=(
            "Manages gimme's configuration. This command allows you to set and "
            "display configuration values such as search groups, pinned "
            "repositories, and aliases."
        ),
    )
    _help_on(config_parser)
    sections = config_parser.add_subparsers(dest="config_section", metavar="<command>")

    add = sections.add_parser(
        "add",
        help="Add configuration values",
        description="Add configuration values such as search groups or aliases.",
    )
    _help_on(add)
    add_targets = add.add_subparsers(dest="config_target", metavar="<command>")

    add_group = add_targets.add_parser(
        "group", help="Add a search group",
        description="Add a folder to search for git repositories.",
    )
    add_group.add_argument("path")
    add_group.set_defaults(config_action="add-group")

    add_alias = add_targets.add_parser(
        "alias", help="Add an alias",
        description="Add an alias to use a short name for a repository path.",
    )
    add_alias.add_argument("short")
    add_alias.add_argument("expanded")
    add_alias.set_defaults(config_action="add-alias")

    add_protected = add_targets.add_parser(
        "protected", help="Add a protected branch",
        description=(
            "Add a branch to the global protected branches list. Protected "
            "branches are preserved across all repositories."
        ),
    )
    add_protected.add_argument("branch")
    add_protected.set_defaults(config_action="add-protected")

    delete = sections.add_parser(
        "delete",
        aliases=["rm", "remove"],
        help="Delete configuration values",
        description="Delete configuration values such as search groups or aliases.",
    )
    _help_on(delete)
    delete_targets = delete.add_subparsers(dest="config_target", metavar="<command>")

    delete_group = delete_targets.add_parser(
        "group", help="Delete a search group",
        description="Remove a search group by path or index.",
    )
    delete_group.add_argument("target", metavar="path|index")
    delete_group.set_defaults(config_action="delete-group")

    delete_alias = delete_targets.add_parser(
        "alias", help="Delete an alias",
        description="Remove an alias by its short name.",
    )
    delete_alias.add_argument("short")
    delete_alias.set_defaults(config_action="delete-alias")

    delete_protected = delete_targets.add_parser(
        "protected", help="Delete a protected branch",
        description="Remove a branch from the global protected branches list.",
    )
    delete_protected.add_argument("branch")
    delete_protected.set_defaults(config_action="delete-protected")

    ls = sections.add_parser(
        "ls",
        aliases=["list"],
        help="List configuration values",
        description=(
            "List configuration values. Use subcommands to show specific "
            "sections, or run without subcommands to show all."
        ),
    )
    ls.set_defaults(config_action="ls-all")
    ls_targets = ls.add_subparsers(dest="config_target", metavar="<command>")

    for name, alias, summary, description, action in (
        ("group", "groups", "List search groups",
         "List all configured search groups.", "ls-groups"),
        ("repo", "repos", "List pinned repositories",
         "List all pinned repositories.", "ls-repos"),
        ("branch", "branches", "List pinned branches",
         "List all pinned branches (global and per-repo).", "ls-branches"),
        ("alias", "aliases", "List aliases",
         "List all configured aliases.", "ls-aliases"),
    ):
        target = ls_targets.add_parser(
            name, aliases=[alias], help=summary, description=description
        )
        target.set_defaults(config_action=action)

    return config_parser


def _add_group(config: Config, options: argparse.Namespace) -> None:
    try:
        config.add_group(options.path)
    except ConfigError:
        pass


def _add_protected(config: Config, options: argparse.Namespace) -> None:
    try:
        config.add_global_pinned_branch(options.branch)
    except ConfigError as exc:
        log.error("Failed to add protected branch: {}", exc)


def _delete_group(config: Config, options: argparse.Namespace) -> None:
    target = options.target
    if _INTEGER.fullmatch(target):
        config.delete_group_by_index(int(target))
    else:
        config.delete_group(target)


def _delete_protected(config: Config, options: argparse.Namespace) -> None:
    try:
        config.delete_global_pinned_branch(options.branch)
    except ConfigError as exc:
        log.error("Failed to delete protected branch: {}", exc)


_ACTIONS: dict[str, Callable[[Config, argparse.Namespace], None]] = {
    "add-group": _add_group,
    "add-alias": lambda config, options: config.add_alias(options.short, options.expanded),
    "add-protected": _add_protected,
    "delete-group": _delete_group,
    "delete-alias": lambda config, options: config.delete_alias(options.short),
    "delete-protected": _delete_protected,
    "ls-all": lambda config, options: show_all(config),
    "ls-groups": lambda config, options: show_groups(config),
    "ls-repos": lambda config, options: show_pinned_repos(config),
    "ls-branches": lambda config, options: show_pinned_branches(config),
    "ls-aliases": lambda config, options: show_aliases(config),
}


def run(config: Config, options: argparse.Namespace) -> None:
    """Carry out the ``config`` subcommand that ``options`` selects."""
    action = getattr(options, "config_action", "help")
    handler = _ACTIONS.get(action)
    if handler is None:
        parser = getattr(options, "help_parser", None)
        if parser is not None:
            parser.print_help(sys.stdout)
        return
    handler(config, options)


def show_groups(config: Config) -> None:
    """List the search groups with their indices."""
    groups = config.search_folders()
    log.echo("Search Groups:")
    if not groups:
        log.echo("  (none configured)")
        return
    for index, group in enumerate(groups):
        log.echo("  [{}] {}", index, group)


def show_pinned_repos(config: Config) -> None:
    """List the pinned repositories with their indices."""
    repos = config.pinned_repos()
    log.echo("Pinned Repositories:")
    if not repos:
        log.echo("  (none configured)")
        return
    for index, repo in enumerate(repos):
        log.echo("  [{}] {}", index, repo)


def show_pinned_branches(config: Config) -> None:
    """List globally protected branches, then branches pinned per repository."""
    branches = config.global_pinned_branches()
    log.echo("Global Protected Branches:")
    if not branches:
        log.echo("  (none configured)")
    else:
        for branch in branches:
            log.echo("  - {}", branch)

    repo_branches = config.repo_pinned_branches()
    if repo_branches:
        log.echo("")
        log.echo("Pinned Branches (per-repo):")
        for repo, pinned in repo_branches.items():
            log.echo("  {}:", repo)
            for branch in pinned:
                log.echo("    - {}", branch)


def show_aliases(config: Config) -> None:
    """List the aliases."""
    aliases = config.aliases()
    log.echo("Aliases:")
    if not aliases:
        log.echo("  (none configured)")
        return
    for short, expanded in aliases.items():
        log.echo("  {} -> {}", short, expanded)


def show_all(config: Config) -> None:
    """List every configuration section, separated by blank lines."""
    show_groups(config)
    log.echo("")
    show_pinned_repos(config)
    log.echo("")
    show_pinned_branches(config)
    log.echo("")
    show_aliases(config)