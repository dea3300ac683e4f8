"""Persistent settings: search folders, pins and aliases, kept in a YAML file."""

from __future__ import annotations

import copy
import os
from typing import Any, Iterable

import yaml

from gimme import log
from gimme.paths import normalize

CONFIG_NAME = ".gimme.config"
CONFIG_EXTENSIONS = ("yaml", "yml")
DEFAULT_FILE_NAME = ".gimme.config.yaml"

KEY_SEARCH_FOLDERS = "search-folders"
KEY_ALIASES = "aliases"
KEY_PINS_REPOSITORIES = "pins.repositories"
KEY_PINS_BRANCHES_GLOBAL = "pins.branches.global"
KEY_PINS_BRANCHES_REPOSITORIES = "pins.branches.repositories"

DEFAULT_SEARCH_FOLDER = "~/"
DEFAULT_GLOBAL_PINNED_BRANCHES = ("main", "master")


class ConfigError(Exception):
    """Raised when the configuration cannot be written."""


def _defaults() -> dict[str, Any]:
    return {
        KEY_SEARCH_FOLDERS: [DEFAULT_SEARCH_FOLDER],
        "pins": {
            "repositories": [],
            "branches": {
                "global": list(DEFAULT_GLOBAL_PINNED_BRANCHES),
                "repositories": {},
            },
        },
        KEY_ALIASES: {},
    }


_MISSING = object()


def _lookup(tree: Any, key: str) -> Any:
    node = tree
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return _MISSING
        node = node[part]
    return node


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _string_list(value: Any) -> list[str]:
    if value is None or value is _MISSING:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [_to_str(item) for item in value]
    return []


def _string_map(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): _to_str(item) for key, item in value.items()}


def _normalized_or_empty(path: str) -> str:
    try:
        return normalize(path)
    except OSError:
        return ""


def _default_search_dirs() -> list[str]:
    return ["$HOME", "."]


class Config:
    """Settings read from the config file, layered over built-in defaults."""

    def __init__(self, data: dict[str, Any] | None = None, path: str | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = copy.deepcopy(data) if data else {}

    @classmethod
    def load(cls, search_dirs: Iterable[str] | None = None) -> "Config":
        """Read the first config file found in ``search_dirs`` (``$HOME`` and ``.`` by default)."""
        dirs = list(search_dirs) if search_dirs is not None else _default_search_dirs()
        candidates = [f"{CONFIG_NAME}.{ext}" for ext in CONFIG_EXTENSIONS] + [CONFIG_NAME]
        for directory in dirs:
            base = os.path.abspath(os.path.expandvars(directory))
            for name in candidates:
                candidate = os.path.join(base, name)
                if os.path.isfile(candidate):
                    return cls._read(candidate)
        return cls()

    @classmethod
    def _read(cls, file_path: str) -> "Config":
        config = cls(path=file_path)
        try:
            with open(file_path, encoding="utf-8") as handle:
                content = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            log.error("Error reading gimme configuration", "err", exc)
            return config
        if content is None:
            return config
        if not isinstance(content, dict):
            log.error("Error reading gimme configuration", "err", "top level is not a mapping")
            return config
        config._data = content
        return config

    def _get(self, key: str) -> Any:
        value = _lookup(self._data, key)
        if value is _MISSING:
            value = _lookup(_defaults(), key)
        return value

    def _set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def settings(self) -> dict[str, Any]:
        """All settings, defaults included, as they would be written."""
        return _merge(_defaults(), self._data)

    # Search folders

    def search_folders(self) -> list[str]:
        """Configured search folders, normalised."""
        result = []
        for raw in _string_list(self._get(KEY_SEARCH_FOLDERS)):
            try:
                result.append(normalize(raw))
            except OSError as exc:
                log.error('Error parsing search folder "{}". Error: {}', raw, exc)
                result.append("")
        return result

    def add_group(self, group_path: str) -> None:
        """Add a search folder, replacing the default one if it is the only folder."""
        groups = _string_list(self._get(KEY_SEARCH_FOLDERS))
        try:
            normalized = normalize(group_path)
        except OSError as exc:
            log.error('Error parsing search folder "{}". Error: {}', group_path, exc)
            normalized = ""

        if any(_normalized_or_empty(g) == normalized for g in groups):
            log.echo('Group already exists: "{}".', group_path)
            return

        if groups == [DEFAULT_SEARCH_FOLDER]:
            groups = [group_path]
        else:
            groups.append(group_path)

        self._set(KEY_SEARCH_FOLDERS, groups)
        log.echo('Added search group "{}".', group_path)
        self.save()

    def delete_group(self, group_path: str) -> None:
        """Remove every search folder that normalises to the same path."""
        groups = _string_list(self._get(KEY_SEARCH_FOLDERS))
        normalized = _normalized_or_empty(group_path)
        remaining = [g for g in groups if _normalized_or_empty(g) != normalized]

        if len(remaining) == len(groups):
            log.echo('Group not found: "{}".', group_path)
            return

        self._set(KEY_SEARCH_FOLDERS, remaining)
        if self._save_logged():
            log.echo('Deleted search group "{}".', group_path)

    def delete_group_by_index(self, index: int) -> None:
        """Remove the search folder at ``index``."""
        groups = _string_list(self._get(KEY_SEARCH_FOLDERS))
        if not 0 <= index < len(groups):
            log.echo("Index out of range: {} (have {} groups).", index, len(groups))
            return

        removed = groups.pop(index)
        self._set(KEY_SEARCH_FOLDERS, groups)
        if self._save_logged():
            log.echo('Deleted search group "{}".', removed)

    # Pinned repositories

    def pinned_repos(self) -> list[str]:
        """Pinned repository paths, normalised where possible."""
        result = []
        for raw in _string_list(self._get(KEY_PINS_REPOSITORIES)):
            try:
                result.append(normalize(raw))
            except OSError as exc:
                log.error('Error parsing pinned path "{}". Error: {}', raw, exc)
                result.append(raw)
        return result

    def add_pinned_repo(self, repo_path: str) -> None:
        """Pin a repository path."""
        repos = _string_list(self._get(KEY_PINS_REPOSITORIES))
        try:
            normalized = normalize(repo_path)
        except OSError as exc:
            log.error('Error parsing pinned path "{}". Error: {}', repo_path, exc)
            return

        if any(_normalized_or_empty(r) == normalized for r in repos):
            log.echo('Pinned repo already exists: "{}".', repo_path)
            return

        repos.append(repo_path)
        self._set(KEY_PINS_REPOSITORIES, repos)
        if self._save_logged():
            log.echo('Added pinned repository "{}".', repo_path)

    def delete_pinned_repo(self, repo_path: str) -> None:
        """Unpin every repository path that normalises to ``repo_path``."""
        repos = _string_list(self._get(KEY_PINS_REPOSITORIES))
        normalized = _normalized_or_empty(repo_path)
        remaining = [r for r in repos if _normalized_or_empty(r) != normalized]

        if len(remaining) == len(repos):
            log.echo('Pinned repo not found: "{}".', repo_path)
            return

        self._set(KEY_PINS_REPOSITORIES, remaining)
        if self._save_logged():
            log.echo('Deleted pinned repository "{}".', repo_path)

    def delete_pinned_repo_by_index(self, index: int) -> None:
        """Unpin the repository at ``index``."""
        repos = _string_list(self._get(KEY_PINS_REPOSITORIES))
        if not 0 <= index < len(repos):
            log.echo("Index out of range: {} (have {} pinned repos).", index, len(repos))
            return

        removed = repos.pop(index)
        self._set(KEY_PINS_REPOSITORIES, repos)
        if self._save_logged():
            log.echo('Deleted pinned repository "{}".', removed)

    # Globally protected branches

    def global_pinned_branches(self) -> list[str]:
        """Branches protected in every repository."""
        return _string_list(self._get(KEY_PINS_BRANCHES_GLOBAL))

    def is_branch_globally_pinned(self, branch: str) -> bool:
        return branch in self.global_pinned_branches()

    def add_global_pinned_branch(self, branch: str) -> None:
        """Protect a branch everywhere; needs an existing config file."""
        branches = self.global_pinned_branches()
        if branch in branches:
            log.echo('Branch "{}" is already protected.', branch)
            return

        branches.append(branch)
        self._set(KEY_PINS_BRANCHES_GLOBAL, branches)
        self._write()
        log.echo('Added protected branch "{}".', branch)

    def delete_global_pinned_branch(self, branch: str) -> None:
        """Stop protecting a branch everywhere; needs an existing config file."""
        branches = self.global_pinned_branches()
        if branch not in branches:
            log.echo('Branch "{}" is not protected.', branch)
            return

        self._set(KEY_PINS_BRANCHES_GLOBAL, [b for b in branches if b != branch])
        self._write()
        log.echo('Removed protected branch "{}".', branch)

    # Per-repository pinned branches

    def repo_pinned_branches(self) -> dict[str, list[str]]:
        """Pinned branches keyed by repository identifier."""
        raw = self._get(KEY_PINS_BRANCHES_REPOSITORIES)
        if not isinstance(raw, dict):
            return {}
        return {
            str(repo_id): [b for b in branches if isinstance(b, str)]
            for repo_id, branches in raw.items()
            if isinstance(branches, (list, tuple))
        }

    def pinned_branches_for_repo(self, repo_identifier: str) -> list[str]:
        """Global protected branches followed by the repository's own pins."""
        return self.global_pinned_branches() + self.repo_pinned_branches().get(
            repo_identifier, []
        )

    def add_repo_pinned_branch(self, repo_identifier: str, branch: str) -> None:
        """Pin a branch for one repository."""
        pins = self.repo_pinned_branches()
        branches = pins.get(repo_identifier, [])
        if branch in branches:
            log.echo('Branch "{}" already pinned for repo "{}".', branch, repo_identifier)
            return

        pins[repo_identifier] = [*branches, branch]
        self._set(KEY_PINS_BRANCHES_REPOSITORIES, pins)
        if self._save_logged():
            log.echo('Added pinned branch "{}" for repo "{}".', branch, repo_identifier)

    def delete_repo_pinned_branch(self, repo_identifier: str, branch: str) -> None:
        """Unpin a branch for one repository, dropping the entry when it empties."""
        pins = self.repo_pinned_branches()
        if repo_identifier not in pins:
            log.echo('No pinned branches found for repo "{}".', repo_identifier)
            return

        branches = pins[repo_identifier]
        if branch not in branches:
            log.echo('Branch "{}" not pinned for repo "{}".', branch, repo_identifier)
            return

        remaining = [b for b in branches if b != branch]
        if remaining:
            pins[repo_identifier] = remaining
        else:
            del pins[repo_identifier]

        self._set(KEY_PINS_BRANCHES_REPOSITORIES, pins)
        if self._save_logged():
            log.echo('Deleted pinned branch "{}" for repo "{}".', branch, repo_identifier)

    def is_branch_pinned_for_repo(self, repo_identifier: str, branch: str) -> bool:
        """Tell whether ``branch`` is pinned for this repository (global pins aside)."""
        return branch in self.repo_pinned_branches().get(repo_identifier, [])

    # Aliases

    def aliases(self) -> dict[str, str]:
        """Short names mapped to their expansions."""
        return _string_map(self._get(KEY_ALIASES))

    def add_alias(self, short: str, expanded: str) -> None:
        """Add or replace an alias."""
        aliases = self.aliases()
        aliases[short] = expanded
        self._set(KEY_ALIASES, aliases)
        if self._save_logged():
            log.echo('Added alias "{}" -> "{}".', short, expanded)

    def delete_alias(self, short: str) -> None:
        """Remove an alias."""
        aliases = self.aliases()
        if short not in aliases:
            log.echo('Alias not found: "{}".', short)
            return

        del aliases[short]
        self._set(KEY_ALIASES, aliases)
        if self._save_logged():
            log.echo('Deleted alias "{}".', short)

    # Persistence

    def save(self) -> None:
        """Write settings to the config file, creating one in the home directory if needed.

        Raises ConfigError when the file cannot be written.
        """
        if self.path is None:
            home = os.environ.get("HOME", "")
            if not home:
                log.error("Could not determine home directory. Error: {}", "$HOME is not defined")
                return
            self.path = os.path.join(home, DEFAULT_FILE_NAME)
        self._write()

    def _write(self) -> None:
        if self.path is None:
            raise ConfigError("no config file in use")
        try:
            with open(self.path, "w", encoding="utf-8") as handle:
                yaml.safe_dump(self.settings(), handle, default_flow_style=False, sort_keys=True)
        except OSError as exc:
            raise ConfigError(f"could not write {self.path}: {exc}") from exc

    def _save_logged(self) -> bool:
        try:
            self.save()
        except ConfigError as exc:
            log.error("Error saving config. Error: {}", exc)
            return False
        return True