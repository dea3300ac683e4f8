"""Path normalisation for configured folders and user input."""

from __future__ import annotations

import os
import re

_SPECIAL = r"*#$@!?\-0-9"
_EXPANSION = re.compile(
    r"\$\{([^}]*)\}"          # ${name}, or ${} which is dropped
    r"|\$\{"                  # unterminated ${ is dropped
    rf"|\$([{_SPECIAL}])"     # single-character special variables
    r"|\$([A-Za-z0-9_]+)"     # $name
)


def _expand_env(text: str) -> str:
    """Replace $VAR and ${VAR} with environment values; unset ones become empty."""

    def replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2) or match.group(3)
        if not name:
            return ""
        return os.environ.get(name, "")

    return _EXPANSION.sub(replace, text)


def _home_dir() -> str:
    variable = "USERPROFILE" if os.name == "nt" else "HOME"
    home = os.environ.get(variable, "")
    if not home:
        shown = f"%{variable}%" if os.name == "nt" else f"${variable}"
        raise OSError(f"{shown} is not defined")
    return home


def _clean(path: str) -> str:
    cleaned = os.path.normpath(path) if path else "."
    if os.sep == "/" and cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def normalize(path: str) -> str:
    """Expand environment variables and a leading ``~``, then clean the path.

    Raises OSError when the home directory is needed but not known.
    """
    expanded = _expand_env(path)
    if expanded.startswith("~"):
        expanded = _home_dir() + expanded[1:]
    return _clean(expanded)