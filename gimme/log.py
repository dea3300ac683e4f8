"""Console output: user messages go to stderr, directory jumps to stdout."""

from __future__ import annotations

import dataclasses
import enum
import inspect
import os
import re
import sys
from typing import Any, Iterable, Iterator, NoReturn

_PLACEHOLDER = re.compile(r"\{(\w*)\}", re.ASCII)
_MISSING_VALUE = "missing value"
_PLAIN_TYPES = (
    str,
    bytes,
    int,
    float,
    complex,
    bool,
    list,
    tuple,
    dict,
    set,
    frozenset,
    type(None),
)


class _Level(enum.IntEnum):
    DEBUG = -4
    INFO = 0
    WARN = 4
    ERROR = 8
    FATAL = 12


_LABELS = {
    _Level.DEBUG: "DEBU",
    _Level.INFO: "INFO",
    _Level.WARN: "WARN",
    _Level.ERROR: "ERRO",
    _Level.FATAL: "FATA",
}

_threshold = _Level.INFO


def _sprint(value: Any) -> str:
    """Render a value the way the console output shows it."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_sprint(item) for item in value) + "]"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{_sprint(k)}:{_sprint(v)}" for k, v in items) + "]"
    return str(value)


def _field(arg: Any, name: str) -> tuple[bool, Any]:
    """Look up a data field called ``name`` on a structured argument."""
    if isinstance(arg, _PLAIN_TYPES):
        return False, None
    if dataclasses.is_dataclass(arg) and not isinstance(arg, type):
        if name in {f.name for f in dataclasses.fields(arg)}:
            return True, getattr(arg, name)
        return False, None
    try:
        value = getattr(arg, name)
    except AttributeError:
        return False, None
    if callable(value):
        return False, None
    return True, value


def has_placeholders(text: str) -> bool:
    """Tell whether a message holds ``{}``, ``{0}`` or ``{Name}`` placeholders."""
    return "{}" in text or _PLACEHOLDER.search(text) is not None


def format_message(template: Any, *args: Any) -> str:
    """Fill placeholders in ``template``.

    ``{}`` takes the next positional argument, ``{0}``/``{1}`` an indexed one,
    ``{Name}`` a field of the first argument that has it. Placeholders that
    cannot be filled are left as they are.
    """
    position = 0

    def replace(match: re.Match[str]) -> str:
        nonlocal position
        inner = match.group(1)
        if not inner:
            if position < len(args):
                value = args[position]
                position += 1
                return _sprint(value)
            return match.group(0)
        if inner.isdigit():
            index = int(inner)
            if index < len(args):
                return _sprint(args[index])
            return match.group(0)
        for arg in args:
            found, value = _field(arg, inner)
            if found:
                return _sprint(value)
        return match.group(0)

    return _PLACEHOLDER.sub(replace, _sprint(template))


def _quote(value: str) -> str:
    if value == "" or any(ch in value for ch in ' ="') or not value.isprintable():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        escaped = escaped.replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
        return f'"{escaped}"'
    return value


def _keyvals(pairs: Iterable[Any]) -> Iterator[str]:
    items = iter(pairs)
    for key in items:
        value = next(items, _MISSING_VALUE)
        yield f"{_quote(_sprint(key))}={_quote(_sprint(value))}"


def _emit(level: _Level | None, msg: Any, args: tuple[Any, ...], caller: str = "") -> None:
    if level is not None and level < _threshold:
        return
    text = _sprint(msg)
    pairs: tuple[Any, ...] = args
    if has_placeholders(text):
        text = format_message(text, *args)
        pairs = ()
    parts = []
    if level is not None:
        parts.append(_LABELS[level])
    if caller:
        parts.append(caller)
    if text:
        parts.append(text)
    parts.extend(_keyvals(pairs))
    sys.stderr.write(" ".join(parts) + "\n")
    sys.stderr.flush()


def _caller() -> str:
    frame = inspect.currentframe()
    try:
        target = frame.f_back.f_back if frame and frame.f_back else None
        if target is None:
            return ""
        return f"<{os.path.basename(target.f_code.co_filename)}:{target.f_lineno}>"
    finally:
        del frame


def to_stdout(path: str) -> None:
    """Announce a directory to change into, for the calling shell to pick up."""
    sys.stdout.write(f"cd://{path}\n")
    sys.stdout.flush()


def error(msg: Any, *args: Any) -> None:
    """Write an error message to stderr."""
    _emit(_Level.ERROR, msg, args)


def warning(msg: Any, *args: Any) -> None:
    """Write a warning to stderr."""
    _emit(_Level.WARN, msg, args)


def info(msg: Any, *args: Any) -> None:
    """Write an informational message to stderr."""
    _emit(_Level.INFO, msg, args)


def echo(msg: Any, *args: Any) -> None:
    """Write a plain message, without a level label, to stderr."""
    _emit(None, msg, args)


def debug(msg: Any, *args: Any) -> None:
    """Write a debug message, with its call site, when debug output is enabled."""
    _emit(_Level.DEBUG, msg, args, _caller())


def fatal(msg: Any, *args: Any) -> NoReturn:
    """Write a fatal message with its call site and exit with status 1."""
    _emit(_Level.FATAL, msg, args, _caller())
    raise SystemExit(1)