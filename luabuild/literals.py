"""Lua literal formatting.

Helpers turning Python values into Lua source text: quoted string literals
compatible with Lua 5.4's ``string.format("%q", s)``, numbers, and inline
table constructors for nested lists and dicts. Everything here is a pure
function; :class:`luabuild.codegen.LuaBuilder` wraps them to append results.
"""
from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from .errors import InvalidArgument

LUA_KEYWORDS: frozenset[str] = frozenset({
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "goto", "if", "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while",
})

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DIGITS = frozenset("0123456789")


def is_identifier(name: str) -> bool:
    """True when ``name`` can be used bare as a Lua name (``t.name``, ``name = v``)."""

    return bool(_NAME_RE.fullmatch(name)) and name not in LUA_KEYWORDS


def escape(raw: str) -> str:
    """
    Quote ``raw`` as a double-quoted Lua string literal.

    Mirrors ``%q``: quotes and backslashes are escaped, control characters
    become decimal escapes (three digits when a digit follows), and line feeds
    are written as ``\\n`` so the literal always stays on one line.
    """
    if not isinstance(raw, str):
        raise InvalidArgument(f"expected str, got {type(raw).__name__}")
    out: list[str] = ['"']
    last = len(raw) - 1
    for i, ch in enumerate(raw):
        if ch == '"' or ch == "\\":
            out.append("\\" + ch)
        elif ch == "\n":
            out.append("\\n")
        elif ch < " " or ch == "\x7f":
            if i < last and raw[i + 1] in _DIGITS:
                out.append(f"\\{ord(ch):03d}")
            else:
                out.append(f"\\{ord(ch)}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def format_number(value: int | float) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"expected a number, got {type(value).__name__}")
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "(0/0)"
    if math.isinf(value):
        return "math.huge" if value > 0 else "-math.huge"
    return repr(value)


def format_value(value: Any) -> str:
    """
    Render an emitter argument as source text.

    Strings are taken verbatim (they are expressions, not string literals);
    numbers, booleans and ``None`` become their Lua spelling.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    raise InvalidArgument(f"cannot use {type(value).__name__} as Lua source text")


def join_values(values: Any, what: str = "values", required: bool = False) -> str:
    """Join a name/value list with ``", "``; a single value is formatted alone."""

    if isinstance(values, (list, tuple)):
        if required and not values:
            raise InvalidArgument(f"{what} must not be empty")
        return ", ".join(format_value(v) for v in values)
    text = format_value(values)
    if required and not text:
        raise InvalidArgument(f"{what} must not be empty")
    return text


def to_lua(value: Any) -> str:
    """
    Serialize a Python value as a Lua literal.

    ``None``, booleans, numbers and strings map to their Lua counterparts,
    sequences to array constructors and mappings to keyed constructors.
    Keys that are valid names use the ``name = v`` form, everything else the
    bracketed ``[key] = v`` form.
    """
    return _to_lua(value, set())


def _to_lua(value: Any, seen: set[int]) -> str:
    if value is None or isinstance(value, (bool, int, float)):
        return format_value(value)
    if isinstance(value, str):
        return escape(value)
    if isinstance(value, (Mapping, list, tuple)):
        if id(value) in seen:
            raise InvalidArgument("cannot serialize a self-referencing container")
        seen.add(id(value))
        try:
            if isinstance(value, Mapping):
                parts = [f"{_key(k)} = {_to_lua(v, seen)}" for k, v in value.items()]
            else:
                parts = [_to_lua(v, seen) for v in value]
        finally:
            seen.discard(id(value))
        return "{" + ", ".join(parts) + "}" if parts else "{}"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return _to_lua(list(value), seen)
    raise InvalidArgument(f"cannot serialize {type(value).__name__} to Lua")


def _key(key: Any) -> str:
    if isinstance(key, str):
        return key if is_identifier(key) else f"[{escape(key)}]"
    if key is None:
        raise InvalidArgument("nil cannot be used as a table key")
    if isinstance(key, (bool, int, float)):
        if isinstance(key, float) and math.isnan(key):
            raise InvalidArgument("NaN cannot be used as a table key")
        return f"[{format_value(key)}]"
    raise InvalidArgument(f"unsupported table key type {type(key).__name__}")
