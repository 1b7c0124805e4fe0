from __future__ import annotations


class LuaBuilderError(Exception):
    """Base class for errors raised while emitting Lua source."""


class InvalidIndentation(LuaBuilderError, ValueError):
    """Raised when a block is closed that was never opened."""


class InvalidArgument(LuaBuilderError, ValueError):
    """Raised synchronously when an emitter receives a malformed argument."""
