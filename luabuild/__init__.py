from .codegen import LuaBuilder, DEFAULT_INDENT_UNIT, DEFAULT_NEWLINE
from .errors import LuaBuilderError, InvalidIndentation, InvalidArgument
from .literals import escape, format_number, format_value, to_lua, is_identifier, LUA_KEYWORDS
from .tokens import Effect, Token, TOKENS, ALIASES, install_tokens

__all__ = [
    # builder
    "LuaBuilder", "DEFAULT_INDENT_UNIT", "DEFAULT_NEWLINE",
    # errors
    "LuaBuilderError", "InvalidIndentation", "InvalidArgument",
    # literals
    "escape", "format_number", "format_value", "to_lua", "is_identifier", "LUA_KEYWORDS",
    # token catalogue
    "Effect", "Token", "TOKENS", "ALIASES", "install_tokens",
]
