from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidArgument, InvalidIndentation
from .literals import escape, format_value, join_values, to_lua
from .tokens import install_tokens

logger = logging.getLogger(__name__)

DEFAULT_INDENT_UNIT = "    "
DEFAULT_NEWLINE = "\n"


@install_tokens
@dataclass
class LuaBuilder:
    """
    Chainable, indentation-aware Lua source builder.

    Fragments are appended to a buffer and concatenated by :meth:`render`.
    Line breaks carry the indentation of the line they open. A break that
    nothing has been written after yet is "soft": closing keywords rewrite it
    at the shallower depth instead of leaving an indented blank line behind.

    Every mutating method returns the builder. Keyword, operator and
    punctuation emitters (``If``, ``End``, ``eq``, ``lp`` ...) are generated
    from :data:`luabuild.tokens.TOKENS`.
    """
    indent_unit: str = DEFAULT_INDENT_UNIT
    newline: str = DEFAULT_NEWLINE
    _buffer: list[str] = field(default_factory=list, init=False, repr=False)
    _level: int = field(default=0, init=False)
    # (index, newline, indent unit) of the trailing soft break
    _soft: tuple[int, str, str] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.set_indent_unit(self.indent_unit)
        self.set_newline(self.newline)

    # -----------------------------
    # Buffer & rendering
    # -----------------------------

    def append(self, text: str) -> LuaBuilder:
        if not isinstance(text, str):
            raise InvalidArgument(f"append() expects str, got {type(text).__name__}")
        self._buffer.append(text)
        if text:
            self._soft = None
        return self

    def render(self) -> str:
        return "".join(self._buffer)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self._buffer)

    def __bool__(self) -> bool:
        # an empty builder is still a builder; use is_empty() for the buffer
        return True

    def is_empty(self) -> bool:
        return not self._buffer

    def fragments(self) -> list[str]:
        return list(self._buffer)

    def reset(self) -> LuaBuilder:
        """Return to the freshly constructed state, formatting included."""
        self.clear()
        self.indent_unit = DEFAULT_INDENT_UNIT
        self.newline = DEFAULT_NEWLINE
        logger.debug("builder reset")
        return self

    def clear(self) -> LuaBuilder:
        """Drop the buffer and indentation but keep the formatting settings."""
        self._buffer.clear()
        self._level = 0
        self._soft = None
        logger.debug("builder cleared (indent_unit=%r, newline=%r)", self.indent_unit, self.newline)
        return self

    # -----------------------------
    # Formatting configuration
    # -----------------------------

    def set_indent_unit(self, unit: str) -> LuaBuilder:
        if not isinstance(unit, str):
            raise InvalidArgument(f"indent unit must be str, got {type(unit).__name__}")
        self.indent_unit = unit
        return self

    def set_newline(self, newline: str) -> LuaBuilder:
        if not isinstance(newline, str) or not newline:
            raise InvalidArgument("newline must be a non-empty str")
        if newline not in ("\n", "\r\n"):
            logger.debug("using non-standard newline %r", newline)
        self.newline = newline
        return self

    def set_lf(self) -> LuaBuilder:
        return self.set_newline("\n")

    def set_crlf(self) -> LuaBuilder:
        return self.set_newline("\r\n")

    # -----------------------------
    # Indentation
    # -----------------------------

    @property
    def indent_level(self) -> int:
        return self._level

    def indent(self) -> LuaBuilder:
        self._level += 1
        return self

    def dedent(self) -> LuaBuilder:
        if self._level == 0:
            raise InvalidIndentation("cannot dedent below level 0; unbalanced block close")
        self._level -= 1
        return self

    def block(self) -> _Block:
        """``with lb.block():`` indents the statements written inside it."""
        return _Block(self)

    def current_indent_string(self) -> str:
        return self.indent_unit * self._level

    def newline_indented(self) -> LuaBuilder:
        self.append(self.newline + self.current_indent_string())
        self._soft = (len(self._buffer) - 1, self.newline, self.indent_unit)
        return self

    def newline_and_indent(self) -> LuaBuilder:
        return self.indent().newline_indented()

    def newline_and_dedent(self) -> LuaBuilder:
        return self.dedent().newline_indented()

    def newline_no_indent(self) -> LuaBuilder:
        return self.append(self.newline)

    def start_line(self) -> LuaBuilder:
        """
        Make sure the next fragment begins a line at the current depth.

        A trailing soft break is re-indented in place, keeping the newline and
        indent unit it was written with; an empty buffer needs no break at all.
        """
        if self._soft is not None:
            index, newline, unit = self._soft
            self._buffer[index] = newline + unit * self._level
        elif self._buffer:
            self.newline_indented()
        return self

    def dedent_line(self) -> LuaBuilder:
        """Move the line about to be written one level out."""
        return self.dedent().start_line()

    # -----------------------------
    # Literals
    # -----------------------------

    escape = staticmethod(escape)
    format_string = staticmethod(escape)

    def append_string_literal(self, text: str) -> LuaBuilder:
        return self.append(escape(text))

    def literal(self, value: Any) -> LuaBuilder:
        """Append ``value`` serialized as a Lua literal (see :func:`luabuild.literals.to_lua`)."""
        return self.append(to_lua(value))

    def comment(self, text: str, is_doc: bool = False) -> LuaBuilder:
        """Append ``--text`` (``---text`` for doc comments); spacing is up to the caller."""
        return self.append(("---" if is_doc else "--") + text)

    # -----------------------------
    # Declarations & assignment
    # -----------------------------

    def local_var(self, name: str) -> LuaBuilder:
        text = "local " + join_values(name, "name", required=True)
        return self.start_line().append(text)

    def local_vars(self, names: list[str]) -> LuaBuilder:
        text = "local " + join_values(names, "names", required=True)
        return self.start_line().append(text)

    def assign(self, names: str | list[str], values: Any = None) -> LuaBuilder:
        """
        Emit ``names = values``.

        Without ``values`` only ``names = `` is written so a table or function
        constructor can follow.
        """
        text = join_values(names, "names", required=True) + " = "
        if values is not None:
            text += join_values(values)
        return self.start_line().append(text)

    def local_assign(self, names: str | list[str], values: Any = None) -> LuaBuilder:
        text = "local " + join_values(names, "names", required=True) + " = "
        if values is not None:
            text += join_values(values)
        return self.start_line().append(text)

    def localize(self, names: list[str], table: str | None = None) -> LuaBuilder:
        """
        Cache globals in locals: ``local a, b = a, b``, or with ``table``
        ``local t = t`` followed by ``local a, b = t.a, t.b``.
        """
        if isinstance(names, str):
            names = [names]
        joined = join_values(names, "names", required=True)
        if table is None:
            return self.start_line().append(f"local {joined} = {joined}")
        sources = ", ".join(f"{table}.{format_value(n)}" for n in names)
        self.start_line().append(f"local {table} = {table}")
        return self.start_line().append(f"local {joined} = {sources}")

    def equals(self, value: Any = None) -> LuaBuilder:
        return self.append(" = " + ("" if value is None else format_value(value)))

    def values(self, values: Any) -> LuaBuilder:
        return self.append(join_values(values))

    # -----------------------------
    # Control flow
    # -----------------------------

    def IfThen(self, condition: str) -> LuaBuilder:
        text = f"if {join_values(condition, 'condition', required=True)} then"
        return self.start_line().append(text).newline_and_indent()

    def ElseIfThen(self, condition: str) -> LuaBuilder:
        text = f"elseif {join_values(condition, 'condition', required=True)} then"
        return self.dedent_line().append(text).newline_and_indent()

    def Until(self, condition: str | None = None) -> LuaBuilder:
        """Close a ``repeat`` body. Without a condition, ``until `` is left open for one."""
        text = "until " + ("" if condition is None else format_value(condition))
        return self.dedent_line().append(text)

    def for_numeric_do(self, var: str, start: Any, finish: Any, step: Any = None) -> LuaBuilder:
        text = f"for {join_values(var, 'loop variable', required=True)} = {format_value(start)}, {format_value(finish)}"
        if step is not None:
            text += f", {format_value(step)}"
        return self.start_line().append(text + " do").newline_and_indent()

    def for_in_do(self, variables: str | list[str], iterator: str) -> LuaBuilder:
        text = f"for {join_values(variables, 'loop variables', required=True)} in {format_value(iterator)} do"
        return self.start_line().append(text).newline_and_indent()

    # -----------------------------
    # Functions & calls
    # -----------------------------

    def Function(self, name: str | None = None, args: str | list[str] | None = None) -> LuaBuilder:
        """
        Open a function body. A named function is a statement and starts its
        own line; an anonymous one is an expression and continues the current
        line (``local f = function(x)``).
        """
        params = "" if args is None else join_values(args)
        if name is None:
            return self.append(f"function({params})").newline_and_indent()
        header = f"function {join_values(name, 'function name', required=True)}({params})"
        return self.start_line().append(header).newline_and_indent()

    def local_function(self, name: str, args: str | list[str] | None = None) -> LuaBuilder:
        params = "" if args is None else join_values(args)
        header = f"local function {join_values(name, 'function name', required=True)}({params})"
        return self.start_line().append(header).newline_and_indent()

    def Return(self, values: Any = None) -> LuaBuilder:
        """
        ``Return()`` and ``Return([])`` write a bare ``return``;
        ``Return("")`` leaves ``return `` open.
        """
        if values is None or (isinstance(values, (list, tuple)) and not values):
            return self.start_line().append("return")
        text = "return " + join_values(values)
        return self.start_line().append(text)

    def call(self, args: Any = None) -> LuaBuilder:
        return self.append("(" + ("" if args is None else join_values(args)) + ")")

    def call_function(self, name: str, args: Any = None) -> LuaBuilder:
        params = "" if args is None else join_values(args)
        return self.start_line().append(f"{join_values(name, 'function name', required=True)}({params})")

    def call_function_string(self, name: str, text: str) -> LuaBuilder:
        """Call with a single string argument and no parentheses: ``print"hi"``."""
        return self.start_line().append(join_values(name, "function name", required=True) + escape(text))

    def CallMethod(self, name: str, args: Any = None) -> LuaBuilder:
        params = "" if args is None else join_values(args)
        return self.append(f":{join_values(name, 'method name', required=True)}({params})")

    def require(self, module: str, path: str | None = None) -> LuaBuilder:
        return self.start_line().append(f"require({escape(path or module)})")

    # -----------------------------
    # Tables & indexing
    # -----------------------------

    def table_start(self) -> LuaBuilder:
        """Open a multi-line table constructor; consecutive tables are comma separated."""
        if self._buffer and self._buffer[-1] == "}":
            self.append(",").start_line()
        return self.append("{").newline_and_indent()

    def table_end(self) -> LuaBuilder:
        return self.dedent_line().append("}")

    def length(self, value: Any = None) -> LuaBuilder:
        return self.append("#" + ("" if value is None else format_value(value) + " "))

    def index(self, index: Any, value: Any = None) -> LuaBuilder:
        prefix = "" if value is None else format_value(value)
        return self.append(f"{prefix}[{format_value(index)}]")


class _Block:
    def __init__(self, lb: LuaBuilder) -> None:
        self.lb = lb

    def __enter__(self) -> LuaBuilder:
        self.lb.indent()
        return self.lb

    def __exit__(self, exc_type, exc, tb) -> None:
        # the body already unbalanced the level; let its own error through
        if exc_type is not None and self.lb.indent_level == 0:
            return
        self.lb.dedent()
