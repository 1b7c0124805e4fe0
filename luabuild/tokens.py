from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeVar

from .errors import InvalidArgument
from .literals import format_value

logger = logging.getLogger(__name__)

_C = TypeVar("_C", bound=type)


class Effect(Enum):
    """What an emitter does to the line/indent state around its text."""

    INLINE = "inline"        # append only
    LINE = "line"            # start a fresh line, then append
    OPEN = "open"            # append, then break into a deeper body
    BLOCK = "block"          # LINE + OPEN
    CONTINUE = "continue"    # step out one level, append, reopen the body
    REOPEN = "reopen"        # step out one level, append (body reopened later)
    CLOSE = "close"          # step out one level, append


@dataclass(frozen=True)
class Token:
    """
    One catalogue entry.

    ``template`` is a ``str.format`` pattern; its positional fields are the
    arguments of the generated method, converted with :func:`format_value`.
    Doubled braces stand for literal ``{`` and ``}``.
    """
    name: str
    template: str
    effect: Effect = Effect.INLINE
    doc: str = ""

    @property
    def arity(self) -> int:
        auto = 0
        highest = -1
        for _, field_name, _, _ in string.Formatter().parse(self.template):
            if field_name is None:
                continue
            if field_name == "":
                auto += 1
            else:
                highest = max(highest, int(field_name))
        return max(auto, highest + 1)

    def render(self, *args: Any) -> str:
        if len(args) != self.arity:
            raise InvalidArgument(
                f"{self.name}() takes {self.arity} argument(s), got {len(args)}"
            )
        return self.template.format(*(format_value(a) for a in args))


def _t(name: str, template: str, effect: Effect = Effect.INLINE, doc: str = "") -> Token:
    return Token(name, template, effect, doc)


L, O, B, C = Effect.LINE, Effect.OPEN, Effect.BLOCK, Effect.CLOSE

TOKENS: tuple[Token, ...] = (
    # punctuation
    _t("sp", " "),
    _t("lp", "("),
    _t("rp", ")"),
    _t("lb", "{{"),
    _t("rb", "}}"),
    _t("semicolon", ";"),
    _t("dot", "."),
    _t("comma", ","),
    _t("vararg", "..."),
    # keywords
    _t("Local", "local ", L),
    _t("If", "if ", L),
    _t("Then", "then", O, "Emit ``then`` and open the branch body."),
    _t("ElseIf", "elseif ", Effect.REOPEN,
       "Return to the ``if`` column and emit ``elseif``; follow with a condition and ``Then``."),
    _t("Else", "else", Effect.CONTINUE),
    _t("End", "end", C, "Close the innermost block; ``end`` lines up with its opener."),
    _t("While", "while ", L),
    _t("Do", "do", O),
    _t("Repeat", "repeat", B),
    _t("Break", "break", L),
    _t("For", "for ", L),
    _t("In", " in "),
    _t("Nil", "nil"),
    _t("true", "true"),
    _t("false", "false"),
    _t("Self", "self"),
    _t("And", "and "),
    _t("Or", "or "),
    _t("Not", "not "),
    # long brackets
    _t("start_multiline_comment", "--[["),
    _t("start_multiline_string", "[["),
    _t("end_multiline_comment", "]]"),
    # comparisons; the trailing space lets a following ``Then``/``Do`` chain on
    _t("eq", "== {} "),
    _t("ne", "~= {} "),
    _t("gt", "> {} "),
    _t("ge", ">= {} "),
    _t("lt", "< {} "),
    _t("le", "<= {} "),
    # arithmetic
    _t("add", " + {}"),
    _t("sub", " - {}"),
    _t("mult", " * {}"),
    _t("div", " / {}"),
    _t("mod", " % {}"),
    _t("pow", " ^ {}"),
    _t("concat", " .. {}"),
    # ``name = name <op> value`` statements
    _t("add_assign", "{0} = {0} + {1}", L),
    _t("sub_assign", "{0} = {0} - {1}", L),
    _t("mult_assign", "{0} = {0} * {1}", L),
    _t("div_assign", "{0} = {0} / {1}", L),
    _t("mod_assign", "{0} = {0} % {1}", L),
    _t("pow_assign", "{0} = {0} ^ {1}", L),
    _t("concat_assign", "{0} = {0} .. {1}", L),
    # helpers
    _t("value", "{}"),
    _t("field", ".{}"),
    _t("select", "select({}, ...)"),
    _t("va_len", "select('#', ...)"),
    _t("ternary", "{} and {} or {}"),
    _t("push", "{0}[#{0} + 1] = {1}", L, "Emit ``t[#t + 1] = v``."),
    _t("get_top", "{0}[#{0}]"),
)

ALIASES: dict[str, str] = {
    "space": "sp",
    "lparen": "lp",
    "rparen": "rp",
    "lbrace": "lb",
    "rbrace": "rb",
    "semi": "semicolon",
    "va": "vararg",
    "end_multiline_string": "end_multiline_comment",
    "EndIf": "End",
    "EndWhile": "End",
    "EndFor": "End",
    "EndFunction": "End",
    "is_equal_to": "eq",
    "is_not_equal_to": "ne",
    "is_greater_than": "gt",
    "is_greater_than_or_equal_to": "ge",
    "is_less_than": "lt",
    "is_less_than_or_equal_to": "le",
    "tab": "indent",
    "unindent": "dedent",
    "de": "dedent",
    "untab": "dedent",
    "nl": "newline_indented",
    "nlin": "newline_and_indent",
    "nlde": "newline_and_dedent",
    "nln": "newline_no_indent",
    "blank": "newline_no_indent",
    "decurrent": "dedent_line",
    "insert_verbatim": "append",
    "build": "render",
    "to_string": "render",
    "to_text": "render",
    "output": "render",
    "get_indent": "current_indent_string",
    "string": "append_string_literal",
    "str": "escape",
    "set_indent_string": "set_indent_unit",
    "call_string": "call_function_string",
}


def _make_emitter(token: Token, owner: str) -> Callable[..., Any]:
    effect = token.effect

    def emit(self: Any, *args: Any) -> Any:
        text = token.render(*args)
        if effect is Effect.LINE or effect is Effect.BLOCK:
            self.start_line()
        elif effect in (Effect.CONTINUE, Effect.REOPEN, Effect.CLOSE):
            self.dedent_line()
        self.append(text)
        if effect in (Effect.OPEN, Effect.BLOCK, Effect.CONTINUE):
            self.newline_and_indent()
        return self

    emit.__name__ = token.name
    emit.__qualname__ = f"{owner}.{token.name}"
    emit.__doc__ = token.doc or f"Emit ``{token.template}`` ({effect.value})."
    return emit


def install_tokens(
    cls: _C,
    tokens: tuple[Token, ...] = TOKENS,
    aliases: dict[str, str] | None = None,
) -> _C:
    """Generate one chaining method per token, then bind the aliases."""

    aliases = ALIASES if aliases is None else aliases
    for token in tokens:
        if token.name in vars(cls):
            raise ValueError(f"duplicate emitter {token.name}")
        setattr(cls, token.name, _make_emitter(token, cls.__name__))
    for alias, target in aliases.items():
        if alias in vars(cls):
            raise ValueError(f"duplicate emitter {alias}")
        # raw attribute, so staticmethods stay static under their alias
        owner = next((k for k in cls.__mro__ if target in vars(k)), None)
        if owner is None:
            raise ValueError(f"alias {alias} targets unknown emitter {target}")
        setattr(cls, alias, vars(owner)[target])
    logger.debug("installed %d emitters and %d aliases on %s", len(tokens), len(aliases), cls.__name__)
    return cls
