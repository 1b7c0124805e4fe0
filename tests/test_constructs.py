import pytest

from luabuild import LuaBuilder, InvalidArgument, InvalidIndentation, Effect, Token, install_tokens


def test_anonymous_function_then_end() -> None:
    assert LuaBuilder().Function(None, "i").End().render() == "function(i)\nend"


def test_opener_closer_symmetry() -> None:
    lb = LuaBuilder().indent()
    before = lb.indent_level
    lb.append("x = ").Function(None, ["a", "b"])
    assert lb.indent_level == before + 1
    lb.End()
    assert lb.indent_level == before
    assert lb.render() == "x = function(a, b)\n    end"


def test_nested_blocks_align_closers() -> None:
    lb = LuaBuilder()
    lb.Function("f", "i").IfThen("i").Return(1).End().Return(0).End()
    assert lb.render() == (
        "function f(i)\n"
        "    if i then\n"
        "        return 1\n"
        "    end\n"
        "    return 0\n"
        "end"
    )


def test_if_elseif_else_chain_alignment() -> None:
    lb = LuaBuilder()
    lb.IfThen("a").call_function("f")
    lb.ElseIfThen("b").Return(1)
    lb.Else().call_function("g", ["x", 2])
    lb.End()
    assert lb.render() == (
        "if a then\n"
        "    f()\n"
        "elseif b then\n"
        "    return 1\n"
        "else\n"
        "    g(x, 2)\n"
        "end"
    )


def test_if_chain_from_tokens() -> None:
    lb = LuaBuilder().Function("check", "x")
    lb.If().append("x ").eq(1).Then().Return('"one"')
    lb.ElseIf().append("x ").gt(1).Then().Return('"many"')
    lb.Else().Return('"none"')
    lb.EndIf().EndFunction()
    assert lb.render() == (
        "function check(x)\n"
        "    if x == 1 then\n"
        '        return "one"\n'
        "    elseif x > 1 then\n"
        '        return "many"\n'
        "    else\n"
        '        return "none"\n'
        "    end\n"
        "end"
    )
    assert lb.indent_level == 0


def test_empty_branches_leave_no_blank_lines() -> None:
    lb = LuaBuilder().IfThen("x").Else().End()
    assert lb.render() == "if x then\nelse\nend"


def test_statement_after_end_starts_new_line() -> None:
    lb = LuaBuilder().Function("f").End().local_var("x")
    assert lb.render() == "function f()\nend\nlocal x"


def test_while_loop() -> None:
    lb = LuaBuilder().local_assign("i", 0)
    lb.While().append("i ").lt(10).Do().add_assign("i", 1).EndWhile()
    assert lb.render() == "local i = 0\nwhile i < 10 do\n    i = i + 1\nend"


def test_numeric_for() -> None:
    lb = LuaBuilder().for_numeric_do("i", 1, 10, 2).call_function("print", "i").EndFor()
    assert lb.render() == "for i = 1, 10, 2 do\n    print(i)\nend"
    lb = LuaBuilder().for_numeric_do("i", 1, "#t").Break().End()
    assert lb.render() == "for i = 1, #t do\n    break\nend"


def test_generic_for() -> None:
    lb = LuaBuilder().for_in_do(["k", "v"], "pairs(t)").push("out", "k").End()
    assert lb.render() == "for k, v in pairs(t) do\n    out[#out + 1] = k\nend"


def test_for_tokens() -> None:
    lb = LuaBuilder().For().append("_, v").In().append("ipairs(t) ").Do().End()
    assert lb.render() == "for _, v in ipairs(t) do\nend"


def test_repeat_until() -> None:
    lb = LuaBuilder().Repeat().add_assign("i", 1).Until("i >= 10")
    assert lb.render() == "repeat\n    i = i + 1\nuntil i >= 10"
    assert lb.indent_level == 0


def test_until_without_condition_stays_open() -> None:
    lb = LuaBuilder().Repeat().Until().Not().append("done")
    assert lb.render() == "repeat\nuntil not done"


def test_return_forms() -> None:
    assert LuaBuilder().Return().render() == "return"
    assert LuaBuilder().Return("").render() == "return "
    assert LuaBuilder().Return(["a", "b"]).render() == "return a, b"
    assert LuaBuilder().Return(True).render() == "return true"
    assert LuaBuilder().Return([]).render() == "return"
    assert LuaBuilder().Return(()).render() == "return"
    lb = LuaBuilder().Function("f").Return([]).End()
    assert lb.render() == "function f()\n    return\nend"


def test_declarations() -> None:
    lb = LuaBuilder().local_var("a").local_vars(["b", "c"]).assign(["b", "c"], [1, 2.5])
    lb.local_assign("s", '"hi"')
    assert lb.render() == 'local a\nlocal b, c\nb, c = 1, 2.5\nlocal s = "hi"'


def test_assign_without_value_leaves_room_for_a_constructor() -> None:
    lb = LuaBuilder().local_assign("add").Function(None, ["a", "b"]).Return("a + b").End()
    assert lb.render() == "local add = function(a, b)\n    return a + b\nend"


def test_empty_names_are_rejected() -> None:
    lb = LuaBuilder()
    with pytest.raises(InvalidArgument, match="names must not be empty"):
        lb.local_vars([])
    with pytest.raises(InvalidArgument):
        lb.for_in_do([], "pairs(t)")
    with pytest.raises(InvalidArgument):
        lb.localize([])
    with pytest.raises(InvalidArgument):
        lb.local_var("")
    with pytest.raises(InvalidArgument):
        lb.assign([], 1)
    assert lb.is_empty()
    assert lb.indent_level == 0


def test_localize() -> None:
    lb = LuaBuilder().localize(["insert", "concat"], "table")
    assert lb.render() == "local table = table\nlocal insert, concat = table.insert, table.concat"
    assert LuaBuilder().localize(["pairs", "type"]).render() == "local pairs, type = pairs, type"


def test_calls() -> None:
    lb = LuaBuilder().call_function("print", ['"a"', 1]).call_function_string("print", 'say "hi"\n')
    lb.start_line().Self().CallMethod("update", ["dt"])
    lb.start_line().append("f").call().call(["x"])
    assert lb.render() == (
        'print("a", 1)\n'
        'print"say \\"hi\\"\\n"\n'
        "self:update(dt)\n"
        "f()(x)"
    )


def test_require() -> None:
    lb = LuaBuilder().require("json").require("util", "lib.util")
    assert lb.render() == 'require("json")\nrequire("lib.util")'


def test_tables() -> None:
    lb = LuaBuilder().local_assign("t").table_start()
    lb.table_start().append("a = 1").table_end()
    lb.table_start().append("b = 2").table_end()
    lb.table_end()
    assert lb.render() == (
        "local t = {\n"
        "    {\n"
        "        a = 1\n"
        "    },\n"
        "    {\n"
        "        b = 2\n"
        "    }\n"
        "}"
    )


def test_table_end_without_start_raises() -> None:
    with pytest.raises(InvalidIndentation):
        LuaBuilder().table_end()


def test_expression_tokens() -> None:
    lb = LuaBuilder().append("x").add(1).mult("y").sub(2).div(3).mod(4).pow(2).concat('"!"')
    assert lb.render() == 'x + 1 * y - 2 / 3 % 4 ^ 2 .. "!"'
    lb = LuaBuilder().length("t").gt(0).And().Not().append("done")
    assert lb.render() == "#t > 0 and not done"


def test_indexing_and_fields() -> None:
    lb = LuaBuilder().index(1, "t").field("name").comma().sp().get_top("stack")
    assert lb.render() == "t[1].name, stack[#stack]"
    assert LuaBuilder().append("t").index('"k"').render() == 't["k"]'


def test_varargs() -> None:
    lb = LuaBuilder().local_assign("n", "select('#', ...)").local_assign("a").select(1).sp().va_len()
    assert lb.render() == "local n = select('#', ...)\nlocal a = select(1, ...) select('#', ...)"


def test_ternary_and_equals() -> None:
    lb = LuaBuilder().Local().append("x").equals().ternary("c", 1, "nil")
    assert lb.render() == "local x = c and 1 or nil"


def test_comments() -> None:
    lb = LuaBuilder().comment(" header", is_doc=True).local_var("x").sp().comment(" trailing")
    assert lb.render() == "--- header\nlocal x -- trailing"
    lb = LuaBuilder().start_multiline_comment().append("note").end_multiline_comment()
    assert lb.render() == "--[[note]]"


def test_literal_and_string() -> None:
    lb = LuaBuilder().local_assign("cfg").literal({"name": "x", "tags": ["a", "b"]})
    lb.local_assign("s").string("a\nb")
    assert lb.render() == 'local cfg = {name = "x", tags = {"a", "b"}}\nlocal s = "a\\nb"'


def test_blank_line() -> None:
    lb = LuaBuilder().local_var("a").newline_no_indent().local_var("b")
    assert lb.render() == "local a\n\nlocal b"


def test_aliases_forward_to_canonical_methods() -> None:
    assert LuaBuilder.EndIf is LuaBuilder.End
    assert LuaBuilder.nlin is LuaBuilder.newline_and_indent
    assert LuaBuilder.build is LuaBuilder.render
    assert LuaBuilder.string is LuaBuilder.append_string_literal
    assert LuaBuilder().lparen().rparen().lbrace().rbrace().semi().render() == "(){};"


def test_generated_emitters_are_named() -> None:
    assert LuaBuilder.End.__name__ == "End"
    assert LuaBuilder.End.__qualname__ == "LuaBuilder.End"
    assert "lines up" in LuaBuilder.End.__doc__


def test_generated_emitter_arity_is_checked() -> None:
    lb = LuaBuilder()
    with pytest.raises(InvalidArgument, match="takes 2 argument"):
        lb.add_assign("i")
    with pytest.raises(InvalidArgument, match="cannot use"):
        lb.eq(object())
    assert lb.is_empty()


def test_token_arity() -> None:
    assert Token("x", "{0} = {0} + {1}").arity == 2
    assert Token("x", "select({}, ...)").arity == 1
    assert Token("x", "{{").arity == 0
    assert Token("x", "{{").render() == "{"


def test_install_tokens_on_subclass() -> None:
    class Extended(LuaBuilder):
        pass

    install_tokens(Extended, tokens=(Token("Goto", "goto {}", Effect.LINE),), aliases={"jump": "Goto"})
    lb = Extended().local_var("x").jump("done").append("::done::")
    assert lb.render() == "local x\ngoto done::done::"


def test_install_tokens_refuses_duplicates() -> None:
    class Dup:
        def sp(self) -> None: ...

    with pytest.raises(ValueError, match="duplicate emitter sp"):
        install_tokens(Dup, tokens=(Token("sp", " "),), aliases={})


def test_local_function_and_values() -> None:
    lb = LuaBuilder().local_function("pack", "...").Return("").lb().vararg().rb().End()
    lb.local_assign(["a", "b"]).values([1, None])
    assert lb.render() == "local function pack(...)\n    return {...}\nend\nlocal a, b = 1, nil"


def test_boolean_emitters() -> None:
    lb = LuaBuilder().Local().append("a").equals().true().comma().sp().false()
    assert lb.render() == "local a = true, false"
    assert LuaBuilder().Return().sp().Not().false().render() == "return not false"


def test_short_aliases() -> None:
    assert LuaBuilder.str("x") == '"x"'
    assert LuaBuilder().str("a\n") == '"a\\n"'
    assert LuaBuilder.output is LuaBuilder.render
    assert LuaBuilder.to_text is LuaBuilder.render
    assert LuaBuilder.de is LuaBuilder.dedent
    lb = LuaBuilder().set_indent_string("\t").IfThen("x").Return().End()
    assert lb.indent_unit == "\t"
    assert lb.output() == "if x then\n\treturn\nend"
    assert LuaBuilder().indent().de().indent_level == 0


def test_unknown_alias_target_is_rejected() -> None:
    class Bare:
        pass

    with pytest.raises(ValueError, match="unknown emitter"):
        install_tokens(Bare, tokens=(), aliases={"x": "missing"})
