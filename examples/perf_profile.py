"""Simple profiling of builder emission and rendering."""

from __future__ import annotations

import timeit
import tracemalloc

from luabuild import LuaBuilder, to_lua


def _build_nested(depth: int) -> LuaBuilder:
    lb: LuaBuilder = LuaBuilder()
    for i in range(depth):
        lb.IfThen(f"x > {i}")
    lb.Return("x")
    for _ in range(depth):
        lb.End()
    return lb


def _build_flat(statements: int) -> LuaBuilder:
    lb: LuaBuilder = LuaBuilder()
    lb.Function("main")
    for i in range(statements):
        lb.local_assign(f"v{i}", i).call_function("print", f"v{i}")
    return lb.End()


def main() -> None:
    duration: float = timeit.timeit(lambda: _build_nested(20), number=1000)
    print(f"Nested blocks (depth 20): {duration:.4f}s/1000")

    flat: LuaBuilder = _build_flat(500)
    render: float = timeit.timeit(flat.render, number=1000)
    print(f"render() of {len(flat)} fragments: {render:.4f}s/1000")

    payload = {"names": [f"n{i}" for i in range(100)], "nested": {"a": [1, 2, 3], "b": "text\n"}}
    ser: float = timeit.timeit(lambda: to_lua(payload), number=1000)
    print(f"to_lua() table: {ser:.4f}s/1000")

    tracemalloc.start()
    _build_flat(2000).render()
    current: int
    peak: int
    current, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()
    print(f"Flat build memory: current={current} bytes peak={peak} bytes")


if __name__ == "__main__":
    main()
