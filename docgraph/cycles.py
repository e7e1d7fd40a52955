"""Cycle detection over small string-keyed graphs."""

from collections.abc import Callable, Iterable


def find_cycles(nodes: Iterable[str], edges: Callable[[str], list[str]]) -> list[list[str]]:
    """Distinct cycles reachable from ``nodes``, in discovery order.

    DFS with an on-stack set; ``done`` memoizes fully explored nodes so every
    node and edge is visited once. Each back edge to a node on the current
    path is one cycle, reported from the repeated node around to itself
    (``["A", "B", "A"]``). Cycles over the same node set are reported once.

    ``edges`` must only return nodes it can also be called with.
    """
    done: set[str] = set()
    on_stack: set[str] = set()
    seen: set[frozenset[str]] = set()
    cycles: list[list[str]] = []

    def visit(node: str, path: list[str]) -> None:
        on_stack.add(node)
        path.append(node)
        for target in edges(node):
            if target in on_stack:
                cycle = path[path.index(target):] + [target]
                key = frozenset(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif target not in done:
                visit(target, path)
        path.pop()
        on_stack.discard(node)
        done.add(node)

    for node in nodes:
        if node not in done:
            visit(node, [])
    return cycles
