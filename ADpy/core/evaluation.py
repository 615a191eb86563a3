from typing import Any, Dict, List, Tuple

from .node import AbstractNode, CachedNode, Node, cached_output, value
from .operator import apply_operator


def forward(x: Any, recursive: bool = False) -> Any:
    """
    Forward evaluation of the computation graph.

    Plain values are returned unchanged and leaves return their stored
    value. A :class:`Node` is recomputed from the forwarded values of its
    arguments. A :class:`CachedNode` is recomputed and its ``output`` is
    overwritten with the new result, which is also returned.

    Cached nodes met as arguments are cache boundaries: their current
    ``output`` is used as is. Pass ``recursive=True`` to refresh every
    reachable cached node as well, each one once and before its consumers.

    The walk uses an explicit stack, so graph depth is not limited by the
    interpreter's recursion limit.

    Args:
        x: Node or value to evaluate
        recursive: Whether to recompute through cache boundaries

    Returns:
        The new value; for broadcasted operators this is a lazy
        :class:`~ADpy.core.operator.BroadcastExpr`
    """
    if not isinstance(x, (Node, CachedNode)):
        return value(x) if isinstance(x, AbstractNode) else x

    results: Dict[int, Any] = {}
    stack: List[Tuple[Any, bool]] = [(x, False)]

    while stack:
        node, expanded = stack.pop()
        key = id(node)
        if key in results:
            continue

        if not expanded:
            if isinstance(node, CachedNode) and node is not x and not recursive:
                results[key] = cached_output(node)
                continue
            if not isinstance(node, (Node, CachedNode)):
                results[key] = value(node)
                continue
            stack.append((node, True))
            stack.extend(
                (child, False)
                for child in reversed(_children(node))
                if isinstance(child, AbstractNode) and id(child) not in results
            )
            continue

        if isinstance(node, CachedNode):
            node.output = results[id(node.node)]
            results[key] = node.output
        else:
            results[key] = apply_operator(
                node.f,
                *(results[id(a)] if isinstance(a, AbstractNode) else a for a in node.args),
            )

    return results[id(x)]


def _children(node: Any) -> Tuple[Any, ...]:
    if isinstance(node, CachedNode):
        return (node.node,)
    return node.args
