from typing import Any, List, Tuple

import numpy as np

from .errors import UncachedValueError
from .gradient import node_gradient
from .guards import check_backward
from .node import AbstractNode, CachedNode, Node, Variable, value

_MISSING = object()


def backward(x: Any, grad: Any = _MISSING) -> None:
    """
    Propagates a gradient from ``x`` down to every reachable variable.

    Without ``grad`` the incoming gradient is the multiplicative identity
    shaped like ``x``'s value. At every cached node the incoming gradient is
    checked against the cached output, the registered gradient rule splits it
    into per-argument contributions, and each argument is visited in order.
    Contributions reaching a :class:`Variable` are added to its ``grad``; a
    variable reachable through several paths receives one contribution per
    path.

    Traversal is depth first on an explicit stack. Errors abort the pass
    without rolling back gradients already accumulated.

    Args:
        x: Start node; plain values are ignored
        grad: Incoming gradient for ``x``

    Raises:
        GradientTypeMismatchError: Gradient and cached output types differ
        GradientShapeMismatchError: Gradient and cached output shapes differ
        UnregisteredGradientError: A node's function has no gradient rule
        UncachedValueError: An un-cached node was reached
    """
    if not isinstance(x, AbstractNode):
        return None
    if grad is _MISSING:
        grad = _seed_like(value(x))

    stack: List[Tuple[Any, Any]] = [(x, grad)]
    while stack:
        node, node_grad = stack.pop()

        if isinstance(node, Variable):
            node.accumulate(node_grad)
        elif isinstance(node, CachedNode):
            check_backward(node, node_grad)
            grads = node_gradient(node, node_grad)
            stack.extend(
                (a, g)
                for a, g in reversed(list(zip(node.args, grads)))
                if isinstance(a, AbstractNode)
            )
        elif isinstance(node, Node):
            raise UncachedValueError(node)

    return None


def _seed_like(output: Any) -> Any:
    if isinstance(output, np.ndarray):
        return np.ones_like(output)
    return type(output)(1)
