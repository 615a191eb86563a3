from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import DTypeLike

from .config import get_config
from .errors import GradientShapeMismatchError, UncachedValueError
from .operator import Operator, as_operator, materialize


class AbstractNode:
    """
    Base class of everything that can appear in a computation graph.

    A node never has to store a value of its own to behave like one: shape and
    element type are read through :func:`value`, and the arithmetic operators
    build new cached nodes through the operator library.
    """

    # Make numpy defer to our reflected operators instead of building object arrays
    __array_ufunc__ = None

    @property
    def shape(self) -> Tuple[int, ...]:
        return np.shape(value(self))

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def dtype(self) -> np.dtype:
        return eltype(self)

    def __add__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Add

        return Add.apply(self, other)

    def __radd__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Add

        return Add.apply(other, self)

    def __sub__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Subtract

        return Subtract.apply(self, other)

    def __rsub__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Subtract

        return Subtract.apply(other, self)

    def __mul__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Multiply

        return Multiply.apply(self, other)

    def __rmul__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Multiply

        return Multiply.apply(other, self)

    def __truediv__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Divide

        return Divide.apply(self, other)

    def __rtruediv__(self, other: Any) -> "CachedNode":
        from ..ops.basic import Divide

        return Divide.apply(other, self)

    def __matmul__(self, other: Any) -> "CachedNode":
        from ..ops.basic import MatMul

        return MatMul.apply(self, other)

    def __rmatmul__(self, other: Any) -> "CachedNode":
        from ..ops.basic import MatMul

        return MatMul.apply(other, self)

    def __neg__(self) -> "CachedNode":
        from ..ops.basic import Negate

        return Negate.apply(self)


class LeafNode(AbstractNode):
    """A node without arguments. Backward propagation stops here."""


class Variable(LeafNode):
    """
    A leaf whose gradient is wanted.

    Gradients arriving through backward propagation are accumulated into
    ``grad`` by addition. ``grad`` is ``None`` until the first contribution
    arrives, unless it was pre-seeded at construction.

    Args:
        value: The stored value, e.g. a float or a numpy array
        grad: Optional initial gradient of the same shape as ``value``
    """

    def __init__(self, value: Any, grad: Optional[Any] = None):
        self.value = value
        self.grad: Optional[Any] = None if grad is None else _own(grad)

    def accumulate(self, grad: Any) -> None:
        """
        Adds a gradient contribution to ``grad``.

        The first contribution is stored as a private copy so that no two
        variables ever share one array; later ones are added in place.

        Raises:
            GradientShapeMismatchError: If leaf shape checks are enabled and
                the contribution's shape differs from the value's shape
        """
        if get_config().check_leaf_shapes and np.shape(grad) != np.shape(self.value):
            raise GradientShapeMismatchError(np.shape(self.value), np.shape(grad))

        if self.grad is None:
            self.grad = _own(grad)
        elif isinstance(self.grad, np.ndarray):
            self.grad += grad
        else:
            self.grad = self.grad + grad

    def zero_grad(self) -> None:
        """Unsets the accumulated gradient."""
        self.grad = None

    def __repr__(self) -> str:
        return f"Variable({self.value!r}, grad={self.grad!r})"


class Node(AbstractNode):
    """
    An operator applied to a fixed, ordered tuple of arguments.

    A node is a recipe: it stores no value. Arguments are other nodes or plain
    values. A bare callable given as operator is wrapped as a plain
    :class:`~ADpy.core.operator.Method`.
    """

    def __init__(self, f: Union[Operator, Any], args: Sequence[Any]):
        self._f = as_operator(f)
        self._args: Tuple[Any, ...] = tuple(args)

    @property
    def f(self) -> Operator:
        return self._f

    @property
    def args(self) -> Tuple[Any, ...]:
        return self._args

    def __repr__(self) -> str:
        return f"Node({self._f!r}, nargs={len(self._args)})"


class CachedNode(AbstractNode):
    """
    A graph node together with the most recent result of forwarding it.

    ``output`` is refreshed only by :func:`~ADpy.core.evaluation.forward`;
    between such calls it may be stale with respect to mutated leaves.

    Attributes:
        node: The wrapped node
        output: Cached forward result (possibly a lazy broadcast expression)
    """

    def __init__(self, node: AbstractNode, output: Any):
        if not isinstance(node, AbstractNode):
            raise TypeError(f"CachedNode expects a node, got {type(node).__name__}")
        self.node = node
        self.output = output

    @classmethod
    def from_operator(cls, f: Union[Operator, Any], args: Sequence[Any]) -> "CachedNode":
        """Builds a node from ``f`` and ``args`` and evaluates it right away."""
        from .evaluation import forward

        node = Node(f, args)
        return cls(node, forward(node))

    @property
    def f(self) -> Operator:
        return self.node.f  # type: ignore[attr-defined]

    @property
    def args(self) -> Tuple[Any, ...]:
        return self.node.args  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"CachedNode({self.node!r}, output={type(self.output).__name__})"


def _own(grad: Any) -> Any:
    if isinstance(grad, np.ndarray):
        return grad.copy()
    return grad


def value(x: Any) -> Any:
    """
    Returns the concrete value a node currently holds.

    Unlike :func:`~ADpy.core.evaluation.forward` this never computes
    anything: a variable returns its stored value and a cached node its cached
    output. Plain values are returned unchanged and lazy broadcast expressions
    are materialized.

    Raises:
        UncachedValueError: If ``x`` (or a node stored as an output) has no
            cached value, e.g. a bare :class:`Node`
    """
    return materialize(cached_output(x))


def cached_output(x: Any) -> Any:
    """Like :func:`value` but leaves lazy broadcast expressions unevaluated."""
    while True:
        if isinstance(x, Variable):
            return x.value
        if isinstance(x, CachedNode):
            x = x.output
            continue
        if isinstance(x, AbstractNode):
            raise UncachedValueError(x)
        return x


def args(x: Union[Node, CachedNode]) -> Tuple[Any, ...]:
    return x.args


def arg(x: Union[Node, CachedNode], i: int) -> Any:
    return x.args[i]


def operator(x: Union[Node, CachedNode]) -> Operator:
    return x.f


def size(x: Any, dim: Optional[int] = None) -> Union[Tuple[int, ...], int]:
    """Shape of the node's value, or its extent along ``dim``."""
    shape = np.shape(value(x))
    return shape if dim is None else shape[dim]


def eltype(x: Any) -> np.dtype:
    """Element type of the node's value."""
    return np.asarray(value(x)).dtype


def axes(x: Any) -> Tuple[range, ...]:
    """Index ranges of every dimension of the node's value."""
    return tuple(range(n) for n in np.shape(value(x)))


def similar(
    x: Any, dtype: Optional[DTypeLike] = None, shape: Optional[Tuple[int, ...]] = None
) -> Variable:
    """
    Creates a fresh variable shaped like ``x``.

    The new variable's value is uninitialized memory, as with ``np.empty_like``.

    Args:
        x: Node or value to imitate
        dtype: Element type override
        shape: Shape override
    """
    return Variable(np.empty_like(value(x), dtype=dtype, shape=shape))
