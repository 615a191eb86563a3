from typing import Any, Callable, List, Sequence, Tuple

import numpy as np

from .errors import AmbiguousOperatorError


class Operator:
    """
    Base class for operator variants.

    An operator wraps a plain callable ``f`` and decides how it is applied to
    the forwarded values of a node's arguments. The variant also takes part in
    gradient rule lookup, so the same function can have different gradient
    rules when it is used plainly and when it is broadcast.

    Attributes:
        f: The wrapped function
    """

    __slots__ = ("f",)

    def __init__(self, f: Callable[..., Any]):
        if isinstance(f, Operator):
            raise TypeError(f"Cannot wrap operator {f!r} in another operator")
        if not callable(f):
            raise TypeError(f"Operator expects a callable, got {type(f).__name__}")
        self.f = f

    def evaluate(self, *args: Any) -> Any:
        raise NotImplementedError

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.f is other.f  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), id(self.f)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({_name_of(self.f)})"


class Method(Operator):
    """Plain application: ``f`` is called eagerly on concrete argument values."""

    __slots__ = ()

    def evaluate(self, *args: Any) -> Any:
        return self.f(*(materialize(a) for a in args))


# Plain is the name used in the docs, Method the one used in gradient rules
Plain = Method


class Broadcasted(Operator):
    """
    Deferred elementwise application.

    Instead of computing ``f`` over its arguments right away this variant
    returns a :class:`BroadcastExpr`, so that consecutive broadcasted
    operations nest into one expression that is evaluated in a single pass.
    """

    __slots__ = ()

    def evaluate(self, *args: Any) -> "BroadcastExpr":
        return BroadcastExpr(self.f, args)


class BroadcastExpr:
    """
    A lazy "apply ``f`` elementwise to these operands" expression.

    Operands may themselves be expressions; they are fused and evaluated only
    when :meth:`materialize` is called. The result is memoized in the
    expression, which captures its operands as they were when it was built.

    Attributes:
        f: Elementwise function
        args: Operands (concrete values or nested expressions)
        shape: Broadcast shape of the operands, known without evaluation
    """

    __slots__ = ("f", "args", "shape", "_result", "_done")

    def __init__(self, f: Callable[..., Any], args: Sequence[Any]):
        self.f = f
        self.args: Tuple[Any, ...] = tuple(args)
        self.shape: Tuple[int, ...] = np.broadcast_shapes(
            *(a.shape if isinstance(a, BroadcastExpr) else np.shape(a) for a in self.args)
        )
        self._result: Any = None
        self._done = False

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def is_materialized(self) -> bool:
        return self._done

    def materialize(self) -> Any:
        """Evaluates the whole fused expression tree and returns the concrete value."""
        if self._done:
            return self._result

        stack: List[Tuple[BroadcastExpr, bool]] = [(self, False)]
        while stack:
            expr, expanded = stack.pop()
            if expr._done:
                continue
            if not expanded:
                stack.append((expr, True))
                stack.extend(
                    (a, False) for a in expr.args if isinstance(a, BroadcastExpr) and not a._done
                )
                continue
            operands = [a._result if isinstance(a, BroadcastExpr) else a for a in expr.args]
            expr._result = _elementwise(expr.f, operands)
            expr._done = True

        return self._result

    def __repr__(self) -> str:
        state = "materialized" if self._done else "lazy"
        return f"BroadcastExpr({_name_of(self.f)}, shape={self.shape}, {state})"


def _elementwise(f: Callable[..., Any], operands: Sequence[Any]) -> Any:
    if isinstance(f, np.ufunc):
        return f(*operands)
    result = np.vectorize(f)(*operands)
    # Keep scalars scalar, as broadcasting over scalars does
    return result[()] if result.ndim == 0 else result


def _name_of(f: Any) -> str:
    return getattr(f, "__name__", repr(f))


def materialize(x: Any) -> Any:
    """Returns ``x`` with any lazy broadcast expression evaluated."""
    if isinstance(x, BroadcastExpr):
        return x.materialize()
    return x


def as_operator(f: Any) -> Operator:
    """Wraps a bare callable as a plain :class:`Method`; operators pass through."""
    if isinstance(f, Operator):
        return f
    if not callable(f):
        raise TypeError(f"Expected an Operator or a callable, got {type(f).__name__}")
    return Method(f)


def apply_operator(op: Any, *args: Any) -> Any:
    """
    Applies an operator to already forwarded argument values.

    Raises:
        AmbiguousOperatorError: If ``op`` is a bare callable. Whether a
            function should be applied plainly or broadcast is never guessed.
    """
    if not isinstance(op, Operator):
        raise AmbiguousOperatorError(op)
    return op.evaluate(*args)
