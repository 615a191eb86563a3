from typing import Any, List, Sequence

import numpy as np
from numpy.typing import NDArray

from ..core.autograd import backward
from ..core.function import register
from ..core.node import Variable
from ..core.operator import apply_operator, as_operator, materialize


def _as_float(x: Any) -> Any:
    if isinstance(x, np.ndarray) or isinstance(x, (list, tuple)):
        return np.array(x, dtype=np.float64)
    return float(x)


def _evaluate_sum(op: Any, values: Sequence[Any]) -> float:
    return float(np.sum(materialize(apply_operator(as_operator(op), *values))))


def numerical_gradient(
    op: Any, values: Sequence[Any], index: int, epsilon: float = 1e-6
) -> Any:
    """
    Central finite-difference gradient of ``sum(op(*values))``.

    Args:
        op: Operator or bare function (applied plainly)
        values: Argument values
        index: Position of the argument to differentiate with respect to
        epsilon: Step size

    Returns:
        A float for scalar arguments, an array shaped like the argument otherwise
    """
    values = [_as_float(v) for v in values]
    x = values[index]

    if not isinstance(x, np.ndarray):
        plus: List[Any] = list(values)
        minus: List[Any] = list(values)
        plus[index] = x + epsilon
        minus[index] = x - epsilon
        return (_evaluate_sum(op, plus) - _evaluate_sum(op, minus)) / (2 * epsilon)

    grad: NDArray[Any] = np.zeros_like(x)
    it = np.nditer(x, flags=["multi_index"])
    while not it.finished:
        ix = it.multi_index
        old_value = x[ix]

        x[ix] = old_value + epsilon
        pos_output = _evaluate_sum(op, values)

        x[ix] = old_value - epsilon
        neg_output = _evaluate_sum(op, values)

        # Restore original value
        x[ix] = old_value

        grad[ix] = (pos_output - neg_output) / (2 * epsilon)
        it.iternext()

    return grad


def gradcheck(
    op: Any,
    *values: Any,
    epsilon: float = 1e-6,
    atol: float = 1e-5,
    rtol: float = 1e-4,
) -> bool:
    """
    Compares gradients from ``backward`` with finite differences.

    Every value becomes a :class:`Variable`, the operation is registered on
    them and back-propagated with the default seed, which makes the analytic
    gradient that of ``sum(op(*values))``.

    Returns:
        True if every argument's gradient matches within tolerance
    """
    values = tuple(_as_float(v) for v in values)
    variables = [Variable(v.copy() if isinstance(v, np.ndarray) else v) for v in values]

    y = register(op, *variables)
    backward(y)

    for i, var in enumerate(variables):
        numeric = numerical_gradient(op, values, i, epsilon)
        analytic = var.grad if var.grad is not None else np.zeros_like(numeric)
        if not np.allclose(analytic, numeric, atol=atol, rtol=rtol):
            return False

    return True
