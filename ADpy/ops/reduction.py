from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

from ..core.function import Function

Axis = Optional[Union[int, Tuple[int, ...]]]


def _options(options: Sequence[Any]) -> Tuple[Axis, bool]:
    axis = options[0] if len(options) > 0 else None
    keepdims = options[1] if len(options) > 1 else False
    return axis, keepdims


def _expand_to_input(grad: Any, x: Any, axis: Axis, keepdims: bool) -> Any:
    grad = np.asarray(grad)
    # Reinsert the reduced axes before broadcasting back to the input shape
    if axis is not None and not keepdims:
        grad = np.expand_dims(grad, axis=axis)
    expanded = np.broadcast_to(grad, np.shape(x)).copy()
    return expanded[()] if expanded.ndim == 0 else expanded


class Sum(Function):
    """
    Sum of elements, over all of them or along ``axis``.

    Called as ``Sum.apply(x)``, ``Sum.apply(x, axis)`` or
    ``Sum.apply(x, axis, keepdims)``.
    """

    @staticmethod
    def forward(x: Any, axis: Axis = None, keepdims: bool = False) -> Any:
        return np.sum(x, axis=axis, keepdims=keepdims)

    @staticmethod
    def backward(grad: Any, output: Any, x: Any, *options: Any) -> Tuple[Any, ...]:
        axis, keepdims = _options(options)
        return (_expand_to_input(grad, x, axis, keepdims),) + (None,) * len(options)


class Mean(Function):
    """Arithmetic mean, over all elements or along ``axis``."""

    @staticmethod
    def forward(x: Any, axis: Axis = None, keepdims: bool = False) -> Any:
        return np.mean(x, axis=axis, keepdims=keepdims)

    @staticmethod
    def backward(grad: Any, output: Any, x: Any, *options: Any) -> Tuple[Any, ...]:
        axis, keepdims = _options(options)
        count = np.size(x) // max(np.size(output), 1)
        grad_x = _expand_to_input(grad, x, axis, keepdims) / count
        return (grad_x,) + (None,) * len(options)
