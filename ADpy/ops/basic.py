from typing import Any, Tuple

import numpy as np

from ..core.function import Function


def unbroadcast(grad: Any, like: Any) -> Any:
    """
    Reduces a gradient to the shape of ``like`` by summing over broadcasted dimensions.

    The result is cast to the floating dtype of ``like``, so mixed precision
    operands each receive a contribution of their own type.
    """
    target_shape = np.shape(like)
    grad = np.asarray(grad)
    # Sum away the leading dimensions broadcasting prepended
    while grad.ndim > len(target_shape):
        grad = grad.sum(axis=0)
    for axis, target_dim in enumerate(target_shape):
        if target_dim == 1 and grad.shape[axis] != 1:
            grad = grad.sum(axis=axis, keepdims=True)

    dtype = np.result_type(like)
    if np.issubdtype(dtype, np.inexact) and grad.dtype != dtype:
        grad = grad.astype(dtype)

    if grad.ndim == 0:
        return grad[()]
    return grad


class Add(Function):
    @staticmethod
    def forward(a: Any, b: Any) -> Any:
        return a + b

    @staticmethod
    def backward(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
        return unbroadcast(grad, a), unbroadcast(grad, b)


class Subtract(Function):
    @staticmethod
    def forward(a: Any, b: Any) -> Any:
        return a - b

    @staticmethod
    def backward(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
        return unbroadcast(grad, a), unbroadcast(-grad, b)


class Multiply(Function):
    @staticmethod
    def forward(a: Any, b: Any) -> Any:
        return a * b

    @staticmethod
    def backward(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
        return unbroadcast(grad * b, a), unbroadcast(grad * a, b)


class Divide(Function):
    """
    Division operation.

    Forward: f(a, b) = a / b
    Backward: df/da = 1/b, df/db = -a/b^2
    """

    @staticmethod
    def forward(a: Any, b: Any) -> Any:
        if np.any(np.asarray(b) == 0):
            raise ValueError("Division by zero")
        return a / b

    @staticmethod
    def backward(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
        return unbroadcast(grad / b, a), unbroadcast(-grad * a / (b * b), b)


class Negate(Function):
    @staticmethod
    def forward(x: Any) -> Any:
        return -x

    @staticmethod
    def backward(grad: Any, output: Any, x: Any) -> Tuple[Any]:
        return (-grad,)


class MatMul(Function):
    """
    Matrix product of 1-D or 2-D operands.

    For 1-D operands the usual numpy promotion applies: a vector on the left
    is a row, a vector on the right is a column.
    """

    @staticmethod
    def forward(a: Any, b: Any) -> Any:
        return np.matmul(a, b)

    @staticmethod
    def backward(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
        a = np.asarray(a)
        b = np.asarray(b)
        if a.ndim == 1 and b.ndim == 1:
            ga, gb = grad * b, grad * a
        elif b.ndim == 1:
            ga, gb = np.outer(grad, b), a.T @ grad
        elif a.ndim == 1:
            ga, gb = b @ grad, np.outer(a, grad)
        else:
            ga, gb = grad @ b.T, a.T @ grad
        return unbroadcast(ga, a), unbroadcast(gb, b)
