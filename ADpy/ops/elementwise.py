"""
Elementwise operations applied through lazy broadcast expressions.

Consecutive elementwise operations nest into one expression that numpy
evaluates only when a value is actually needed. Gradient rules are registered
against the bare numpy functions, so they also apply when the same function
is used plainly, e.g. ``register(np.sin, x)``.
"""

from typing import Any, Callable, Tuple

import numpy as np

from ..core.function import register
from ..core.gradient import register_gradient
from ..core.node import CachedNode
from ..core.operator import Broadcasted
from .basic import unbroadcast


def broadcast(f: Callable[..., Any], *args: Any) -> CachedNode:
    """Applies ``f`` elementwise to ``args`` as a fusable broadcast."""
    return register(Broadcasted(f), *args)


def sin(x: Any) -> CachedNode:
    return broadcast(np.sin, x)


def cos(x: Any) -> CachedNode:
    return broadcast(np.cos, x)


def exp(x: Any) -> CachedNode:
    return broadcast(np.exp, x)


def log(x: Any) -> CachedNode:
    return broadcast(np.log, x)


def tanh(x: Any) -> CachedNode:
    return broadcast(np.tanh, x)


def square(x: Any) -> CachedNode:
    return broadcast(np.square, x)


@register_gradient(np.sin)
def _sin_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad * np.cos(x),)


@register_gradient(np.cos)
def _cos_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (-grad * np.sin(x),)


@register_gradient(np.exp)
def _exp_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad * np.exp(x),)


# A broadcast's output is already materialized when its gradient is taken
@register_gradient(Broadcasted(np.exp))
def _broadcasted_exp_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad * output,)


@register_gradient(np.log)
def _log_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad / x,)


@register_gradient(np.tanh)
def _tanh_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad * (1 - output * output),)


@register_gradient(np.square)
def _square_grad(grad: Any, output: Any, x: Any) -> Tuple[Any]:
    return (grad * 2 * x,)


@register_gradient(np.add)
def _add_grad(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
    return unbroadcast(grad, a), unbroadcast(grad, b)


@register_gradient(np.subtract)
def _subtract_grad(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
    return unbroadcast(grad, a), unbroadcast(-grad, b)


@register_gradient(np.multiply)
def _multiply_grad(grad: Any, output: Any, a: Any, b: Any) -> Tuple[Any, Any]:
    return unbroadcast(grad * b, a), unbroadcast(grad * a, b)
