"""
ADpy: Tape-free reverse-mode automatic differentiation

Operations build a graph of cached nodes as they execute. ``forward``
refreshes cached outputs, ``backward`` distributes gradients down to leaf
variables, and ``register_gradient`` / ``Function`` add new differentiable
operations.
"""

from .core import (
    ADError,
    AmbiguousOperatorError,
    Broadcasted,
    CachedNode,
    Function,
    GradientArityError,
    GradientShapeMismatchError,
    GradientTypeMismatchError,
    Method,
    Node,
    UncachedValueError,
    UnregisteredGradientError,
    Variable,
    backward,
    forward,
    gradient,
    register,
    register_gradient,
    value,
)

__version__ = "0.1.0"

__all__ = [
    "Variable",
    "Node",
    "CachedNode",
    "register",
    "value",
    "forward",
    "backward",
    "gradient",
    "register_gradient",
    "Method",
    "Broadcasted",
    "Function",
    "ADError",
    "UncachedValueError",
    "AmbiguousOperatorError",
    "GradientTypeMismatchError",
    "GradientShapeMismatchError",
    "UnregisteredGradientError",
    "GradientArityError",
]
