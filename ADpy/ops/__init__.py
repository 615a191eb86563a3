"""
Operations module for ADpy.

Differentiable operations built on the public registration contracts:
``Function`` subclasses for plain operations and broadcast helpers for
elementwise ones.
"""

from .basic import Add, Divide, MatMul, Multiply, Negate, Subtract, unbroadcast
from .elementwise import broadcast, cos, exp, log, sin, square, tanh
from .reduction import Mean, Sum
from .reshape import Reshape, Transpose

__all__ = [
    # Basic operations
    "Add",
    "Subtract",
    "Multiply",
    "Divide",
    "Negate",
    "MatMul",
    "unbroadcast",
    # Element-wise operations
    "broadcast",
    "sin",
    "cos",
    "exp",
    "log",
    "tanh",
    "square",
    # Reduction operations
    "Sum",
    "Mean",
    # Shape operations
    "Reshape",
    "Transpose",
]
