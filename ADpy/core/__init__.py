"""
Core functionality for ADpy.

This module contains the graph, evaluation and gradient-dispatch machinery.
"""

from .autograd import backward
from .config import Config, get_config, shape_checks
from .errors import (
    ADError,
    AmbiguousOperatorError,
    GradientArityError,
    GradientShapeMismatchError,
    GradientTypeMismatchError,
    UncachedValueError,
    UnregisteredGradientError,
)
from .evaluation import forward
from .function import Function, register
from .gradient import (
    GradientRegistry,
    get_gradient_registry,
    gradient,
    node_gradient,
    register_gradient,
)
from .node import (
    AbstractNode,
    CachedNode,
    LeafNode,
    Node,
    Variable,
    arg,
    args,
    axes,
    eltype,
    operator,
    similar,
    size,
    value,
)
from .operator import (
    BroadcastExpr,
    Broadcasted,
    Method,
    Operator,
    Plain,
    apply_operator,
    materialize,
)

__all__ = [
    "AbstractNode",
    "LeafNode",
    "Variable",
    "Node",
    "CachedNode",
    "value",
    "args",
    "arg",
    "operator",
    "size",
    "eltype",
    "axes",
    "similar",
    "Operator",
    "Method",
    "Plain",
    "Broadcasted",
    "BroadcastExpr",
    "apply_operator",
    "materialize",
    "forward",
    "backward",
    "register",
    "Function",
    "GradientRegistry",
    "get_gradient_registry",
    "register_gradient",
    "gradient",
    "node_gradient",
    "Config",
    "get_config",
    "shape_checks",
    "ADError",
    "UncachedValueError",
    "AmbiguousOperatorError",
    "GradientTypeMismatchError",
    "GradientShapeMismatchError",
    "UnregisteredGradientError",
    "GradientArityError",
]
