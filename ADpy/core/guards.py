"""
Pre-flight checks run before a backward step through a cached node.

The type check is always active. The shape check is a boundary check that
can be switched off through :mod:`ADpy.core.config` (``check_shapes``) once
a graph is known to be well formed; it is on by default.
"""

from numbers import Number
from typing import Any, NamedTuple, Optional

import numpy as np

from .config import get_config
from .errors import GradientShapeMismatchError, GradientTypeMismatchError
from .node import CachedNode, value


class SemanticType(NamedTuple):
    """
    Type of a value as seen by the type guard.

    Numpy arrays are described by element type and rank. Scalars, whether
    Python numbers or numpy scalars, by their numpy element type, so that
    ``3.0`` and ``np.float64(3.0)`` agree. Anything else by its Python type.
    """

    kind: type
    dtype: Optional[np.dtype] = None
    ndim: Optional[int] = None

    def __str__(self) -> str:
        if self.dtype is None:
            return self.kind.__name__
        return f"{self.kind.__name__}[{self.dtype}, {self.ndim}]"


def semantic_type(x: Any) -> SemanticType:
    if isinstance(x, np.ndarray):
        return SemanticType(type(x), x.dtype, x.ndim)
    if isinstance(x, (Number, np.generic)):
        return SemanticType(Number, np.asarray(x).dtype, 0)
    return SemanticType(type(x))


def check_gradient_type(node: CachedNode, grad: Any) -> None:
    """
    Raises:
        GradientTypeMismatchError: If ``grad`` and the cached output differ in type
    """
    expected = semantic_type(value(node))
    got = semantic_type(grad)
    if expected != got:
        raise GradientTypeMismatchError(expected, got)


def check_gradient_shape(node: CachedNode, grad: Any) -> None:
    """
    Raises:
        GradientShapeMismatchError: If ``grad`` and the cached output differ in shape
    """
    expected = np.shape(value(node))
    got = np.shape(grad)
    if expected != got:
        raise GradientShapeMismatchError(expected, got)


def check_backward(node: CachedNode, grad: Any) -> None:
    check_gradient_type(node, grad)
    if get_config().check_shapes:
        check_gradient_shape(node, grad)
