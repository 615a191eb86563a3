from typing import Any, Optional, Tuple

import numpy as np

from ..core.function import Function


class Reshape(Function):
    @staticmethod
    def forward(x: Any, shape: Tuple[int, ...]) -> Any:
        return np.reshape(x, shape)

    @staticmethod
    def backward(grad: Any, output: Any, x: Any, shape: Tuple[int, ...]) -> Tuple[Any, None]:
        return np.reshape(grad, np.shape(x)), None


class Transpose(Function):
    """Permutes dimensions; reverses them when no ``axes`` are given."""

    @staticmethod
    def forward(x: Any, axes: Optional[Tuple[int, ...]] = None) -> Any:
        return np.transpose(x, axes)

    @staticmethod
    def backward(grad: Any, output: Any, x: Any, *options: Any) -> Tuple[Any, ...]:
        axes = options[0] if options else None
        if axes is None:
            grad_x = np.transpose(grad)
        else:
            grad_x = np.transpose(grad, np.argsort(axes))
        return (grad_x,) + (None,) * len(options)
