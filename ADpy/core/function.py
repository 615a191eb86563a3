from abc import ABC, abstractmethod
from typing import Any, Tuple, Type, Union

from .gradient import get_gradient_registry
from .node import CachedNode
from .operator import Broadcasted, Method, Operator


def register(f: Union[Operator, Any], *args: Any) -> CachedNode:
    """
    Builds a graph node for ``f`` applied to ``args`` and evaluates it.

    This is the entry point every differentiable operation goes through.
    A bare callable is wrapped as a plain :class:`Method`.

    Returns:
        A cached node holding the forward result
    """
    return CachedNode.from_operator(f, args)


class Function(ABC):
    """
    Base class for operations declared together with their gradient rule.

    Subclasses implement ``forward`` (the computation on concrete values) and
    ``backward`` (the gradient rule). The rule is registered against
    ``forward`` when the subclass is created, so ``apply`` only needs to
    build the node. A subclass that inherits ``forward`` shares the parent's
    rule and may not override ``backward``.

    Set ``broadcast = True`` to apply ``forward`` elementwise through a lazy
    broadcast expression instead of calling it directly.

    Example::

        class Square(Function):
            @staticmethod
            def forward(x):
                return x * x

            @staticmethod
            def backward(grad, output, x):
                return (grad * 2 * x,)

        y = Square.apply(Variable(3.0))
    """

    broadcast: bool = False

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if _is_abstract(cls.forward) or _is_abstract(cls.backward):
            return
        if "forward" not in cls.__dict__:
            # Rules are keyed by ``forward``; an inherited one already has its rule
            if "backward" in cls.__dict__:
                raise TypeError(
                    f"{cls.__name__} overrides backward without defining its own forward"
                )
            return
        get_gradient_registry().register(cls.forward, cls.backward)

    @staticmethod
    @abstractmethod
    def forward(*args: Any) -> Any:
        """
        Performs the forward computation on concrete argument values.

        Returns:
            Result of the computation
        """
        raise NotImplementedError

    @staticmethod
    @abstractmethod
    def backward(grad: Any, output: Any, *args: Any) -> Tuple[Any, ...]:
        """
        Computes the gradient contributions of each argument.

        Args:
            grad: Gradient of the loss with respect to the output
            output: Cached output of the forward computation
            *args: Argument values the output was computed from

        Returns:
            One contribution per argument, in argument order
        """
        raise NotImplementedError

    @classmethod
    def operator(cls) -> Operator:
        """The operator wrapping ``forward`` with this function's variant."""
        variant: Type[Operator] = Broadcasted if cls.broadcast else Method
        return variant(cls.forward)

    @classmethod
    def apply(cls, *args: Any) -> CachedNode:
        """Applies the function to the given arguments (nodes or plain values)."""
        return register(cls.operator(), *args)

    @classmethod
    def verify_backward(
        cls, *inputs: Any, epsilon: float = 1e-6, atol: float = 1e-5, rtol: float = 1e-4
    ) -> bool:
        """
        Verifies ``backward`` against numerical gradients.

        Args:
            *inputs: Argument values to check the gradient at
            epsilon: Step of the central finite differences
            atol: Absolute tolerance
            rtol: Relative tolerance

        Returns:
            True if gradients match within tolerance, False otherwise
        """
        from ..utils.gradcheck import gradcheck

        return gradcheck(cls.operator(), *inputs, epsilon=epsilon, atol=atol, rtol=rtol)


def _is_abstract(method: Any) -> bool:
    return getattr(method, "__isabstractmethod__", False)
