from typing import Any, Callable, Dict, Optional, Tuple, Type

from .errors import GradientArityError, UnregisteredGradientError
from .node import CachedNode, value
from .operator import Operator

GradientRule = Callable[..., Tuple[Any, ...]]
RuleKey = Tuple[Optional[Type[Operator]], int]


class GradientRegistry:
    """
    Maps (operator variant, function) pairs to gradient rules.

    A rule is called as ``rule(grad, output, *args)`` with the incoming
    gradient, the cached output and the values of the node's arguments, and
    returns one gradient contribution per argument, in argument order.

    Rules can be registered against a bare function, which makes them the
    shared default for every variant, or against an operator
    (``Method(f)`` / ``Broadcasted(f)``), which overrides the default for
    that variant only. Functions are keyed by identity.
    """

    def __init__(self) -> None:
        self._rules: Dict[RuleKey, Tuple[Any, GradientRule]] = {}

    @staticmethod
    def _key(target: Any, variant: Optional[Type[Operator]] = None) -> Tuple[RuleKey, Any]:
        if isinstance(target, Operator):
            if variant is not None:
                raise TypeError("Pass either an operator or a function with a variant, not both")
            return (type(target), id(target.f)), target.f
        if variant is not None and not (isinstance(variant, type) and issubclass(variant, Operator)):
            raise TypeError(f"variant must be an Operator subclass, got {variant!r}")
        if not callable(target):
            raise TypeError(f"Cannot register a gradient for non-callable {target!r}")
        return (variant, id(target)), target

    def register(
        self, target: Any, rule: GradientRule, variant: Optional[Type[Operator]] = None
    ) -> None:
        """
        Registers ``rule`` as the gradient of ``target``.

        Args:
            target: A function, or an operator wrapping one
            rule: The gradient rule
            variant: Operator class to register a bare function under
        """
        key, f = self._key(target, variant)
        # Keep the function alive so its id stays unique
        self._rules[key] = (f, rule)

    def unregister(self, target: Any, variant: Optional[Type[Operator]] = None) -> None:
        key, _ = self._key(target, variant)
        del self._rules[key]

    def lookup(self, op: Any) -> GradientRule:
        """
        Finds the rule for an operator or function.

        Operators are looked up by their own variant (and its operator base
        classes) first, then by the bare function.

        Raises:
            UnregisteredGradientError: If no rule matches
        """
        if isinstance(op, Operator):
            f = op.f
            candidates = [
                (cls, id(f))
                for cls in type(op).__mro__
                if isinstance(cls, type) and issubclass(cls, Operator)
            ]
            candidates.append((None, id(f)))
        else:
            f = op
            candidates = [(None, id(f))]

        for key in candidates:
            entry = self._rules.get(key)
            if entry is not None:
                return entry[1]
        raise UnregisteredGradientError(f)

    def __contains__(self, target: Any) -> bool:
        key, _ = self._key(target)
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def clear(self) -> None:
        """Removes every registered rule."""
        self._rules.clear()


# Global gradient registry instance
_gradient_registry = GradientRegistry()


def get_gradient_registry() -> GradientRegistry:
    """Returns the global gradient registry instance."""
    return _gradient_registry


def register_gradient(
    target: Any, variant: Optional[Type[Operator]] = None
) -> Callable[[GradientRule], GradientRule]:
    """
    Decorator registering a gradient rule in the global registry.

    Example::

        @register_gradient(np.sin)
        def _sin_grad(grad, output, x):
            return (grad * np.cos(x),)

    Args:
        target: A function, ``Method(f)`` or ``Broadcasted(f)``
        variant: Operator class to register a bare function under
    """

    def decorator(rule: GradientRule) -> GradientRule:
        _gradient_registry.register(target, rule, variant)
        return rule

    return decorator


def gradient(op: Any, grad: Any, output: Any, *args: Any) -> Tuple[Any, ...]:
    """
    Computes per-argument gradient contributions of an operation.

    Args:
        op: Operator or bare function
        grad: Incoming gradient
        output: Cached output of the operation
        *args: Values of the operation's arguments

    Returns:
        Tuple with one contribution per argument

    Raises:
        UnregisteredGradientError: If no rule is registered for ``op``
        GradientArityError: If the rule returns the wrong number of contributions
    """
    rule = _gradient_registry.lookup(op)
    grads = rule(grad, output, *args)
    if not isinstance(grads, (tuple, list)):
        raise GradientArityError(_function_of(op), len(args), 1)
    if len(grads) != len(args):
        raise GradientArityError(_function_of(op), len(args), len(grads))
    return tuple(grads)


def node_gradient(node: CachedNode, grad: Any) -> Tuple[Any, ...]:
    """Gradient contributions for the arguments of a cached node."""
    return gradient(node.f, grad, value(node), *(value(a) for a in node.args))


def _function_of(op: Any) -> Any:
    return op.f if isinstance(op, Operator) else op
