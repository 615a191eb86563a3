from typing import Any, Tuple


class ADError(Exception):
    """Base class for every error raised by the differentiation engine."""


class UncachedValueError(ADError, ValueError):
    """
    Raised when the value of a node without a cached output is requested.

    A bare graph node is only a recipe; it has to be wrapped in a cached node
    (for example through ``register``) before its value can be read.
    """

    def __init__(self, node: Any):
        self.node = node
        super().__init__(
            f"Expected value in this node {node!r} of type {type(node).__name__}, "
            "check if you defined a non-cached node or overload value() for your node"
        )


class AmbiguousOperatorError(ADError, TypeError):
    """Raised when a bare callable reaches the generic forward path."""

    def __init__(self, function: Any):
        self.function = function
        super().__init__(
            f"Please wrap {function!r} as an Operator (Method or Broadcasted), "
            "directly forwarding a function is ambiguous"
        )


class GradientTypeMismatchError(ADError, TypeError):
    """Raised when the incoming gradient's type differs from the cached output's type."""

    def __init__(self, expected: Any, got: Any):
        self.expected = expected
        self.got = got
        super().__init__(
            "Gradient is expected to have the same type with outputs, "
            f"expected {expected}, got {got}"
        )


class GradientShapeMismatchError(ADError, ValueError):
    """Raised when the incoming gradient's shape differs from the cached output's shape."""

    def __init__(self, expected: Tuple[int, ...], got: Tuple[int, ...]):
        self.expected = expected
        self.got = got
        super().__init__(
            "Gradient should have the same size with output, "
            f"expect size {expected}, got {got}"
        )


class UnregisteredGradientError(ADError, NotImplementedError):
    """Raised when no gradient rule is registered for a function."""

    def __init__(self, function: Any):
        self.function = function
        name = getattr(function, "__name__", repr(function))
        super().__init__(
            f"gradient of operator {name} is not defined\n"
            "Possible Fix:\n"
            "register one of the following:\n"
            f"1. register_gradient({name})(rule)\n"
            f"2. register_gradient(Method({name}))(rule)\n"
            f"3. register_gradient(Broadcasted({name}))(rule)\n"
            "where rule(grad, output, *args) returns one gradient per argument"
        )


class GradientArityError(ADError, ValueError):
    """Raised when a gradient rule returns the wrong number of contributions."""

    def __init__(self, function: Any, expected: int, got: int):
        self.function = function
        self.expected = expected
        self.got = got
        name = getattr(function, "__name__", repr(function))
        super().__init__(
            f"gradient rule of {name} returned {got} contributions, "
            f"expected one per argument ({expected})"
        )
