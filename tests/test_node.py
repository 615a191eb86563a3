import pytest
import numpy as np
from ADpy.core import (
    CachedNode,
    GradientShapeMismatchError,
    Method,
    Node,
    UncachedValueError,
    Variable,
    arg,
    args,
    axes,
    backward,
    eltype,
    operator,
    register,
    similar,
    size,
    value,
)


def double(x):
    return 2 * x


class TestVariable:
    """Tests for leaf variables and gradient accumulation."""

    def test_value_and_unset_grad(self):
        """Test a new variable"""
        x = Variable(3.0)
        assert value(x) == 3.0
        assert x.grad is None

    def test_preseeded_grad(self):
        """Test creating a variable with a gradient"""
        x = Variable(np.array([1.0, 2.0]), np.array([0.5, 0.5]))
        assert np.allclose(x.grad, [0.5, 0.5])

    def test_preseeded_grad_is_copied(self):
        """Test that the initial gradient is copied"""
        seed = np.zeros(2)
        x = Variable(np.ones(2), seed)
        x.accumulate(np.ones(2))
        assert np.allclose(seed, [0.0, 0.0])
        assert np.allclose(x.grad, [1.0, 1.0])

    def test_accumulate_adds(self):
        """Test gradient accumulation"""
        x = Variable(1.0)
        x.accumulate(2.0)
        x.accumulate(3.0)
        assert x.grad == 5.0

    def test_first_contribution_is_copied(self):
        """Accumulating twice must not modify the array passed in."""
        x = Variable(np.zeros(3))
        contribution = np.ones(3)
        x.accumulate(contribution)
        x.accumulate(contribution)
        assert np.allclose(contribution, [1.0, 1.0, 1.0])
        assert np.allclose(x.grad, [2.0, 2.0, 2.0])

    def test_accumulate_shape_mismatch(self):
        """Test leaf shape check on accumulation"""
        x = Variable(np.zeros(3))
        with pytest.raises(GradientShapeMismatchError):
            x.accumulate(np.ones(2))
        assert x.grad is None

    def test_zero_grad(self):
        """Test resetting the gradient"""
        x = Variable(1.0, 4.0)
        x.zero_grad()
        assert x.grad is None


class TestNode:
    """Tests for bare graph nodes."""

    def test_bare_callable_wrapped_as_method(self):
        """Test that a bare callable becomes a plain operator"""
        x = Variable(1.0)
        node = Node(double, (x,))
        assert isinstance(node.f, Method)
        assert node.f.f is double

    def test_args_stored_as_tuple(self):
        """Test argument storage"""
        x = Variable(1.0)
        node = Node(double, [x])
        assert isinstance(node.args, tuple)
        assert node.args[0] is x

    def test_value_of_uncached_node_raises(self):
        """Test value of an uncached node"""
        node = Node(double, (Variable(1.0),))
        with pytest.raises(UncachedValueError) as exc_info:
            value(node)
        assert exc_info.value.node is node

    def test_non_callable_operator(self):
        """Test node creation with a non-callable"""
        with pytest.raises(TypeError):
            Node(3, ())


class TestCachedNode:
    """Tests for cached nodes built through register."""

    def test_register_evaluates(self):
        """Test that register evaluates immediately"""
        x = Variable(2.0)
        y = register(double, x)
        assert isinstance(y, CachedNode)
        assert y.output == 4.0
        assert value(y) == 4.0

    def test_accessors(self):
        """Test node accessors"""
        x = Variable(2.0)
        y = register(double, x)
        assert args(y) == (x,)
        assert arg(y, 0) is x
        assert operator(y).f is double
        assert args(y.node) == (x,)

    def test_node_output_is_unwrapped(self):
        """Test value of a node holding another node"""
        x = Variable(2.0)
        inner = register(double, x)
        outer = CachedNode(Node(double, (x,)), inner)
        assert value(outer) == 4.0

    def test_requires_node(self):
        """Test cached node creation from a non-node"""
        with pytest.raises(TypeError):
            CachedNode(3.0, 1.0)


class TestIntrospection:
    """Tests for shape and type queries answered through value()."""

    def setup_method(self):
        self.x = Variable(np.zeros((2, 3)))
        self.y = register(double, self.x)

    def test_size(self):
        """Test size of nodes and values"""
        assert size(self.y) == (2, 3)
        assert size(self.y, 1) == 3
        assert size(Variable(3.0)) == ()

    def test_shape_properties(self):
        """Test shape, ndim and dtype properties"""
        assert self.y.shape == (2, 3)
        assert self.y.ndim == 2
        assert self.y.dtype == np.float64

    def test_eltype_and_axes(self):
        """Test element type and axes"""
        assert eltype(self.y) == np.float64
        assert axes(self.y) == (range(2), range(3))

    def test_similar(self):
        """Test creating a similar variable"""
        fresh = similar(self.y)
        assert isinstance(fresh, Variable)
        assert fresh.value.shape == (2, 3)
        assert fresh.grad is None
        assert similar(self.y, dtype=np.int32).value.dtype == np.int32
        assert similar(self.y, shape=(4,)).value.shape == (4,)

    def test_uncached_node_introspection_raises(self):
        """Test introspection of an uncached node"""
        with pytest.raises(UncachedValueError):
            size(Node(double, (self.x,)))


class TestArithmetic:
    """Tests for the operator overloads on nodes."""

    def test_expression(self):
        """Test building an expression with operators"""
        x = Variable(2.0)
        y = Variable(3.0)
        z = x * y + x
        assert value(z) == 8.0

        backward(z)
        assert x.grad == 4.0
        assert y.grad == 2.0

    def test_reflected_with_numpy_array(self):
        """Test reflected operators with a numpy array"""
        x = Variable(np.array([1.0, 1.0]))
        z = np.array([1.0, 2.0]) + x
        assert isinstance(z, CachedNode)
        assert np.allclose(value(z), [2.0, 3.0])

    def test_sub_div_neg(self):
        """Test subtraction, division and negation operators"""
        x = Variable(6.0)
        y = Variable(2.0)
        assert value(x - y) == 4.0
        assert value(1.0 - y) == -1.0
        assert value(x / y) == 3.0
        assert value(12.0 / x) == 2.0
        assert value(-x) == -6.0

    def test_matmul(self):
        """Test the matmul operator"""
        a = Variable(np.eye(2))
        b = Variable(np.array([[1.0, 2.0], [3.0, 4.0]]))
        assert np.allclose(value(a @ b), [[1.0, 2.0], [3.0, 4.0]])
