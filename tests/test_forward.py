import pytest
import numpy as np
from ADpy.core import (
    AmbiguousOperatorError,
    BroadcastExpr,
    Broadcasted,
    Node,
    Variable,
    forward,
    register,
    value,
)


def square(v):
    return v * v


def increment(v):
    return v + 1.0


class TestForward:
    """Tests for forward evaluation and output caching."""

    def test_plain_values_pass_through(self):
        """Test forward on non-node values"""
        data = np.ones(3)
        assert forward(3.0) == 3.0
        assert forward(data) is data

    def test_leaf_returns_value(self):
        """Test forward on a variable"""
        assert forward(Variable(5.0)) == 5.0

    def test_bare_node_recomputed_every_call(self):
        """Test that an uncached node is evaluated on every call"""
        x = Variable(2.0)
        node = Node(square, (x,))
        assert forward(node) == 4.0
        x.value = 3.0
        assert forward(node) == 9.0

    def test_cache_refresh(self):
        """Test refreshing a cached node after a leaf changes"""
        x = Variable(2.0)
        y = register(square, x)
        x.value = 5.0

        # Stale until forwarded again
        assert y.output == 4.0
        assert value(y) == 4.0

        assert forward(y) == 25.0
        assert y.output == 25.0
        assert value(y) == 25.0

    def test_idempotent_reforward(self):
        """Test that forwarding twice gives the same output"""
        x = Variable(np.array([1.0, 2.0, 3.0]))
        y = register(square, x)
        first = forward(y)
        second = forward(y)
        assert np.array_equal(first, second)
        assert np.array_equal(y.output, [1.0, 4.0, 9.0])

    def test_cached_arguments_are_boundaries(self):
        """Test that cached arguments are not recomputed"""
        x = Variable(2.0)
        a = register(square, x)
        b = register(square, a)
        assert value(b) == 16.0

        x.value = 3.0
        assert forward(b) == 16.0
        assert forward(a) == 9.0
        assert forward(b) == 81.0

    def test_recursive_forward(self):
        """Test recomputing through cached arguments"""
        x = Variable(2.0)
        a = register(square, x)
        b = register(square, a)

        x.value = 3.0
        assert forward(b, recursive=True) == 81.0
        assert a.output == 9.0

    def test_shared_bare_node_evaluated_once_per_call(self):
        """Test memoization of a shared uncached node"""
        calls = []

        def counted(v):
            calls.append(v)
            return v + 1.0

        x = Variable(1.0)
        shared = Node(counted, (x,))
        top = register(lambda a, b: a + b, shared, shared)
        assert value(top) == 4.0
        assert len(calls) == 1

        calls.clear()
        forward(top)
        assert len(calls) == 1

    def test_non_node_arguments(self):
        """Test forward with constant arguments"""
        x = Variable(2.0)
        y = register(lambda v, k: v * k, x, 3.0)
        assert value(y) == 6.0

    def test_broadcasted_output_is_lazy(self):
        """Test that broadcast outputs stay unevaluated"""
        x = Variable(np.zeros(3))
        y = register(Broadcasted(np.sin), x)
        assert isinstance(y.output, BroadcastExpr)
        assert np.allclose(value(y), [0.0, 0.0, 0.0])

    def test_broadcasts_fuse_across_cached_nodes(self):
        """Test that chained broadcasts nest into one expression"""
        x = Variable(np.zeros(3))
        s = register(Broadcasted(np.sin), x)
        t = register(Broadcasted(np.add), s, 1.0)
        assert t.output.args[0] is s.output
        assert np.allclose(value(t), [1.0, 1.0, 1.0])

    def test_plain_consumer_of_broadcast(self):
        """Test that plain operators receive materialized values"""
        x = Variable(np.array([0.0, np.pi / 2]))
        s = register(Broadcasted(np.sin), x)
        total = register(np.sum, s)
        assert np.isclose(value(total), 1.0)

    def test_deep_uncached_chain(self):
        """Test forward through a long uncached chain"""
        x = Variable(1.0)
        node = x
        for _ in range(20000):
            node = Node(increment, (node,))
        assert forward(node) == 20001.0

    def test_deep_cached_chain_recursive(self):
        """Test recursive forward through a long cached chain"""
        x = Variable(1.0)
        node = x
        for _ in range(5000):
            node = register(increment, node)
        assert value(node) == 5001.0

        x.value = 0.0
        assert forward(node, recursive=True) == 5000.0

    def test_bare_function_in_forward_path(self):
        """Test error for a bare callable reached by forward"""
        x = Variable(2.0)
        node = Node(square, (x,))
        node._f = square
        with pytest.raises(AmbiguousOperatorError):
            forward(node)
