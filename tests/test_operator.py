import pytest
import numpy as np
from ADpy.core import (
    AmbiguousOperatorError,
    BroadcastExpr,
    Broadcasted,
    Method,
    Plain,
    apply_operator,
    materialize,
)


class TestOperators:
    """Tests for the Method and Broadcasted operator variants."""

    def test_method_applies_eagerly(self):
        """Test plain operator evaluation"""
        assert Method(np.sin).evaluate(0.0) == 0.0

    def test_method_materializes_lazy_arguments(self):
        """Test that plain operators materialize expressions"""
        expr = Broadcasted(np.add).evaluate(np.ones(2), 1.0)
        assert Method(np.sum).evaluate(expr) == 4.0

    def test_broadcasted_is_lazy(self):
        """Test that broadcast evaluation is deferred"""
        expr = Broadcasted(np.add).evaluate(np.ones(3), 1.0)
        assert isinstance(expr, BroadcastExpr)
        assert not expr.is_materialized
        assert expr.shape == (3,)

    def test_bare_function_is_ambiguous(self):
        """Test error for applying a bare callable"""
        with pytest.raises(AmbiguousOperatorError) as exc_info:
            apply_operator(np.sin, 0.0)
        assert exc_info.value.function is np.sin

    def test_apply_operator(self):
        """Test applying an operator"""
        assert apply_operator(Method(np.add), 1.0, 2.0) == 3.0

    def test_invalid_wrapping(self):
        """Test rejected operator arguments"""
        with pytest.raises(TypeError):
            Method(Method(np.sin))
        with pytest.raises(TypeError):
            Broadcasted(42)

    def test_equality(self):
        """Test operator equality and hashing"""
        assert Method(np.sin) == Method(np.sin)
        assert hash(Method(np.sin)) == hash(Method(np.sin))
        assert Method(np.sin) != Broadcasted(np.sin)
        assert Method(np.sin) != Method(np.cos)

    def test_plain_alias_and_repr(self):
        """Test the Plain alias and operator repr"""
        assert Plain is Method
        assert repr(Method(np.sin)) == "Method(sin)"
        assert repr(Broadcasted(np.cos)) == "Broadcasted(cos)"


class TestBroadcastExpr:
    """Tests for lazy broadcast expressions."""

    def test_shape_without_evaluation(self):
        """Test expression shape before evaluation"""
        expr = BroadcastExpr(np.add, (np.ones((2, 1)), np.ones(3)))
        assert expr.shape == (2, 3)
        assert expr.ndim == 2
        assert not expr.is_materialized

    def test_incompatible_shapes(self):
        """Test error for shapes that do not broadcast"""
        with pytest.raises(ValueError):
            BroadcastExpr(np.add, (np.ones(2), np.ones(3)))

    def test_nested_expressions_fuse(self):
        """Test nested expression evaluation"""
        inner = BroadcastExpr(np.sin, (np.zeros(3),))
        outer = BroadcastExpr(np.add, (inner, 1.0))
        assert np.allclose(outer.materialize(), [1.0, 1.0, 1.0])
        assert inner.is_materialized

    def test_materialize_is_memoized(self):
        """Test that an expression is evaluated only once"""
        calls = []

        def doubled(v):
            calls.append(v)
            return v * 2

        expr = BroadcastExpr(doubled, (np.arange(3.0),))
        first = expr.materialize()
        count = len(calls)
        second = expr.materialize()
        assert len(calls) == count
        assert first is second
        assert np.allclose(first, [0.0, 2.0, 4.0])

    def test_python_function_applied_elementwise(self):
        """Test broadcasting a Python function"""
        expr = BroadcastExpr(lambda v: v * v if v > 0 else 0.0, (np.array([-1.0, 2.0]),))
        assert np.allclose(expr.materialize(), [0.0, 4.0])

    def test_scalars_stay_scalar(self):
        """Test that scalar expressions give scalars"""
        result = BroadcastExpr(lambda a, b: a + b, (1.0, 2.0)).materialize()
        assert np.ndim(result) == 0
        assert result == 3.0

    def test_deep_expression(self):
        """Test a deeply nested expression"""
        expr = np.zeros(2)
        for _ in range(5000):
            expr = BroadcastExpr(np.add, (expr, 1.0))
        assert np.allclose(expr.materialize(), [5000.0, 5000.0])

    def test_materialize_passthrough(self):
        """Test materializing plain values"""
        data = np.ones(2)
        assert materialize(data) is data
        assert materialize(3.0) == 3.0
