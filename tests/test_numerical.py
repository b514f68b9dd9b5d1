"""
Unit Tests: Numerical Differentiation and Gradient Checks
=========================================================

Finite differences are the independent oracle for backward(). These tests
pin down the estimate itself, the side effect it has on an operation's
retained input, and the gradient_check harness built on top of it.

Run with: pytest tests/test_numerical.py -v
"""

import logging
import math
import pytest
import numpy as np

from chaingrad import (
    Variable, Square, Exp, Log, Tanh,
    numerical_diff, gradient_check, GradientCheck, Config, using_config
)


class SquareExpSquare:
    """y = square(exp(square(x))), written by hand from three operations."""

    def __init__(self) -> None:
        self.ops = [Square(), Exp(), Square()]

    def forward(self, x: Variable) -> Variable:
        for op in self.ops:
            x = op.forward(x)
        return x


class WrongExp(Exp):
    """Exp with a deliberately broken derivative."""

    def backward(self, gy):
        return np.float32(gy)


# =============================================================================
# numerical_diff
# =============================================================================

class TestNumericalDiff:
    """Test the central-difference estimate."""

    def test_square_at_two(self) -> None:
        """Test d(x^2)/dx at x = 2 is about 4."""
        dy = numerical_diff(Square(), Variable(2.0), eps=1e-2)
        assert abs(dy - 4.0) < 1e-2

    def test_returns_float32(self) -> None:
        """Test the estimate stays in single precision."""
        assert isinstance(numerical_diff(Exp(), Variable(1.0)), np.float32)

    @pytest.mark.parametrize("op_cls, x, expected", [
        (Exp, 1.0, math.e),
        (Log, 2.0, 0.5),
        (Tanh, 0.5, 1 - math.tanh(0.5) ** 2),
    ])
    def test_matches_known_derivative(self, op_cls, x: float, expected: float) -> None:
        """Test estimates for the other operations."""
        dy = numerical_diff(op_cls(), Variable(x))
        assert abs(dy - expected) < 1e-3

    def test_composite(self) -> None:
        """Test that any object with forward() can be differentiated."""
        dy = numerical_diff(SquareExpSquare(), Variable(0.5))
        assert abs(dy - 2 * math.exp(0.5)) < 1e-2

    def test_leaves_upper_probe_retained(self) -> None:
        """Test the retained input is x + eps afterwards."""
        op = Square()
        numerical_diff(op, Variable(2.0), eps=1e-2)
        assert op.input == Variable(np.float32(2.0) + np.float32(1e-2))

    def test_overwrites_previous_forward(self) -> None:
        """Test that probing a shared instance clobbers its retained input."""
        op = Square()
        op.forward(Variable(3.0))
        numerical_diff(op, Variable(1.0), eps=0.5)
        assert op.input == Variable(1.5)
        assert op.backward(1.0) == 3.0

    def test_default_eps_from_config(self) -> None:
        """Test that eps defaults to Config.numerical_eps."""
        op = Square()
        with using_config('numerical_eps', 0.5):
            numerical_diff(op, Variable(2.0))
        assert op.input == Variable(2.5)

    @pytest.mark.parametrize("eps", [0.0, -1e-2, 1e-50])
    def test_non_positive_eps_raises(self, eps: float) -> None:
        """Test that eps must be positive, including after rounding to float32."""
        op = Square()
        with pytest.raises(ValueError):
            numerical_diff(op, Variable(2.0), eps=eps)
        assert op.input is None


# =============================================================================
# gradient_check
# =============================================================================

class TestGradientCheck:
    """Test analytic-vs-numerical comparison."""

    @pytest.mark.parametrize("op_cls, x", [
        (Square, 2.0),
        (Square, -0.5),
        (Exp, 1.0),
        (Exp, -2.0),
        (Log, 2.0),
        (Tanh, 0.5),
    ])
    def test_operations_pass(self, op_cls, x: float) -> None:
        """Test backward agrees with finite differences for every operation."""
        result = gradient_check(op_cls(), Variable(x))
        assert isinstance(result, GradientCheck)
        assert result.passed, result

    def test_result_fields(self) -> None:
        """Test analytic, numeric and error for a quadratic."""
        result = gradient_check(Square(), Variable(3.0), gy=2.0)
        assert result.analytic == 12.0
        assert abs(result.numeric - 12.0) < 1e-3
        assert result.error == abs(float(result.analytic - result.numeric))

    def test_restores_retained_input(self) -> None:
        """Test the retained input is x when the check returns."""
        op = Exp()
        gradient_check(op, Variable(0.3))
        assert op.input == Variable(0.3)

    def test_detects_wrong_derivative(self, caplog) -> None:
        """Test a broken backward fails and is logged."""
        with caplog.at_level(logging.WARNING, logger="chaingrad.numerical"):
            result = gradient_check(WrongExp(), Variable(1.0))

        assert not result.passed
        assert result.error > 1.0
        assert "gradient check failed for WrongExp" in caplog.text

    def test_passing_check_logs_at_debug_only(self, caplog) -> None:
        """Test nothing is logged above DEBUG for a passing check."""
        with caplog.at_level(logging.DEBUG, logger="chaingrad.numerical"):
            gradient_check(Square(), Variable(2.0))

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.DEBUG]

    def test_tolerance_argument(self) -> None:
        """Test that an impossible tolerance makes the check fail."""
        result = gradient_check(Exp(), Variable(1.0), tolerance=0.0)
        assert not result.passed

    def test_tolerance_from_config(self) -> None:
        """Test that tolerance defaults to Config.check_tolerance."""
        with using_config('check_tolerance', 10.0):
            assert gradient_check(WrongExp(), Variable(1.0)).passed


# =============================================================================
# Config
# =============================================================================

class TestConfig:
    """Test temporary configuration overrides."""

    def test_override_is_restored(self) -> None:
        """Test the old value comes back after the block."""
        before = Config.numerical_eps
        with using_config('numerical_eps', 0.25):
            assert Config.numerical_eps == 0.25
        assert Config.numerical_eps == before

    def test_restored_after_error(self) -> None:
        """Test the old value comes back when the block raises."""
        before = Config.check_tolerance
        with pytest.raises(RuntimeError):
            with using_config('check_tolerance', 1.0):
                raise RuntimeError("boom")
        assert Config.check_tolerance == before

    def test_unknown_name_raises(self) -> None:
        """Test that only existing settings can be overridden."""
        with pytest.raises(AttributeError):
            with using_config('no_such_setting', 1):
                pass


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
