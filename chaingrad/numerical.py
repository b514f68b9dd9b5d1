"""
Numerical Differentiation
=========================

Finite-difference derivatives, used to check analytic backward() results
without trusting them.

The central difference

    f'(x) ~= (f(x + eps) - f(x - eps)) / (2 * eps)

has error O(eps^2) for smooth f, but in float32 a very small eps loses more
to cancellation than it gains. The default eps lives in Config.
"""

from __future__ import annotations
import logging
import numpy as np
from typing import NamedTuple, Optional

from .config import Config
from .engine import Numeric, Operation, Variable


logger = logging.getLogger(__name__)


class GradientCheck(NamedTuple):
    """Outcome of comparing an analytic gradient with its numerical estimate."""

    analytic: np.float32
    numeric: np.float32
    error: float
    passed: bool


def _resolve_eps(eps: Optional[float]) -> np.float32:
    eps = Config.numerical_eps if eps is None else eps
    # Checked after the cast: tiny eps underflows to 0 in float32.
    eps32 = np.float32(eps)
    if not eps32 > 0:
        raise ValueError(f"eps must be positive in float32, got {eps}")
    return eps32


def numerical_diff(op: Operation, x: Variable, eps: Optional[float] = None) -> np.float32:
    """
    Estimate d(op)/dx at x with a central difference.

    op is probed at x - eps and then at x + eps through its own forward(),
    so its retained input is x + eps afterwards. Do not backward() a shared
    instance after calling this without forwarding it again.

    Any object with a forward(Variable) -> Variable method works, including
    a caller-written composite of several operations.

    Args:
        op: Operation (or composite) to differentiate.
        x: Point of evaluation.
        eps: Probe half-width. Defaults to Config.numerical_eps.

    Returns:
        The derivative estimate as float32.

    Raises:
        ValueError: If eps is not positive.

    Example:
        >>> numerical_diff(Square(), Variable(2.0), eps=1e-2)  # ~4.0
    """
    eps = _resolve_eps(eps)
    x0 = Variable(x.data - eps)
    x1 = Variable(x.data + eps)
    y0 = op.forward(x0)
    y1 = op.forward(x1)
    return (y1.data - y0.data) / (np.float32(2) * eps)


def gradient_check(
    op: Operation,
    x: Variable,
    gy: Numeric = 1.0,
    eps: Optional[float] = None,
    tolerance: Optional[float] = None
) -> GradientCheck:
    """
    Compare op.backward(gy) at x with gy times the numerical derivative.

    op is forwarded at x last, so its retained input is x when this returns.

    Args:
        op: Operation to check.
        x: Point of evaluation.
        gy: Upstream gradient passed to backward().
        eps: Probe half-width. Defaults to Config.numerical_eps.
        tolerance: Maximum absolute error. Defaults to Config.check_tolerance.

    Returns:
        GradientCheck(analytic, numeric, error, passed).
    """
    tolerance = Config.check_tolerance if tolerance is None else tolerance

    numeric = np.float32(gy) * numerical_diff(op, x, eps)
    op.forward(x)
    analytic = op.backward(gy)

    error = float(abs(analytic - numeric))
    passed = error <= tolerance

    name = type(op).__name__
    logger.debug(
        "gradient check %s at x=%s: analytic=%s numeric=%s error=%.3e",
        name, x.data, analytic, numeric, error
    )
    if not passed:
        logger.warning(
            "gradient check failed for %s at x=%s: error %.3e exceeds %.3e",
            name, x.data, error, tolerance
        )

    return GradientCheck(analytic, numeric, error, passed)
