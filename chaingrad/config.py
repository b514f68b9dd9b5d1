"""Library-wide defaults for numerical differentiation and gradient checks."""

from __future__ import annotations
import contextlib
from typing import Any, Iterator


class Config:
    """
    Defaults read at call time.

    Attributes:
        numerical_eps: Half-width of the central-difference probe.
        check_tolerance: Maximum absolute difference gradient_check accepts
            between the analytic and numerical derivative.
    """

    numerical_eps: float = 1e-2
    check_tolerance: float = 1e-3


@contextlib.contextmanager
def using_config(name: str, value: Any) -> Iterator[None]:
    """
    Temporarily override one Config attribute.

    Example:
        >>> with using_config('numerical_eps', 1e-2):
        ...     numerical_diff(Square(), Variable(2.0))

    Raises:
        AttributeError: If Config has no attribute called name.
    """
    old_value = getattr(Config, name)
    setattr(Config, name, value)
    try:
        yield
    finally:
        setattr(Config, name, old_value)
