"""
ChainGrad: A Scalar Reverse-Mode Differentiation Core
=====================================================

The smallest useful piece of an autograd engine: values, and operations that
remember what they were applied to so they can later hand a gradient back.

There is no computation graph here. The caller strings operations together
and then walks them in reverse, feeding each operation's backward result into
the previous one. That is the chain rule, done by hand:

    >>> A, B, C = Square(), Exp(), Square()
    >>> x = Variable(0.5)
    >>> a = A.forward(x)
    >>> b = B.forward(a)
    >>> y = C.forward(b)
    >>> y.grad = 1.0
    >>> b.grad = C.backward(y.grad)
    >>> a.grad = B.backward(b.grad)
    >>> x.grad = A.backward(a.grad)

All arithmetic is single precision. Transcendental functions are evaluated in
double precision and rounded once to float32.
"""

from __future__ import annotations
import math
import numpy as np
from typing import Optional, Protocol, Union, runtime_checkable


# Type alias for numeric inputs
Numeric = Union[int, float, np.integer, np.floating]


def _check_real(value: object, name: str) -> None:
    if isinstance(value, (bool, np.bool_)) or not isinstance(
        value, (int, float, np.integer, np.floating)
    ):
        raise TypeError(
            f"Variable {name} must be a real scalar, got {type(value).__name__}"
        )


class BackwardBeforeForward(RuntimeError):
    """Raised when backward() is called on an operation with no retained input."""

    def __init__(self, op: object) -> None:
        self.op_name = type(op).__name__
        super().__init__(
            f"{self.op_name}.backward() called before any forward() call"
        )


class Variable:
    """
    A scalar value with an optional gradient slot.

    Attributes:
        data: The stored value as a numpy.float32.
        grad: The gradient of some downstream objective with respect to this
            value. None until the caller assigns it during a backward pass.

    Example:
        >>> v = Variable(2.0)
        >>> v.item()
        2.0
        >>> v.grad is None
        True
    """

    __slots__ = ('data', 'grad')

    def __init__(self, data: Numeric, grad: Optional[Numeric] = None) -> None:
        """
        Args:
            data: The scalar to wrap. Converted to float32.
            grad: Optional initial gradient.

        Raises:
            TypeError: If data, or a grad other than None, is not a real scalar.
        """
        _check_real(data, "data")
        if grad is not None:
            _check_real(grad, "grad")

        self.data: np.float32 = np.float32(data)
        self.grad: Optional[Numeric] = grad

    def __repr__(self) -> str:
        if isinstance(self.grad, (int, float, np.integer, np.floating)):
            grad = f'{self.grad:.4f}'
        else:
            grad = repr(self.grad)
        return f"Variable(data={self.data:.4f}, grad={grad})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variable):
            return NotImplemented
        return bool(self.data == other.data and self.grad == other.grad)

    # Mutable grad slot; compare by value, never hash.
    __hash__ = None  # type: ignore[assignment]

    def item(self) -> float:
        """Return the scalar value as a Python float."""
        return float(self.data)


@runtime_checkable
class Operation(Protocol):
    """
    The forward/backward contract every differentiable operation follows.

    An operation keeps a single retained-input slot. forward() overwrites it,
    backward() only reads it. If the same instance is used twice in a chain,
    backward() reflects the last forward() call.
    """

    input: Optional[Variable]

    def forward(self, x: Variable) -> Variable:
        ...

    def backward(self, gy: Numeric) -> np.float32:
        ...


def _retained(op: Operation) -> np.float32:
    """Value retained by op's last forward(), or BackwardBeforeForward."""
    if op.input is None:
        raise BackwardBeforeForward(op)
    return op.input.data


# =============================================================================
# Operations
# =============================================================================

class Square:
    """
    Square: y = x^2

    Local derivative:
        dy/dx = 2x
    """

    def __init__(self) -> None:
        self.input: Optional[Variable] = None

    def __call__(self, x: Variable) -> Variable:
        return self.forward(x)

    def forward(self, x: Variable) -> Variable:
        """
        Compute x^2 and retain x.

        Args:
            x: Input variable.

        Returns:
            New Variable holding x.data squared, with no gradient.
        """
        self.input = Variable(x.data)
        return Variable(x.data * x.data)

    def backward(self, gy: Numeric) -> np.float32:
        """
        Return gy * 2x at the retained input.

        Raises:
            BackwardBeforeForward: If forward() was never called.
        """
        x = _retained(self)
        return np.float32(2) * x * np.float32(gy)


class Exp:
    """
    Exponential: y = e^x

    Local derivative:
        dy/dx = e^x
    """

    def __init__(self) -> None:
        self.input: Optional[Variable] = None

    def __call__(self, x: Variable) -> Variable:
        return self.forward(x)

    def forward(self, x: Variable) -> Variable:
        """Compute e^x and retain x. Overflows to inf, never raises."""
        self.input = Variable(x.data)
        return Variable(np.exp(np.float64(x.data)))

    def backward(self, gy: Numeric) -> np.float32:
        """
        Return gy * e^x at the retained input.

        Raises:
            BackwardBeforeForward: If forward() was never called.
        """
        x = _retained(self)
        return np.float32(np.exp(np.float64(x))) * np.float32(gy)


class Log:
    """
    Natural logarithm: y = ln(x)

    Local derivative:
        dy/dx = 1/x
    """

    def __init__(self) -> None:
        self.input: Optional[Variable] = None

    def __call__(self, x: Variable) -> Variable:
        return self.forward(x)

    def forward(self, x: Variable) -> Variable:
        """
        Compute ln(x) and retain x.

        Raises:
            ValueError: If x.data <= 0. The retained input is left untouched.
        """
        if x.data <= 0:
            raise ValueError(f"log undefined for non-positive values: {x.data}")

        self.input = Variable(x.data)
        return Variable(math.log(x.data))

    def backward(self, gy: Numeric) -> np.float32:
        x = _retained(self)
        return np.float32(gy) / x


class Tanh:
    """
    Hyperbolic tangent: y = tanh(x)

    Local derivative:
        dy/dx = 1 - tanh(x)^2
    """

    def __init__(self) -> None:
        self.input: Optional[Variable] = None

    def __call__(self, x: Variable) -> Variable:
        return self.forward(x)

    def forward(self, x: Variable) -> Variable:
        self.input = Variable(x.data)
        return Variable(math.tanh(x.data))

    def backward(self, gy: Numeric) -> np.float32:
        x = _retained(self)
        t = np.float32(math.tanh(x))
        return (np.float32(1) - t * t) * np.float32(gy)
