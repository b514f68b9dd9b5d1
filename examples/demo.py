#!/usr/bin/env python3
"""
ChainGrad Demo: Backpropagation by Hand
=======================================

This demo shows the complete workflow:
1. Forward a value through a chain of operations
2. Walk the chain backward, one backward() call at a time
3. Check every analytic derivative against finite differences
4. Plot analytic and numerical derivatives side by side

Run: python examples/demo.py
"""

import logging
import math
import numpy as np
import matplotlib.pyplot as plt
from typing import List

from chaingrad import Variable, Square, Exp, Log, Tanh, numerical_diff, gradient_check


class SquareExpSquare:
    """The same chain as one object with forward(), for numerical_diff."""

    def __init__(self):
        self.ops = [Square(), Exp(), Square()]

    def forward(self, v):
        for op in self.ops:
            v = op.forward(v)
        return v


def demo_manual_backprop():
    """
    Differentiate y = square(exp(square(x))) at x = 0.5.
    """
    print("=" * 60)
    print("DEMO 1: Manual Backpropagation")
    print("=" * 60)
    print()

    A = Square()
    B = Exp()
    C = Square()

    # Forward pass: each operation keeps its own input
    x = Variable(0.5)
    a = A.forward(x)
    b = B.forward(a)
    y = C.forward(b)

    # Backward pass: strict reverse order
    y.grad = 1.0
    b.grad = C.backward(y.grad)
    a.grad = B.backward(b.grad)
    x.grad = A.backward(a.grad)

    print("y = square(exp(square(x))) at x = 0.5")
    print(f"  a = x^2     = {a.data:.6f}")
    print(f"  b = exp(a)  = {b.data:.6f}")
    print(f"  y = b^2     = {y.data:.6f}")
    print()
    print(f"dy/dx (backprop)  = {x.grad:.7f}")
    print(f"dy/dx (numerical) = {numerical_diff(SquareExpSquare(), x):.7f}")
    print(f"(Analytical: 4x * exp(2x^2) = {2 * math.exp(0.5):.7f})")
    print()


def demo_gradient_checks():
    """
    Run gradient_check for every operation at a few points.
    """
    print("=" * 60)
    print("DEMO 2: Gradient Checks")
    print("=" * 60)
    print()

    points = {Square: [-1.5, 0.5, 2.0], Exp: [-1.0, 0.0, 1.0],
              Log: [0.5, 1.0, 2.0], Tanh: [-0.5, 0.0, 0.5]}

    for op_cls, xs in points.items():
        for xi in xs:
            result = gradient_check(op_cls(), Variable(xi))
            status = "ok" if result.passed else "FAILED"
            print(
                f"{op_cls.__name__:>6} at x={xi:>5.2f}: analytic={result.analytic:>9.5f} "
                f"numeric={result.numeric:>9.5f} error={result.error:.2e} {status}"
            )
    print()


def plot_derivatives(op_cls, xs: np.ndarray, filename: str) -> None:
    """
    Plot backward() against numerical_diff() over a range of inputs.

    Args:
        op_cls: Operation class to plot.
        xs: Input values.
        filename: Where to save the figure.
    """
    analytic: List[float] = []
    numeric: List[float] = []
    op = op_cls()
    for xi in xs:
        x = Variable(xi)
        numeric.append(float(numerical_diff(op, x)))
        op.forward(x)
        analytic.append(float(op.backward(1.0)))

    plt.figure(figsize=(10, 6))
    plt.plot(xs, analytic, 'b-', linewidth=2, label='backward()')
    plt.plot(xs, numeric, 'r--', linewidth=2, label='numerical_diff()')
    plt.xlabel('x')
    plt.ylabel('dy/dx')
    plt.title(f'{op_cls.__name__}: analytic vs numerical derivative')
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(filename, dpi=150)
    plt.close()
    print(f"Saved derivative plot to: {filename}")


def main():
    """Run all demos."""
    logging.basicConfig(level=logging.WARNING)

    demo_manual_backprop()
    demo_gradient_checks()

    print("=" * 60)
    print("DEMO 3: Derivative Plots")
    print("=" * 60)
    print()
    plot_derivatives(Tanh, np.linspace(-3, 3, 121), './tanh_derivative.png')
    plot_derivatives(Exp, np.linspace(-2, 2, 81), './exp_derivative.png')
    print()


if __name__ == "__main__":
    main()
