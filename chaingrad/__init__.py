"""ChainGrad: a scalar reverse-mode differentiation core with manual chaining."""

from .engine import Variable, Operation, BackwardBeforeForward, Square, Exp, Log, Tanh
from .numerical import numerical_diff, gradient_check, GradientCheck
from .config import Config, using_config

__all__ = [
    "Variable",
    "Operation",
    "BackwardBeforeForward",
    "Square",
    "Exp",
    "Log",
    "Tanh",
    "numerical_diff",
    "gradient_check",
    "GradientCheck",
    "Config",
    "using_config",
]
