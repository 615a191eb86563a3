"""
Optimization algorithms for ADpy.

Optimizers update leaf variables from their accumulated gradients.
"""

from .adam import Adam
from .optimizer import Optimizer
from .sgd import SGD

__all__ = ["Optimizer", "SGD", "Adam"]
