from typing import Dict, Iterable, Union

import numpy as np

from ..core import Variable
from .optimizer import Optimizer


class SGD(Optimizer):
    """
    Implements stochastic gradient descent with momentum.

    Args:
        params: Variables to optimize
        lr: Learning rate (default: 0.1)
        momentum: Momentum factor (default: 0)
        weight_decay: Weight decay (L2 penalty) (default: 0)
        dampening: Dampening for momentum (default: 0)
        nesterov: Enables Nesterov momentum (default: False)
    """

    def __init__(
        self,
        params: Iterable[Variable],
        lr: float = 0.1,
        momentum: float = 0.0,
        weight_decay: float = 0.0,
        dampening: float = 0.0,
        nesterov: bool = False,
    ) -> None:
        if lr < 0.0:
            raise ValueError(f"Invalid learning rate: {lr}")
        if momentum < 0.0:
            raise ValueError(f"Invalid momentum value: {momentum}")
        if weight_decay < 0.0:
            raise ValueError(f"Invalid weight_decay value: {weight_decay}")
        if nesterov and momentum == 0.0:
            raise ValueError("Nesterov momentum requires a non-zero momentum")

        defaults: Dict[str, Union[float, bool]] = dict(
            lr=lr,
            momentum=momentum,
            weight_decay=weight_decay,
            dampening=dampening,
            nesterov=nesterov,
        )
        super().__init__(params, defaults)

    def step(self) -> None:
        """Performs a single optimization step."""
        for p in self._params:
            if p.grad is None:
                continue

            grad = p.grad

            if self.defaults["weight_decay"] != 0:
                grad = grad + self.defaults["weight_decay"] * p.value

            if self.defaults["momentum"] != 0:
                state = self.state[id(p)]
                if "momentum_buffer" not in state:
                    buf = np.array(grad, dtype=np.float64, copy=True)
                else:
                    buf = state["momentum_buffer"] * self.defaults["momentum"]
                    buf = buf + (1 - self.defaults["dampening"]) * grad
                state["momentum_buffer"] = buf

                if self.defaults["nesterov"]:
                    grad = grad + self.defaults["momentum"] * buf
                else:
                    grad = buf

            p.value = p.value - self.defaults["lr"] * grad
