from typing import Dict, Iterable, Tuple, Union

import numpy as np

from ..core import Variable
from .optimizer import Optimizer


class Adam(Optimizer):
    """
    Implements Adam algorithm.

    The Adam optimizer combines ideas from RMSprop and momentum optimization:
    - It uses exponential moving averages of gradients (like momentum)
    - It uses exponential moving averages of squared gradients (like RMSprop)
    - It includes bias correction for more accurate initial steps

    Args:
        params: Variables to optimize
        lr: Learning rate (default: 0.001)
        betas: Coefficients for computing running averages of gradient and its square
            (default: (0.9, 0.999))
        eps: Term added to denominator to improve numerical stability (default: 1e-8)
        weight_decay: Weight decay (L2 penalty) (default: 0)
        amsgrad: Whether to use the AMSGrad variant (default: False)
    """

    def __init__(
        self,
        params: Iterable[Variable],
        lr: float = 0.001,
        betas: Tuple[float, float] = (0.9, 0.999),
        eps: float = 1e-8,
        weight_decay: float = 0,
        amsgrad: bool = False,
    ) -> None:
        if not 0.0 <= lr:
            raise ValueError(f"Invalid learning rate: {lr}")
        if not 0.0 <= eps:
            raise ValueError(f"Invalid epsilon value: {eps}")
        if not 0.0 <= betas[0] < 1.0:
            raise ValueError(f"Invalid beta parameter at index 0: {betas[0]}")
        if not 0.0 <= betas[1] < 1.0:
            raise ValueError(f"Invalid beta parameter at index 1: {betas[1]}")
        if not 0.0 <= weight_decay:
            raise ValueError(f"Invalid weight_decay value: {weight_decay}")

        defaults: Dict[str, Union[float, Tuple[float, float], bool]] = dict(
            lr=lr, betas=betas, eps=eps, weight_decay=weight_decay, amsgrad=amsgrad
        )
        super().__init__(params, defaults)

    def step(self) -> None:
        """Performs a single optimization step."""
        for p in self._params:
            if p.grad is None:
                continue

            grad = p.grad
            state = self.state[id(p)]

            if len(state) == 0:
                state["step"] = 0
                # Exponential moving average of gradient values
                state["exp_avg"] = np.zeros_like(p.value, dtype=np.float64)
                # Exponential moving average of squared gradient values
                state["exp_avg_sq"] = np.zeros_like(p.value, dtype=np.float64)
                if self.defaults["amsgrad"]:
                    state["max_exp_avg_sq"] = np.zeros_like(p.value, dtype=np.float64)

            beta1, beta2 = self.defaults["betas"]

            state["step"] += 1
            bias_correction1 = 1 - beta1 ** state["step"]
            bias_correction2 = 1 - beta2 ** state["step"]

            if self.defaults["weight_decay"] != 0:
                grad = grad + self.defaults["weight_decay"] * p.value

            exp_avg = beta1 * state["exp_avg"] + (1 - beta1) * grad
            exp_avg_sq = beta2 * state["exp_avg_sq"] + (1 - beta2) * grad * grad

            if self.defaults["amsgrad"]:
                # Use the max of all 2nd moment running averages for normalizing
                max_exp_avg_sq = np.maximum(state["max_exp_avg_sq"], exp_avg_sq)
                state["max_exp_avg_sq"] = max_exp_avg_sq
                denom = np.sqrt(max_exp_avg_sq) / np.sqrt(bias_correction2) + self.defaults["eps"]
            else:
                denom = np.sqrt(exp_avg_sq) / np.sqrt(bias_correction2) + self.defaults["eps"]

            step_size = self.defaults["lr"] / bias_correction1

            p.value = p.value - step_size * exp_avg / denom

            state["exp_avg"] = exp_avg
            state["exp_avg_sq"] = exp_avg_sq
