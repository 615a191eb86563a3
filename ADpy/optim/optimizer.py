from typing import Any, Dict, Iterable, List, Union, cast

from ..core import Variable

# State dictionary maps variable IDs to their states
OptState = Dict[int, Dict[str, Any]]
OptDefaults = Dict[str, Any]
StateDict = Dict[str, Union[OptState, OptDefaults]]


class Optimizer:
    """
    Base class for all optimizers.

    Optimizers update the ``value`` of leaf variables from their accumulated
    ``grad``. Values are replaced rather than modified in place, so scalar
    variables work as well as array ones. Cached nodes built from the
    variables keep their old outputs until they are forwarded again.

    Args:
        params: An iterable of variables to optimize
        defaults: Dictionary of default hyperparameter values for the optimizer
    """

    def __init__(self, params: Iterable[Variable], defaults: OptDefaults) -> None:
        self.defaults = defaults
        self._params: List[Variable] = list(params)
        self.state: OptState = {}

        for p in self._params:
            if not isinstance(p, Variable):
                raise TypeError(f"Optimizer can only optimize Variables, got {type(p).__name__}")
            self.state[id(p)] = {}

    def zero_grad(self) -> None:
        """
        Unsets the gradients of all optimized variables.

        Gradients accumulate across backward passes, so this should be called
        before computing gradients for the next step.
        """
        for p in self._params:
            p.zero_grad()

    def step(self) -> None:
        """
        Performs a single optimization step.

        Raises:
            NotImplementedError: If not implemented by subclass
        """
        raise NotImplementedError

    def state_dict(self) -> StateDict:
        """
        Returns the state of the optimizer as a dictionary.

        The state dictionary has two main components:
        - 'state': Maps variable IDs to their optimization state
        - 'defaults': Contains the default hyperparameters
        """
        return {"state": self.state, "defaults": self.defaults}

    def load_state_dict(self, state_dict: StateDict) -> None:
        """
        Loads the optimizer state from a dictionary.

        Args:
            state_dict: Dictionary containing optimizer state and defaults
        """
        self.state = cast(OptState, state_dict["state"])
        self.defaults = cast(OptDefaults, state_dict["defaults"])
