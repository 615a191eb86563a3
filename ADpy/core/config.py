import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in _FALSE_VALUES


@dataclass
class Config:
    """
    Runtime switches of the differentiation engine.

    The gradient type guard is always active and has no switch here. The
    shape guards are boundary checks: they can be turned off for speed once
    a graph is known to be well formed.

    Attributes:
        check_shapes: Compare the incoming gradient's shape with the cached
            output's shape before each backward step
        check_leaf_shapes: Compare a contribution's shape with the variable's
            value before accumulating it
    """

    check_shapes: bool = field(default_factory=lambda: _env_flag("ADPY_CHECK_SHAPES", True))
    check_leaf_shapes: bool = field(
        default_factory=lambda: _env_flag("ADPY_CHECK_LEAF_SHAPES", True)
    )


# Global configuration instance
_config = Config()


def get_config() -> Config:
    """Returns the global configuration instance."""
    return _config


@contextmanager
def shape_checks(enabled: bool) -> Iterator[Config]:
    """
    Temporarily enables or disables both shape guards.

    Args:
        enabled: Whether shape checks run inside the ``with`` block
    """
    saved = (_config.check_shapes, _config.check_leaf_shapes)
    _config.check_shapes = enabled
    _config.check_leaf_shapes = enabled
    try:
        yield _config
    finally:
        _config.check_shapes, _config.check_leaf_shapes = saved
