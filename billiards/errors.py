"""
Failure values raised at the simulator boundary.

Numeric trouble inside a stepping loop never surfaces here: loops stop and
hand back the partial trajectory instead.
"""

from enum import Enum
from typing import Optional

import numpy as np


class ErrorKind(str, Enum):
    INVALID_PARAMETER = 'invalid_parameter'
    NO_CANDIDATES = 'no_candidates'
    DEGENERATE_STEP = 'degenerate_step'


class SimulationError(ValueError):
    """Structured error naming the violated constraint."""

    def __init__(self, kind: ErrorKind, constraint: str, value=None):
        self.kind = kind
        self.constraint = constraint
        self.value = value
        msg = constraint if value is None else f"{constraint} (got {value!r})"
        super().__init__(msg)


class ExpressionError(ValueError):
    """Raised by the scalar-expression parser; `position` indexes the input."""

    def __init__(self, message: str, text: str = '', position: Optional[int] = None):
        self.text = text
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


def invalid(constraint: str, value=None) -> SimulationError:
    return SimulationError(ErrorKind.INVALID_PARAMETER, constraint, value)


def require_positive_int(name: str, value) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise invalid(f"{name} must be a positive integer", value)
    if value < 1:
        raise invalid(f"{name} must be a positive integer", value)
    return int(value)
