"""
Exception hierarchy for the camera model engine.

Every error subclasses both `CameraModelError` and the closest built-in
exception, so callers may catch either. Projection failures are per-point:
a caller looping over many points can catch them and move on.
"""

from __future__ import annotations


class CameraModelError(Exception):
    """Base class for all sciimg camera errors."""


class ValidationError(CameraModelError, ValueError):
    """Malformed model text, model file or solver configuration."""


class ConfigurationError(CameraModelError, RuntimeError):
    """A `CameraModel` was used before a concrete model was set."""


class ConvergenceError(CameraModelError, ArithmeticError):
    """A Newton-Raphson solve hit its iteration cap without meeting its tolerance."""

    def __init__(self, message: str, *, iterations: int, last_step: float) -> None:
        super().__init__(f"{message} (iterations={iterations}, last step={last_step:.3e})")
        self.iterations = iterations
        self.last_step = last_step


class NumericalDegeneracyError(CameraModelError, ArithmeticError):
    """A derivative or denominator fell within epsilon of zero."""

    def __init__(self, message: str, *, quantity: str, value: float) -> None:
        super().__init__(f"{message} ({quantity}={value!r})")
        self.quantity = quantity
        self.value = value


class DomainError(CameraModelError, ValueError):
    """The point cannot be represented by the CAHVORE lens model."""

    def __init__(self, message: str, *, theta: float, linearity: float) -> None:
        super().__init__(f"{message} (theta={theta!r}, linearity={linearity!r})")
        self.theta = theta
        self.linearity = linearity
