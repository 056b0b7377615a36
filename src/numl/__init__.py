"""Provides numl's accuracy-focused numerical routines."""

from importlib.metadata import PackageNotFoundError, version

from numl.derivative import DerivativeEstimate, estimate_derivative
from numl.errors import (
    DerivativeZeroError,
    DomainError,
    EstimatorError,
    EvaluationSite,
    NumericError,
    PropagatedError,
)
from numl.newton import NewtonResult, quasi_newton, quasi_newton_step

try:
    __version__ = version("numl")
except PackageNotFoundError:
    pass

__all__ = [
    "DerivativeEstimate",
    "DerivativeZeroError",
    "DomainError",
    "EstimatorError",
    "EvaluationSite",
    "NewtonResult",
    "NumericError",
    "PropagatedError",
    "estimate_derivative",
    "quasi_newton",
    "quasi_newton_step",
]
