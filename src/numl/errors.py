"""Exceptions raised by numl estimators.

All of them derive from :class:`EstimatorError`, so callers that do not care
about the cause of a failure can catch a single type. None of these
conditions is retried internally: every estimator performs a fixed number of
function evaluations and reports what went wrong instead of trying again
with a different step.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "EvaluationSite",
    "EstimatorError",
    "DomainError",
    "NumericError",
    "PropagatedError",
    "DerivativeZeroError",
]


class EvaluationSite(str, Enum):
    """Names the three abscissas of a centered difference."""

    MINUS = "minus"
    CENTER = "center"
    PLUS = "plus"


class EstimatorError(Exception):
    """Base class for all numl estimator errors."""


class DomainError(EstimatorError, ValueError):
    """The evaluation point is NaN or infinite.

    Raised before the function is evaluated.
    """


class NumericError(EstimatorError, ArithmeticError):
    """A numerically degenerate situation.

    Either the function returned a non-finite value at one of the
    abscissas, or the step size could not be represented around the
    evaluation point (it underflowed, overflowed, or was absorbed by
    rounding).
    """


class DerivativeZeroError(NumericError):
    """The estimated derivative is exactly zero where a nonzero one is needed."""


class PropagatedError(EstimatorError):
    """The user function raised while being evaluated.

    The original exception is kept in :attr:`original` and chained as
    ``__cause__``.

    Attributes:
        site: Which of the three evaluations failed.
        abscissa: The point the function was evaluated at.
        original: The exception raised by the function.
    """

    def __init__(self, site: EvaluationSite, abscissa: float, original: BaseException):
        """Initialises the error from the failing site and the original exception.

        Args:
            site: Which of the three evaluations failed.
            abscissa: The point the function was evaluated at.
            original: The exception raised by the function.
        """
        self.site = EvaluationSite(site)
        self.abscissa = abscissa
        self.original = original
        super().__init__(
            f"function raised {type(original).__name__} at the {self.site.value} "
            f"abscissa x={abscissa!r}: {original}"
        )
