"""Provides the centered-difference first derivative estimator.

The caller supplies the function and the point, nothing else. The step size
is chosen per call from the machine epsilon of the working precision and the
magnitude of the evaluation point, then corrected for rounding so that the
division uses the distance the abscissas are actually apart.

Examples:
--------
>>> import math
>>> from numl.derivative import estimate_derivative
>>> est = estimate_derivative(math.exp, 1.0)
>>> abs(est.value - math.e) < 1e-8
True

The result unpacks into the value, the step used and an error estimate:

>>> value, step, err = estimate_derivative(lambda x: x**2, 3.0)
>>> abs(value - 6.0) < 1e-8
True
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from numl.errors import EvaluationSite, NumericError, PropagatedError
from numl.logger import numl_logger
from numl.utils.numerics import (
    candidate_step,
    characteristic_scale,
    degradation_threshold,
    effective_step,
    roundoff_error_scale,
    second_difference,
    truncation_error_scale,
)
from numl.utils.types import Real, RealFunction
from numl.utils.validate import (
    as_scalar_value,
    check_finite_values,
    validate_evaluation_point,
)

__all__ = [
    "DerivativeEstimate",
    "estimate_derivative",
]


@dataclass(frozen=True)
class DerivativeEstimate:
    """Result of :func:`estimate_derivative`.

    Iterating over an estimate yields ``(value, step, error_estimate)``.

    Attributes:
        value: The first derivative estimate.
        step: The effective step used; abscissas were ``x - step``, ``x``
            and ``x + step``.
        error_estimate: Sum of the round-off and truncation error scales.
        curvature: Second difference at ``x``, an estimate of ``f''(x)``.
        center_value: ``f(x)``.
        degraded: True if ``error_estimate`` is too large for the estimate
            to be trusted beyond what a naive fixed step would give.
    """

    value: float
    step: float
    error_estimate: float
    curvature: float
    center_value: float
    degraded: bool

    def __iter__(self) -> Iterator[float]:
        """Yields ``value``, ``step`` and ``error_estimate``."""
        yield self.value
        yield self.step
        yield self.error_estimate


def _as_argument(x: np.floating) -> Real:
    """Returns the value ``function`` is called with.

    ``float64`` points are passed as Python floats, so the function sees
    ordinary float semantics (``1.0 / 0.0`` raises). Other precisions are
    passed as NumPy scalars to keep their dtype.
    """
    if np.asarray(x).dtype == np.float64:
        return x.item()
    return x


def _evaluate(function: RealFunction, x: np.floating, site: EvaluationSite) -> np.floating:
    """Evaluates ``function`` once, tagging any exception with its site."""
    try:
        raw = function(_as_argument(x))
    except Exception as exc:
        raise PropagatedError(site, float(x), exc) from exc
    return as_scalar_value(raw, np.asarray(x).dtype, site)


def estimate_derivative(function: RealFunction, x: Real) -> DerivativeEstimate:
    """Estimates ``f'(x)`` from exactly three evaluations of ``function``.

    The step is ``h = eps**(1/3) * max(|x|, 1)`` in the working
    precision of ``x``, replaced by ``(x + h) - x`` after rounding. The
    function is evaluated at ``x - h``, ``x`` and ``x + h`` in that order and
    the derivative is the centered difference ``(f(x+h) - f(x-h)) / (2h)``.
    The value at ``x`` feeds the curvature and error diagnostics.

    For a function with a bounded third derivative near ``x`` the error is
    ``O(eps**(2/3))``.

    Args:
        function: Real function of one real variable. Called with Python
            floats for ``float64`` points and with NumPy scalars of the
            working dtype otherwise; must return a real scalar.
        x: Finite evaluation point. NumPy floating scalars keep their
            precision; other numbers are treated as ``float64``.

    Returns:
        A :class:`DerivativeEstimate`.

    Raises:
        DomainError: If ``x`` is NaN or infinite. ``function`` is not called.
        NumericError: If the step cannot be represented around ``x`` or
            ``function`` returns a non-finite value.
        PropagatedError: If ``function`` raises; the site of the failing
            evaluation is attached and nothing is retried.
        TypeError: If ``x`` or a function value is not a real scalar.
    """
    xf = validate_evaluation_point(x)
    scale = characteristic_scale(xf)
    with np.errstate(over="ignore", invalid="ignore"):
        h = effective_step(xf, candidate_step(xf))
        x_minus = xf - h
        x_plus = xf + h
    # h > 0 after rounding implies both abscissas differ from x.
    if not (np.isfinite(h) and h > 0 and np.isfinite(x_minus) and np.isfinite(x_plus)):
        raise NumericError(
            f"step size is not representable around x={x!r}: h={h!r} "
            "(zero or non-finite after rounding)."
        )

    numl_logger.debug("estimate_derivative: x=%r, scale=%r, step=%r", xf, scale, h)

    f_minus = _evaluate(function, x_minus, EvaluationSite.MINUS)
    f_center = _evaluate(function, xf, EvaluationSite.CENTER)
    f_plus = _evaluate(function, x_plus, EvaluationSite.PLUS)
    check_finite_values(
        {
            EvaluationSite.MINUS: f_minus,
            EvaluationSite.CENTER: f_center,
            EvaluationSite.PLUS: f_plus,
        }
    )

    with np.errstate(over="ignore", invalid="ignore"):
        value = (f_plus - f_minus) / (2 * h)
        curvature = second_difference(f_minus, f_center, f_plus, h)
        roundoff = roundoff_error_scale(f_minus, f_plus, h)
        error = roundoff + truncation_error_scale(curvature, h, scale)
    if not np.isfinite(value):
        raise NumericError(
            f"centered difference overflowed at x={x!r}: "
            f"f(x-h)={f_minus!r}, f(x+h)={f_plus!r}, h={h!r}."
        )
    degraded = bool(error > degradation_threshold(value))

    if degraded:
        numl_logger.warning(
            "Derivative estimate at x=%r is dominated by numerical error "
            "(value=%r, error estimate=%r).",
            float(xf), float(value), float(error),
        )

    return DerivativeEstimate(
        value=float(value),
        step=float(h),
        error_estimate=float(error),
        curvature=float(curvature),
        center_value=float(f_center),
        degraded=degraded,
    )
