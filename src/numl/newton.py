"""Quasi-Newton root finding built on :func:`numl.derivative.estimate_derivative`.

The slope of each Newton step is a centered-difference estimate, and the
function value at the current iterate is the center evaluation of that same
estimate. One step therefore costs exactly three function evaluations.

Examples:
--------
>>> from numl.newton import quasi_newton
>>> res = quasi_newton(lambda x: x**3 + 2 * x**2 - 0.4, 1.0)
>>> res.converged, 0.40 < res.root < 0.41
(True, True)
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from numl.derivative import estimate_derivative
from numl.errors import DerivativeZeroError
from numl.logger import numl_logger
from numl.utils.numerics import machine_epsilon
from numl.utils.types import Real, RealFunction
from numl.utils.validate import validate_evaluation_point

__all__ = [
    "NewtonResult",
    "quasi_newton_step",
    "quasi_newton",
]


@dataclass(frozen=True)
class NewtonResult:
    """Outcome of :func:`quasi_newton`.

    ``root`` itself is not evaluated. ``last_value`` is the function value
    the final step was computed from, at the iterate just before ``root``;
    call ``function(root)`` for the residual at ``root``.

    Attributes:
        root: Last iterate.
        iterations: Number of steps taken.
        converged: Whether the last step was within tolerance.
        last_value: ``f`` at the iterate the last step started from.
    """

    root: float
    iterations: int
    converged: bool
    last_value: float


def _step(function: RealFunction, x: np.floating) -> tuple[np.floating, float]:
    """Returns the next iterate, in the dtype of ``x``, and ``f(x)``."""
    est = estimate_derivative(function, x)
    if est.value == 0.0:
        raise DerivativeZeroError(
            f"derivative estimated as zero at x={x!r}; the Newton step is undefined."
        )
    dtype = np.asarray(x).dtype
    with np.errstate(over="ignore"):
        x_next = x - dtype.type(est.center_value) / dtype.type(est.value)
    return x_next, est.center_value


def quasi_newton_step(function: RealFunction, x: Real) -> float:
    """Performs one quasi-Newton iteration ``x - f(x) / f'(x)``.

    The update is carried out in the working precision of ``x``, as in
    :func:`~numl.derivative.estimate_derivative`.

    Args:
        function: Real function of one real variable.
        x: Current iterate.

    Returns:
        The next iterate.

    Raises:
        DerivativeZeroError: If the derivative estimate is exactly zero.
        DomainError: If ``x`` is not finite.
        NumericError: If the derivative cannot be estimated at ``x``.
        PropagatedError: If ``function`` raises.
    """
    return float(_step(function, validate_evaluation_point(x))[0])


def quasi_newton(
    function: RealFunction,
    x0: Real,
    *,
    max_iter: int = 50,
    xtol: float | None = None,
) -> NewtonResult:
    """Iterates :func:`quasi_newton_step` from ``x0``.

    Iteration stops once a step moves the iterate by no more than ``xtol``,
    or after ``max_iter`` steps. Running out of steps is not an error: the
    result reports ``converged=False`` and a warning is logged.

    Iterates keep the working dtype of ``x0``: a ``float32`` start is
    iterated, and the function evaluated, in ``float32`` throughout.

    Args:
        function: Real function of one real variable.
        x0: Starting point.
        max_iter: Maximum number of steps. Default is 50.
        xtol: Absolute step tolerance. If None, ``4 * eps * max(1, |x|)`` at
            the current iterate is used, with ``eps`` of the working dtype.

    Returns:
        A :class:`NewtonResult`.

    Raises:
        ValueError: If ``max_iter < 1`` or ``xtol < 0``.
        DerivativeZeroError: If an iterate lands on a stationary point.
        DomainError: If ``x0`` or an iterate is not finite.
        NumericError: If a derivative cannot be estimated at an iterate.
        PropagatedError: If ``function`` raises.
    """
    if max_iter < 1:
        raise ValueError("max_iter must be a positive integer.")
    if xtol is not None and xtol < 0:
        raise ValueError("xtol must be non-negative.")

    x = validate_evaluation_point(x0)
    dtype = np.asarray(x).dtype
    eps = machine_epsilon(dtype)
    last_value = np.nan
    for k in range(1, max_iter + 1):
        x_next, last_value = _step(function, x)
        tol = 4 * eps * np.maximum(dtype.type(1), np.abs(x)) if xtol is None else xtol
        moved = np.abs(x_next - x)
        x = x_next
        if moved <= tol:
            return NewtonResult(
                root=float(x), iterations=k, converged=True, last_value=last_value
            )

    numl_logger.warning(
        "quasi_newton did not converge after %d iterations (x=%r, f=%r).",
        max_iter, float(x), last_value,
    )
    return NewtonResult(
        root=float(x), iterations=max_iter, converged=False, last_value=last_value
    )
