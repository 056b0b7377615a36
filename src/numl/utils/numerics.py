"""Numerical utilities for step-size selection and error scales."""

from __future__ import annotations

from functools import lru_cache

import numpy as np
from numpy.typing import DTypeLike

from numl.utils.types import Real

__all__ = [
    "working_dtype",
    "machine_epsilon",
    "characteristic_scale",
    "candidate_step",
    "effective_step",
    "second_difference",
    "roundoff_error_scale",
    "truncation_error_scale",
    "degradation_threshold",
    "SCALE_FLOOR",
]

# Smallest characteristic scale; |x| below this is treated as order one.
SCALE_FLOOR = 1.0


def working_dtype(x: Real) -> np.dtype:
    """Returns the floating dtype arithmetic on ``x`` is carried out in.

    NumPy floating scalars keep their own dtype. Everything else (Python
    floats, integers, booleans) is promoted to ``float64``.

    Args:
        x: A real number.

    Returns:
        The floating-point dtype.
    """
    dtype = np.asarray(x).dtype
    if np.issubdtype(dtype, np.floating):
        return dtype
    return np.dtype(np.float64)


@lru_cache(maxsize=None)
def machine_epsilon(dtype: DTypeLike = np.float64) -> np.floating:
    """Returns the machine epsilon of a floating dtype as a scalar of that dtype.

    The value is looked up once per dtype and cached.

    Args:
        dtype: A floating-point dtype. Default is ``float64``.

    Returns:
        The smallest ``eps`` with ``1 + eps != 1`` in ``dtype``.
    """
    dt = np.dtype(dtype)
    return dt.type(np.finfo(dt).eps)


def characteristic_scale(x: np.floating) -> np.floating:
    """Computes the magnitude the step size is proportional to.

    The scale is ``max(|x|, SCALE_FLOOR)``. The floor keeps the step away
    from zero when ``x`` is at or near the origin, where ``|x|`` says nothing
    about how fast the function varies.

    Args:
        x: Evaluation point, already in its working dtype.

    Returns:
        The characteristic scale, in the dtype of ``x``.
    """
    dtype = np.asarray(x).dtype
    return np.maximum(np.abs(x), dtype.type(SCALE_FLOOR))


def candidate_step(x: np.floating) -> np.floating:
    """Returns the analytic step ``eps**(1/3) * scale`` for a centered difference.

    This balances the ``O(h**2)`` truncation error against the
    ``O(eps / h)`` round-off error of the centered formula.

    Args:
        x: Evaluation point, already in its working dtype.

    Returns:
        The step before any rounding correction.
    """
    eps = machine_epsilon(np.asarray(x).dtype)
    return np.cbrt(eps) * characteristic_scale(x)


def effective_step(x: np.floating, h: np.floating) -> np.floating:
    """Returns the step actually realised when ``h`` is added to ``x``.

    ``x + h`` is rounded to the nearest representable value, so the
    distance between the two abscissas is ``(x + h) - x`` and not ``h``.
    That difference is exact and is the one to divide by.

    Args:
        x: Evaluation point.
        h: Analytic step.

    Returns:
        The post-rounding step. Zero if ``h`` was absorbed entirely.
    """
    shifted = x + h
    return shifted - x


def second_difference(
    f_minus: np.floating,
    f_center: np.floating,
    f_plus: np.floating,
    step: np.floating,
) -> np.floating:
    """Computes the centered second difference ``(f+ - 2 f0 + f-) / h**2``."""
    return (f_plus - 2 * f_center + f_minus) / (step * step)


def roundoff_error_scale(
    f_minus: np.floating,
    f_plus: np.floating,
    step: np.floating,
) -> np.floating:
    """Estimates the round-off error of ``(f+ - f-) / (2 h)``.

    Each function value carries a relative error of about ``eps``, which
    survives the subtraction and is amplified by ``1 / (2 h)``.

    Args:
        f_minus: Function value at ``x - h``.
        f_plus: Function value at ``x + h``.
        step: Effective step ``h``.

    Returns:
        Round-off error scale.
    """
    eps = machine_epsilon(np.asarray(step).dtype)
    return eps * (np.abs(f_plus) + np.abs(f_minus)) / (2 * step)


def truncation_error_scale(
    curvature: np.floating,
    step: np.floating,
    scale: np.floating,
) -> np.floating:
    """Estimates the truncation error of the centered difference.

    The leading term is ``h**2 |f'''| / 6``. The third derivative is not
    available from three points, so it is approximated by the curvature
    divided by the characteristic scale of the evaluation point.

    Args:
        curvature: Second difference at the evaluation point.
        step: Effective step ``h``.
        scale: Characteristic scale of the evaluation point.

    Returns:
        Truncation error scale.
    """
    return np.abs(curvature) * step * step / (6 * scale)


def degradation_threshold(value: np.floating) -> np.floating:
    """Returns the error above which an estimate counts as degraded.

    The threshold is ``eps**(1/3) * max(1, |value|)``: an error that large is
    no better than a naive fixed-step difference would give.

    Args:
        value: The derivative estimate.

    Returns:
        The error threshold, in the dtype of ``value``.
    """
    dtype = np.asarray(value).dtype
    eps = machine_epsilon(dtype)
    return np.cbrt(eps) * np.maximum(dtype.type(1), np.abs(value))
