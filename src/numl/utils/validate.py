"""Validation utilities for numl estimators."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np

from numl.errors import DomainError, EvaluationSite, NumericError
from numl.utils.numerics import working_dtype
from numl.utils.types import Real

__all__ = [
    "validate_evaluation_point",
    "as_scalar_value",
    "check_finite_values",
]


def validate_evaluation_point(x: Real) -> np.floating:
    """Checks that ``x`` is a finite real number and casts it to its working dtype.

    Args:
        x: Evaluation point.

    Returns:
        ``x`` as a NumPy floating scalar.

    Raises:
        TypeError: If ``x`` is not a real number.
        DomainError: If ``x`` is NaN, infinite, or an integer too large for
            ``float64``.
    """
    if isinstance(x, int):
        try:
            x = float(x)
        except OverflowError:
            raise DomainError(
                "evaluation point is not finite in float64; got an integer "
                f"of {x.bit_length()} bits."
            ) from None
    arr = np.asarray(x)
    if arr.ndim != 0 or not (
        np.issubdtype(arr.dtype, np.integer)
        or np.issubdtype(arr.dtype, np.floating)
        or np.issubdtype(arr.dtype, np.bool_)
    ):
        raise TypeError(
            f"evaluation point must be a real scalar; got {type(x).__name__} "
            f"with dtype {arr.dtype} and shape {arr.shape}."
        )
    dtype = working_dtype(x)
    xf = dtype.type(arr)
    if not np.isfinite(xf):
        raise DomainError(f"evaluation point must be finite; got x={x!r}.")
    return xf


def as_scalar_value(value: Any, dtype: np.dtype, site: EvaluationSite) -> np.floating:
    """Converts a function output to a real scalar of the working dtype.

    Args:
        value: Whatever the function returned.
        dtype: Working floating dtype.
        site: Which evaluation produced ``value``; used in error messages.

    Returns:
        ``value`` as a NumPy floating scalar.

    Raises:
        TypeError: If ``value`` is not a single real number.
        NumericError: If ``value`` is an integer too large for ``float64``.
    """
    if isinstance(value, int):
        try:
            value = float(value)
        except OverflowError:
            raise NumericError(
                f"function returned an integer of {value.bit_length()} bits at the "
                f"{site.value} evaluation, which is not finite in float64."
            ) from None
    arr = np.asarray(value)
    if arr.size != 1:
        raise TypeError(
            "estimate_derivative() expects a scalar-valued function; "
            f"got shape {arr.shape} from the {site.value} evaluation."
        )
    if np.iscomplexobj(arr) or not (
        np.issubdtype(arr.dtype, np.number) or np.issubdtype(arr.dtype, np.bool_)
    ):
        raise TypeError(
            "estimate_derivative() expects a real-valued function; "
            f"got dtype {arr.dtype} from the {site.value} evaluation."
        )
    return dtype.type(arr.reshape(()))


def check_finite_values(values: Mapping[EvaluationSite, np.floating]) -> None:
    """Raises if any of the function values is NaN or infinite.

    Args:
        values: Function values keyed by the site they were evaluated at.

    Raises:
        NumericError: Naming every site whose value is not finite.
    """
    bad = {site: v for site, v in values.items() if not np.isfinite(v)}
    if bad:
        detail = ", ".join(f"{site.value}={v!r}" for site, v in bad.items())
        raise NumericError(f"function returned non-finite values: {detail}.")
