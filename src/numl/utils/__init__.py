"""Utility functions for numl package."""

from .numerics import (
    effective_step,
    machine_epsilon,
    working_dtype,
)

__all__ = [
    "effective_step",
    "machine_epsilon",
    "working_dtype",
]
