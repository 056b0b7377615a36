"""Shared typing aliases for numl."""

from __future__ import annotations

from typing import Callable, TypeAlias

import numpy as np

Real: TypeAlias = float | int | np.floating
RealFunction: TypeAlias = Callable[[float], Real]
