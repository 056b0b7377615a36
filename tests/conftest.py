"""Pytest configuration file with a fixture that records function evaluations."""

import pytest

__all__ = ["recorder"]


class Recorder:
    """Wraps a function and records every abscissa it is called with."""

    def __init__(self, function):
        self.function = function
        self.calls = []

    def __call__(self, x):
        self.calls.append(x)
        return self.function(x)


@pytest.fixture
def recorder():
    """Return a factory that wraps a function in a call-recording callable.

    The returned factory has signature ``wrap(function) -> Recorder``; the
    abscissas seen so far are available as ``Recorder.calls``.
    """
    return Recorder
