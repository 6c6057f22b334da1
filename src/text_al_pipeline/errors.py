from __future__ import annotations


class InvalidArgument(ValueError):
    """Raised when a selection request does not fit the pool it targets."""


class FeatureSpaceMismatch(InvalidArgument):
    """Feature vector dimension differs from the fitted vocabulary."""

    def __init__(self, expected: int, actual: int, index: int | None = None) -> None:
        where = "" if index is None else f" at pool index {index}"
        super().__init__(
            f"Feature vector{where} has {actual} features; model expects {expected}."
        )
        self.expected = expected
        self.actual = actual
        self.index = index


class InvalidProbability(ValueError):
    """Classifier produced a probability outside [0, 1]."""

    def __init__(self, value: float, index: int | None = None) -> None:
        where = "" if index is None else f" at pool index {index}"
        super().__init__(f"Probability{where} must be in [0, 1]; got {value!r}.")
        self.value = value
        self.index = index
