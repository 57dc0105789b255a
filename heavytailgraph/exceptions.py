class HeavyTailGraphError(Exception):
    """Base class of the errors raised by heavytailgraph."""


class InvalidDimensionError(HeavyTailGraphError, ValueError):
    """Raised when data, weights or degrees do not have compatible shapes."""


class InvalidHyperparameterError(HeavyTailGraphError, ValueError):
    """Raised when a hyperparameter is outside of its admissible range."""
