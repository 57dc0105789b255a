from .elliptical import Gaussian, Student
from .estimators import HeavyTailGL, learn_regular_heavytail_graph
from .exceptions import (
    HeavyTailGraphError, InvalidDimensionError, InvalidHyperparameterError
)

__version__ = "0.1.0"
