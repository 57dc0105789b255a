import numpy as np
import pytest

from heavytailgraph.operators import A, L
from heavytailgraph.utils import sample_gmrf


@pytest.fixture
def w_true():
    """Cycle 0-1-2-3-0 with weights 1/2, so that every node has degree one.

    Edges are ordered (0,1), (0,2), (0,3), (1,2), (1,3), (2,3); the two
    diagonals (0,2) and (1,3) are absent.
    """
    return np.array([.5, 0., .5, .5, 0., .5])


@pytest.fixture
def laplacian_true(w_true):
    return L(w_true)


@pytest.fixture
def adjacency_true(w_true):
    return A(w_true)


@pytest.fixture
def gaussian_data(laplacian_true):
    return sample_gmrf(laplacian_true, 1000, random_state=np.random.RandomState(42))
