import numpy as np
import pytest

from heavytailgraph.exceptions import InvalidDimensionError, InvalidHyperparameterError
from heavytailgraph.initialization import (
    normalize_weights, rough_precision, w_init
)
from heavytailgraph.operators import A, L


def test_naive_initialization_clips_negative_weights():
    Sinv = np.array([[2., -1., .5],
                     [-1., 2., -1.],
                     [.5, -1., 2.]])
    np.testing.assert_allclose(w_init("naive", Sinv), [1., 0., 1.])


def test_qp_initialization_recovers_laplacian(w_true, laplacian_true):
    w = w_init("qp", laplacian_true)
    assert np.all(w >= 0)
    np.testing.assert_allclose(w, w_true, atol=1e-8)


def test_qp_initialization_is_nonnegative(gaussian_data):
    w = w_init("qp", rough_precision(gaussian_data))
    assert w.shape == (6,)
    assert np.all(w >= 0)


def test_vector_initialization(laplacian_true):
    w0 = [1., 2., 3., 4., 5., 6.]
    w = w_init(w0, laplacian_true)
    np.testing.assert_array_equal(w, w0)
    with pytest.raises(InvalidDimensionError):
        w_init([1., 2., 3.], laplacian_true)
    with pytest.raises(InvalidHyperparameterError):
        w_init([1., -2., 3., 4., 5., 6.], laplacian_true)


def test_unknown_strategy(laplacian_true):
    with pytest.raises(InvalidHyperparameterError):
        w_init("spectral", laplacian_true)


def test_normalize_weights_divides_rows():
    w = np.array([1., 1., 2.])
    normalized = normalize_weights(w)
    Aw = A(w)
    expected = [Aw[0, 1]/2, Aw[0, 2]/2, Aw[1, 2]/3]
    np.testing.assert_allclose(normalized, expected)


def test_normalize_weights_of_regular_graph_is_unchanged(w_true):
    np.testing.assert_allclose(normalize_weights(w_true), w_true)


def test_normalize_weights_with_isolated_node():
    w = np.array([1., 0., 0.])
    normalized = normalize_weights(w)
    assert np.all(np.isfinite(normalized))
    np.testing.assert_allclose(normalized, [1., 0., 0.])


def test_rough_precision_is_symmetric(gaussian_data):
    Sinv = rough_precision(gaussian_data)
    np.testing.assert_allclose(Sinv, Sinv.T, atol=1e-10)
    assert Sinv.shape == (4, 4)
    np.testing.assert_allclose(L(w_init("naive", Sinv)).sum(axis=1), 0., atol=1e-12)
