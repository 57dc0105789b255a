import numpy as np
import pytest

from heavytailgraph import admm
from heavytailgraph.elliptical import Gaussian, Student
from heavytailgraph.operators import L, lstar_outer


@pytest.fixture
def state():
    rng = np.random.default_rng(0)
    p = 5
    w = rng.uniform(0, 1, size=p*(p-1)//2)
    Y = rng.normal(size=(p, p))
    return {"w": w, "Lw": L(w), "Y": (Y + Y.T)/2, "y": rng.normal(size=p),
            "theta": L(rng.uniform(0, 1, size=p*(p-1)//2)), "J": np.ones((p, p))/p,
            "d": np.ones(p)}


def test_step_size():
    assert admm.step_size(1, 4) == pytest.approx(1/14)
    assert admm.step_size(2, 2) == pytest.approx(1/12)


def test_update_weights_is_nonnegative(state):
    rng = np.random.default_rng(1)
    weighted_lstar = rng.normal(scale=10, size=state["w"].shape)
    wi = admm.update_weights(state["w"], state["Lw"], state["theta"], state["Y"],
                             state["y"], 1., state["d"], weighted_lstar)
    assert np.all(wi >= 0)


def test_update_weights_is_a_gradient_step(state):
    # no clipping happens for a small gradient
    rho = 1.
    w = state["w"] + 1.
    Lw = L(w)
    d = np.diag(Lw)
    theta, Y, y = Lw.copy(), np.zeros_like(Lw), np.zeros_like(d)
    weighted_lstar = np.full(w.shape, 1e-3)
    wi = admm.update_weights(w, Lw, theta, Y, y, rho, d, weighted_lstar)
    np.testing.assert_allclose(wi, w - admm.step_size(rho, len(d))*weighted_lstar)


def test_update_theta_is_positive_definite_after_centering(state):
    for rho in [.1, 1., 10.]:
        theta = admm.update_theta(state["Lw"], state["Y"], rho, state["J"])
        np.testing.assert_allclose(theta, theta.T, atol=1e-10)
        assert np.all(np.linalg.eigvalsh(theta + state["J"]) > 0)


def test_update_theta_solves_proximal_problem(state):
    # optimality: rho*(theta + J) - inv(theta + J) = rho*(Lw + J) - Y
    rho = 2.
    theta = admm.update_theta(state["Lw"], state["Y"], rho, state["J"])
    M = theta + state["J"]
    np.testing.assert_allclose(rho*M - np.linalg.inv(M),
                               rho*(state["Lw"] + state["J"]) - state["Y"], atol=1e-8)


def test_update_duals(state):
    rho = 3.
    Y, y, R1, R2 = admm.update_duals(state["Y"], state["y"], state["theta"],
                                     state["Lw"], rho, state["d"])
    np.testing.assert_allclose(R1, state["theta"] - state["Lw"])
    np.testing.assert_allclose(R2, np.diag(state["Lw"]) - state["d"])
    np.testing.assert_allclose(Y, state["Y"] + rho*R1)
    np.testing.assert_allclose(y, state["y"] + rho*R2)


@pytest.mark.parametrize("r, s, expected", [
    (10., 1., 2.),      # primal residual dominates
    (1., 10., .5),      # dual residual dominates
    (1., 1., 1.),       # balanced
    (2., 1., 1.),       # ratio not above mu
])
def test_update_rho(r, s, expected):
    assert admm.update_rho(1., r, s) == pytest.approx(expected)


@pytest.mark.parametrize("model", [Gaussian(), Student(4.)])
def test_augmented_lagrangian_at_feasible_point(model, w_true, laplacian_true):
    rng = np.random.default_rng(2)
    X = rng.normal(size=(20, 4))
    lstar_sq = lstar_outer(X)/19
    J = np.ones((4, 4))/4
    p = 4
    value = admm.augmented_lagrangian(w_true, laplacian_true, lstar_sq, laplacian_true, J,
                                      rng.normal(size=(p, p)), rng.normal(size=p),
                                      np.ones(p), 5., model)
    # constraints hold, only likelihood and log-determinant remain
    expected = model.negative_log_likelihood(w_true, lstar_sq) \
        - np.log(np.linalg.det(laplacian_true + J))
    assert value == pytest.approx(expected)
