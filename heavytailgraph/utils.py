'''
General purpose utils functions: data generation from graph models,
estimation metrics and progress bar handling.
'''
import logging
from contextlib import contextmanager
from functools import partialmethod

import numpy as np
import tqdm
from scipy.stats import multivariate_normal, multivariate_t
from sklearn.metrics import f1_score as _f1_score

logger = logging.getLogger(__name__)


def relative_error(L_true, L_est):
    """Relative Frobenius error between two matrices.
    """
    return np.linalg.norm(L_true - L_est, 'fro')/np.linalg.norm(L_true, 'fro')


def f1_score(A_true, A_est, threshold=1e-4):
    """F1-score of the recovered edge support.

    Parameters
    ----------
    A_true : array-like of shape (p, p)
        true adjacency matrix.
    A_est : array-like of shape (p, p)
        estimated adjacency matrix.
    threshold : float, default=1e-4
        estimated weights above threshold are counted as edges.
    """
    iu = np.triu_indices(len(A_true), k=1)
    return _f1_score(np.asarray(A_true)[iu] > 0, np.asarray(A_est)[iu] > threshold)


def sample_gmrf(laplacian, n_samples, random_state=None):
    """Sample from a Laplacian constrained Gaussian Markov random field.

    Parameters
    ----------
    laplacian : array-like of shape (p, p)
        Laplacian matrix, used as precision matrix through its pseudo-inverse.
    n_samples : int
    random_state : None, int or numpy random generator
    """
    p = len(laplacian)
    return multivariate_normal.rvs(
        mean=np.zeros(p),
        cov=np.linalg.pinv(laplacian),
        size=n_samples,
        random_state=random_state
    )


def sample_student_gmrf(laplacian, n_samples, df, random_state=None):
    """Sample from a Student-t Markov random field with Laplacian precision.

    The shape matrix is scaled by (df-2)/df so that the covariance matches
    pinv(laplacian).
    """
    p = len(laplacian)
    return multivariate_t.rvs(
        loc=np.zeros(p),
        shape=((df-2)/df)*np.linalg.pinv(laplacian),
        df=df,
        size=n_samples,
        random_state=random_state
    )


def inject_outliers(X, n_outliers, amplitude, direction=None, random_state=None):
    """Replaces the first n_outliers rows of X with large observations.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
    n_outliers : int
    amplitude : float
        norm of the outliers.
    direction : array-like of shape (n_features,), default=None
        direction of the outliers, drawn at random for every row when None.
    random_state : None, int or numpy random generator
    """
    rng = np.random.default_rng(random_state)
    X = np.array(X, dtype=float)
    n_features = X.shape[1]
    if direction is None:
        U = rng.normal(size=(n_outliers, n_features))
    else:
        U = np.tile(np.asarray(direction, dtype=float), (n_outliers, 1))
        U = U*rng.choice([-1., 1.], size=(n_outliers, 1))
    U = U/np.linalg.norm(U, axis=1, keepdims=True)
    X[:n_outliers] = amplitude*U
    logger.debug("Injected %d outliers of norm %g", n_outliers, amplitude)
    return X


# -------------------------------------------------------------------------
# Disabling tqdm temporarily. Credits to liam-ly:
# https://github.com/tqdm/tqdm/issues/614
# -------------------------------------------------------------------------
@contextmanager
def monkeypatched(obj, name, patch):
    """Temporarily monkeypatch."""
    old_attr = getattr(obj, name)
    setattr(obj, name, patch(old_attr))
    try:
        yield
    finally:
        setattr(obj, name, old_attr)


@contextmanager
def disable_tqdm():
    """Context manager to disable tqdm."""

    def _patch(old_init):
        return partialmethod(old_init, disable=True)

    with monkeypatched(tqdm.std.tqdm, "__init__", _patch):
        yield
