import logging

import numpy as np
from scipy.optimize import nnls

from .exceptions import InvalidDimensionError, InvalidHyperparameterError
from .operators import A, Ainv, L, Linv

logger = logging.getLogger(__name__)


def rough_precision(X):
    """Pseudo-inverse of the correlation matrix of the data.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
    """
    return np.linalg.pinv(np.corrcoef(X.T))


def _laplacian_matrix_map(p):
    """Matrix R such that R @ w = vec(L(w)).
    """
    k = p*(p-1)//2
    return np.stack([L(e).ravel() for e in np.eye(k)], axis=1)


def w_init(w0, Sinv):
    """
    Initial graph weights from a rough precision matrix.

    Parameters
    ----------
    w0 : str or array-like
        - 'naive' : negative of the off-diagonal entries of Sinv, clipped at zero.
        - 'qp' : nonnegative least-squares fit of L(w) to Sinv.
        - array-like of shape (p*(p-1)/2,) : used as is.
    Sinv : ndarray of shape (p, p)
        rough estimate of the precision matrix.

    Returns
    -------
    ndarray of shape (p*(p-1)/2,)
        nonnegative graph weights.
    """
    p = Sinv.shape[0]
    k = p*(p-1)//2

    if isinstance(w0, str):
        if w0 == "naive":
            w = Linv(Sinv)
            w[w < 0] = 0.
        elif w0 == "qp":
            w, residual = nnls(_laplacian_matrix_map(p), Sinv.ravel())
            logger.debug("qp initialization residual: %.3e", residual)
        else:
            raise InvalidHyperparameterError(
                f"w0 must be 'naive', 'qp' or a vector of graph weights, got {w0!r}.")
        return w

    w = np.asarray(w0, dtype=float).ravel()
    if w.size != k:
        raise InvalidDimensionError(
            f"w0 has length {w.size}, expected p*(p-1)/2 = {k} for p = {p} nodes.")
    if np.any(w < 0):
        raise InvalidHyperparameterError("w0 must have nonnegative entries.")
    return w.copy()


def normalize_weights(w):
    """Divides every row of A(w) by its sum and reads back the upper triangle.

    Rows summing to zero are left at zero.
    """
    Aw = A(w)
    row_sums = np.sum(Aw, axis=1, keepdims=True)
    row_sums[row_sums == 0] = 1.
    return Ainv(Aw / row_sums)
