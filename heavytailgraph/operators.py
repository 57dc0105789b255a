import numpy as np

from .exceptions import InvalidDimensionError


# -------------------------------------------------------------------------
# Linear operators between graph weights and matrices
# (see Kumar et al. 2020, JMLR, and Cardoso et al. 2021, Neurips)
#
# Graph weights are stored as a vector of length p(p-1)/2 holding the
# edges (i, j), i < j, row by row, i.e. in np.triu_indices(p, k=1) order.
# -------------------------------------------------------------------------
def n_nodes(k):
    """Number of nodes p of a graph with k = p(p-1)/2 edge weights.
    """
    p = int(round(.5*(1 + np.sqrt(1 + 8*k))))
    if p*(p-1)//2 != k:
        raise InvalidDimensionError(
            f"len(w)={k} is not a triangular number; expected k=p*(p-1)/2.")
    return p


def _edges(p):
    return np.triu_indices(p, k=1)


def A(w):
    """Adjacency operator: maps graph weights to a symmetric, zero diagonal matrix.
    """
    w = np.asarray(w, dtype=float).ravel()
    p = n_nodes(w.size)
    iu = _edges(p)
    Aw = np.zeros((p, p))
    Aw[iu] = w
    Aw[(iu[1], iu[0])] = w
    return Aw


def L(w):
    """Laplacian operator: off-diagonal entries are -w and rows sum to zero.
    """
    Aw = A(w)
    return np.diag(np.sum(Aw, axis=1)) - Aw


def D(w):
    """Degree operator, diagonal of L(w).
    """
    return np.sum(A(w), axis=1)


def Lstar(Y):
    """Adjoint of the Laplacian operator.

    Parameters
    ----------
    Y : array-like of shape (p, p)

    Returns
    -------
    ndarray of shape (p*(p-1)/2,)
        entries Y_ii + Y_jj - Y_ij - Y_ji for i < j.
    """
    Y = np.asarray(Y, dtype=float)
    if Y.ndim != 2 or Y.shape[0] != Y.shape[1]:
        raise InvalidDimensionError("Y must be a square matrix.")
    i, j = _edges(Y.shape[0])
    return Y[i, i] + Y[j, j] - Y[i, j] - Y[j, i]


def Astar(Y):
    """Adjoint of the adjacency operator.
    """
    Y = np.asarray(Y, dtype=float)
    if Y.ndim != 2 or Y.shape[0] != Y.shape[1]:
        raise InvalidDimensionError("Y must be a square matrix.")
    i, j = _edges(Y.shape[0])
    return Y[i, j] + Y[j, i]


def Dstar(y):
    """Adjoint of the degree operator: entries y_i + y_j for i < j.
    """
    y = np.asarray(y, dtype=float).ravel()
    i, j = _edges(y.size)
    return y[i] + y[j]


def Ainv(M):
    """Inverse of the adjacency operator (see Cardoso, 2021)

    C++ implementation available at:
    https://github.com/dppalomar/spectralGraphTopology/blob/master/src/operators.cc
    """
    M = np.asarray(M, dtype=float)
    return M[_edges(M.shape[0])].copy()


def Linv(M):
    """Inverse of the Laplacian operator, reads minus the strict upper triangle.
    """
    M = np.asarray(M, dtype=float)
    return -M[_edges(M.shape[0])]


def lstar_outer(X):
    """Lstar of every rank-one matrix x_q x_q^T, stacked as rows.

    Lstar(x x^T)_ij = (x_i - x_j)^2, so no outer product is formed.

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)

    Returns
    -------
    ndarray of shape (n_samples, n_features*(n_features-1)/2)
    """
    X = np.asarray(X, dtype=float)
    i, j = _edges(X.shape[1])
    return (X[:, i] - X[:, j])**2

