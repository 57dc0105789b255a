import logging

import numpy as np

from .exceptions import InvalidHyperparameterError
from .operators import n_nodes

logger = logging.getLogger(__name__)


class EllipticalModel():
    """
    Likelihood of a centered elliptical distribution whose precision matrix is
    a graph Laplacian L(w).

    Observations enter through the rows of `lstar_sq`, where row q is
    Lstar(x_q x_q^T)/(n-1). The likelihood is evaluated at the quadratic
    forms t_q = n * <w, lstar_sq[q]>, while the observation weights of the
    w-update are evaluated at <w, lstar_sq[q]>.

    Parameters
    ----------
    log_density_generator : Callable
        logarithm of the density generator, called as log_density_generator(t, p).
    u : Callable
        per-observation weight, called as u(s, p).
    """
    def __init__(self, log_density_generator, u):
        self.log_density_generator = log_density_generator
        self.u = u

    def quadratic_forms(self, w, lstar_sq):
        """Quadratic form of the current graph evaluated at every observation.
        """
        return lstar_sq.shape[0] * (lstar_sq @ w)

    def weights(self, w, lstar_sq):
        """
        Per-observation weights of the reweighted sample covariance.

        Parameters
        ----------
        w : ndarray of shape (p*(p-1)/2,)
            graph weights.
        lstar_sq : ndarray of shape (n_samples, p*(p-1)/2)
            Lstar of the scaled outer products of the observations.

        Returns
        -------
        ndarray of shape (n_samples,)
        """
        p = n_nodes(lstar_sq.shape[1])
        return self.u(lstar_sq @ w, p)

    def weighted_lstar(self, w, lstar_sq, weights=None):
        """Sum over observations of weight_q * lstar_sq[q].

        Precomputed `weights` are used instead of evaluating them at w.
        """
        if weights is None:
            weights = self.weights(w, lstar_sq)
        return weights @ lstar_sq

    def negative_log_likelihood(self, w, lstar_sq):
        """
        Data term of the augmented Lagrangian, up to a constant.

        Returns
        -------
        float
            -(1/n) sum_q log h(t_q).
        """
        n, k = lstar_sq.shape
        t = self.quadratic_forms(w, lstar_sq)
        return -np.sum(self.log_density_generator(t, n_nodes(k))) / n


class Gaussian(EllipticalModel):
    """
    Gaussian likelihood: every observation has weight 1.
    """
    def __init__(self):
        def log_density_generator(t, p): return -t
        def u(s, p): return np.ones_like(s)
        super().__init__(log_density_generator, u)

    def weights(self, w, lstar_sq):
        return np.ones(lstar_sq.shape[0])

    def weighted_lstar(self, w, lstar_sq, weights=None):
        # weights are identically one
        return np.sum(lstar_sq, axis=0)

    def __repr__(self):
        return "Gaussian()"


class Student(EllipticalModel):
    """
    Multivariate Student-t likelihood. Observations with a large quadratic
    form under the current graph are down-weighted.

    Parameters
    ----------
    nu : float
        degrees of freedom of the t-distribution, must be > 2.
    """
    def __init__(self, nu):
        if nu is None or not np.isfinite(nu) or nu <= 2:
            raise InvalidHyperparameterError(
                f"Student-t degrees of freedom must be a real number > 2, got {nu}.")
        self.nu = float(nu)
        def log_density_generator(t, p): return -(p+self.nu)*np.log(1 + t/self.nu)
        def u(s, p): return (p+self.nu)/(s + self.nu)
        super().__init__(log_density_generator, u)

    def __repr__(self):
        return f"Student(nu={self.nu})"


def from_name(heavy_type, nu=None):
    """Builds the likelihood model selected by the `heavy_type` hyperparameter.
    """
    if heavy_type == "student":
        return Student(nu)
    if heavy_type == "gaussian":
        if nu is not None:
            logger.warning("nu=%s is ignored when heavy_type='gaussian'.", nu)
        return Gaussian()
    raise InvalidHyperparameterError(
        f"heavy_type must be 'gaussian' or 'student', got {heavy_type!r}.")
