import logging
import numbers
import time

import numpy as np
from networkx import from_numpy_array
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils import check_array
from tqdm import tqdm

from . import admm
from .elliptical import from_name
from .exceptions import InvalidDimensionError, InvalidHyperparameterError
from .initialization import normalize_weights, rough_precision, w_init
from .operators import A, L, Lstar, lstar_outer

logger = logging.getLogger(__name__)


def _check_degrees(d, p):
    d = np.asarray(d, dtype=float)
    if d.ndim == 0:
        return np.full(p, float(d))
    if d.shape != (p,):
        raise InvalidDimensionError(
            f"d must be a scalar or a vector of length {p}, got shape {d.shape}.")
    return d.copy()


def _check_hyperparameters(rho, maxiter, reltol):
    if not rho > 0:
        raise InvalidHyperparameterError(f"rho must be positive, got {rho}.")
    if not isinstance(maxiter, numbers.Integral) or maxiter < 1:
        raise InvalidHyperparameterError(
            f"maxiter must be a positive integer, got {maxiter}.")
    if not reltol > 0:
        raise InvalidHyperparameterError(f"reltol must be positive, got {reltol}.")


def learn_regular_heavytail_graph(X,
                                  heavy_type="gaussian",
                                  nu=None,
                                  w0="naive",
                                  d=1,
                                  rho=1,
                                  update_rho=True,
                                  maxiter=10000,
                                  reltol=1e-5,
                                  callback=None):
    """
    Laplacian matrix of a connected graph with regular degrees, learned from
    possibly heavy-tailed data with an ADMM.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        data matrix, the n_features columns are the nodes of the graph.
    heavy_type : {'gaussian', 'student'}, default='gaussian'
        statistical distribution assumed for the data.
    nu : float, default=None
        degrees of freedom of the Student-t distribution, must be > 2.
        Ignored when heavy_type='gaussian'.
    w0 : {'naive', 'qp'} or array-like of shape (p*(p-1)/2,), default='naive'
        initial graph weights or method to compute them.
    d : float or array-like of shape (n_features,), default=1
        target degrees of the nodes.
    rho : float, default=1
        initial penalty parameter.
    update_rho : bool, default=True
        whether to adapt rho by residual balancing.
    maxiter : int, default=10000
        maximum number of iterations.
    reltol : float, default=1e-5
        relative change of the Laplacian below which the algorithm stops.
    callback : Callable, default=None
        called as callback(iteration, state) after every iteration, where
        state is a dict holding 'w', 'laplacian', 'theta', 'rho' and 'weights',
        the observation weights used by the w-update of that iteration.

    Returns
    -------
    dict
        'laplacian', 'adjacency', 'theta', 'maxiter' (number of iterations
        done), 'convergence', 'primal_lap_residual', 'primal_deg_residual',
        'dual_residual', 'lagrangian', 'elapsed_time' and 'rho'.
    """
    if np.ndim(X) != 2:
        raise InvalidDimensionError(
            f"X must be a 2D array of shape (n_samples, n_features), got {np.ndim(X)}D.")
    X = check_array(X, ensure_min_samples=0, ensure_min_features=0)
    n, p = X.shape
    if n < 2 or p < 2:
        raise InvalidDimensionError(
            f"X must have at least 2 samples and 2 features, got shape {X.shape}.")
    model = from_name(heavy_type, nu)
    d = _check_degrees(d, p)
    _check_hyperparameters(rho, maxiter, reltol)

    # store Lstar of the scaled outer products of the observations
    lstar_sq = lstar_outer(X)/(n-1)

    # Compute quantities on the initial guess
    w = normalize_weights(w_init(w0, rough_precision(X)))

    J = (1/p)*np.ones((p, p))

    # Initialization of the slack variable (theta)
    Lw = L(w)
    theta = Lw

    # Initialize dual variables by zero
    Y = np.zeros((p, p))
    y = np.zeros(p)

    # Residual vectors
    primal_lap_residual = np.empty(maxiter)
    primal_deg_residual = np.empty(maxiter)
    dual_residual = np.empty(maxiter)
    lagrangian = np.empty(maxiter)
    elapsed_time = np.empty(maxiter)

    has_converged = False
    start_time = time.time()

    for i in range(maxiter):

        # Update w
        weights = model.weights(w, lstar_sq)
        wi = admm.update_weights(w, Lw, theta, Y, y, rho, d,
                                 model.weighted_lstar(w, lstar_sq, weights))
        Lwi = L(wi)

        # Update theta
        thetai = admm.update_theta(Lwi, Y, rho, J)

        # Update Y and y
        Y, y, R1, R2 = admm.update_duals(Y, y, thetai, Lwi, rho, d)

        # Compute primal, dual residuals and lagrangian
        s = rho*np.linalg.norm(Lstar(theta - thetai))
        r = np.linalg.norm(R1, 'fro')
        primal_lap_residual[i] = r
        primal_deg_residual[i] = np.linalg.norm(R2)
        dual_residual[i] = s
        lagrangian[i] = admm.augmented_lagrangian(wi, Lwi, lstar_sq, thetai, J,
                                                  Y, y, d, rho, model)

        # Update rho
        if update_rho:
            new_rho = admm.update_rho(rho, r, s)
            if new_rho != rho:
                logger.debug("iteration %d: rho %.3g -> %.3g", i + 1, rho, new_rho)
            rho = new_rho

        # an empty starting graph gives an infinite relative change
        with np.errstate(divide="ignore", invalid="ignore"):
            has_converged = (np.linalg.norm(Lw - Lwi, 'fro')/np.linalg.norm(Lw, 'fro') < reltol) \
                and (i > 0)
        elapsed_time[i] = time.time() - start_time

        if callback is not None:
            callback(i, {"w": wi, "laplacian": Lwi, "theta": thetai, "rho": rho,
                         "weights": weights})

        if has_converged:
            break

        w = wi
        Lw = Lwi
        theta = thetai

    n_iter = i + 1
    if has_converged:
        logger.info("Converged after %d iterations.", n_iter)
    else:
        logger.info("Did not converge after %d iterations.", n_iter)

    return {"laplacian": L(wi), "adjacency": A(wi), "theta": thetai,
            "maxiter": n_iter, "convergence": has_converged,
            "primal_lap_residual": primal_lap_residual[:n_iter],
            "primal_deg_residual": primal_deg_residual[:n_iter],
            "dual_residual": dual_residual[:n_iter],
            "lagrangian": lagrangian[:n_iter],
            "elapsed_time": elapsed_time[:n_iter],
            "rho": rho}


# -------------------------------------------------------------------------
# Class Heavy-Tail Graph Learning
# -------------------------------------------------------------------------
class HeavyTailGL(BaseEstimator, TransformerMixin):
    """
    Heavy Tail Graph Learning.

    Learns the Laplacian matrix of a connected graph with regular node degrees
    from data assumed to be Gaussian or Student-t distributed, as proposed in:

    Cardoso J., Ying J. and Palomar D.P. "Graphical Models in Heavy-Tailed
    Markets". Neurips, 2021.

    Parameters
    ----------
    heavy_type : {'gaussian', 'student'}, default='gaussian'
        statistical distribution of the data.
    w0_type : {'naive', 'qp'} or array-like, default='naive'
        initial graph weights or method to compute them.
    nu : float, default=None
        degrees of freedom of the Student-t distribution, must be > 2.
    deg : float or array-like of shape (n_features,), default=1
        target node degrees.
    rho : float, default=1
        initial ADMM penalty parameter.
    update_rho : bool, default=True
        adapt rho during the iterations.
    maxiter : int, default=10000
    reltol : float, default=1e-5
    verbosity : int, default=1
        a progress bar is shown when verbosity >= 1.

    Attributes
    ----------
    laplacian_ : ndarray of shape (n_features, n_features)
    adjacency_ : ndarray of shape (n_features, n_features)
    theta_ : ndarray of shape (n_features, n_features)
        slack variable of the Laplacian.
    precision_ : ndarray of shape (n_features, n_features)
        same as adjacency_, returned by transform.
    graph_ : networkx.Graph
        weighted graph built from adjacency_.
    n_iter_ : int
    converged_ : bool
    results_ : dict
        full output of learn_regular_heavytail_graph.
    """
    def __init__(
        self,
        heavy_type="gaussian",
        w0_type="naive",
        nu=None,
        deg=1,
        rho=1,
        update_rho=True,
        maxiter=10000,
        reltol=1e-5,
        verbosity=1
    ):
        self.heavy_type = heavy_type
        self.w0_type = w0_type
        self.nu = nu
        self.deg = deg
        self.rho = rho
        self.update_rho = update_rho
        self.maxiter = maxiter
        self.reltol = reltol
        self.verbosity = verbosity

    def _learn_graph(self, X, callback=None):
        return learn_regular_heavytail_graph(
            X, heavy_type=self.heavy_type, nu=self.nu, w0=self.w0_type,
            d=self.deg, rho=self.rho, update_rho=self.update_rho,
            maxiter=self.maxiter, reltol=self.reltol, callback=callback)

    def fit(self, X, y=None):
        """
        Fit the model according to the given training data.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Training vector, where 'n_samples' is the number of samples and
            'n_features' is the number of nodes of the graph.

        y : Ignored
        """
        if self.verbosity >= 1:
            with tqdm(total=self.maxiter, desc=self.heavy_type, leave=False) as pbar:
                results = self._learn_graph(X, lambda i, state: pbar.update())
        else:
            results = self._learn_graph(X)

        # Saving results
        self.results_ = results
        self.laplacian_ = results["laplacian"]
        self.adjacency_ = results["adjacency"]
        self.theta_ = results["theta"]
        self.precision_ = results["adjacency"]
        self.n_iter_ = results["maxiter"]
        self.converged_ = results["convergence"]
        self.graph_ = from_numpy_array(self.adjacency_)

        return self

    def transform(self, X, y=None):
        """
        Does nothing. For scikit-learn compatibility purposes.
        """
        return self.precision_

    def fit_transform(self, X, y=None, **fit_params):
        return self.fit(X, **fit_params).transform(X)
