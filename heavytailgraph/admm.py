import numpy as np

from .operators import Dstar, Lstar

# ADMM constants of the residual balancing rule
MU = 2
TAU = 2


def step_size(rho, p):
    """Inverse of an upper bound on the Lipschitz constant of the w-subproblem.
    """
    return 1/(2*rho*(2*p - 1))


def update_weights(w, Lw, theta, Y, y, rho, d, weighted_lstar):
    """
    One projected gradient step on the graph weights.

    Parameters
    ----------
    w : ndarray of shape (p*(p-1)/2,)
        current graph weights.
    Lw : ndarray of shape (p, p)
        Laplacian L(w).
    theta : ndarray of shape (p, p)
        current slack matrix.
    Y : ndarray of shape (p, p)
        dual variable of the constraint theta = L(w).
    y : ndarray of shape (p,)
        dual variable of the constraint diag(L(w)) = d.
    rho : float
        penalty parameter.
    d : ndarray of shape (p,)
        target degrees.
    weighted_lstar : ndarray of shape (p*(p-1)/2,)
        sum over observations of weight_q * Lstar(x_q x_q^T)/(n-1).

    Returns
    -------
    ndarray of shape (p*(p-1)/2,)
        updated nonnegative graph weights.
    """
    p = Lw.shape[0]
    grad = weighted_lstar - Lstar(rho*theta + Y) \
        + Dstar(y - rho*d) + rho*(Lstar(Lw) + Dstar(np.diag(Lw)))
    wi = w - step_size(rho, p)*grad
    wi[wi < 0] = 0.
    return wi


def update_theta(Lw, Y, rho, J):
    """
    Closed form solution of the log-determinant proximal subproblem.

    The eigenvalues gamma of rho*(Lw + J) - Y are replaced with
    (gamma + sqrt(gamma^2 + 4 rho))/(2 rho), which are all positive, so that
    theta + J is positive definite.
    """
    Lambda, U = np.linalg.eigh(rho*(Lw + J) - Y)
    D = (Lambda + np.sqrt(Lambda**2 + 4*rho))/(2*rho)
    return (U*D)@U.T - J


def update_duals(Y, y, theta, Lw, rho, d):
    """Dual ascent on both constraints. Also returns the primal residuals.
    """
    R1 = theta - Lw
    R2 = np.diag(Lw) - d
    return Y + rho*R1, y + rho*R2, R1, R2


def update_rho(rho, r, s, mu=MU, tau=TAU):
    """
    Residual balancing: increase rho when the primal residual r dominates the
    dual residual s, decrease it in the opposite case.
    """
    if r > mu*s:
        return rho*tau
    elif s > mu*r:
        return rho/tau
    return rho


def augmented_lagrangian(w, Lw, lstar_sq, theta, J, Y, y, d, rho, model):
    """
    Augmented Lagrangian of the regular graph learning problem, for monitoring.

    Parameters
    ----------
    model : EllipticalModel
        likelihood of the data (Gaussian or Student).
    """
    eig = np.linalg.eigvalsh(theta + J)
    Dw = np.diag(Lw)
    return (model.negative_log_likelihood(w, lstar_sq) - np.sum(np.log(eig))
            + np.sum(y*(Dw - d)) + np.sum(Y*(theta - Lw))
            + .5*rho*(np.linalg.norm(Dw - d)**2 + np.linalg.norm(Lw - theta, 'fro')**2))
