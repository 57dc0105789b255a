import logging
import time

import numpy as np
import matplotlib.pyplot as plt

from networkx import random_regular_graph, to_numpy_array
from sklearn.pipeline import Pipeline

from joblib import Parallel, delayed
from tqdm import tqdm

from heavytailgraph.estimators import HeavyTailGL
from heavytailgraph.operators import L, Ainv
from heavytailgraph.utils import (
    relative_error, f1_score, sample_student_gmrf, inject_outliers
)


def regular_graph(p, degree, seed=None):
    """Random regular graph whose weighted degrees are all equal to one.
    """
    graph = random_regular_graph(degree, p, seed=seed)
    adjacency = to_numpy_array(graph)/degree
    return L(Ainv(adjacency))


def one_monte_carlo(trial_no, laplacian, n, nu, n_outliers, amplitude):

    rng = np.random.default_rng(trial_no)

    X = sample_student_gmrf(laplacian, n, df=nu, random_state=rng)
    X = inject_outliers(X, n_outliers, amplitude, random_state=rng)

    GGL = Pipeline(steps=[
        ('Graph Estimation', HeavyTailGL(heavy_type='gaussian', maxiter=5000,
                                         verbosity=0))]
                   )
    StGL = Pipeline(steps=[
        ('Graph Estimation', HeavyTailGL(heavy_type='student', nu=nu,
                                         maxiter=5000, verbosity=0))]
                    )

    adjacency_true = np.diag(np.diag(laplacian)) - laplacian
    delta_seq = []
    for pipeline in [GGL, StGL]:
        pipeline.fit_transform(X)
        estimator = pipeline['Graph Estimation']
        delta_seq.append([relative_error(laplacian, estimator.laplacian_),
                          f1_score(adjacency_true, estimator.adjacency_, threshold=1e-2)])
    return delta_seq


def parallel_monte_carlo(laplacian, n, nu, n_outliers, amplitude,
                         n_threads, n_trials, Multi):

    # Looping on Monte Carlo Trials
    if Multi:
        results_parallel = Parallel(n_jobs=n_threads)(
            delayed(one_monte_carlo)(iMC, laplacian, n, nu, n_outliers, amplitude)
            for iMC in range(n_trials))
        return np.array(results_parallel)
    else:
        results = []
        for iMC in range(n_trials):
            results.append(one_monte_carlo(iMC, laplacian, n, nu, n_outliers, amplitude))
        return np.array(results)


if __name__ == "__main__":

    logging.basicConfig(level=logging.WARNING)

    p = 20                                          # number of nodes
    n_samples = 10*p                                # number of observations
    nu = 4                                          # degrees of freedom
    amplitude = 50.                                 # norm of the outliers
    outlier_seq = np.array([0, 1, 2, 5, 10])

    number_of_threads = -1              # to use the maximum number of threads
    Multi = True
    number_of_trials = 20

    laplacian_true = regular_graph(p, 3, seed=0)

    print(u"Parameters: p=%d, n=%d, nu=%g, outliers=%s" % (p, n_samples, nu, outlier_seq))
    t_beginning = time.time()

    # (outliers, trials, estimator, metric)
    delta_container = np.zeros((len(outlier_seq), number_of_trials, 2, 2))
    for i_o, n_outliers in enumerate(tqdm(outlier_seq)):
        delta_container[i_o] = parallel_monte_carlo(
            laplacian_true, n_samples, nu, n_outliers, amplitude,
            number_of_threads, number_of_trials, Multi)

    print('Done in %f s' % (time.time()-t_beginning))

    fig, ax = plt.subplots(1, 2, figsize=(9, 4))
    labels = ["Gaussian", "Student-t"]
    for k, metric in enumerate(["Relative error", "F1-score"]):
        for m in range(2):
            ax[k].plot(outlier_seq, np.mean(delta_container[:, :, m, k], axis=1),
                       marker='o', label=labels[m])
        ax[k].set_xlabel('Number of outliers')
        ax[k].set_ylabel(metric)
        ax[k].legend()
    plt.tight_layout()
    plt.show()
