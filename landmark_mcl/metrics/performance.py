"""
Diagnostics for evaluating localization quality.

Pose errors against ground truth and particle weight statistics.
"""

import numpy as np

from ..common.angles import angle_diff


def pose_errors(estimates, ground_truth):
    """
    Per-step position and heading errors.

    Parameters
    ----------
    estimates : np.ndarray
        Estimated poses (N, 3) as [x, y, theta]
    ground_truth : np.ndarray
        True poses (N, 3)

    Returns
    -------
    np.ndarray
        (N, 2): Euclidean position error and absolute wrapped heading
        error
    """
    estimates = np.atleast_2d(np.asarray(estimates, dtype=float))
    ground_truth = np.atleast_2d(np.asarray(ground_truth, dtype=float))
    if estimates.shape != ground_truth.shape:
        raise ValueError(
            f"shape mismatch: estimates {estimates.shape} vs ground truth {ground_truth.shape}"
        )

    position = np.hypot(estimates[:, 0] - ground_truth[:, 0],
                        estimates[:, 1] - ground_truth[:, 1])
    heading = np.abs(angle_diff(estimates[:, 2], ground_truth[:, 2]))
    return np.column_stack([position, heading])


def pose_rmse(estimates, ground_truth):
    """
    Root mean square error per pose component.

    Returns
    -------
    dict
        ``x``, ``y``, ``theta`` (wrapped) and ``position`` RMSE
    """
    estimates = np.atleast_2d(np.asarray(estimates, dtype=float))
    ground_truth = np.atleast_2d(np.asarray(ground_truth, dtype=float))
    errors = pose_errors(estimates, ground_truth)

    dx = estimates[:, 0] - ground_truth[:, 0]
    dy = estimates[:, 1] - ground_truth[:, 1]

    return {
        'x': float(np.sqrt(np.mean(dx ** 2))),
        'y': float(np.sqrt(np.mean(dy ** 2))),
        'theta': float(np.sqrt(np.mean(errors[:, 1] ** 2))),
        'position': float(np.sqrt(np.mean(errors[:, 0] ** 2))),
    }


def weight_statistics(weights):
    """
    Summary of an unnormalized weight array.

    Parameters
    ----------
    weights : np.ndarray
        Particle weights (N,)

    Returns
    -------
    dict
        ``highest``, ``mean`` and ``ess`` (effective sample size,
        0 when every weight is zero)

    Notes
    -----
    ESS = (sum w)^2 / sum w^2, between 1 and N for any non-zero weights.
    """
    weights = np.asarray(weights, dtype=float)
    if weights.size == 0:
        return {'highest': 0.0, 'mean': 0.0, 'ess': 0.0}

    total = weights.sum()
    squares = np.sum(weights ** 2)
    ess = float(total ** 2 / squares) if squares > 0 else 0.0

    return {
        'highest': float(weights.max()),
        'mean': float(weights.mean()),
        'ess': ess,
    }


def print_metrics(metrics, filter_name="PF"):
    """
    Print pose RMSE in a formatted way.

    Parameters
    ----------
    metrics : dict
        Output of pose_rmse
    filter_name : str, optional
        Name shown in the header
    """
    print(f"\n{filter_name} Localization Error")
    print("=" * 50)
    print(f"RMSE x:        {metrics['x']:.4f} m")
    print(f"RMSE y:        {metrics['y']:.4f} m")
    print(f"RMSE position: {metrics['position']:.4f} m")
    print(f"RMSE heading:  {metrics['theta']:.4f} rad")
    print("=" * 50)
