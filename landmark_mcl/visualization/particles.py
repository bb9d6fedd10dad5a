"""
Particle cloud and trajectory visualization.

Functions for plotting the filter population over the landmark map,
its uncertainty ellipse, and estimated vs. true trajectories.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Ellipse
from scipy.stats import chi2


def plot_covariance_ellipse(mean, cov, confidence=0.95, ax=None, **kwargs):
    """
    Plot the confidence ellipse of a 2D Gaussian.

    Parameters
    ----------
    mean : array-like
        Mean of distribution [x, y]
    cov : np.ndarray
        2x2 covariance matrix
    confidence : float, optional
        Probability mass inside the ellipse (default: 0.95)
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, uses the current axes.
    **kwargs : dict
        Additional arguments passed to the Ellipse patch

    Returns
    -------
    matplotlib.patches.Ellipse
        The ellipse patch object
    """
    if ax is None:
        ax = plt.gca()

    mean = np.asarray(mean, dtype=float)
    cov = np.asarray(cov, dtype=float)

    eigenvalues, eigenvectors = np.linalg.eigh(cov)
    eigenvalues = np.clip(eigenvalues, 0.0, None)

    # Angle of the major axis
    angle = np.degrees(np.arctan2(eigenvectors[1, 1], eigenvectors[0, 1]))

    # Mahalanobis radius holding `confidence` of a 2-DOF chi-square
    scale = np.sqrt(chi2.ppf(confidence, df=2))
    width, height = 2 * scale * np.sqrt(eigenvalues[::-1])

    ellipse = Ellipse(xy=mean, width=width, height=height, angle=angle, **kwargs)
    ax.add_patch(ellipse)

    return ellipse


def plot_particles(particle_filter, landmarks=None, true_pose=None, ax=None,
                   title="Particle Cloud", figsize=(10, 8), save_path=None, show=True):
    """
    Plot the particle population, the map and the best estimate.

    Parameters
    ----------
    particle_filter : ParticleFilter
        Initialized filter
    landmarks : sequence of Landmark, optional
        Map landmarks to draw
    true_pose : array-like, optional
        Ground truth pose [x, y, theta]
    ax : matplotlib.axes.Axes, optional
        Axes to draw on; a new figure is created if None
    title : str, optional
        Plot title
    figsize : tuple, optional
        Figure size
    save_path : str, optional
        Path to save figure
    show : bool, optional
        Whether to display the plot

    Returns
    -------
    fig, ax
        Matplotlib figure and axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    xs = [p.x for p in particle_filter.particles]
    ys = [p.y for p in particle_filter.particles]
    ax.scatter(xs, ys, s=4, c='tab:blue', alpha=0.4, label='Particles')

    if landmarks:
        ax.scatter([lm.x for lm in landmarks], [lm.y for lm in landmarks],
                   marker='*', s=80, c='tab:orange', label='Landmarks')

    best = particle_filter.best_particle()
    ax.plot(best.x, best.y, 'r^', markersize=10, label='Best particle')
    if best.sense_x:
        ax.scatter(best.sense_x, best.sense_y, marker='x', c='r', s=30,
                   label='Best observations')

    mean, cov = particle_filter.estimate()
    plot_covariance_ellipse(mean[:2], cov[:2, :2], ax=ax, facecolor='none',
                            edgecolor='tab:blue', linewidth=1.5)

    if true_pose is not None:
        ax.plot(true_pose[0], true_pose[1], 'go', markersize=10, label='Ground Truth')

    ax.set_xlabel('X Position (m)', fontsize=12)
    ax.set_ylabel('Y Position (m)', fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis('equal')

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')

    if show:
        plt.show()

    return fig, ax


def plot_trajectory(estimates, ground_truth=None, landmarks=None, title="Vehicle Trajectory",
                    figsize=(10, 8), save_path=None, show=True):
    """
    Plot estimated (and true) 2D trajectory over the map.

    Parameters
    ----------
    estimates : np.ndarray
        Estimated poses (N, 3)
    ground_truth : np.ndarray, optional
        True poses (N, 3)
    landmarks : sequence of Landmark, optional
        Map landmarks to draw

    Returns
    -------
    fig, ax
        Matplotlib figure and axes
    """
    fig, ax = plt.subplots(figsize=figsize)
    estimates = np.asarray(estimates)

    if landmarks:
        ax.scatter([lm.x for lm in landmarks], [lm.y for lm in landmarks],
                   marker='*', s=80, c='tab:orange', label='Landmarks')

    ax.plot(estimates[:, 0], estimates[:, 1], 'b-', linewidth=2, label='Estimate', alpha=0.8)
    ax.plot(estimates[0, 0], estimates[0, 1], 'go', markersize=10, label='Start')
    ax.plot(estimates[-1, 0], estimates[-1, 1], 'r^', markersize=10, label='End')

    if ground_truth is not None:
        ground_truth = np.asarray(ground_truth)
        ax.plot(ground_truth[:, 0], ground_truth[:, 1], 'k--', linewidth=1.5,
                label='Ground Truth', alpha=0.6)

    ax.set_xlabel('X Position (m)', fontsize=12)
    ax.set_ylabel('Y Position (m)', fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis('equal')

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    if show:
        plt.show()

    return fig, ax
