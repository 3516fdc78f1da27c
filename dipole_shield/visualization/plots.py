import logging
import os

import matplotlib.pyplot as plt
import numpy as np

from dipole_shield.config.settings import OUTPUT_DIR

logger = logging.getLogger(__name__)


def plot_trajectories(sweep, output_dir=OUTPUT_DIR):
    """
    Plot the x-z projection of every trajectory with the protected region.
    """
    os.makedirs(output_dir, exist_ok=True)
    L = sweep.dipole.protected_size

    fig, ax = plt.subplots(figsize=(9, 7))
    for run in sweep.runs:
        pos = run.trajectory.positions
        ax.plot(pos[:, 0], pos[:, 2], label=f"{run.energy_kev:g} keV")

    theta = np.linspace(0.0, 2.0 * np.pi, 200)
    ax.plot(L * np.cos(theta), L * np.sin(theta), "k--", linewidth=1.0, label="Protected region")
    ax.plot([0.0], [0.0], "ro", label="Dipole")

    ax.set_xlabel("x (m)")
    ax.set_ylabel("z (m)")
    ax.set_title(f"Electron trajectories, dipole moment {sweep.dipole.moment:.3e} A·m²")
    ax.set_aspect("equal", adjustable="datalim")
    if len(sweep.runs) <= 10:
        ax.legend()
    else:
        ax.legend(fontsize=8, ncol=2)

    save_path = os.path.join(output_dir, "trajectories_xz.png")
    fig.tight_layout()
    fig.savefig(save_path)
    plt.close(fig)

    logger.info("Saved: %s", save_path)
    return save_path


def plot_min_distance(sweep, output_dir=OUTPUT_DIR):
    """
    Closest approach and theoretical Larmor radius vs energy.
    """
    os.makedirs(output_dir, exist_ok=True)

    results = sweep.results
    energies = [r.energy_kev for r in results]
    r_min = [r.min_distance for r in results]
    r_larmor = [r.larmor_radius for r in results]

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.loglog(energies, r_min, "o-", label="Minimum distance")
    ax.loglog(energies, r_larmor, "s--", label="Larmor radius at L")
    ax.axhline(sweep.dipole.protected_size, color="k", linestyle=":", label="L")
    ax.set_xlabel("Kinetic energy (keV)")
    ax.set_ylabel("Distance (m)")
    ax.set_title("Closest approach vs energy")
    ax.legend()

    save_path = os.path.join(output_dir, "min_distance_vs_energy.png")
    fig.tight_layout()
    fig.savefig(save_path)
    plt.close(fig)

    logger.info("Saved: %s", save_path)
    return save_path
