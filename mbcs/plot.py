"""
MBCS Plotting Utilities

This module provides plotting functions for the results of each section.
Uses matplotlib, with networkx for drawing networks.
"""

from pathlib import Path
from typing import Optional
import numpy as np
import matplotlib.pyplot as plt
import networkx as nx
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from .experiments import (
    DiversityResult,
    NetworkResult,
    LandscapeResult,
    GrowthResult,
    StemCellResult,
    KineticsResult,
)
from .networks import to_graph

COLORS = ['#2E86AB', '#A23B72', '#F18F01', '#C73E1D', '#3B1F2B', '#6A994E']


def setup_style() -> None:
    """Set up matplotlib style for publication-quality plots."""
    plt.rcParams.update({
        'font.size': 10,
        'axes.labelsize': 11,
        'axes.titlesize': 12,
        'xtick.labelsize': 9,
        'ytick.labelsize': 9,
        'legend.fontsize': 9,
        'figure.figsize': (8, 6),
        'figure.dpi': 150,
        'savefig.dpi': 150,
        'axes.grid': True,
        'grid.alpha': 0.3,
    })


def _finish(fig: Figure, outdir: Optional[Path], filename: str, show: bool) -> Figure:
    plt.tight_layout()

    if outdir is not None:
        fig.savefig(outdir / filename, bbox_inches='tight')

    if show:
        plt.show()

    return fig


def plot_diversity(result: DiversityResult,
                   outdir: Optional[Path] = None,
                   show: bool = False) -> Figure:
    """Bar chart of species counts for each community, annotated with S and E.

    Args:
        result: DiversityResult from experiment
        outdir: Directory to save plot (if provided)
        show: Whether to display the plot

    Returns:
        matplotlib Figure object
    """
    setup_style()

    names = list(result.communities)
    n_cols = 2
    n_rows = int(np.ceil(len(names) / n_cols))
    fig, axes = plt.subplots(n_rows, n_cols, figsize=(12, 4 * n_rows), squeeze=False)

    for i, name in enumerate(names):
        ax = axes[i // n_cols, i % n_cols]
        community = result.communities[name]
        summary = result.summaries[name]
        x = np.arange(len(community.species))
        ax.bar(x, community.counts, color=COLORS[i % len(COLORS)])
        ax.set_xticks(x)
        ax.set_xticklabels(community.species, fontsize=8)
        ax.set_ylabel('Organisms')
        ax.set_title(name.replace('_', ' ').title())
        ax.text(0.98, 0.95, f"S = {summary.simpson:.3f}\nE = {summary.evenness:.3f}",
                transform=ax.transAxes, ha='right', va='top',
                bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))

    for j in range(len(names), n_rows * n_cols):
        axes[j // n_cols, j % n_cols].axis('off')

    return _finish(fig, outdir, "diversity_communities.png", show)


def _draw_network(ax: Axes, result: NetworkResult) -> None:
    G = to_graph(result.matrix)
    pos = nx.circular_layout(G)
    edge_style = {}
    if G.is_directed():
        # Curved arrows keep i -> j and j -> i apart
        edge_style = dict(arrows=True, arrowstyle='-|>', arrowsize=12,
                          connectionstyle='arc3,rad=0.1', node_size=400)
    nx.draw_networkx_nodes(G, pos, ax=ax, node_size=400, node_color=COLORS[0])
    nx.draw_networkx_labels(G, pos, labels={k: str(k + 1) for k in G.nodes},
                            ax=ax, font_size=10, font_color='white')
    nx.draw_networkx_edges(G, pos, ax=ax, edge_color='gray', width=1.5, **edge_style)
    ax.set_xlim(-1.5, 1.5)
    ax.set_ylim(-1.5, 1.5)
    ax.set_aspect('equal')
    ax.axis('off')


def plot_networks(results: dict[str, NetworkResult],
                  outdir: Optional[Path] = None,
                  show: bool = False) -> Figure:
    """Draw each network (top row) and its degree distribution (bottom row).

    Args:
        results: Dictionary of network name -> NetworkResult
        outdir: Directory to save plot
        show: Whether to display

    Returns:
        matplotlib Figure
    """
    setup_style()

    n = len(results)
    fig, axes = plt.subplots(2, n, figsize=(4 * n, 8), squeeze=False)

    for col, (name, result) in enumerate(results.items()):
        summary = result.summary
        _draw_network(axes[0, col], result)
        axes[0, col].set_title(f"{name.replace('_', ' ').title()}\n{summary.kind.replace('_', ' ')}")

        dist = summary.degree_distribution
        axes[1, col].bar(dist.k, dist.p_k, color=COLORS[col % len(COLORS)])
        axes[1, col].set_xlabel('k')
        axes[1, col].set_ylabel(r'$p_k$')
        axes[1, col].set_title(f"E = {summary.n_links}, D = {summary.density:.2f}, "
                               f"<k> = {summary.average_degree:.2f}", fontsize=9)

    return _finish(fig, outdir, "networks.png", show)


def plot_landscapes(results: dict[str, LandscapeResult],
                    outdir: Optional[Path] = None,
                    show: bool = False) -> Figure:
    """Contour maps of each landscape with its peaks and a greedy climb."""
    setup_style()

    n = len(results)
    fig, axes = plt.subplots(1, n, figsize=(5 * n, 4.5), squeeze=False)

    for col, (name, result) in enumerate(results.items()):
        ax = axes[0, col]
        cs = ax.contourf(result.X, result.Y, result.Z, levels=30, cmap='viridis')
        plt.colorbar(cs, ax=ax, label='z')

        if result.peaks:
            pi, pj = zip(*result.peaks)
            ax.plot(result.X[pi, pj], result.Y[pi, pj], 'w^', markersize=6,
                    markeredgecolor='black', label='peaks')
        ci, cj = zip(*result.climb)
        ax.plot(result.X[ci, cj], result.Y[ci, cj], '-', color='#F18F01', linewidth=2,
                label='hill climb')
        ax.plot(result.X[ci[0], cj[0]], result.Y[ci[0], cj[0]], 'o', color='#C73E1D')

        ax.set_xlabel('x')
        ax.set_ylabel('y')
        ax.set_title(f"{name.title()} landscape")
        ax.legend(loc='lower right', fontsize=7)
        ax.grid(False)

    return _finish(fig, outdir, "landscapes.png", show)


def plot_growth_iterative(result: GrowthResult,
                          outdir: Optional[Path] = None,
                          show: bool = False) -> Figure:
    """Trajectories of the discrete and Euler-stepped growth models."""
    setup_style()

    fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))
    pairs = [
        ("unconstrained", "unconstrained_euler"),
        ("constrained", "constrained_euler"),
        ("logistic_map", "logistic_euler"),
    ]

    for ax, (discrete, euler) in zip(axes, pairs):
        d = result.iterative[discrete]
        e = result.iterative[euler]
        ax.plot(d.times, d.values, 'o-', markersize=3, color='#2E86AB', label=d.label)
        ax.plot(e.times, e.values, '-', linewidth=2, color='#A23B72', label=e.label)
        ax.set_xlabel('Time (steps)')
        ax.set_ylabel('Population')
        ax.legend(loc='best', fontsize=7)

    axes[0].set_title('Unconstrained growth')
    axes[1].set_title('Constrained growth')
    axes[2].set_title('Logistic growth')

    return _finish(fig, outdir, "growth_iterative.png", show)


def plot_growth_continuous(result: GrowthResult,
                           outdir: Optional[Path] = None,
                           show: bool = False) -> Figure:
    """Exponential vs logistic growth for each cell cycle length."""
    setup_style()

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    for i, T in enumerate(result.logistic):
        color = COLORS[i % len(COLORS)]
        ax1.plot(result.t, result.exponential[T], '--', color=color, label=f"exponential, T={T:g}")
        ax1.plot(result.t, result.logistic[T], '-', color=color, label=f"logistic, T={T:g}")
        ax2.plot(result.t, result.logistic[T], '-', color=color, label=f"T={T:g}")

    ax1.set_yscale('log')
    ax1.set_xlabel('Time')
    ax1.set_ylabel('N(t)')
    ax1.set_title('Exponential vs logistic growth')
    ax1.legend(loc='best', fontsize=7)

    ax2.axhline(result.K, color='gray', linestyle=':', label='K')
    ax2.set_xlabel('Time')
    ax2.set_ylabel('N(t)')
    ax2.set_title(f"Logistic growth, $N_0$={result.N0:g}, K={result.K:g}")
    ax2.legend(loc='best')

    return _finish(fig, outdir, "growth_continuous.png", show)


def plot_stemcells(result: StemCellResult,
                   outdir: Optional[Path] = None,
                   show: bool = False) -> Figure:
    """Progenitors, differentiated and apoptotic cells for each scenario."""
    setup_style()

    n = len(result.trajectories)
    fig, axes = plt.subplots(1, n, figsize=(4.5 * n, 4.5), squeeze=False)

    for ax, (name, traj) in zip(axes[0], result.trajectories.items()):
        ax.plot(traj.t, traj.P, '-', linewidth=2, color='#2E86AB', label='P (progenitors)')
        ax.plot(traj.t, traj.D, '-', linewidth=2, color='#A23B72', label='D (differentiated)')
        if np.any(traj.A > 0):
            ax.plot(traj.t, traj.A, '-', linewidth=2, color='#C73E1D', label='A (apoptotic)')
        ax.set_xlabel('Time')
        ax.set_ylabel('Cells')
        title = name.replace('_', ' ').title()
        if traj.params is not None:
            m = traj.params.modes
            title += f"\npp={m.pp:g}, dd={m.dd:g}, ø={m.apoptosis:g}"
        ax.set_title(title, fontsize=10)
        ax.legend(loc='best', fontsize=7)

    return _finish(fig, outdir, "stemcells.png", show)


def plot_parameter_estimates(result: StemCellResult,
                             outdir: Optional[Path] = None,
                             show: bool = False) -> Figure:
    """Estimated pp - dd and T over time against their true values."""
    setup_style()

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

    for i, (name, est) in enumerate(result.estimates.items()):
        color = COLORS[i % len(COLORS)]
        truth = result.estimation_truth[name]
        ax1.plot(est.t, est.pp_minus_dd, '-', color=color, label=name.replace('_', ' '))
        ax1.axhline(truth["pp"] - truth["dd"], color=color, linestyle=':')
        ax2.plot(est.t, est.cycle_length, '-', color=color, label=name.replace('_', ' '))
        ax2.axhline(truth["cycle_length"], color=color, linestyle=':')

    ax1.set_xlabel('Time')
    ax1.set_ylabel('pp - dd')
    ax1.set_title('Estimated pp - dd (dotted: true)')
    ax1.legend(loc='best')
    ax2.set_xlabel('Time')
    ax2.set_ylabel('T')
    ax2.set_title('Estimated cell cycle length (dotted: true)')
    ax2.legend(loc='best')

    return _finish(fig, outdir, "stemcells_estimation.png", show)


def plot_mass_action(result: KineticsResult,
                     outdir: Optional[Path] = None,
                     show: bool = False) -> Figure:
    """Concentrations over time for each mass-action demo."""
    setup_style()

    n = len(result.runs)
    fig, axes = plt.subplots(1, n, figsize=(4.5 * n, 4.5), squeeze=False)

    for ax, (name, run) in zip(axes[0], result.runs.items()):
        for i, species in enumerate(run.reaction.species):
            ax.plot(run.t, run.concentrations[i], '-', linewidth=2,
                    color=COLORS[i % len(COLORS)], label=species)
        ax.set_xlabel('Time [s]')
        ax.set_ylabel('Concentration [M]')
        ax.set_title(f"{run.reaction.description}\n$k_1$={run.k_forward:g}, $k_2$={run.k_backward:g}",
                     fontsize=10)
        ax.legend(loc='best')

    return _finish(fig, outdir, "kinetics_mass_action.png", show)


def plot_arrhenius(result: KineticsResult,
                   outdir: Optional[Path] = None,
                   show: bool = False) -> Figure:
    """k(T), the reversible ln k vs 1/T lines, and [I2] vs K_eq."""
    setup_style()

    fig, (ax1, ax2, ax3) = plt.subplots(1, 3, figsize=(15, 4.5))

    ax1.plot(result.temperature, result.rate_constant, '-', linewidth=2, color='#2E86AB')
    ax1.set_xlabel('T [K]')
    ax1.set_ylabel('k')
    ax1.set_title(f"Arrhenius law, $E_a$={result.Ea:g}")

    rev = result.reversible
    inv_T = 1.0 / rev.T
    ax2.plot(inv_T, rev.log_k_exothermic, '-', linewidth=2, color='#F18F01', label='exothermic')
    ax2.plot(inv_T, rev.log_k_endothermic, '-', linewidth=2, color='#2E86AB', label='endothermic')
    ax2.set_xlabel('1/T [1/K]')
    ax2.set_ylabel('ln k')
    ax2.set_title('Reversible reaction')
    ax2.legend(loc='best')

    ax3.plot(result.iodine_K_eq, result.iodine_I2, 'o-', linewidth=2, color='#A23B72')
    ax3.set_xlabel(r'$K_{eq}$')
    ax3.set_ylabel(r'[I$_2$] [M]')
    ax3.set_title(r'H$_2$ + I$_2$ <-> 2 HI')

    return _finish(fig, outdir, "kinetics_arrhenius.png", show)
