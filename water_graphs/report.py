"""
PDF figure report for an analysed cluster table.

Each page reproduces one of the standard views of the dataset: ring counts
against cluster size, ring-size correlations, molecule type populations,
energy against hydrogen bonds (raw and normalized) and molecule types
against energy for a window of cluster sizes.
"""

from pathlib import Path
from typing import List, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib import cm
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.colors import Normalize

from water_graphs.statistics import (
    RING_PREFIX, TYPE_PREFIX, group_stats, normalize, ring_columns,
    ring_correlations, select_size_range, type_columns, type_populations
)

COMMON_RINGS = (3, 4, 5, 6)


def _label(column: str) -> str:
    if column.startswith(RING_PREFIX):
        return f"{column[len(RING_PREFIX):]}-cycles"
    if column.startswith(TYPE_PREFIX):
        return column[len(TYPE_PREFIX):] or "isolated"
    return column


def plot_rings_vs_size(ax, table: pd.DataFrame, columns: Sequence[str], ddof: int = 1) -> None:
    """Mean ring count per cluster size with a one standard deviation band."""
    for column in columns:
        stats = group_stats(table, column, ddof=ddof)
        sizes = stats.index.to_numpy()
        ax.plot(sizes, stats['mean'], 'o-', markersize=3, label=_label(column))
        ax.fill_between(sizes, stats['mean'] - stats['std'], stats['mean'] + stats['std'], alpha=0.2)

    ax.set_xlabel('Cluster size (molecules)')
    ax.set_ylabel('Number of primitive rings')
    ax.legend(fontsize=8, ncol=2)
    ax.grid(True, alpha=0.3)


def plot_ring_correlations(fig, ax, table: pd.DataFrame) -> None:
    """Heat map of pairwise Pearson correlations between ring counts."""
    matrix = ring_correlations(table)
    image = ax.imshow(matrix.to_numpy(dtype=float), cmap='coolwarm', vmin=-1, vmax=1)
    labels = [column[len(RING_PREFIX):] for column in matrix.columns]
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels)
    ax.set_yticks(range(len(labels)))
    ax.set_yticklabels(labels)
    ax.set_xlabel('Ring size')
    ax.set_ylabel('Ring size')
    ax.set_title('Ring size correlation')

    for i in range(len(labels)):
        for j in range(len(labels)):
            value = matrix.iat[i, j]
            if np.isfinite(value):
                ax.text(j, i, f"{value:.2f}", ha='center', va='center', fontsize=7)

    fig.colorbar(image, ax=ax, label='Pearson r')


def plot_type_populations(fig, axes, table: pd.DataFrame) -> None:
    """Molecule type counts per cluster size, log scale left and linear right."""
    populations = type_populations(table)
    columns = list(populations.columns)
    positions = np.arange(len(columns))
    sizes = populations.index.to_numpy()
    norm = Normalize(sizes.min(), sizes.max())

    for ax, scale in zip(axes, ('log', 'linear')):
        for size, counts in populations.iterrows():
            ax.scatter(positions, counts.to_numpy(), c=[size] * len(columns),
                       cmap='viridis', norm=norm, s=15)
        ax.set_xticks(positions)
        ax.set_xticklabels([_label(column) for column in columns], rotation=45)
        ax.set_yscale(scale)
        ax.set_ylabel('Number of molecules')
        ax.grid(True, alpha=0.3)

    mappable = cm.ScalarMappable(norm=norm, cmap='viridis')
    fig.colorbar(mappable, ax=list(axes), label='Cluster size (molecules)')


def _scatter_by_size(ax, x, y, sizes):
    return ax.scatter(x, y, c=sizes, cmap='viridis', s=8)


def plot_energy_vs_hbonds(fig, ax, table: pd.DataFrame) -> None:
    """Total energy against the number of hydrogen bonds."""
    points = _scatter_by_size(ax, table['n_hbonds'], table['energy'], table['n_molecules'])
    ax.set_xlabel('Number of hydrogen bonds')
    ax.set_ylabel('Energy')
    ax.grid(True, alpha=0.3)
    fig.colorbar(points, ax=ax, label='Cluster size (molecules)')


def plot_normalized_energy(fig, axes, table: pd.DataFrame) -> None:
    """Energy per molecule and per hydrogen bond against hydrogen bonds per molecule."""
    bonded = table[table['n_hbonds'] > 0]
    per_molecule_ax, per_bond_ax = axes

    points = _scatter_by_size(per_molecule_ax, bonded['hbonds_per_molecule'],
                              bonded['energy_per_molecule'], bonded['n_molecules'])
    per_molecule_ax.set_xlabel('Hydrogen bonds per molecule')
    per_molecule_ax.set_ylabel('Energy per molecule')

    per_bond = normalize(bonded, 'energy', 'n_hbonds')
    _scatter_by_size(per_bond_ax, bonded['hbonds_per_molecule'], per_bond, bonded['n_molecules'])
    per_bond_ax.set_xlabel('Hydrogen bonds per molecule')
    per_bond_ax.set_ylabel('Energy per hydrogen bond')

    for ax in axes:
        ax.grid(True, alpha=0.3)
    fig.colorbar(points, ax=list(axes), label='Cluster size (molecules)')


def plot_types_vs_energy(fig, axes, table: pd.DataFrame, columns: List[str]) -> None:
    """Energy against the count of each molecule type."""
    points = None
    for ax, column in zip(axes, columns):
        points = _scatter_by_size(ax, table[column], table['energy'], table['n_molecules'])
        ax.set_xlabel(f"Number of {_label(column)} molecules")
        ax.set_ylabel('Energy')
        ax.grid(True, alpha=0.3)
    for ax in axes[len(columns):]:
        ax.axis('off')
    if points is not None:
        fig.colorbar(points, ax=list(axes), label='Cluster size (molecules)')


def generate_report(table: pd.DataFrame, output_dir: str = "results", ddof: int = 1,
                    energy_window: Sequence[int] = (20, 30)) -> None:
    """
    Generate a PDF report with the standard figures of the dataset.

    Args:
        table: Cluster table from the analysis pipeline
        output_dir: Directory to save the report
        ddof: Delta degrees of freedom for the standard deviation bands
        energy_window: Cluster size range used for the types-vs-energy page
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    report_file = output_path / "cluster_report.pdf"

    if len(table) < 2:
        print("Not enough clusters to plot. Skipping report generation.")
        return

    rings = ring_columns(table)
    common = [column for column in rings if int(column[len(RING_PREFIX):]) in COMMON_RINGS]

    with PdfPages(report_file) as pdf:
        fig, axes = plt.subplots(1, 2, figsize=(14, 6))
        plot_rings_vs_size(axes[0], table, rings, ddof=ddof)
        axes[0].set_title('All ring sizes')
        plot_rings_vs_size(axes[1], table, common, ddof=ddof)
        axes[1].set_title('3- to 6-membered rings')
        fig.suptitle('Primitive rings vs cluster size', fontsize=14, fontweight='bold')
        pdf.savefig(fig, bbox_inches='tight')
        plt.close(fig)

        fig, ax = plt.subplots(figsize=(8, 7))
        plot_ring_correlations(fig, ax, table)
        pdf.savefig(fig, bbox_inches='tight')
        plt.close(fig)

        types = type_columns(table)
        if types:
            fig, axes = plt.subplots(1, 2, figsize=(14, 6))
            plot_type_populations(fig, axes, table)
            fig.suptitle('Molecule types vs cluster size', fontsize=14, fontweight='bold')
            pdf.savefig(fig, bbox_inches='tight')
            plt.close(fig)

        fig, ax = plt.subplots(figsize=(8, 6))
        plot_energy_vs_hbonds(fig, ax, table)
        ax.set_title('Energy vs hydrogen bonds')
        pdf.savefig(fig, bbox_inches='tight')
        plt.close(fig)

        if (table['n_hbonds'] > 0).any():
            fig, axes = plt.subplots(1, 2, figsize=(14, 6))
            plot_normalized_energy(fig, axes, table)
            fig.suptitle('Normalized energy vs hydrogen bonds per molecule', fontsize=14, fontweight='bold')
            pdf.savefig(fig, bbox_inches='tight')
            plt.close(fig)

        low, high = energy_window
        window = select_size_range(table, low, high)
        if not window.empty and types:
            n_cols = 3
            n_rows = int(np.ceil(len(types) / n_cols))
            fig, axes = plt.subplots(n_rows, n_cols, figsize=(15, 4 * n_rows), squeeze=False)
            plot_types_vs_energy(fig, list(axes.flat), window, types)
            fig.suptitle(f'Molecule types vs energy ({low} to {high} molecules)',
                         fontsize=14, fontweight='bold')
            pdf.savefig(fig, bbox_inches='tight')
            plt.close(fig)

    print(f"Generated cluster report: {report_file}")
