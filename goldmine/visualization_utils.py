"""
Visualization utilities for Goldmine.

Renders a board with a path drawn over it, and the score history of a run.
"""

from pathlib import Path as FilePath
from typing import Optional, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from .maps import Map, PICKAXE, START, WALL
from .path import Path


def board_image(m: Map) -> np.ndarray:
    """
    Numeric image of a board for imshow.

    Walls are -1, spaces 0, value cells their digit, pickaxes and the
    start 10 and 11 so they stand out from values.
    """
    image = np.zeros((m.rows(), m.cols()))
    for row, cells in enumerate(m.cells):
        for col, cell in enumerate(cells):
            if cell == WALL:
                image[row, col] = -1
            elif cell == PICKAXE:
                image[row, col] = 10
            elif cell == START:
                image[row, col] = 11
            elif cell.isdigit():
                image[row, col] = int(cell)
    return image


def plot_path(m: Map, path: Path, ax: Optional[plt.Axes] = None) -> plt.Axes:
    """Draw the board and the cells a path walks through."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 6))

    ax.imshow(board_image(m), cmap="YlOrBr", interpolation="nearest")

    for row, cells in enumerate(m.cells):
        for col, cell in enumerate(cells):
            if cell != '.':
                ax.text(col, row, cell, ha='center', va='center', fontsize=8)

    v = m.start
    rows, cols = [v.row], [v.col]
    for step in path:
        v = v.move(step)
        if not m.can_be_at(v):
            break
        rows.append(v.row)
        cols.append(v.col)
    ax.plot(cols, rows, color="blue", linewidth=2, alpha=0.7, marker='o', markersize=3)

    ax.set_title(f"Path {path} scores {path.score(m)}")
    ax.set_xticks([])
    ax.set_yticks([])
    return ax


def plot_score_history(history: Sequence[int], ax: Optional[plt.Axes] = None) -> plt.Axes:
    """Best score at each sample."""
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 4))

    ax.plot(range(1, len(history) + 1), history, color="green", linewidth=2)
    ax.set_xlabel("Sample")
    ax.set_ylabel("Best score")
    ax.grid(True, alpha=0.3)
    return ax


def save_run_plots(
    m: Map,
    path_text: str,
    history: Sequence[int],
    output_path: FilePath,
    figsize: Tuple[int, int] = (12, 5)
) -> None:
    """
    Save a two-panel PNG: the board with its best path and the score history.

    Args:
        m: Solved map
        path_text: Best path in u/d/l/r form
        history: Sampled best scores
        output_path: Path to save PNG file
        figsize: Figure size (width, height) in inches
    """
    output_path = FilePath(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, (ax_board, ax_history) = plt.subplots(1, 2, figsize=figsize)
    plot_path(m, Path.parse(path_text), ax_board)
    plot_score_history(history, ax_history)

    fig.tight_layout()
    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
