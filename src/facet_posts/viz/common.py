from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt

POSITIVE_COLOR = "#0284c7"
NEGATIVE_COLOR = "#dc2626"
FIGURE_DPI = 150


def save_figure(path: Path, dpi: int = FIGURE_DPI) -> Path:
    """Save and close the current figure; the format follows the path suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    figure = plt.gcf()
    figure.tight_layout()
    figure.savefig(path, dpi=dpi)
    plt.close(figure)
    return path
