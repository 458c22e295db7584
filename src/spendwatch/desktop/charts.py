"""Chart helpers for Flet views."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from ..formatting import format_money
from ..services.dashboard import ChartPoint

# Label every point until the chart gets crowded
MAX_ANNOTATED_POINTS = 12


def _save(fig) -> Path:
    with NamedTemporaryFile(delete=False, suffix=".png") as tmp:
        fig.savefig(tmp.name, bbox_inches="tight", dpi=100)
        path = Path(tmp.name)
    plt.close(fig)
    return path


def discard_chart(path: Path | None) -> None:
    """Delete a PNG produced by this module; missing files are ignored."""
    if path is not None:
        path.unlink(missing_ok=True)


def spending_trend_png(points: Sequence[ChartPoint], *, currency: str = "₹") -> Path:
    """Render the spending-trend line chart and return the PNG path."""

    if not points:
        fig, ax = plt.subplots(figsize=(10, 4))
        ax.text(
            0.5,
            0.5,
            "No expenses yet\nAdd an expense to see your spending trend",
            ha="center",
            va="center",
            fontsize=12,
            color="#999",
        )
        ax.axis("off")
        return _save(fig)

    labels = [point.label for point in points]
    values = [point.value for point in points]
    x_positions = list(range(len(points)))

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.plot(x_positions, values, linewidth=2, color="#7C3AED")
    ax.fill_between(x_positions, values, color="#EDE9FE", alpha=0.5)

    if len(points) <= MAX_ANNOTATED_POINTS:
        ax.scatter(x_positions, values, s=24, color="#7C3AED", zorder=3)
        for x, value in zip(x_positions, values):
            ax.annotate(
                format_money(value, currency),
                (x, value),
                textcoords="offset points",
                xytext=(0, 8),
                ha="center",
                fontsize=8,
                color="#4C1D95",
            )

    ax.grid(True, linestyle="--", alpha=0.1)
    ax.set_axisbelow(True)
    for side in ("top", "right", "left", "bottom"):
        ax.spines[side].set_visible(False)
    ax.tick_params(colors="#888888", labelsize=9, length=0)

    ax.set_title("Spending Trends", fontsize=13, fontweight="bold", loc="left", pad=12)
    ax.set_xticks(x_positions)
    ax.set_xticklabels(labels, rotation=45 if len(labels) > 6 else 0, ha="right" if len(labels) > 6 else "center")
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda v, _pos: format_money(v, currency)))
    ax.set_ylim(bottom=0)

    fig.tight_layout()
    return _save(fig)
