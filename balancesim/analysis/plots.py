"""Charts of a recorded run."""

from __future__ import annotations

import logging
from pathlib import Path

from balancesim.components.auto_scaler import SCALE_OUT
from balancesim.instrumentation.history import HistorySink

logger = logging.getLogger(__name__)


def plot_history(history: HistorySink, path: str | Path, title: str = "Load balancer run") -> Path:
    """Save a three-panel chart of ``history`` to ``path``.

    Panels: worker count with scaling events marked, pending queue
    length, and cumulative processed/blocked counters.

    Returns:
        The path written.
    """
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    if not history.records:
        raise ValueError("history holds no records to plot")

    df = history.to_dataframe()
    ticks = df.index.to_numpy()

    fig, axes = plt.subplots(3, 1, figsize=(10, 9), sharex=True)
    fig.suptitle(title)

    ax = axes[0]
    ax.step(ticks, df["worker_count"], where="post", color="tab:blue")
    for event in history.events:
        color = "tab:green" if event.action == SCALE_OUT else "tab:red"
        ax.axvline(event.tick, color=color, alpha=0.3, linewidth=1)
    ax.set_ylabel("Workers")
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(ticks, df["queue_length"], color="tab:orange")
    ax.set_ylabel("Queue length")
    ax.grid(True, alpha=0.3)

    ax = axes[2]
    ax.plot(ticks, df["processed_count"], label="processed")
    ax.plot(ticks, df["blocked_count"], label="blocked")
    ax.set_ylabel("Cumulative requests")
    ax.set_xlabel("Tick")
    ax.legend()
    ax.grid(True, alpha=0.3)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)

    logger.info("Saved run chart to %s", path)
    return path
