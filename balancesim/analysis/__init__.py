"""Post-run analysis and charts."""

from balancesim.analysis.plots import plot_history

__all__ = ["plot_history"]
