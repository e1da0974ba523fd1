"""Plotting utilities for mint-tune."""

from mint_tune.plotting.tuning_curve import plot_component_errors, plot_tuning_curve

__all__ = ["plot_component_errors", "plot_tuning_curve"]
