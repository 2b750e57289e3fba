"""Public API surface for HTTP serving and Python-first interfaces."""

from plot_analytics.api.app import create_app
from plot_analytics.api.contracts import load_plot_json, save_plot_json
from plot_analytics.api.python_interface import PlotAnalyticsClient

__all__ = [
    "PlotAnalyticsClient",
    "create_app",
    "load_plot_json",
    "save_plot_json",
]
