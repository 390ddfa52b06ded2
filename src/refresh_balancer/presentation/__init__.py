"""Presentation layer for the refresh balancer.

Provides console output and export utilities for analysis results and
impact previews.

Public API
----------
- :class:`ConsoleDashboard` -- Rich-based (or plain-text) console output
- :func:`export_json`, :func:`export_csv`, :func:`export_hourly_csv`,
  :func:`export_all` -- file export utilities
"""

from refresh_balancer.presentation.console import ConsoleDashboard
from refresh_balancer.presentation.export import (
    export_all,
    export_csv,
    export_hourly_csv,
    export_json,
)

__all__ = [
    # Console
    "ConsoleDashboard",
    # Export
    "export_json",
    "export_csv",
    "export_hourly_csv",
    "export_all",
]
