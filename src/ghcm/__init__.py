"""GitHub Copilot usage metrics: aggregation, ROI and reports."""

__version__ = "0.1.0"
