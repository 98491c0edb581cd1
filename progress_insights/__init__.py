"""Progress Insights: rule-based trend insights for logged student sessions."""

__version__ = "0.3.0"
