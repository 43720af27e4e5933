"""CallServer Insight: call-server usage aggregation and trend reporting."""

__version__ = "1.2.0"
