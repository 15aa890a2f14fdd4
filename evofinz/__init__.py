"""EvoFinz: expense tax aggregation and report exports."""

__version__ = "0.1.0"
