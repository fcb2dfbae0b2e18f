"""Personal Finance Tracker package."""

__all__ = [
    "config",
    "models",
    "errors",
    "retrieval",
    "aggregation",
    "validation",
    "reports",
    "store",
    "webapp",
    "cli",
    "db",
]

__version__ = "0.1.0"
