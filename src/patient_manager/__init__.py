"""Patient record management service and terminal dashboard."""

__version__ = "1.0.0"
