"""HR compliance management service."""

__version__ = "0.1.0"
