"""x-gifts: paid gift recommendation API."""

__version__ = "0.1.0"
