"""Back-office service for category menu management."""

__version__ = "0.1.0"
