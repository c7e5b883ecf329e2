"""Admin API for the legal-services platform dashboard."""

__version__ = "1.0.0"
