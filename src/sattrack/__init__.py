"""Satellite pass visualisation, real-time tracking and Doppler correction."""

__version__ = "0.1.0"

__all__ = ["__version__"]
