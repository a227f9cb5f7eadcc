"""Recurring prize draw settled with externally supplied randomness."""

__version__ = "0.1.0"
