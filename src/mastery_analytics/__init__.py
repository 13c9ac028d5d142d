"""Mastery tracking and learning analytics for K-6 math practice."""

__version__ = "0.1.0"
