"""Costume Roaster: AI-powered Halloween costume critiques."""

__version__ = "1.0.0"
