"""Costume roast endpoints."""
