"""Utility helpers for the SPL token manager."""
