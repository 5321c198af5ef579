"""Utility helpers for the CHAGEE API client."""
