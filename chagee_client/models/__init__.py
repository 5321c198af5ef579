"""Data models for the CHAGEE API client."""
