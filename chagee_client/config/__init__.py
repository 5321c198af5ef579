"""Configuration management for the CHAGEE API client."""
