"""HTTP clients for the CHAGEE API."""
