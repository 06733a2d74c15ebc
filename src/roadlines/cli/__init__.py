"""Command-line interface (``roadlines`` console script)."""
