"""roadlines - local SQLite database lifecycle for the Roadlines desktop app."""

__version__ = "0.1.0"
