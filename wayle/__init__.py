"""TOML configuration store, schema documentation pages and media player state for desktop shells."""

__version__ = "0.1.0"