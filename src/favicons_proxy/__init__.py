"""Favicons proxy: fetch a domain's favicon from a fixed chain of providers."""

__version__ = "0.1.0"
