"""Quotewise: multi-tenant quoting backend."""

__version__ = "0.1.0"
