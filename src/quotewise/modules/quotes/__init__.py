"""Quotes module - price quotes issued to clients."""
