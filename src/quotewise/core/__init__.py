"""Core infrastructure: configuration-driven services shared by all modules."""
