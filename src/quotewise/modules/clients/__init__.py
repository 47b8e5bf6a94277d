"""Clients module - customers of a company."""
