"""Endpoint modules for the FordPass API."""
