"""Shared utilities: error taxonomy and address parsing."""
