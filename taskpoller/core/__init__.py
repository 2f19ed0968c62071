"""Core constants, errors and failure reporting."""
