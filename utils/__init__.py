"""Shared helpers: errors, entropy statistics and console output."""
