"""Shared utilities for delegate-auth."""
