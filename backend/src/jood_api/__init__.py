"""Jood Kitchen permission management API."""
