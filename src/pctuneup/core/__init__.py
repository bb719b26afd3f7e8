"""Scan and clean engines."""
