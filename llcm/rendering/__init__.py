"""Rendering of collected entries."""
