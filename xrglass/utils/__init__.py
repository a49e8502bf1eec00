"""Shared helpers for XRglass."""
