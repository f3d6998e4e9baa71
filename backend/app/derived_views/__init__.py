"""Derived views: read-only views for UI consumption.

The UI reads only these views. Every nullable cell is rendered to a display
string or placeholder, and badge tones are computed server-side.
"""
