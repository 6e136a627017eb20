"""
Core app - shared building blocks used by every other app.

Currently holds the API error taxonomy (errors.py).
"""
