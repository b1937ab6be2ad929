"""
HTTP-facing helpers for Alias Platform (schemas shared by routes and tests).
"""
