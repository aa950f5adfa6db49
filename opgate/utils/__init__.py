"""
Utilities for opgate.
"""
