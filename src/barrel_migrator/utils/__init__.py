"""
Utilities for console output and logging.
"""
