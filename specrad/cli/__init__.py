"""
Command-line interface for specrad.

This module provides CLI tools for:
- Band and total fluxes of a column from a configuration file
- Top-of-atmosphere radiances
- Inspection of configured bands and absorbers
"""

__all__ = []
