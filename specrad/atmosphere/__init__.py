"""
Atmospheric state inputs.

This module provides:
- AtmosphericState: temperature, pressure and composition of one air parcel
- Column: ordered layers plus path lengths, the unit of one radiative solve
"""

from specrad.atmosphere.state import AtmosphericState, Column

__all__ = [
    "AtmosphericState",
    "Column",
]
