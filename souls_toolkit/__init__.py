"""Souls Toolkit - Read FromSoftware DCX containers and BND4 archives."""

__version__ = "0.1.0"
