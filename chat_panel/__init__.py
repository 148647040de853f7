"""Client-side controller for an embedded assistant chat panel."""

__version__ = "0.1.0"
