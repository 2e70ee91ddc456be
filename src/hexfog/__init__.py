"""Hex-grid spatial model and fog-of-war visibility engine."""

__version__ = "0.1.0"
