"""Plate Spotter: a license plate collection game for the terminal."""

__version__ = "0.1.0"
