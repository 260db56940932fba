"""Chronos Plantacerium - a tree-ring time journal for the terminal."""

__version__ = "0.3.0"
