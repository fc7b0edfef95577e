"""Reversible transforms, headers and helpers for preprocessing Wikipedia XML dumps."""

__version__ = "0.1.0"