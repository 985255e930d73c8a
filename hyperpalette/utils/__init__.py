"""Utilities for hyperpalette."""
