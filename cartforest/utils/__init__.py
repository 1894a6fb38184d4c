"""Utility helpers for cartforest."""

from .sampling import draw_size, subset

__all__ = ["draw_size", "subset"]
