"""Exceptions raised by cartforest."""

from __future__ import annotations


class InvalidInput(ValueError):
    """A query vector or training set is missing, empty or malformed."""


class InvalidConfiguration(ValueError):
    """A construction parameter is outside its admissible range."""


class DegenerateSplit(Exception):
    """No informative split exists for a node (one side would be empty).

    Raised and recovered during tree growth by turning the node into a leaf;
    callers of the public API never see it.
    """


__all__ = ["DegenerateSplit", "InvalidConfiguration", "InvalidInput"]
