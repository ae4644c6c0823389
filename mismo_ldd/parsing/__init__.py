"""Structural checks over raw XML text."""

from .well_formed import check_well_formed

__all__ = ['check_well_formed']
