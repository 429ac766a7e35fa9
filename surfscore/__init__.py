"""Surf quality scoring for named surf breaks."""

__version__ = "0.1.0"
