"""searchkit: traced graph search strategies and alpha-beta draughts search."""

__version__ = "1.0.0"
