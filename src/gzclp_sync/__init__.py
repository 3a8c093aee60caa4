"""GZCLP progression tracker and Hevy routine sync engine."""

__version__ = "0.3.0"
