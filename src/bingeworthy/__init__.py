"""Movie and TV discovery backed by TMDb, with optional AI recommendations."""

__version__ = "0.1.0"
