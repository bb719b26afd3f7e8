"""PC TuneUp: find and reclaim disk space on Windows."""

__version__ = "0.1.0"
