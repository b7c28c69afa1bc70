"""Package analysis building blocks: ecosystems, run records, strace parsing and file helpers."""

__version__ = "0.1.0"
__all__ = ["analysisrun", "ecosystem", "strace", "tempfiles", "utils"]