"""cmsfixup - batch maintenance commands for content-management records."""

__version__ = "0.3.0"

__all__ = ["__version__"]
