"""Extract unique email addresses from the text layer of PDF documents."""

__version__ = "0.1.0"

__all__ = ["__version__"]
