"""Socket and port monitoring for Linux, in a readable terminal table."""

__version__ = "1.0.1"
__all__ = ["__version__"]