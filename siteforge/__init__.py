"""Site configuration, theme data, page and section front matter, and image resizing."""

__version__ = "0.1.0"
__all__ = ["__version__"]