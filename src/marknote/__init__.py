"""Marknote - filesystem core for a Markdown note collection."""

__version__ = "0.1.0"
