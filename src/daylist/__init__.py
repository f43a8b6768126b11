"""daylist: a personal to-do list client over a hosted row store."""

__version__ = "0.1.0"
