"""A netcat-like TCP tool: listen for or open a connection and pipe it to a terminal or shell."""

__version__ = "1.0.0"