"""Chat backend with rolling conversational memory."""

__version__ = "1.0.0"
