"""contextkit - request message assembly for chat-completion APIs."""

__version__ = "0.1.0"
