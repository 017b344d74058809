"""Chat Bridge: Discord front end for a hosted chat-completion model."""

__version__ = "0.1.0"
