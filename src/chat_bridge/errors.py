"""Exceptions raised by the session core and its collaborators."""


class ChatBridgeError(Exception):
    """Base class for every error the front end reports to the user."""


class StorageError(ChatBridgeError):
    """Loading or saving history/statistics failed."""


class CompletionError(ChatBridgeError):
    """The model provider rejected the request or could not be reached."""


class CostLookupError(ChatBridgeError):
    """No price entry exists for the requested model."""
