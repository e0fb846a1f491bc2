"""Shared error types for the chat platform layer."""


class ChatError(Exception):
    """Base error for all chat-platform failures."""


class RemoteApiError(ChatError):
    """A call to the chat platform's API failed.

    ``status`` is the HTTP status (``None`` for transport failures) and
    ``code`` the platform's own error code when the response carried one.
    """

    def __init__(self, message: str, *, status: int | None = None, code: int | None = None) -> None:
        self.message = message
        self.status = status
        self.code = code
        super().__init__(message)
