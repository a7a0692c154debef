"""Error taxonomy for the NightVibe client core."""

NETWORK_ERROR_MESSAGE = "Network error. Please try again."


class NightVibeError(Exception):
    """Base class for all client-core errors."""


class NotAuthenticatedError(NightVibeError):
    """No stored auth token; the operation was skipped."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class TransportError(NightVibeError):
    """Network or transport failure before a server response arrived."""


class ServerRejectedError(NightVibeError):
    """The server answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, server_message: str | None = None):
        self.status_code = status_code
        self.server_message = server_message
        super().__init__(server_message or f"Request failed with status {status_code}")


class InvalidResponseError(ServerRejectedError):
    """A 2xx response whose body lacks a field the client needs."""

    def __init__(self, detail: str, status_code: int = 200):
        self.status_code = status_code
        self.server_message = None
        NightVibeError.__init__(self, detail)


def user_facing_message(exc: BaseException, fallback: str) -> str:
    """Translate an error into the single string shown to the user.

    Server messages are shown verbatim when present, transport failures get
    the generic retry text, everything else falls back to ``fallback``.
    """
    if isinstance(exc, ServerRejectedError) and exc.server_message:
        return exc.server_message
    if isinstance(exc, TransportError):
        return NETWORK_ERROR_MESSAGE
    if isinstance(exc, NotAuthenticatedError):
        return str(exc)
    return fallback
