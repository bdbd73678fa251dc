class RegistryClientError(Exception):
    """Base exception for the remote registry client."""
    pass


class RegistryConnectionError(RegistryClientError):
    """Raised when the registry cannot be reached."""
    pass


class RegistryTimeoutError(RegistryClientError):
    """Raised when the registry does not answer in time."""
    pass


class RegistryPushError(RegistryClientError):
    """Raised when the registry answers but rejects a record."""

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code
