from .client import HttpRegistryClient, PushResult, RegistryClient
from .exceptions import (
    RegistryClientError,
    RegistryConnectionError,
    RegistryPushError,
    RegistryTimeoutError,
)

__all__ = [
    "HttpRegistryClient",
    "PushResult",
    "RegistryClient",
    "RegistryClientError",
    "RegistryConnectionError",
    "RegistryPushError",
    "RegistryTimeoutError",
]
