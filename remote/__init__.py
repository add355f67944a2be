from .errors import AuthenticationError, NormalizationError, RemoteApiError, RemoteError
from .loader import DEFAULT_PATHS, SnapshotLoader
from .normalize import (
    normalize_appointment, normalize_client, normalize_service,
    normalize_staff_member,
)
from .session import ApiSession

__all__ = [
    "ApiSession", "SnapshotLoader", "DEFAULT_PATHS",
    "normalize_appointment", "normalize_staff_member",
    "normalize_service", "normalize_client",
    "RemoteError", "RemoteApiError", "AuthenticationError", "NormalizationError",
]
