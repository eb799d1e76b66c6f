"""Custom exceptions for mpm."""


class MpmError(Exception):
    """Base exception for all mpm errors."""


class InputError(MpmError):
    """Raised when user input is malformed or missing (empty reference, bad scope)."""


class NotFoundError(MpmError):
    """Raised when the registry has no artifact matching a query or coordinate."""


class RegistryError(MpmError):
    """Raised when a registry call fails (network error, timeout, non-200 status).

    The failure is retrievable: the caller may retry, mpm never does.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ManifestError(MpmError):
    """Base exception for pom.xml handling."""


class ManifestParseError(ManifestError):
    """Raised when pom.xml is missing or not a well-formed Maven project."""


class ManifestStateError(ManifestError):
    """Raised when an operation needs a loaded pom.xml and auto-load failed."""


class ManifestIOError(ManifestError):
    """Raised when pom.xml cannot be written."""


class AlreadyExistsError(ManifestError):
    """Raised when creating a pom.xml where one already exists."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} already exists")
