
class BucketApiError(Exception):
    """Base class for all BucketApi errors."""
    pass


class ConfigError(BucketApiError):
    """Raised when the configuration file is missing or cannot be parsed."""
    pass


class BackendError(BucketApiError):
    """Raised when a storage backend call fails.

    The tag is the prefix used in the response message, e.g. ``ErrorMkdir:``.
    """

    def __init__(self, tag: str, message: str):
        super().__init__(message)
        self.tag = tag

    @property
    def message(self) -> str:
        return f"{self.tag}{self}"


class BackendInitError(BackendError):
    """Raised when a storage client cannot be built from the configuration."""

    def __init__(self, message: str, tag: str = "ErrorInitClient:"):
        super().__init__(tag, message)
