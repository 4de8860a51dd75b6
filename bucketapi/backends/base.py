from abc import ABC, abstractmethod

from bucketapi.model.responses import ListObject

DELIMITER = "/"


def strip_prefix(key: str, prefix: str) -> str:
    """Return the key relative to the queried prefix."""
    if prefix and key.startswith(prefix):
        return key[len(prefix):]
    return key


def dir_key(prefix: str, dirname: str) -> str:
    key = prefix + dirname
    if not key.endswith(DELIMITER):
        key += DELIMITER
    return key


class StorageBackend(ABC):
    """
    Uniform file operations over one object-storage bucket.

    Implementations build their SDK client in the constructor and make exactly
    one vendor call per operation (a paginated listing counts as one). All
    methods block, callers in async code should run them in a thread.
    """

    name: str

    def __init__(self, credentials, logger):
        self.credentials = credentials
        self.logger = logger

    @property
    @abstractmethod
    def endpoint_url(self) -> str:
        """Raw public URL of the bucket, used when no custom domain is configured."""

    @property
    def domain(self) -> str:
        if self.credentials.domain:
            return self.credentials.domain
        return self.endpoint_url + "/"

    def url_for(self, key: str) -> str:
        return self.domain + key

    @abstractmethod
    def list_objects(self, prefix: str) -> list[ListObject]:
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        ...

    @abstractmethod
    def upload(self, key: str, data: bytes) -> str:
        ...

    @abstractmethod
    def mkdir(self, prefix: str, dirname: str) -> None:
        ...
