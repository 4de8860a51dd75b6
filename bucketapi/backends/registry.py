from bucketapi.backends.base import StorageBackend
from bucketapi.backends.cos import CosBackend
from bucketapi.backends.oss import OssBackend
from bucketapi.backends.ups import UpsBackend
from bucketapi.config import GatewayConfig
from bucketapi.errors import BackendInitError

BACKENDS: dict[str, type[StorageBackend]] = {
    CosBackend.name: CosBackend,
    OssBackend.name: OssBackend,
    UpsBackend.name: UpsBackend,
}


def build_backend(name: str, config: GatewayConfig, logger) -> StorageBackend:
    """Build the named backend from its credential block in the configuration."""
    backend_cls = BACKENDS.get((name or "").lower())
    if backend_cls is None:
        raise BackendInitError(f"unknown backend '{name}'")

    credentials = getattr(config, backend_cls.name)
    if credentials is None:
        raise BackendInitError(f"{backend_cls.name.capitalize()} is not configured")

    return backend_cls(credentials, logger)
