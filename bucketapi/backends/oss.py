from datetime import datetime, timezone

import oss2
from oss2.exceptions import OssError

from bucketapi.backends.base import DELIMITER, StorageBackend, dir_key, strip_prefix
from bucketapi.config import OssCredentials
from bucketapi.errors import BackendError, BackendInitError
from bucketapi.model.responses import ListObject


def endpoint_host(endpoint: str) -> str:
    """oss-cn-hangzhou.aliyuncs.com from either a bare host or a URL."""
    for scheme in ("https://", "http://"):
        if endpoint.startswith(scheme):
            endpoint = endpoint[len(scheme):]
    return endpoint.rstrip("/")


class OssBackend(StorageBackend):
    """Alibaba Cloud OSS through oss2."""

    name = "oss"

    def __init__(self, credentials: OssCredentials, logger, bucket=None):
        super().__init__(credentials, logger)
        if bucket is None:
            try:
                auth = oss2.Auth(credentials.access_key, credentials.secret_key)
            except OssError as e:
                raise BackendInitError(str(e)) from e
            try:
                bucket = oss2.Bucket(auth, credentials.endpoint, credentials.bucket)
            except OssError as e:
                raise BackendInitError(str(e), tag="ErrorInitBucket:") from e
        self.bucket = bucket

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.credentials.bucket}.{endpoint_host(self.credentials.endpoint)}"

    def list_objects(self, prefix: str) -> list[ListObject]:
        result = []
        marker = prefix
        while True:
            try:
                page = self.bucket.list_objects(prefix=prefix, delimiter=DELIMITER, marker=marker)
            except OssError as e:
                raise BackendError("ErrorListObject:", str(e)) from e

            for dirname in page.prefix_list:
                result.append(ListObject(
                    filename=strip_prefix(dirname, prefix),
                    prefix=prefix,
                    is_dir=True,
                ))
            for obj in page.object_list:
                result.append(ListObject(
                    filename=strip_prefix(obj.key, prefix),
                    prefix=prefix,
                    is_dir=False,
                    size=obj.size,
                    create_time=datetime.fromtimestamp(obj.last_modified, tz=timezone.utc),
                ))

            if not page.is_truncated:
                break
            marker = page.next_marker

        self.logger.info("Listed objects", backend=self.name, prefix=prefix, count=len(result))
        return result

    def delete(self, path: str) -> None:
        try:
            self.bucket.delete_object(path)
        except OssError as e:
            raise BackendError("ErrorObjectDelete:", str(e)) from e

    def upload(self, key: str, data: bytes) -> str:
        try:
            self.bucket.put_object(key, data)
        except OssError as e:
            raise BackendError("ErrorObjectUpload:", str(e)) from e
        return self.url_for(key)

    def mkdir(self, prefix: str, dirname: str) -> None:
        try:
            self.bucket.put_object(dir_key(prefix, dirname), b"")
        except OssError as e:
            raise BackendError("ErrorMkdir:", str(e)) from e
