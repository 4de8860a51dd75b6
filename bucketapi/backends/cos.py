from qcloud_cos import CosConfig, CosS3Client
from qcloud_cos.cos_exception import CosClientError, CosServiceError

from bucketapi.backends.base import DELIMITER, StorageBackend, dir_key, strip_prefix
from bucketapi.config import CosCredentials
from bucketapi.errors import BackendError, BackendInitError
from bucketapi.model.responses import ListObject

# Overall HTTP timeout in seconds
CLIENT_TIMEOUT = 100

COS_ERRORS = (CosClientError, CosServiceError)


def _error_text(e: Exception) -> str:
    if isinstance(e, CosServiceError):
        return f"{e.get_error_code()}: {e.get_error_msg()}"
    return str(e)


def _last_key(page: dict) -> str:
    # NextMarker is only sent when a delimiter is set
    keys = [obj["Key"] for obj in page.get("Contents", [])]
    keys += [common["Prefix"] for common in page.get("CommonPrefixes", [])]
    return max(keys) if keys else ""


class CosBackend(StorageBackend):
    """Tencent Cloud COS through cos-python-sdk-v5."""

    name = "cos"

    def __init__(self, credentials: CosCredentials, logger, client=None):
        super().__init__(credentials, logger)
        if client is None:
            try:
                cfg = CosConfig(
                    Region=credentials.region,
                    SecretId=credentials.secret_id,
                    SecretKey=credentials.secret_key,
                    Scheme="https",
                    Timeout=CLIENT_TIMEOUT,
                )
                client = CosS3Client(cfg)
            except COS_ERRORS as e:
                raise BackendInitError(_error_text(e)) from e
        self.client = client

    @property
    def endpoint_url(self) -> str:
        return self.credentials.api_address

    def list_objects(self, prefix: str) -> list[ListObject]:
        dirs = []
        files = []
        marker = prefix
        while True:
            try:
                page = self.client.list_objects(
                    Bucket=self.credentials.bucket,
                    Prefix=prefix,
                    Delimiter=DELIMITER,
                    Marker=marker,
                )
            except COS_ERRORS as e:
                raise BackendError("ErrorListObject:", _error_text(e)) from e

            for common in page.get("CommonPrefixes", []):
                dirs.append(ListObject(
                    filename=strip_prefix(common["Prefix"], prefix),
                    prefix=prefix,
                    is_dir=True,
                ))
            for obj in page.get("Contents", []):
                files.append(ListObject(
                    filename=strip_prefix(obj["Key"], prefix),
                    prefix=prefix,
                    is_dir=False,
                    size=int(obj["Size"]),
                    create_time=obj["LastModified"],
                ))

            if str(page.get("IsTruncated", "false")).lower() != "true":
                break
            marker = page.get("NextMarker") or _last_key(page)
            if not marker:
                break

        self.logger.info("Listed objects", backend=self.name, prefix=prefix, dirs=len(dirs), files=len(files))
        return dirs + files

    def delete(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.credentials.bucket, Key=path)
        except COS_ERRORS as e:
            raise BackendError("ErrorObjectDelete:", _error_text(e)) from e

    def upload(self, key: str, data: bytes) -> str:
        try:
            self.client.put_object(Bucket=self.credentials.bucket, Body=data, Key=key)
        except COS_ERRORS as e:
            raise BackendError("ErrorObjectUpload:", _error_text(e)) from e
        return self.url_for(key)

    def mkdir(self, prefix: str, dirname: str) -> None:
        try:
            self.client.put_object(Bucket=self.credentials.bucket, Body=b"", Key=dir_key(prefix, dirname))
        except COS_ERRORS as e:
            raise BackendError("ErrorMkdir:", _error_text(e)) from e
