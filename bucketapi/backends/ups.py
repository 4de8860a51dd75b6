from datetime import datetime, timezone

import upyun
from upyun import UpYunClientException, UpYunServiceException

from bucketapi.backends.base import DELIMITER, StorageBackend
from bucketapi.config import UpsCredentials
from bucketapi.errors import BackendError, BackendInitError
from bucketapi.model.responses import ListObject

UPS_ERRORS = (UpYunClientException, UpYunServiceException)

# list item types
FOLDER = "F"

# x-upyun-list-iter value once the last page has been served
LIST_END = "g2gCZAAEbmV4dGQAA2VvZg"


class UpsBackend(StorageBackend):
    """
    UpYun storage through the upyun SDK.

    UpYun has a real directory tree, so listings are per directory and
    mkdir uses the native call instead of a marker object.
    """

    name = "ups"

    def __init__(self, credentials: UpsCredentials, logger, client=None):
        super().__init__(credentials, logger)
        if client is None:
            try:
                client = upyun.UpYun(credentials.bucket, credentials.operator, credentials.password)
            except UPS_ERRORS as e:
                raise BackendInitError(str(e)) from e
        self.client = client

    @property
    def endpoint_url(self) -> str:
        return f"https://{self.credentials.bucket}.b0.upaiyun.com"

    def list_objects(self, prefix: str) -> list[ListObject]:
        if not prefix.endswith(DELIMITER):
            prefix += DELIMITER
        items = []
        marker = None
        while True:
            try:
                page = self.client.get_list_with_iter(prefix, begin=marker)
            except UPS_ERRORS as e:
                raise BackendError("ErrorListObject:", str(e)) from e

            items.extend(page.get("files") or [])
            marker = page.get("iter")
            if not marker or marker == LIST_END:
                break

        result = []
        for item in items:
            if not item.get("name"):
                continue
            is_dir = item.get("type") == FOLDER
            result.append(ListObject(
                filename=item["name"] + DELIMITER if is_dir else item["name"],
                prefix=prefix,
                is_dir=is_dir,
                size=None if is_dir else int(item.get("size") or 0),
                create_time=None if is_dir else datetime.fromtimestamp(int(item["time"]), tz=timezone.utc),
            ))

        self.logger.info("Listed objects", backend=self.name, prefix=prefix, count=len(result))
        return result

    def delete(self, path: str) -> None:
        try:
            self.client.delete(path)
        except UPS_ERRORS as e:
            raise BackendError("ErrorDelete:", str(e)) from e

    def upload(self, key: str, data: bytes) -> str:
        try:
            self.client.put(key, data)
        except UPS_ERRORS as e:
            raise BackendError("ErrorUpload:", str(e)) from e
        return self.url_for(key)

    def mkdir(self, prefix: str, dirname: str) -> None:
        try:
            self.client.mkdir(prefix + dirname)
        except UPS_ERRORS as e:
            raise BackendError("ErrorMkdir:", str(e)) from e
