from types import SimpleNamespace

import pytest
import structlog

from bucketapi.backends.base import DELIMITER, StorageBackend, dir_key, strip_prefix
from bucketapi.errors import BackendError
from bucketapi.model.responses import ListObject

CONFIG_YAML = """
Port: 8080
Default: https://upload.example.com/api/storage?operate=upload
Token: s3cret
UToken: u-token
Backend: oss
Cos:
  SecretID: AKIDxxxx
  SecretKey: cos-key
  Bucket: test-1234567889
  Region: ap-nanjing
  Domain: ""
Oss:
  Ak: oss-ak
  Sk: oss-sk
  Bucket: files
  Endpoint: oss-cn-hangzhou.aliyuncs.com
  Domain: https://cdn.example.com/
Ups:
  Bucket: files
  Operator: op
  Password: pw
  Domain: https://ups.example.com/
"""


class MemoryBackend(StorageBackend):
    """Flat key space with delimiter listings, like a real bucket."""

    name = "memory"

    def __init__(self, domain="https://cdn.example.com/", logger=None):
        super().__init__(SimpleNamespace(domain=domain), logger or structlog.get_logger())
        self.objects = {}

    @property
    def endpoint_url(self):
        return "https://memory.example.com"

    def list_objects(self, prefix):
        dirs = set()
        result = []
        for key in sorted(self.objects):
            if not key.startswith(prefix) or key == prefix:
                continue
            rest = key[len(prefix):]
            if DELIMITER in rest:
                dirs.add(prefix + rest.split(DELIMITER)[0] + DELIMITER)
            else:
                result.append(ListObject(
                    filename=rest, prefix=prefix, is_dir=False, size=len(self.objects[key]),
                ))
        return [
            ListObject(filename=strip_prefix(d, prefix), prefix=prefix, is_dir=True) for d in sorted(dirs)
        ] + result

    def delete(self, path):
        self.objects.pop(path, None)

    def upload(self, key, data):
        if key.startswith("forbidden/"):
            raise BackendError("ErrorObjectUpload:", "AccessDenied")
        self.objects[key] = data
        return self.url_for(key)

    def mkdir(self, prefix, dirname):
        self.objects[dir_key(prefix, dirname)] = b""


@pytest.fixture()
def logger():
    return structlog.get_logger()


@pytest.fixture()
def memory_backend():
    return MemoryBackend()


@pytest.fixture()
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    monkeypatch.setenv("BUCKETAPI_CONFIG_PATH", str(path))
    return path
