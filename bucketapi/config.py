from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bucketapi.errors import ConfigError


class CosCredentials(BaseModel):
    """Tencent Cloud COS bucket, e.g. Bucket ``test-1234567889``, Region ``ap-nanjing``."""
    model_config = ConfigDict(populate_by_name=True)

    secret_id: str = Field("", alias="SecretID")
    secret_key: str = Field("", alias="SecretKey")
    bucket: str = Field(alias="Bucket")
    region: str = Field(alias="Region")
    domain: str = Field("", alias="Domain")

    @property
    def api_address(self) -> str:
        return f"https://{self.bucket}.cos.{self.region}.myqcloud.com"


class OssCredentials(BaseModel):
    """Alibaba Cloud OSS bucket. Endpoint is the region endpoint, not the bucket domain."""
    model_config = ConfigDict(populate_by_name=True)

    access_key: str = Field("", alias="Ak")
    secret_key: str = Field("", alias="Sk")
    bucket: str = Field(alias="Bucket")
    endpoint: str = Field(alias="Endpoint")
    domain: str = Field("", alias="Domain")


class UpsCredentials(BaseModel):
    """UpYun storage service and an authorized operator."""
    model_config = ConfigDict(populate_by_name=True)

    bucket: str = Field(alias="Bucket")
    operator: str = Field("", alias="Operator")
    password: str = Field("", alias="Password")
    domain: str = Field("", alias="Domain")


class GatewayConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    port: str = Field("8000", alias="Port")
    default: str = Field("", alias="Default")
    token: str = Field("", alias="Token")
    utoken: str = Field("", alias="UToken")
    backend: Optional[str] = Field(None, alias="Backend")

    cos: Optional[CosCredentials] = Field(None, alias="Cos")
    oss: Optional[OssCredentials] = Field(None, alias="Oss")
    ups: Optional[UpsCredentials] = Field(None, alias="Ups")


def load_config(file_path: str) -> GatewayConfig:
    """
    Read and validate the gateway configuration file.

    The file is read on every call; nothing is cached. Any failure raises
    ConfigError, an empty or partial file is never accepted silently.

    :param file_path: path to the YAML file
    :return: the parsed configuration
    """
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"read config file error: {e}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"read config file error: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"read config file error: {file_path} does not contain a mapping")

    # Port is commonly written unquoted in YAML
    if isinstance(data.get("Port"), int):
        data["Port"] = str(data["Port"])

    try:
        return GatewayConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"read config file error: {e}") from e
