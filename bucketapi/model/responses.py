from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class ListObject(BaseModel):
    filename: str
    prefix: str
    is_dir: bool
    size: Optional[int] = None
    create_time: Optional[datetime] = None


class Envelope(BaseModel):
    code: int
    message: Any = None
    data: Any = None


class ListEnvelope(BaseModel):
    code: int
    count: int
    message: Any = None
    data: list[ListObject] = []


class LoginError(BaseModel):
    code: int = 500
    errors: str = "token error"


class UploadAPIResponse(BaseModel):
    code: int = 200
    utoken: str
    url: str


def ok(message: Any = "ok", data: Any = None) -> dict:
    return Envelope(code=200, message=message, data=data).model_dump(mode="json")


def failed(message: str) -> dict:
    return Envelope(code=500, message=message).model_dump(mode="json")


def listing(objects: list[ListObject], domain: str) -> dict:
    return ListEnvelope(
        code=200, count=len(objects), message=domain, data=objects
    ).model_dump(mode="json")
