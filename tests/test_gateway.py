import io

import pytest
from starlette.datastructures import FormData, UploadFile

from bucketapi.errors import BackendInitError
from bucketapi.gateway import dispatch


def upload_form(filename, data, prefix=None):
    fields = [("file", UploadFile(file=io.BytesIO(data), filename=filename))]
    if prefix is not None:
        fields.append(("prefix", prefix))
    return FormData(fields)


@pytest.mark.asyncio()
async def test_upload_returns_public_url(memory_backend, logger):
    envelope = await dispatch(
        lambda: memory_backend, "upload", {}, logger, form=upload_form("a.txt", b"hello", prefix="docs/")
    )

    assert envelope == {"code": 200, "message": "ok", "data": "https://cdn.example.com/docs/a.txt"}
    assert memory_backend.objects["docs/a.txt"] == b"hello"


@pytest.mark.asyncio()
async def test_upload_without_file(memory_backend, logger):
    envelope = await dispatch(lambda: memory_backend, "upload", {}, logger, form=FormData([("prefix", "docs/")]))

    assert envelope["code"] == 500
    assert envelope["message"].startswith("ErrorUpload:")


@pytest.mark.asyncio()
async def test_upload_backend_failure(memory_backend, logger):
    envelope = await dispatch(
        lambda: memory_backend, "upload", {}, logger, form=upload_form("a.txt", b"x", prefix="forbidden/")
    )

    assert envelope == {"code": 500, "message": "ErrorObjectUpload:AccessDenied", "data": None}


@pytest.mark.asyncio()
async def test_list_strips_prefix(memory_backend, logger):
    memory_backend.objects.update({
        "docs/": b"",
        "docs/a.txt": b"abc",
        "docs/img/b.png": b"png",
        "other.txt": b"o",
    })

    envelope = await dispatch(lambda: memory_backend, "list", {"prefix": "docs/"}, logger)

    assert envelope["code"] == 200
    assert envelope["message"] == "https://cdn.example.com/"
    assert envelope["count"] == 2
    names = [obj["filename"] for obj in envelope["data"]]
    assert names == ["img/", "a.txt"]
    assert not any(name.startswith("docs/") for name in names)
    assert all(obj["prefix"] == "docs/" for obj in envelope["data"])


@pytest.mark.asyncio()
async def test_mkdir_then_list_shows_directory(memory_backend, logger):
    envelope = await dispatch(lambda: memory_backend, "mkdir", {"prefix": "docs/", "dirname": "new"}, logger)
    assert envelope["code"] == 200

    envelope = await dispatch(lambda: memory_backend, "list", {"prefix": "docs/"}, logger)

    assert {"filename": "new/", "prefix": "docs/", "is_dir": True, "size": None, "create_time": None} in envelope["data"]


@pytest.mark.asyncio()
async def test_upload_then_delete_twice(memory_backend, logger):
    memory_backend.objects["docs/keep.txt"] = b"keep"
    await dispatch(lambda: memory_backend, "upload", {}, logger, form=upload_form("a.txt", b"x", prefix="docs/"))

    first = await dispatch(lambda: memory_backend, "delete", {"path": "docs/a.txt"}, logger)
    second = await dispatch(lambda: memory_backend, "delete", {"path": "docs/a.txt"}, logger)

    assert first == {"code": 200, "message": "ok", "data": None}
    assert second["code"] in (200, 500)
    assert memory_backend.objects == {"docs/keep.txt": b"keep"}


@pytest.mark.asyncio()
async def test_domain(memory_backend, logger):
    envelope = await dispatch(lambda: memory_backend, "domain", {}, logger)

    assert envelope == {"code": 200, "message": "https://cdn.example.com/", "data": None}


@pytest.mark.asyncio()
async def test_unknown_operate(memory_backend, logger):
    envelope = await dispatch(lambda: memory_backend, "rename", {}, logger)

    assert envelope["code"] == 500
    assert envelope["message"] == "ErrorOperate:unsupported operate 'rename'"


@pytest.mark.asyncio()
async def test_backend_init_failure(logger):
    def build():
        raise BackendInitError("Oss is not configured")

    envelope = await dispatch(build, "list", {"prefix": ""}, logger)

    assert envelope == {"code": 500, "message": "ErrorInitClient:Oss is not configured", "data": None}
