import asyncio
from typing import Callable, Mapping, Optional

from starlette.datastructures import UploadFile

from bucketapi.backends.base import StorageBackend
from bucketapi.errors import BackendError
from bucketapi.model.responses import failed, listing, ok


async def list_operation(backend: StorageBackend, query: Mapping, form) -> dict:
    """List files and directories directly under a prefix."""
    prefix = query.get("prefix", "")
    objects = await asyncio.to_thread(backend.list_objects, prefix)
    return listing(objects, backend.domain)


async def delete_operation(backend: StorageBackend, query: Mapping, form) -> dict:
    await asyncio.to_thread(backend.delete, query.get("path", ""))
    return ok()


async def upload_operation(backend: StorageBackend, query: Mapping, form) -> dict:
    """
    Store the multipart ``file`` field at ``prefix + filename``.

    :return: envelope whose data is the public URL of the new object
    """
    upload = form.get("file") if form is not None else None
    if not isinstance(upload, UploadFile):
        raise BackendError("ErrorUpload:", "no such file")

    prefix = form.get("prefix") or ""
    data = await upload.read()
    url = await asyncio.to_thread(backend.upload, prefix + upload.filename, data)
    return ok(data=url)


async def mkdir_operation(backend: StorageBackend, query: Mapping, form) -> dict:
    await asyncio.to_thread(backend.mkdir, query.get("prefix", ""), query.get("dirname", ""))
    return ok()


async def domain_operation(backend: StorageBackend, query: Mapping, form) -> dict:
    return ok(message=backend.domain)


OPERATIONS = {
    "list": list_operation,
    "delete": delete_operation,
    "upload": upload_operation,
    "mkdir": mkdir_operation,
    "domain": domain_operation,
}


async def dispatch(
        build: Callable[[], StorageBackend],
        operate: str,
        query: Mapping,
        logger,
        form: Optional[Mapping] = None,
) -> dict:
    """
    Run one operate request against a freshly built backend.

    Backend failures never raise out of here, they come back as a code 500
    envelope with the error tag and vendor message.
    """
    operation = OPERATIONS.get(operate)
    if operation is None:
        logger.error("Unsupported operate", operate=operate)
        return failed(f"ErrorOperate:unsupported operate '{operate}'")

    try:
        backend = await asyncio.to_thread(build)
        logger.info("Storage operation", backend=backend.name, operate=operate)
        return await operation(backend, query, form)
    except BackendError as e:
        logger.error("Storage operation failed", operate=operate, error=e.message)
        return failed(e.message)
