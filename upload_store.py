"""
upload_store.py — The Loading Dock
===================================
Parks multipart uploads on local disk for the lifetime of one request
and packs them into Gemini inline parts.

Every stored file is removed when its `store_upload()` block exits,
whether the model call inside it succeeded or raised.
"""

import base64
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from fastapi import UploadFile

log = logging.getLogger("gemini-gateway")

UPLOAD_DIR = "uploads"

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass
class StoredUpload:
    path:      Path
    mime_type: str
    filename:  str
    size:      int


@dataclass
class InlinePart:
    data:      str   # base64
    mime_type: str

    def to_content(self) -> dict:
        return {"inline_data": {"data": self.data, "mime_type": self.mime_type}}


@asynccontextmanager
async def store_upload(upload: UploadFile, upload_dir=None):
    """Write `upload` into the upload dir, yield a StoredUpload, always delete it."""
    target_dir = Path(upload_dir or UPLOAD_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / uuid.uuid4().hex
    content = await upload.read()
    path.write_bytes(content)

    stored = StoredUpload(
        path=path,
        mime_type=upload.content_type or DEFAULT_MIME_TYPE,
        filename=upload.filename or path.name,
        size=len(content),
    )
    try:
        yield stored
    finally:
        # Cleanup failures are not swallowed.
        path.unlink()
        log.debug(f"Removed upload {path}")


def encode_inline_part(path, mime_type: str) -> InlinePart:
    """Read a file off disk and base64 it for an inline model part."""
    data = Path(path).read_bytes()
    return InlinePart(data=base64.b64encode(data).decode("ascii"), mime_type=mime_type)
