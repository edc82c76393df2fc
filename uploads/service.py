"""
Business logic for file uploads and signed URLs.
"""

import base64
import binascii
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

import azure.functions as func

from shared.errors import InvalidInputError
from shared.gateway import DataGateway
from shared.supabase_client import ObjectStorage
from shared.validation import read_json_body
from .schemas import MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"


@dataclass
class UploadedFile:
    filename: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def extension(self) -> str:
        if "." in self.filename:
            ext = self.filename.rsplit(".", 1)[-1]
            if ext:
                return ext
        return DEFAULT_EXTENSION


def _file_required() -> InvalidInputError:
    return InvalidInputError(
        "File is required",
        errors=[{"field": "file", "message": "File is required"}]
    )


def read_upload(req: func.HttpRequest) -> UploadedFile:
    """
    Read the uploaded file from a multipart form (field `file`) or from a JSON
    body carrying base64 `file_data` and `file_name`.

    Raises:
        InvalidInputError: If no file was sent or it exceeds the size limit
    """
    content_type = req.headers.get("Content-Type", "")

    if "multipart/form-data" in content_type:
        files = req.files
        if not files or "file" not in files:
            raise _file_required()
        uploaded = files["file"]
        upload = UploadedFile(
            filename=uploaded.filename or "",
            data=uploaded.read(),
            content_type=uploaded.content_type or "application/octet-stream",
        )
    elif "application/json" in content_type:
        body = read_json_body(req)
        if not isinstance(body, dict) or not body.get("file_data") or not body.get("file_name"):
            raise InvalidInputError(
                "File is required",
                errors=[{"field": "file_data", "message": "file_data and file_name are required"}]
            )
        try:
            data = base64.b64decode(body["file_data"], validate=True)
        except (binascii.Error, ValueError):
            raise InvalidInputError(
                "Invalid file data",
                errors=[{"field": "file_data", "message": "Must be base64 encoded"}]
            )
        upload = UploadedFile(
            filename=body["file_name"],
            data=data,
            content_type=body.get("content_type") or "application/octet-stream",
        )
    else:
        raise InvalidInputError("Content-Type must be multipart/form-data or application/json")

    if not upload.data:
        raise _file_required()
    if len(upload.data) > MAX_UPLOAD_BYTES:
        raise InvalidInputError(
            "File too large",
            errors=[{"field": "file", "message": "File must be at most 5 MB"}]
        )
    return upload


def form_value(req: func.HttpRequest, name: str) -> Optional[str]:
    """Read a field from the multipart form, then the JSON body, then the query string."""
    content_type = req.headers.get("Content-Type", "")
    value = None
    if "multipart/form-data" in content_type:
        value = req.form.get(name)
    elif "application/json" in content_type:
        body = read_json_body(req)
        if isinstance(body, dict) and body.get(name) is not None:
            value = str(body[name])
    return value or req.params.get(name) or None


def required_form_value(req: func.HttpRequest, name: str) -> str:
    value = form_value(req, name)
    if not value:
        raise InvalidInputError(
            f"{name} is required",
            errors=[{"field": name, "message": "Field required"}]
        )
    return value


def _object_name(upload: UploadedFile) -> str:
    return f"{uuid.uuid4()}.{upload.extension}"


def safe_filename(filename: str) -> str:
    """Keep only the last path segment of a client-supplied filename."""
    name = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    if name in ("", ".", ".."):
        raise InvalidInputError(
            "Invalid filename",
            errors=[{"field": "filename", "message": "Must name a file"}]
        )
    return name


class UploadService:
    """Service class for storage operations."""

    def __init__(self, storage: ObjectStorage, gateway: DataGateway, signed_url_expires_in: int = 600):
        self.storage = storage
        self.gateway = gateway
        self.signed_url_expires_in = signed_url_expires_in

    async def _upload(self, bucket: str, path: str, upload: UploadedFile) -> Dict:
        public_url = await self.storage.upload(bucket, path, upload.data, upload.content_type)
        logger.info(f"Uploaded {len(upload.data)} bytes to {bucket}/{path}")
        return {"bucket": bucket, "path": path, "publicUrl": public_url}

    async def upload_avatar(self, user_id: str, upload: UploadedFile) -> Dict:
        """Store under avatars/{user_id}/{uuid}.{ext}."""
        return await self._upload("avatars", f"avatars/{user_id}/{_object_name(upload)}", upload)

    async def upload_request_image(
        self,
        request_id: str,
        upload: UploadedFile,
        sujeto_index: Optional[int] = None
    ) -> Dict:
        """
        Store a request image and record it in `solicitud_imagenes`.

        Returns:
            The inserted `solicitud_imagenes` row
        """
        stored = await self._upload(
            "requests", f"requests/{request_id}/{_object_name(upload)}", upload
        )
        return await self.gateway.insert_one(
            "solicitud_imagenes",
            {
                "solicitud_id": request_id,
                "sujeto_index": sujeto_index,
                "bucket": stored["bucket"],
                "path": stored["path"],
                "url": stored["publicUrl"],
            },
            credentials=self.gateway.as_service(),
        )

    async def upload_session_image(self, session_id: str, upload: UploadedFile) -> Dict:
        return await self._upload("sessions", f"sessions/{session_id}/{_object_name(upload)}", upload)

    async def sign_avatar_upload(self, user_id: str, filename: str) -> Dict:
        """Suggest an avatar path for a client-side upload. No remote call."""
        millis = int(time.time() * 1000)
        return {"path": f"avatars/{user_id}/{millis}_{safe_filename(filename)}", "bucket": "avatars"}

    async def signed_url(self, bucket: str, path: str) -> Dict:
        url = await self.storage.signed_url(bucket, path, self.signed_url_expires_in)
        return {
            "signedUrl": url,
            "bucket": bucket,
            "path": path,
            "expiresIn": self.signed_url_expires_in,
        }


def parse_subject_index(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidInputError(
            "Invalid sujetoIndex",
            errors=[{"field": "sujetoIndex", "message": "Must be an integer"}]
        )
