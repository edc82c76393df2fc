"""
Input shapes for storage endpoints.
"""

from typing import Literal

from pydantic import BaseModel, Field

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class SignAvatarUploadQuery(BaseModel):
    filename: str = Field(..., min_length=1)


class SignedUrlQuery(BaseModel):
    bucket: Literal["avatars", "requests", "sessions"]
    path: str = Field(..., min_length=1)
