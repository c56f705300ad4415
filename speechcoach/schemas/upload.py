from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict

from speechcoach.schemas.analysis import CamelModel


class UploadOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    project_id: str
    file_name: str
    file_hash: str
    content_type: str | None = None
    created_at: datetime


class UploadResponse(CamelModel):
    success: bool = True
    upload: UploadOut


class UploadListResponse(CamelModel):
    uploads: list[UploadOut]
